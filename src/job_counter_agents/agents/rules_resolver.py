"""Rules resolver agent: expands the eligibility rules into flat postcode sets."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any

import structlog

from job_counter_agents.agents.base import BaseAgent
from job_counter_agents.orchestrator.documents import load_document, save_document
from job_counter_agents.tools.postcodes import (
    postcode_universe,
    resolve_with_gaps,
    unresolved_regions,
)
from job_counter_core.constants import ALL_SENTINEL
from job_counter_core.state import PipelineState

logger = structlog.get_logger()


def unresolved_warning(gap: str) -> str:
    """Report warning for a region whose postcodes were not enumerated."""
    return f"{gap} is marked {ALL_SENTINEL} and was not expanded; its postcodes are not counted"


def resolve_file(path: Path) -> tuple[dict[str, Any], list[str]]:
    """Resolve the rules document at `path` in place.

    The file is only rewritten once resolution succeeded, so a malformed
    token leaves it untouched. Returns the resolved document and its gaps.
    """
    resolved, gaps = resolve_with_gaps(load_document(path))
    save_document(resolved, path)
    return resolved, gaps


class RulesResolverAgent(BaseAgent):
    """Resolve the rules document in place and derive the postcode universe."""

    agent_name = "rules_resolver"

    async def run(self, state: PipelineState) -> PipelineState:
        """Resolve (unless skipped), persist, and load the postcode universe."""
        rules_path = state.config.rules_path
        self._log_start({"rules_path": str(rules_path), "skip_resolve": state.config.skip_resolve})
        start = time.monotonic()

        if state.config.skip_resolve:
            rules_doc = load_document(rules_path)
            gaps = unresolved_regions(rules_doc)
        else:
            rules_doc, gaps = resolve_file(rules_path)
        state.warnings.extend(unresolved_warning(gap) for gap in gaps)

        state.rules_doc = rules_doc
        state.postcodes = postcode_universe(rules_doc)

        self._log_end(
            time.monotonic() - start,
            {"postcodes": len(state.postcodes), "warnings": len(state.warnings)},
        )
        return state
