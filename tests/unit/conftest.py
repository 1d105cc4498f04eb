"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from job_counter_core.config.settings import Settings
from tests.mocks.mock_rules import sample_rules
from tests.mocks.mock_settings import make_settings


@pytest.fixture
def mock_settings() -> Settings:
    """Settings with instant retries and no settle delay."""
    return make_settings()


@pytest.fixture
def rules_doc() -> dict[str, Any]:
    """Return a fresh unresolved rules document."""
    return sample_rules()


@pytest.fixture
def rules_file(tmp_path: Path) -> Path:
    """Write the sample rules document to a temporary file."""
    path = tmp_path / "rules" / "eligibility-462.json"
    path.parent.mkdir()
    path.write_text(json.dumps(sample_rules(), indent=2))
    return path
