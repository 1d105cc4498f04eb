"""JSON read/write for the rules and report documents."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog

from job_counter_core.exceptions import DocumentError

logger = structlog.get_logger()


def load_document(path: Path) -> dict[str, Any]:
    """Load a JSON object from disk."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        msg = f"Failed to load {path}: {e}"
        raise DocumentError(msg) from e

    if not isinstance(data, dict):
        msg = f"{path} does not hold a JSON object"
        raise DocumentError(msg)
    logger.debug("document_loaded", path=str(path))
    return data


def save_document(document: dict[str, Any], path: Path) -> Path:
    """Write a JSON object to disk with 2-space indentation."""
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        path.write_text(
            json.dumps(document, indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
    except OSError as e:
        msg = f"Failed to write {path}: {e}"
        raise DocumentError(msg) from e
    logger.info("document_saved", path=str(path))
    return path
