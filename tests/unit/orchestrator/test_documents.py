"""Tests for rules/report document I/O."""

from __future__ import annotations

from pathlib import Path

import pytest

from job_counter_agents.orchestrator.documents import load_document, save_document
from job_counter_core.exceptions import DocumentError


@pytest.mark.unit
class TestDocuments:
    """JSON load/save."""

    def test_save_creates_parents(self, tmp_path: Path) -> None:
        """Missing parent directories are created."""
        path = tmp_path / "data" / "nested" / "report.json"
        save_document({"perPOA": {}}, path)
        assert path.exists()

    def test_save_format(self, tmp_path: Path) -> None:
        """Two-space indent, raw unicode and a trailing newline."""
        path = tmp_path / "doc.json"
        save_document({"name": "Kununurra – WA", "n": [1]}, path)
        text = path.read_text(encoding="utf-8")
        assert text.endswith("\n")
        assert '  "name": "Kununurra – WA"' in text

    def test_round_trip(self, tmp_path: Path) -> None:
        """Saved documents load back unchanged."""
        doc = {"definitions": {"tourismExtraPostcodes": ["0872"]}}
        path = save_document(doc, tmp_path / "rules.json")
        assert load_document(path) == doc

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """A missing file is a document error."""
        with pytest.raises(DocumentError, match="Failed to load"):
            load_document(tmp_path / "absent.json")

    def test_invalid_json_raises(self, tmp_path: Path) -> None:
        """Unparseable content is a document error."""
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(DocumentError, match="Failed to load"):
            load_document(path)

    def test_non_object_raises(self, tmp_path: Path) -> None:
        """The top level must be a JSON object."""
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")
        with pytest.raises(DocumentError, match="JSON object"):
            load_document(path)
