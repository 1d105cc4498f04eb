"""Tests for the sequential async pipeline orchestrator."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from job_counter_agents.orchestrator.pipeline import Pipeline
from job_counter_core.config.settings import Settings
from job_counter_core.models.postings import KeywordGroup
from job_counter_core.models.run import RunConfig
from tests.mocks.fake_job_source import FakeJobSource
from tests.mocks.mock_rules import sample_rules

FARM = KeywordGroup(name="farm", terms=("farm",))


def _rules_file(tmp_path: Path) -> Path:
    """Rules whose universe is exactly 4870 and 6701."""
    doc = sample_rules()
    definitions = doc["definitions"]
    definitions["northernAustralia"] = {"postcodes": ["4870", "6701"]}
    definitions["regionalAustralia"] = {"NT": ["ALL"]}
    definitions["remoteVeryRemoteByState"] = {"QLD": ["4870"]}
    definitions["tourismExtraPostcodes"] = []
    path = tmp_path / "rules.json"
    path.write_text(json.dumps(doc))
    return path


def _config(tmp_path: Path) -> RunConfig:
    return RunConfig(
        run_id="run_test",
        rules_path=_rules_file(tmp_path),
        report_path=tmp_path / "data" / "jobs-last10d.json",
    )


def _pipeline(settings: Settings, source: FakeJobSource) -> Pipeline:
    return Pipeline(settings, client_factory=lambda s: source, keyword_groups=[FARM])


@pytest.mark.unit
class TestPipeline:
    """Test Pipeline.run orchestration."""

    @pytest.mark.asyncio
    async def test_success_writes_report(self, mock_settings: Settings, tmp_path: Path) -> None:
        """A clean run resolves, counts and writes the report."""
        source = FakeJobSource(pages={"4870": [["2 days ago", "20 days ago"]], "6701": []})
        config = _config(tmp_path)

        result = await _pipeline(mock_settings, source).run(config)

        assert result.status == "success"
        assert result.postcodes == 2
        assert result.pairs_attempted == 2
        assert result.total_count == 1
        assert result.report_path == config.report_path

        doc = json.loads(config.report_path.read_text())
        assert doc["perPOA"] == {"4870": {"count": 1}, "6701": {"count": 0}}
        assert doc["warnings"] == result.warnings
        assert "regionalAustralia/NT" in doc["warnings"][0]

    @pytest.mark.asyncio
    async def test_rules_resolved_in_place(self, mock_settings: Settings, tmp_path: Path) -> None:
        """The rules document gains its flat sets during the run."""
        config = _config(tmp_path)

        await _pipeline(mock_settings, FakeJobSource()).run(config)

        definitions = json.loads(config.rules_path.read_text())["definitions"]
        assert definitions["remoteVeryRemoteFlat"] == ["4870"]
        assert definitions["regionalAustraliaFlat"] == []

    @pytest.mark.asyncio
    async def test_failed_pair_is_partial(self, mock_settings: Settings, tmp_path: Path) -> None:
        """A failed pair still yields a report, with status 'partial'."""
        source = FakeJobSource(
            pages={"4870": [["Added 1 day ago"]]},
            fail=lambda query, postcode: postcode == "6701",
        )
        config = _config(tmp_path)

        result = await _pipeline(mock_settings, source).run(config)

        assert result.status == "partial"
        assert result.pairs_failed == 1
        doc = json.loads(config.report_path.read_text())
        assert doc["perPOA"]["6701"] == {"count": 0}
        assert doc["failedQueries"][0]["postcode"] == "6701"
        assert [e.is_fatal for e in result.errors] == [False]

    @pytest.mark.asyncio
    async def test_unreachable_source_fails_without_report(
        self, mock_settings: Settings, tmp_path: Path
    ) -> None:
        """Source unavailability is fatal and nothing is written."""
        source = FakeJobSource(unreachable=True)
        config = _config(tmp_path)

        result = await _pipeline(mock_settings, source).run(config)

        assert result.status == "failed"
        assert result.report_path is None
        assert not config.report_path.exists()
        assert source.closed
        assert result.errors[-1].is_fatal
        assert result.errors[-1].error_type == "SourceUnavailable"

    @pytest.mark.asyncio
    async def test_bad_rules_stop_before_counting(
        self, mock_settings: Settings, tmp_path: Path
    ) -> None:
        """A malformed rules document stops the run at the first step."""
        config = _config(tmp_path)
        config.rules_path.write_text("{not json")
        source = FakeJobSource()

        result = await _pipeline(mock_settings, source).run(config)

        assert result.status == "failed"
        assert result.errors[0].step_name == "rules_resolver"
        assert result.errors[0].error_type == "DocumentError"
        assert not source.navigated

    @pytest.mark.asyncio
    async def test_run_context_bound_and_cleared(
        self, mock_settings: Settings, tmp_path: Path
    ) -> None:
        """The run id is bound for logging and cleared afterwards."""
        with (
            patch("job_counter_agents.orchestrator.pipeline.bind_run_context") as bind,
            patch("job_counter_agents.orchestrator.pipeline.clear_run_context") as clear,
        ):
            await _pipeline(mock_settings, FakeJobSource()).run(_config(tmp_path))

        bind.assert_called_once_with("run_test", source="Workforce Australia", window_days=10)
        clear.assert_called_once()

    @pytest.mark.asyncio
    async def test_spans_created_when_tracing(
        self, mock_settings: Settings, tmp_path: Path
    ) -> None:
        """Each step gets its own span when a tracer is active."""
        tracer = MagicMock()
        with patch("job_counter_agents.orchestrator.pipeline.get_tracer", return_value=tracer):
            await _pipeline(mock_settings, FakeJobSource()).run(_config(tmp_path))

        names = [call.args[0] for call in tracer.start_span.call_args_list]
        assert names == ["agent.resolve_rules", "agent.count_jobs", "agent.write_report"]
        assert tracer.start_span.return_value.end.call_count == 3
