"""Tests for Settings configuration."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from job_counter_core.config.settings import Settings


@pytest.mark.unit
class TestSettings:
    """Test Settings validation and defaults."""

    def test_default_settings(self) -> None:
        """Defaults match the published report layout and source."""
        s = Settings(_env_file=None)
        assert s.rules_path == Path("rules/eligibility-462.json")
        assert s.report_path == Path("data/jobs-last10d.json")
        assert s.window_days == 10
        assert s.max_pages == 5
        assert s.count_policy == "sum"
        assert s.max_sessions == 1
        assert s.source_name == "Workforce Australia"
        assert s.headless is True
        assert s.otel_exporter == "none"

    def test_env_prefix(self) -> None:
        """JC_ environment variables override defaults."""
        env = {"JC_WINDOW_DAYS": "14", "JC_COUNT_POLICY": "dedupe", "JC_MAX_SESSIONS": "3"}
        with patch.dict(os.environ, env, clear=False):
            s = Settings(_env_file=None)
        assert s.window_days == 14
        assert s.count_policy == "dedupe"
        assert s.max_sessions == 3

    @pytest.mark.parametrize("field", ["window_days", "max_pages", "max_sessions", "query_retry_max"])
    def test_non_positive_bound_raises(self, field: str) -> None:
        """Counting bounds must be at least 1."""
        with pytest.raises(ValidationError, match=f"{field} must be at least 1"):
            Settings(_env_file=None, **{field: 0})

    def test_unknown_policy_raises(self) -> None:
        """Only 'sum' and 'dedupe' are accepted."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, count_policy="max")  # type: ignore[arg-type]
