"""Tests for posting recency classification."""

from __future__ import annotations

from datetime import date

import pytest

from job_counter_agents.tools.recency import classify_recency, is_within_window
from job_counter_core.models.postings import Recency, ResultItem


@pytest.mark.unit
class TestClassifyText:
    """Text-based classification."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Added 5 days ago", Recency.WITHIN_WINDOW),
            ("5 days ago", Recency.WITHIN_WINDOW),
            ("Added 10 days ago", Recency.WITHIN_WINDOW),
            ("Added 1 day ago", Recency.WITHIN_WINDOW),
            ("15 days ago", Recency.OUTSIDE_WINDOW),
            ("Added 11 DAYS AGO", Recency.OUTSIDE_WINDOW),
            ("Posted Today", Recency.WITHIN_WINDOW),
            ("Added yesterday", Recency.WITHIN_WINDOW),
            ("Posted last month", Recency.UNCLASSIFIED),
            ("Today", Recency.UNCLASSIFIED),
            ("Added 3 hours ago", Recency.UNCLASSIFIED),
            ("", Recency.UNCLASSIFIED),
        ],
    )
    def test_window_ten(self, text: str, expected: Recency) -> None:
        """Phrasings classify against a 10-day window."""
        assert classify_recency(text, 10) is expected

    def test_multiline_card(self) -> None:
        """The marker may sit anywhere in a rendered card."""
        card = "Farm Hand\nAtherton QLD 4883\nCasual\nAdded 2 days ago"
        assert classify_recency(card, 10) is Recency.WITHIN_WINDOW

    def test_window_boundary(self) -> None:
        """N equal to the window is inside; N one above is outside."""
        assert is_within_window("3 days ago", 3)
        assert not is_within_window("4 days ago", 3)


@pytest.mark.unit
class TestClassifyStructured:
    """Structured dates take precedence over text."""

    def test_structured_date_wins(self) -> None:
        """A recent posted_date is inside even when the text says otherwise."""
        item = ResultItem(text="30 days ago", posted_date=date(2024, 3, 8))
        assert classify_recency(item, 10, today=date(2024, 3, 10)) is Recency.WITHIN_WINDOW

    def test_old_structured_date(self) -> None:
        """An old posted_date is outside the window."""
        item = ResultItem(text="Posted Today", posted_date=date(2024, 2, 1))
        assert classify_recency(item, 10, today=date(2024, 3, 10)) is Recency.OUTSIDE_WINDOW

    def test_future_date_counts_as_today(self) -> None:
        """Dates after today clamp to age zero."""
        item = ResultItem(text="", posted_date=date(2024, 3, 11))
        assert is_within_window(item, 10, today=date(2024, 3, 10))

    def test_falls_back_to_text(self) -> None:
        """Without a date the text is classified."""
        item = ResultItem(text="Added 2 days ago")
        assert is_within_window(item, 10)
