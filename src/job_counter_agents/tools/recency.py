"""Posting recency classification."""

from __future__ import annotations

import re
from datetime import UTC, date, datetime

from job_counter_core.models.postings import Recency, ResultItem

_DAYS_AGO = re.compile(r"(\d+)\s+days?\s+ago", re.IGNORECASE)
_POSTED_MARKER = re.compile(r"\b(added|posted)\b", re.IGNORECASE)
_SAME_OR_PREVIOUS_DAY = re.compile(r"\b(today|yesterday)\b", re.IGNORECASE)


def classify_recency(
    item: ResultItem | str,
    window_days: int,
    today: date | None = None,
) -> Recency:
    """Classify a posting as inside or outside the recency window.

    A structured posted_date wins over text. Text is matched against
    "N day(s) ago" and "Added/Posted ... Today/Yesterday"; any other
    phrasing is UNCLASSIFIED and must not be counted.
    """
    if isinstance(item, str):
        item = ResultItem(text=item)

    if item.posted_date is not None:
        today = today or datetime.now(UTC).date()
        age = max((today - item.posted_date).days, 0)
        return Recency.WITHIN_WINDOW if age <= window_days else Recency.OUTSIDE_WINDOW

    return _classify_text(item.text, window_days)


def is_within_window(item: ResultItem | str, window_days: int, today: date | None = None) -> bool:
    """True when the posting counts towards the window."""
    return classify_recency(item, window_days, today) is Recency.WITHIN_WINDOW


def _classify_text(text: str, window_days: int) -> Recency:
    """Classify free-form rendered text."""
    days = _DAYS_AGO.search(text)
    if days:
        if int(days.group(1)) <= window_days:
            return Recency.WITHIN_WINDOW
        return Recency.OUTSIDE_WINDOW

    if _POSTED_MARKER.search(text) and _SAME_OR_PREVIOUS_DAY.search(text):
        return Recency.WITHIN_WINDOW

    return Recency.UNCLASSIFIED
