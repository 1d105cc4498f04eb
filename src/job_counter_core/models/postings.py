"""Keyword group, query plan and result item models."""

from __future__ import annotations

from datetime import date
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Recency(StrEnum):
    """Recency classification of a single posting."""

    WITHIN_WINDOW = "within_window"
    OUTSIDE_WINDOW = "outside_window"
    UNCLASSIFIED = "unclassified"  # Unrecognised phrasing, excluded from counts


class KeywordGroup(BaseModel):
    """Search terms for one eligible industry, OR-ed into a single query."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Industry identifier")
    terms: tuple[str, ...] = Field(min_length=1, description="Search terms")

    @property
    def query(self) -> str:
        """Disjunctive search query string."""
        return " OR ".join(self.terms)


class QueryPair(BaseModel):
    """One unit of work in the query plan."""

    model_config = ConfigDict(frozen=True)

    group: KeywordGroup = Field(description="Keyword group searched")
    postcode: str = Field(description="Location searched")


class ResultItem(BaseModel):
    """A single posting as returned by the job source."""

    text: str = Field(description="Rendered text of the result card")
    posted_date: date | None = Field(
        default=None, description="Structured publication date, when the source exposes one"
    )
    posting_id: str | None = Field(
        default=None, description="Stable posting identity such as its link"
    )

    @property
    def identity(self) -> str:
        """Key used to deduplicate postings across keyword groups."""
        if self.posting_id:
            return self.posting_id
        return " ".join(self.text.split()).lower()
