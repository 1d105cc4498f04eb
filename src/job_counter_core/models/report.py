"""Job count report document."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class PostcodeCount(BaseModel):
    """Within-window posting count for one postcode."""

    count: int = Field(ge=0, description="Postings attributed to the postcode")


class FailedQuery(BaseModel):
    """A keyword group / postcode pair that contributed zero after failing."""

    model_config = ConfigDict(populate_by_name=True)

    postcode: str = Field(description="Postcode searched")
    keyword_group: str = Field(alias="keywordGroup", description="Keyword group name")
    error: str = Field(description="Error description")


class JobCountReport(BaseModel):
    """Per-postcode job counts, serialised with the report's camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    generated_at_utc: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        alias="generatedAtUTC",
        description="When the report was created",
    )
    sources: list[str] = Field(description="External data sources used")
    window_days: int = Field(alias="windowDays", description="Recency window in days")
    count_policy: Literal["sum", "dedupe"] = Field(
        alias="countPolicy", description="Cross-group counting policy"
    )
    per_poa: dict[str, PostcodeCount] = Field(
        alias="perPOA", description="Counts keyed by postcode"
    )
    warnings: list[str] = Field(
        default_factory=list, description="Known gaps, e.g. unresolved ALL regions"
    )
    failed_queries: list[FailedQuery] = Field(
        default_factory=list, alias="failedQueries", description="Pairs that contributed zero"
    )

    @property
    def total(self) -> int:
        """Sum of all postcode counts."""
        return sum(c.count for c in self.per_poa.values())

    def to_document(self) -> dict[str, object]:
        """JSON-ready dict using the document's key names."""
        return self.model_dump(mode="json", by_alias=True)
