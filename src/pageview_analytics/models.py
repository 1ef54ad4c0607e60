"""Pydantic models for the domain listing."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps as UTC so members can be compared."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class DomainStats(BaseModel):
    """Traffic totals for a single tracked hostname."""

    domain: str
    total_pageviews: int = Field(default=0, ge=0)
    unique_visitors: int = Field(default=0, ge=0)
    urls: int = Field(default=0, ge=0)  # distinct tracked URLs
    last_pageview: Optional[datetime] = None  # always timezone-aware

    @field_validator("last_pageview")
    @classmethod
    def _normalize_last_pageview(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)


class DomainGroup(BaseModel):
    """A production domain with its preview deployments rolled in."""

    canonical: str
    members: list[str] = Field(default_factory=list)
    preview_count: int = 0  # "N preview deployments" badge

    # Summed over members
    total_pageviews: int = 0
    unique_visitors: int = 0  # upper bound, visitors may span members
    urls: int = 0
    last_pageview: Optional[datetime] = None

    @field_validator("last_pageview")
    @classmethod
    def _normalize_last_pageview(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)

    @property
    def has_previews(self) -> bool:
        """Check if any preview deployments were grouped in."""
        return self.preview_count > 0
