"""
Roll per-hostname traffic up into domain groups.

The domain listing shows one row per production domain, with preview
deployments folded in and counted ("shop.com, 3 preview deployments").
Grouping happens at read time only; stored pageviews keep their original
hostname.
"""

import logging
from typing import Iterable

from .config import GroupingConfig
from .domains import group_domains, is_preview_domain
from .models import DomainGroup, DomainStats

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "pageviews": "total_pageviews",
    "visitors": "unique_visitors",
}
SORT_ORDERS = ("asc", "desc")


def _merge_stats(stats: Iterable[DomainStats]) -> dict[str, DomainStats]:
    """Collapse duplicate rows for the same hostname, keeping first-seen order."""
    merged: dict[str, DomainStats] = {}
    for row in stats:
        existing = merged.get(row.domain)
        if existing is None:
            merged[row.domain] = row
            continue

        last_seen = [t for t in (existing.last_pageview, row.last_pageview) if t]
        merged[row.domain] = DomainStats(
            domain=row.domain,
            total_pageviews=existing.total_pageviews + row.total_pageviews,
            unique_visitors=existing.unique_visitors + row.unique_visitors,
            urls=existing.urls + row.urls,
            last_pageview=max(last_seen) if last_seen else None,
        )
    return merged


def rollup_domains(
    stats: Iterable[DomainStats],
    config: GroupingConfig | None = None,
    sort_by: str = "pageviews",
    sort_order: str = "desc",
) -> list[DomainGroup]:
    """
    Group domain stats so previews are reported under their production domain.

    Args:
        stats: One row per tracked hostname (duplicate hostnames are summed)
        config: Optional grouping tunables
        sort_by: "pageviews" or "visitors"
        sort_order: "asc" or "desc"

    Returns:
        One DomainGroup per group, sorted by the chosen total
        (ties broken by canonical name)

    Raises:
        ValueError: If sort_by or sort_order is not recognized
    """
    if sort_by not in SORT_FIELDS:
        raise ValueError(
            f"sort_by must be one of {sorted(SORT_FIELDS)}. Got {sort_by!r}."
        )
    if sort_order not in SORT_ORDERS:
        raise ValueError(
            f"sort_order must be one of {list(SORT_ORDERS)}. Got {sort_order!r}."
        )

    by_domain = _merge_stats(stats)
    groups = group_domains(by_domain, config)

    rows = []
    for canonical, members in groups.items():
        member_stats = [by_domain[m] for m in members]
        last_seen = [s.last_pageview for s in member_stats if s.last_pageview]
        rows.append(DomainGroup(
            canonical=canonical,
            members=members,
            preview_count=sum(
                1 for m in members if m != canonical and is_preview_domain(m)
            ),
            total_pageviews=sum(s.total_pageviews for s in member_stats),
            unique_visitors=sum(s.unique_visitors for s in member_stats),
            urls=sum(s.urls for s in member_stats),
            last_pageview=max(last_seen) if last_seen else None,
        ))

    field = SORT_FIELDS[sort_by]
    rows.sort(key=lambda g: g.canonical)
    rows.sort(key=lambda g: getattr(g, field), reverse=sort_order == "desc")

    logger.debug(f"Rolled {len(by_domain)} domains into {len(rows)} groups")
    return rows
