"""
Privacy-first pageview analytics helpers.

Usage:
    from pageview_analytics import group_domains, count_previews

    hostnames = [
        "shop.com",
        "shop-git-feature.vercel.app",
        "a1b2c3d4.shop.pages.dev",
    ]

    groups = group_domains(hostnames)
    # {"shop.com": ["a1b2c3d4.shop.pages.dev", "shop-git-feature.vercel.app", "shop.com"]}

    count_previews("shop.com", hostnames)  # -> 2
"""

from .bots import BotClassification, BotType, classify_bot
from .config import GroupingConfig, InvalidThresholdError, PrivacyConfig
from .domains import (
    DomainAnalysis,
    analyze_domain,
    count_previews,
    get_canonical_domain,
    group_domains,
    is_preview_domain,
)
from .models import DomainGroup, DomainStats
from .rollup import rollup_domains

__version__ = "0.1.0"
__all__ = [
    "DomainAnalysis", "analyze_domain", "group_domains",
    "is_preview_domain", "get_canonical_domain", "count_previews",
    "DomainStats", "DomainGroup", "rollup_domains",
    "BotType", "BotClassification", "classify_bot",
    "GroupingConfig", "PrivacyConfig", "InvalidThresholdError",
]
