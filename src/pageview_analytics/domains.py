"""
Domain grouping for preview deployments.

Hosting platforms give every branch build and pull request its own hostname
(Vercel, Cloudflare Pages, git-branch deploys). Left alone, a single project
shows up in the dashboard as dozens of unrelated domains. This module groups
those preview hostnames with their production domain using token analysis
instead of hardcoded patterns.

How it works:
- Analyze: split the first label on "-", drop tokens that look like
  deployment noise (hashes, branch markers, random ids), and rebuild a
  canonical hostname from what is left.
- Group: bucket hostnames by canonical form, then merge buckets whose
  project tokens overlap enough (Jaccard similarity plus a shared-parent bonus).

Everything here is a pure function of its input. Grouping is O(n^2) in the
number of distinct canonical forms, which is fine for the few thousand
hostnames a site list holds.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable

from .config import (
    DEFAULT_CONFIDENCE,
    DEFAULT_GROUPING,
    PAGES_SUFFIX,
    PREVIEW_TLD,
    PROTECTED_BRANCH_NAMES,
    GroupingConfig,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainAnalysis:
    """
    Result of analyzing a single hostname.

    Attributes:
        original: The hostname as given
        project_tokens: Subdomain tokens that identify the project, in order
        is_preview: Whether this looks like an ephemeral deployment
        confidence: Fraction of subdomain tokens kept (0.5 when there are none)
        canonical: Project tokens rejoined onto the parent domain
    """
    original: str
    project_tokens: tuple[str, ...]
    is_preview: bool
    confidence: float
    canonical: str

    @property
    def tld(self) -> str:
        """Everything after the first label of the original hostname."""
        return _split_hostname(self.original)[1]


# =============================================================================
# EPHEMERAL TOKEN RULES
# =============================================================================
# Ordered (predicate, is_ephemeral) entries. The first predicate that
# matches decides the outcome; tokens matching none are project tokens.

TokenPredicate = Callable[[str, int, list[str]], bool]

_HEX_HASH = re.compile(r"[a-f0-9]{8,}", re.IGNORECASE)
_LONG_ID = re.compile(r"[a-z0-9]{9,}", re.IGNORECASE | re.ASCII)
_ALNUM = re.compile(r"[a-z0-9]+", re.IGNORECASE | re.ASCII)
_PAGES_HASH = re.compile(r"[a-f0-9]{8}", re.IGNORECASE)

GIT_MARKER = "git"
DEPLOYMENT_TOOL_PREFIXES = ("claude-", "011c")


def _is_long_id(token: str) -> bool:
    return len(token) >= 9 and _LONG_ID.fullmatch(token) is not None


def _looks_random(token: str) -> bool:
    # "il3r78fte" style codes: mostly distinct characters
    if not 6 <= len(token) <= 12 or not _ALNUM.fullmatch(token):
        return False
    return len(set(token)) >= len(token) * 0.6


EPHEMERAL_RULES: tuple[tuple[TokenPredicate, bool], ...] = (
    (lambda token, i, tokens: not token, True),
    # Branch markers: "git" and the branch name after it
    (lambda token, i, tokens: token == GIT_MARKER, True),
    (lambda token, i, tokens: i > 0 and tokens[i - 1] == GIT_MARKER, True),
    (lambda token, i, tokens: _HEX_HASH.fullmatch(token) is not None, True),
    # Long ids, except branch names that happen to be long
    (lambda token, i, tokens: _is_long_id(token) and token.lower() in PROTECTED_BRANCH_NAMES, False),
    (lambda token, i, tokens: _is_long_id(token), True),
    (lambda token, i, tokens: len(token) > 15 and _ALNUM.fullmatch(token) is not None, True),
    (lambda token, i, tokens: token.startswith(DEPLOYMENT_TOOL_PREFIXES), True),
    (lambda token, i, tokens: _looks_random(token), True),
)


def is_ephemeral_token(token: str, index: int, tokens: list[str]) -> bool:
    """
    Check whether a subdomain token is deployment noise.

    Args:
        token: The token to classify
        index: Position of the token within tokens
        tokens: All tokens of the subdomain (needed for branch markers)

    Returns:
        True if the token should be dropped from the canonical form

    Examples:
        >>> is_ephemeral_token("a1b2c3d4", 1, ["myapp", "a1b2c3d4"])
        True
        >>> is_ephemeral_token("production", 1, ["myapp", "production"])
        False
    """
    for predicate, outcome in EPHEMERAL_RULES:
        if predicate(token, index, tokens):
            return outcome
    return False


# =============================================================================
# ANALYZER
# =============================================================================

def _split_hostname(hostname: str) -> tuple[str, str]:
    """Split into (first label, remainder)."""
    subdomain, _, tld = hostname.partition(".")
    return subdomain, tld


def _is_platform_preview(tld: str) -> bool:
    return tld == PREVIEW_TLD or tld.endswith(PAGES_SUFFIX)


def analyze_domain(hostname: str) -> DomainAnalysis:
    """
    Analyze a hostname and extract its project identity.

    No normalization is applied: callers pass lowercase hostnames without
    ports or trailing dots. Never raises; degenerate input (including "")
    becomes its own canonical form.

    Examples:
        >>> analyze_domain("a1b2c3d4.myapp.pages.dev").canonical
        'myapp.pages.dev'

        >>> analyze_domain("myapp-a1b2c3d4.example.com").project_tokens
        ('myapp',)
    """
    subdomain, tld = _split_hostname(hostname)

    # Cloudflare Pages: [hash].project.pages.dev
    if tld.endswith(PAGES_SUFFIX) and _PAGES_HASH.fullmatch(subdomain):
        project = tld[: -len(PAGES_SUFFIX)]
        return DomainAnalysis(
            original=hostname,
            project_tokens=tuple(project.split("-")),
            is_preview=True,
            confidence=1.0,
            canonical=tld,
        )

    tokens = [t for t in subdomain.split("-") if t]
    project_tokens = tuple(
        token for i, token in enumerate(tokens)
        if not is_ephemeral_token(token, i, tokens)
    )

    is_preview = len(project_tokens) != len(tokens) or _is_platform_preview(tld)

    if tokens:
        confidence = len(project_tokens) / len(tokens)
    else:
        confidence = DEFAULT_CONFIDENCE

    # Fully ephemeral subdomains keep their original name
    canonical = hostname
    if project_tokens:
        canonical = "-".join(project_tokens)
        if tld:
            canonical = f"{canonical}.{tld}"

    return DomainAnalysis(
        original=hostname,
        project_tokens=project_tokens,
        is_preview=is_preview,
        confidence=confidence,
        canonical=canonical,
    )


# =============================================================================
# GROUPER
# =============================================================================

def calculate_similarity(
    a: DomainAnalysis,
    b: DomainAnalysis,
    config: GroupingConfig | None = None,
) -> float:
    """
    Score how likely two analyses belong to the same project (0-1).

    Identical canonical forms score 1.0. Otherwise the score is the Jaccard
    similarity of the project tokens, plus a bonus when both hostnames share
    the same parent domain, capped at 1.0. Empty token sets score 0.
    """
    config = config or DEFAULT_GROUPING

    if a.canonical == b.canonical:
        return 1.0

    tokens_a = set(a.project_tokens)
    tokens_b = set(b.project_tokens)
    union = tokens_a | tokens_b
    if not union:
        return 0.0

    jaccard = len(tokens_a & tokens_b) / len(union)
    bonus = config.tld_bonus if a.tld == b.tld else 0.0
    return min(1.0, jaccard + bonus)


def _is_production_looking(hostname: str) -> bool:
    return PREVIEW_TLD not in hostname and PAGES_SUFFIX not in hostname


def _choose_representative(members: list[str]) -> str:
    """Prefer the first production-looking member, else the shortest."""
    for hostname in members:
        if _is_production_looking(hostname):
            return hostname
    return min(members, key=lambda h: (len(h), h))


def group_domains(
    hostnames: Iterable[str],
    config: GroupingConfig | None = None,
) -> dict[str, list[str]]:
    """
    Group hostnames so each preview deployment sits with its production domain.

    Buckets are visited in the order their canonical form first appears in
    hostnames, so the same input order always yields the same groups.

    Args:
        hostnames: Hostnames to group (duplicates are collapsed)
        config: Optional tunables (merge threshold, shared-parent bonus)

    Returns:
        Dict mapping each group's representative hostname to its sorted members

    Examples:
        >>> group_domains(["myapp.com", "a1b2c3d4.myapp.pages.dev"])
        {'myapp.com': ['a1b2c3d4.myapp.pages.dev', 'myapp.com']}
    """
    config = config or DEFAULT_GROUPING

    # First pass: exact canonical match (dicts keep first-seen order)
    buckets: dict[str, list[DomainAnalysis]] = {}
    for hostname in hostnames:
        analysis = analyze_domain(hostname)
        buckets.setdefault(analysis.canonical, []).append(analysis)

    logger.debug(f"Grouping {len(buckets)} canonical buckets")

    # Second pass: merge similar buckets into the first unprocessed one
    processed: set[str] = set()
    groups: dict[str, list[str]] = {}

    for canonical, bucket in buckets.items():
        if canonical in processed:
            continue
        processed.add(canonical)

        # dict as an ordered set of member hostnames
        merged = dict.fromkeys(a.original for a in bucket)

        for other_canonical, other_bucket in buckets.items():
            if other_canonical in processed:
                continue

            similarity = calculate_similarity(bucket[0], other_bucket[0], config)
            if similarity >= config.merge_threshold:
                logger.debug(
                    f"Merging {other_canonical} into {canonical} "
                    f"(similarity {similarity:.2f})"
                )
                merged.update(dict.fromkeys(a.original for a in other_bucket))
                processed.add(other_canonical)

        members = list(merged)
        representative = _choose_representative(members)
        groups[representative] = sorted(members)

    logger.debug(f"Grouped {len(buckets)} buckets into {len(groups)} domains")
    return groups


# =============================================================================
# QUERY HELPERS
# =============================================================================

def is_preview_domain(hostname: str) -> bool:
    """Check if a hostname is a preview deployment."""
    return analyze_domain(hostname).is_preview


def get_canonical_domain(hostname: str) -> str:
    """Get the canonical (base) domain for a hostname."""
    return analyze_domain(hostname).canonical


def count_previews(
    base_domain: str,
    all_domains: Iterable[str],
    config: GroupingConfig | None = None,
) -> int:
    """
    Count preview deployments grouped under a base domain.

    Only counts when base_domain was chosen as its group's representative;
    otherwise returns 0.

    Args:
        base_domain: Production hostname (e.g., "shop.com")
        all_domains: Every hostname being tracked
        config: Optional grouping tunables

    Returns:
        Number of other members in the group that are previews
    """
    group = group_domains(all_domains, config).get(base_domain)
    if not group:
        return 0

    return sum(
        1 for hostname in group
        if hostname != base_domain and is_preview_domain(hostname)
    )
