"""
Configuration for Pageview Analytics.
"""
import logging
import os
import warnings
from dataclasses import dataclass
from functools import lru_cache

logger = logging.getLogger(__name__)

# Domain grouping constants
GROUP_MERGE_THRESHOLD = 0.6
TLD_BONUS = 0.2
DEFAULT_CONFIDENCE = 0.5

# Deployment platforms whose hostnames are always previews
PREVIEW_TLD = "vercel.app"
PAGES_SUFFIX = ".pages.dev"

# Branch names that look like deployment ids but are kept as project tokens
PROTECTED_BRANCH_NAMES = frozenset({
    "master",
    "main",
    "develop",
    "dev",
    "prod",
    "production",
    "staging",
    "test",
})

# Privacy constants
IP_SALT_ENV_VAR = "IP_HASH_SALT"
DEFAULT_IP_SALT = "default-salt-please-change-in-production"
CONSENT_COOKIE_NAME = "pageview_consent"


class InvalidThresholdError(ValueError):
    """Raised when a grouping tunable falls outside [0, 1]."""
    pass


def validate_unit_interval(name: str, value: float) -> None:
    """Validate that a score tunable lies in [0, 1].

    Raises:
        InvalidThresholdError: If value is outside the unit interval
    """
    if not 0.0 <= value <= 1.0:
        raise InvalidThresholdError(
            f"{name} must be between 0 and 1. Got {value}."
        )


@dataclass(frozen=True)
class GroupingConfig:
    """Tunables for merging preview deployments into domain groups.

    Usage:
        config = GroupingConfig(merge_threshold=0.8)
        groups = group_domains(hostnames, config=config)
    """

    merge_threshold: float = GROUP_MERGE_THRESHOLD  # Minimum similarity to merge
    tld_bonus: float = TLD_BONUS  # Added when two hostnames share a parent domain

    def __post_init__(self):
        validate_unit_interval("merge_threshold", self.merge_threshold)
        validate_unit_interval("tld_bonus", self.tld_bonus)


DEFAULT_GROUPING = GroupingConfig()


@dataclass(frozen=True)
class PrivacyConfig:
    """Settings for visitor anonymization."""

    ip_salt: str = DEFAULT_IP_SALT
    consent_cookie: str = CONSENT_COOKIE_NAME

    @property
    def uses_default_salt(self) -> bool:
        """Check if the development salt is still in use."""
        return self.ip_salt == DEFAULT_IP_SALT

    @classmethod
    def from_env(cls) -> "PrivacyConfig":
        """Build a config from the environment.

        Falls back to the development salt when IP_HASH_SALT is unset, which
        makes visitor hashes predictable across deployments.
        Generate a real salt with: openssl rand -hex 32
        """
        salt = os.environ.get(IP_SALT_ENV_VAR, "")
        if salt:
            logger.debug(f"Using IP salt from {IP_SALT_ENV_VAR}")
            return cls(ip_salt=salt)

        warnings.warn(
            f"{IP_SALT_ENV_VAR} is not set; falling back to the default salt. "
            f"Visitor hashes will be predictable until a salt is configured.",
            UserWarning,
            stacklevel=2,
        )
        logger.warning(f"{IP_SALT_ENV_VAR} is not set, using default IP salt")
        return cls()


@lru_cache(maxsize=1)
def get_privacy_config() -> PrivacyConfig:
    """Privacy settings for this process, read from the environment once.

    Call get_privacy_config.cache_clear() after changing IP_HASH_SALT.
    """
    return PrivacyConfig.from_env()
