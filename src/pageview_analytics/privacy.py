"""
Privacy utilities for visitor counting.

Raw IP addresses are never stored. Pageviews carry a salted one-way hash
(or a truncated session id derived from it) so unique visitors can be counted
without identifying anyone.
"""

import hashlib
import re
from typing import Optional

from .config import CONSENT_COOKIE_NAME, get_privacy_config

SESSION_ID_LENGTH = 16
UNKNOWN_IP = "unknown"

_IPV4 = re.compile(
    r"(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}"
    r"(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)"
)
# Full form only, no "::" compression
_IPV6 = re.compile(r"(?:[a-fA-F0-9]{1,4}:){7}[a-fA-F0-9]{1,4}")


def _is_missing(ip: Optional[str]) -> bool:
    return not ip or ip == UNKNOWN_IP


def hash_ip(ip: Optional[str], salt: Optional[str] = None) -> Optional[str]:
    """Hash an IP address with SHA-256 and a salt.

    Args:
        ip: IP address from the request
        salt: Salt to mix in. Defaults to IP_HASH_SALT, read once per process.

    Returns:
        64-character hex digest, or None if the IP is missing
    """
    if _is_missing(ip):
        return None

    if salt is None:
        salt = get_privacy_config().ip_salt

    return hashlib.sha256((ip + salt).encode()).hexdigest()


def anonymize_ip(ip: Optional[str]) -> Optional[str]:
    """Drop the host part of an IP address.

    IPv4 loses its last octet (192.168.1.100 -> 192.168.1.0); IPv6 keeps only
    its first three groups. Less private than hashing but readable when debugging.
    """
    if _is_missing(ip):
        return None

    if "." in ip:
        parts = ip.split(".")
        if len(parts) == 4:
            parts[3] = "0"
            return ".".join(parts)

    if ":" in ip:
        parts = ip.split(":")
        if len(parts) >= 3:
            return ":".join(parts[:3]) + "::0"

    return None


def get_session_id(ip: Optional[str], salt: Optional[str] = None) -> Optional[str]:
    """Short visitor identifier: the first 16 characters of the IP hash."""
    hashed = hash_ip(ip, salt)
    return hashed[:SESSION_ID_LENGTH] if hashed else None


def is_valid_ip(ip: Optional[str]) -> bool:
    """Check for a dotted-quad IPv4 or full eight-group IPv6 address."""
    if not ip:
        return False
    return bool(_IPV4.fullmatch(ip) or _IPV6.fullmatch(ip))


def has_tracking_consent(
    cookies: Optional[str],
    cookie_name: str = CONSENT_COOKIE_NAME,
) -> bool:
    """Check the Cookie header for the analytics consent flag."""
    if not cookies:
        return False
    return f"{cookie_name}=true" in cookies
