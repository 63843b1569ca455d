"""
Utility helper functions for safe data handling.
"""
import re
from typing import Any, Optional


def safe_str(value: Any, default: str = "") -> str:
    """
    Safely convert value to string, handling None.

    Args:
        value: Any value to convert
        default: Default string if value is None

    Returns:
        String representation or default
    """
    if value is None:
        return default
    return str(value)


def safe_lower(value: Any) -> str:
    """
    Safely lowercase a value, handling None.

    Args:
        value: Any value to lowercase

    Returns:
        Lowercased string or empty string if None
    """
    if value is None:
        return ""
    return str(value).lower()


def safe_int(value: Any, default: Optional[int] = 0) -> Optional[int]:
    """
    Safely convert value to int, handling None and invalid values.

    Args:
        value: Any value to convert
        default: Default if conversion fails (may be None)

    Returns:
        Integer or default
    """
    if value is None:
        return default
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def normalize_team_name(name: Any) -> str:
    """Lowercase and strip everything but letters and digits ("Man. Utd" -> "manutd")."""
    return re.sub(r"[^a-z0-9]", "", safe_lower(name))


def team_names_match(a: Any, b: Any) -> bool:
    """True if either normalized team name contains the other."""
    na = normalize_team_name(a)
    nb = normalize_team_name(b)
    if not na or not nb:
        return False
    return na in nb or nb in na
