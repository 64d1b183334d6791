"""
Formatting utilities.
"""

import math
import re
from typing import Any

DEFAULT_WALK_TIME_MINUTES = 10

_DIGITS = re.compile(r"\d+")


def format_currency(amount: int, currency: str = "JPY") -> str:
    """
    Format an integer amount as currency.

    Args:
        amount: The amount in whole units (e.g., yen).
        currency: Currency code (default JPY).

    Returns:
        Formatted currency string.
    """
    symbols = {
        "JPY": "¥",
        "GBP": "£",
        "USD": "$",
    }
    symbol = symbols.get(currency, currency + " ")
    return f"{symbol}{amount:,}"


def format_man_yen(amount: int) -> str:
    """Format a yen amount in units of 10,000 (万円), truncating the remainder."""
    return f"{amount // 10000:,}万円"


def format_percent(value: float, decimals: int = 2) -> str:
    """
    Format a number as a percentage.

    Args:
        value: The percentage value.
        decimals: Number of decimal places.

    Returns:
        Formatted percentage string.
    """
    return f"{value:.{decimals}f}%"


def normalise_walk_time(walk_time: Any) -> int:
    """
    Normalise a walking distance to whole minutes.

    Listings carry this as a number or as free text such as "徒歩8分".
    Numbers pass through, text yields its first integer, anything else
    (including NaN and infinity) falls back to 10 minutes.
    """
    if isinstance(walk_time, bool):
        return DEFAULT_WALK_TIME_MINUTES
    if isinstance(walk_time, float) and not math.isfinite(walk_time):
        return DEFAULT_WALK_TIME_MINUTES
    if isinstance(walk_time, (int, float)):
        return int(walk_time)
    if isinstance(walk_time, str):
        match = _DIGITS.search(walk_time)
        return int(match.group()) if match else DEFAULT_WALK_TIME_MINUTES
    return DEFAULT_WALK_TIME_MINUTES
