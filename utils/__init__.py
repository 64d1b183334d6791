"""
Utility modules for the appraisal engine.
"""

from .formatting import format_currency, format_man_yen, format_percent, normalise_walk_time
from .config import Config
from .logging import setup_logging

__all__ = [
    "format_currency",
    "format_man_yen",
    "format_percent",
    "normalise_walk_time",
    "Config",
    "setup_logging",
]
