"""
Utilities package for the Core Ledger.

Exports shared helpers for logging, id generation, and timestamp formatting.
Keep this package lightweight and free of domain-specific logic.
"""

from coreledger.utils.ids import new_id
from coreledger.utils.logging import configure_logging, get_logger
from coreledger.utils.timefmt import format_instant, now_instant, to_utc, utc_now

__all__ = [
    "configure_logging",
    "get_logger",
    "new_id",
    "format_instant",
    "now_instant",
    "to_utc",
    "utc_now",
]
