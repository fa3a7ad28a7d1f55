"""
Error taxonomy. Only configuration errors are meant to reach the user;
data errors are recovered per tick.
"""

from __future__ import annotations


class TradelabError(Exception):
    """Base class for all tradelab errors."""


class DataUnavailable(TradelabError):
    """Market data source timed out, failed, or returned an unusable payload."""


class InvalidConfiguration(TradelabError):
    """Settings rejected before a session or backtest starts."""


class MissingConfiguration(TradelabError):
    """Live session started without saved settings."""


class LedgerError(TradelabError):
    """Accounting operation would break ledger invariants. Indicates a defect."""
