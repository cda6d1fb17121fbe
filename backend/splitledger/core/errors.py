"""
Error types raised by the ledger engine.

Expected validation failures of a split configuration are returned as
``SplitValidationError`` values (see ``splitledger.schemas.split``); the
exceptions below signal contract violations or failures propagated from the
persistence layer.
"""
from typing import Optional


class LedgerError(ValueError):
    """Base class for every ledger engine error."""


class EmptyParticipantSet(LedgerError):
    """A split was requested with no participants."""

    def __init__(self, message: str = "At least one participant is required"):
        super().__init__(message)


class InvalidShareConfiguration(LedgerError):
    """Share weights cannot be used to divide an amount (e.g. zero total)."""


class InvalidShareCount(LedgerError):
    """A share count is not a positive integer."""


class PercentagesMustSumTo100(LedgerError):
    """Percentages of a split do not add up to 100."""


class PercentageOutOfRange(LedgerError):
    """A single percentage lies outside 0 to 100."""


class AmountsMustSumToTotal(LedgerError):
    """Exact amounts of a split do not add up to the expense total."""


class InvalidAmount(LedgerError):
    """A monetary amount is NaN, infinite, or negative where it must not be."""


class UnsupportedCurrency(LedgerError):
    """Currency code is not a supported ISO 4217 code."""


class CurrencyMismatch(LedgerError):
    """A record is expressed in a currency other than the one being computed."""

    def __init__(self, expected: str, actual: str, record_id: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        self.record_id = record_id
        where = f" on record {record_id}" if record_id else ""
        super().__init__(f"Currency mismatch{where}: expected {expected}, got {actual}")


class GroupNotFound(LedgerError):
    """Group does not exist or has been deleted."""

    def __init__(self, group_id: str):
        self.group_id = group_id
        super().__init__(f"Group not found or has been deleted: {group_id}")


class SplitConfigurationError(LedgerError):
    """Raised by ``calculate_split`` when the configuration fails validation."""

    def __init__(self, error):
        # error is a SplitValidationError
        self.error = error
        super().__init__(error.message)
