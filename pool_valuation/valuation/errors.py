"""
Exceptions raised by the valuation core.

Soft failures (missing code, missing pairs, bad metadata) never raise; they
show up as zero values. The classes below are the hard failures that abort a
whole evaluation, plus the provider-level call failure the probe absorbs.
"""


class ValuationError(Exception):
    """Base exception for errors that abort an evaluation."""
    pass


class FixedPointOverflowError(ValuationError):
    """Raised when a price x amount product does not fit in 256 bits."""
    pass


class DivisionConsistencyError(ValuationError):
    """Raised when the long-division correction step loses track of the high limb."""
    pass


class CallFailedError(Exception):
    """Raised by a chain state provider when a read-only call reverts or fails."""

    def __init__(self, message: str, address: str = ""):
        super().__init__(message)
        self.address = address
