"""
Failure classification for batched valuations.

A batch evaluation can fail because the node is slow or unreachable (worth
another attempt at the same block) or because the inputs are bad or the
arithmetic overflowed (the same snapshot will fail the same way again).
ErrorHandler tells the two apart for BaseBatcher's retry loop.
"""

import logging
from typing import Any, Dict, Optional

from ..valuation.errors import ValuationError

logger = logging.getLogger(__name__)

MAX_BACKOFF_SECONDS = 60

# Message fragments used when an error arrives untyped (e.g. from the RPC client)
_CATEGORY_KEYWORDS = (
    ('rate_limit', ('rate limit', 'too many requests', '429')),
    ('network', ('connection', 'timeout', 'network', 'dns')),
    ('validation', ('invalid', 'bad request', '400')),
)

_RETRYABLE = {'network', 'rate_limit', 'unknown'}

# Multipliers applied to the exponential backoff base
_DELAY_FACTORS = {'rate_limit': 2.0, 'network': 1.0}


class BatchError(Exception):
    """Base exception for batcher failures."""
    pass


class RateLimitError(BatchError):
    """The RPC endpoint throttled us."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class NetworkError(BatchError):
    """The RPC endpoint could not be reached."""
    pass


class ValidationError(BatchError):
    """A batch was given inputs it cannot evaluate."""
    pass


class ErrorHandler:
    """
    Decides how the batcher reacts to a failed evaluation.

    Typed errors are classified by class; anything else by its message.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def classify_error(self, error: Exception) -> str:
        """
        Map an exception to one of: valuation, rate_limit, network,
        validation, unknown.
        """
        if isinstance(error, ValuationError):
            return 'valuation'
        if isinstance(error, RateLimitError):
            return 'rate_limit'
        if isinstance(error, NetworkError):
            return 'network'
        if isinstance(error, ValidationError):
            return 'validation'

        message = str(error).lower()
        for category, keywords in _CATEGORY_KEYWORDS:
            if any(keyword in message for keyword in keywords):
                return category

        return 'unknown'

    def should_retry(self, error: Exception, attempt: int, max_retries: int) -> bool:
        """
        Whether another attempt can succeed.

        Args:
            error: The failure
            attempt: Zero-based attempt that just failed
            max_retries: Attempt budget

        Returns:
            True for transient failures while budget remains
        """
        if attempt >= max_retries:
            return False
        return self.classify_error(error) in _RETRYABLE

    def get_retry_delay(self, error: Exception, attempt: int) -> float:
        """
        Seconds to wait before the next attempt.

        A server-provided retry_after wins. Otherwise the delay doubles per
        attempt (capped at MAX_BACKOFF_SECONDS) and is stretched for rate
        limits and unclassified errors.
        """
        if isinstance(error, RateLimitError) and error.retry_after is not None:
            return error.retry_after

        base_delay = min(2 ** attempt, MAX_BACKOFF_SECONDS)
        return base_delay * _DELAY_FACTORS.get(self.classify_error(error), 1.5)

    def log_error(self, error: Exception, context: Dict[str, Any]):
        """Log a failure at a level matching its category, with context as extra."""
        category = self.classify_error(error)
        extra = {
            'error_type': type(error).__name__,
            'error_category': category,
            'error_message': str(error),
            **context
        }

        if category == 'valuation':
            self.logger.error(f"Valuation aborted: {error}", extra=extra)
        elif category == 'rate_limit':
            self.logger.info(f"Rate limited: {error}", extra=extra)
        elif category == 'validation':
            self.logger.warning(f"Rejected input: {error}", extra=extra)
        else:
            self.logger.warning(f"Batch attempt failed: {error}", extra=extra)
