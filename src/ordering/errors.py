"""Errors raised across the checkout and order pipeline.

Field-level validation failures use protean's ValidationError and unknown
orders use ObjectNotFoundError; these cover what protean has no exception for.
"""


class TransientNetworkError(Exception):
    """An order create/update/lookup call failed and may be retried by the user."""

    def __init__(self, message: str = "Order service unavailable", cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class BestEffortFailure(Exception):
    """A background call whose failure must not change the user-visible outcome."""


class CheckoutInProgress(Exception):
    """A checkout submission is already in flight for this session."""
