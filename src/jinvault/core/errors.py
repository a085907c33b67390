"""
Exception types raised by the chain access layer.

Component boundaries (router, fee claimer, distributor, orchestrator) catch
these and convert them into structured results.
"""


class ChainClientError(Exception):
    """Base error for chain interactions."""


class TransactionFailedError(ChainClientError):
    """The network or the program rejected a transaction."""

    def __init__(self, message: str, logs: list[str] | None = None):
        super().__init__(message)
        self.logs = logs or []

    def __str__(self) -> str:
        message = super().__str__()
        if self.logs:
            return f"{message} | logs: {' | '.join(self.logs)}"
        return message


class ConfirmationTimeoutError(ChainClientError):
    """A submitted transaction was not confirmed in time."""

    def __init__(self, signature: str, message: str | None = None):
        super().__init__(message or f"Transaction {signature} was not confirmed")
        self.signature = signature


class AggregatorError(ChainClientError):
    """The swap aggregator HTTP API returned an error or malformed payload."""


class InsufficientBalanceError(ChainClientError):
    """The signer does not hold enough funds for the requested operation."""
