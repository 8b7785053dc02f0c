"""CascadeWatch exception hierarchy.

This module defines the base exception class and specialized exceptions
for the error categories the watcher distinguishes. Routine outcomes
(filtered-out transactions, lookup misses, duplicate signals) are not
errors and never raise.
"""


class CascadeWatchError(Exception):
    """Base exception for all CascadeWatch errors.

    All custom exceptions in CascadeWatch should inherit from this class
    to enable consistent error handling and logging.
    """

    pass


class ConfigurationError(CascadeWatchError):
    """Raised when configuration is invalid or missing.

    Startup-time only. The process aborts before entering the ingest loop.

    Example:
        raise ConfigurationError("Missing required env var: TARGET_POOL1")
    """

    pass


class ValidationError(CascadeWatchError):
    """Raised when chain data cannot be parsed into a domain model.

    Example:
        raise ValidationError("Transaction value is not a hex quantity")
    """

    pass


class ExternalServiceError(CascadeWatchError):
    """Raised when an external HTTP service call fails.

    Attributes:
        service: Name or base URL of the external service that failed.
        status_code: HTTP status code if available, None otherwise.

    Example:
        raise ExternalServiceError(service="rpc", message="Rate limited", status_code=429)
    """

    def __init__(
        self,
        service: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self.service = service
        self.status_code = status_code
        super().__init__(f"{service}: {message}")


class CircuitBreakerOpenError(CascadeWatchError):
    """Raised when an API client's circuit breaker is open.

    Example:
        raise CircuitBreakerOpenError("Circuit is open for the RPC endpoint")
    """

    pass


class ChainConnectionError(CascadeWatchError):
    """Raised when a JSON-RPC call to the chain node fails.

    Attributes:
        method: JSON-RPC method that failed (if known).

    Example:
        raise ChainConnectionError("eth_chainId failed: timeout", method="eth_chainId")
    """

    def __init__(self, message: str, method: str | None = None) -> None:
        super().__init__(message)
        self.method = method


class SubscriptionClosedError(ChainConnectionError):
    """Raised when the pending-transaction subscription stream ends.

    The stream is not restartable; the ingest loop stops when it sees this.
    """

    pass


class ContractCallError(CascadeWatchError):
    """Raised when a contract call fails to submit or is reverted.

    Attributes:
        method: Contract method name (``emitCascade`` or ``claimYield``).
        tx_hash: Submitted transaction hash, None if submission never happened.

    Example:
        raise ContractCallError("emitCascade", "insufficient funds")
    """

    def __init__(self, method: str, message: str, tx_hash: str | None = None) -> None:
        self.method = method
        self.tx_hash = tx_hash
        super().__init__(f"{method}: {message}")
