"""
Facilitator error types.

Each failure domain gets its own exception so route handlers and the
cashback step can tell a bad request from a post-settlement failure.
"""


class FacilitatorError(Exception):
    """Base error for all facilitator operations."""
    pass


class ConfigurationError(FacilitatorError):
    """A required key, address or setting is missing."""
    pass


class UnsupportedNetworkError(FacilitatorError):
    """Network is in neither the EVM nor the SVM allow-list."""
    def __init__(self, network: str):
        self.network = network
        super().__init__(f"Invalid network: {network}")


class SettlementError(FacilitatorError):
    """The x402 settle call returned an unsuccessful result."""
    def __init__(self, reason: str | None, network: str | None = None):
        self.reason = reason
        self.network = network
        super().__init__(f"Settlement failed: {reason or 'unknown reason'}")


class CashbackError(FacilitatorError):
    """Cashback transfer could not be sent or was reverted."""
    pass
