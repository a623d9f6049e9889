"""
tierstake Exceptions

Custom exception classes shared across the tierstake package.
"""


class TierStakeException(Exception):
    """Base exception for tierstake."""

    def __init__(self, reason: str = ""):
        self.reason = reason
        super().__init__(reason)


class ConfigurationError(TierStakeException):
    """Configuration error."""
    pass


class ChainError(TierStakeException):
    """Local execution environment error."""
    pass


class InvalidAddressError(TierStakeException):
    """Invalid address format."""
    pass
