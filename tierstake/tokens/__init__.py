"""
tierstake fungible token

Provides:
  - TestToken : ERC-20 style token used for staking and rewards
"""

from .erc20 import (
    TestToken,
    TransferEvent,
    ApprovalEvent,
    TokenError,
    InsufficientBalanceError,
    InsufficientAllowanceError,
    to_base_units,
    from_base_units,
)

__all__ = [
    "TestToken",
    "TransferEvent",
    "ApprovalEvent",
    "TokenError",
    "InsufficientBalanceError",
    "InsufficientAllowanceError",
    "to_base_units",
    "from_base_units",
]
