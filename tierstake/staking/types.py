"""
Staking Types

Data structures and errors for stake positions.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict

from ..exceptions import TierStakeException


class StakeType(IntEnum):
    """Reward tiers shipped with the default configuration."""
    BASIC = 0
    ADVANCED = 1
    PREMIUM = 2


class PositionState(Enum):
    """Lifecycle of a (account, stake_type) position."""
    UNINITIALIZED = "uninitialized"
    STAKED = "staked"
    PARTIALLY_WITHDRAWN = "partially_withdrawn"
    EMPTY = "empty"


# ══════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════

class StakingError(TierStakeException):
    """Base exception for staking operations."""


class InvalidAmountError(StakingError):
    """Raised when an amount is zero or negative."""


class InvalidStakeTypeError(StakingError):
    """Raised when a stake type has no configured reward tier."""
    def __init__(self, stake_type: int):
        self.stake_type = stake_type
        super().__init__(f"Unknown stake type {stake_type}")


class StakeBelowMinimumError(StakingError):
    """Raised when a stake amount is below the configured minimum."""
    def __init__(self, amount: int, minimum: int):
        self.amount = amount
        self.minimum = minimum
        super().__init__(f"Stake amount {amount} is below minimum {minimum}")


class StakeAboveMaximumError(StakingError):
    """Raised when a stake amount, or the resulting position, exceeds the maximum."""
    def __init__(self, amount: int, maximum: int):
        self.amount = amount
        self.maximum = maximum
        super().__init__(f"Stake amount {amount} exceeds maximum {maximum}")


class InsufficientStakedBalanceError(StakingError):
    """Raised when a withdrawal exceeds the staked balance."""
    def __init__(self, requested: int, staked: int):
        self.requested = requested
        self.staked = staked
        super().__init__(
            f"Insufficient staked balance: requested {requested}, staked {staked}"
        )


# ══════════════════════════════════════════════════════════════════════
#  POSITIONS
# ══════════════════════════════════════════════════════════════════════

@dataclass
class StakePosition:
    """
    Stake held by one account in one tier.

    Attributes:
        account: Staker address
        stake_type: Reward tier
        staked: Amount in custody, base units
        start_timestamp: Start of the current accrual window
        unpaid_rewards: Settled rewards the reward pool could not pay yet
        state: Lifecycle state
    """
    account: str
    stake_type: int
    staked: int = 0
    start_timestamp: int = 0
    unpaid_rewards: int = 0
    state: PositionState = PositionState.UNINITIALIZED

    @property
    def is_active(self) -> bool:
        return self.staked > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'account': self.account,
            'stake_type': self.stake_type,
            'staked': str(self.staked),
            'start_timestamp': self.start_timestamp,
            'unpaid_rewards': str(self.unpaid_rewards),
            'state': self.state.value,
        }


@dataclass(frozen=True)
class StakingInfo:
    """Snapshot returned by `StakingEngine.get_staking_info`."""
    staked: int
    rewards: int


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StakedEvent:
    account: str
    stake_type: int
    amount: int
    timestamp: int
    created_at: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Staked",
            "account": self.account,
            "stakeType": self.stake_type,
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class UnstakedEvent:
    account: str
    stake_type: int
    amount: int
    timestamp: int
    created_at: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Unstaked",
            "account": self.account,
            "stakeType": self.stake_type,
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class RewardsPaidEvent:
    """Emitted when settled rewards are transferred to the staker."""
    account: str
    stake_type: int
    amount: int
    outstanding: int
    timestamp: int
    created_at: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "RewardsPaid",
            "account": self.account,
            "stakeType": self.stake_type,
            "amount": str(self.amount),
            "outstanding": str(self.outstanding),
            "timestamp": self.timestamp,
        }
