"""
tierstake staking engine

Provides:
  - StakingEngine  : tiered staking with time-based reward accrual
  - RewardSchedule : per-tier rates and the accrual formula
  - StakePosition  : per (account, stake_type) bookkeeping
"""

from .engine import StakingEngine
from .rewards import RewardSchedule, RewardTier
from .types import (
    StakeType,
    PositionState,
    StakePosition,
    StakingInfo,
    StakedEvent,
    UnstakedEvent,
    RewardsPaidEvent,
    StakingError,
    InvalidAmountError,
    InvalidStakeTypeError,
    StakeBelowMinimumError,
    StakeAboveMaximumError,
    InsufficientStakedBalanceError,
)

__all__ = [
    # Engine
    "StakingEngine",
    "RewardSchedule",
    "RewardTier",
    # Types
    "StakeType",
    "PositionState",
    "StakePosition",
    "StakingInfo",
    "StakedEvent",
    "UnstakedEvent",
    "RewardsPaidEvent",
    # Errors
    "StakingError",
    "InvalidAmountError",
    "InvalidStakeTypeError",
    "StakeBelowMinimumError",
    "StakeAboveMaximumError",
    "InsufficientStakedBalanceError",
]
