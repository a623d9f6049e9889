"""
tierstake configuration.

Provides:
  - StakingConfig : [staking] section (stake band, reward period, tiers)
  - TierConfig    : one [[staking.tiers]] entry
"""

from .loader import StakingConfig, TierConfig

__all__ = [
    "StakingConfig",
    "TierConfig",
]
