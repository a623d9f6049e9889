"""
Reward Schedule

Per-tier reward rates and the accrual formula.

Each tier carries a simple (non-compounding) rate in basis points that
applies over one reward period:

    reward = staked * rate_bps * elapsed // (BPS_DENOMINATOR * period_seconds)

Division truncates, so a reported reward never exceeds the exact value.
With the default 360-day period, a 1,000,000-token stake earns
138.88 / 173.61 / 231.48 tokens per hour in tiers 0 / 1 / 2.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..config import StakingConfig
from ..constants import BPS_DENOMINATOR, SECONDS_IN_HOUR
from ..exceptions import ConfigurationError
from .types import InvalidStakeTypeError


@dataclass(frozen=True)
class RewardTier:
    stake_type: int
    name: str
    rate_bps: int


class RewardSchedule:
    """Maps stake types to reward rates and computes accrued rewards."""

    def __init__(self, tiers: Iterable[RewardTier], period_seconds: int):
        if period_seconds <= 0:
            raise ConfigurationError("period_seconds must be positive")
        self._tiers: Dict[int, RewardTier] = {t.stake_type: t for t in tiers}
        if not self._tiers:
            raise ConfigurationError("RewardSchedule needs at least one tier")
        self.period_seconds = period_seconds

    @classmethod
    def from_config(cls, config: Optional[StakingConfig] = None) -> "RewardSchedule":
        config = config or StakingConfig()
        return cls(
            tiers=[
                RewardTier(stake_type=t.stake_type, name=t.name, rate_bps=t.rate_bps)
                for t in config.tiers
            ],
            period_seconds=config.reward_period_seconds,
        )

    @property
    def tiers(self) -> List[RewardTier]:
        return [self._tiers[k] for k in sorted(self._tiers)]

    def has_tier(self, stake_type: int) -> bool:
        return stake_type in self._tiers

    def tier(self, stake_type: int) -> RewardTier:
        try:
            return self._tiers[stake_type]
        except KeyError:
            raise InvalidStakeTypeError(stake_type)

    def rate_for(self, stake_type: int) -> int:
        return self.tier(stake_type).rate_bps

    def accrued(self, staked: int, elapsed: int, stake_type: int) -> int:
        """Rewards earned by `staked` base units over `elapsed` seconds."""
        rate = self.rate_for(stake_type)
        if staked <= 0 or elapsed <= 0:
            return 0
        return staked * rate * elapsed // (BPS_DENOMINATOR * self.period_seconds)

    def hourly_reward(self, staked: int, stake_type: int) -> int:
        return self.accrued(staked, SECONDS_IN_HOUR, stake_type)
