"""
Reward Schedule Test Suite
"""

import os
import sys

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from tierstake.config import StakingConfig, TierConfig
from tierstake.constants import REWARD_PERIOD_SECONDS
from tierstake.exceptions import ConfigurationError
from tierstake.staking import InvalidStakeTypeError, RewardSchedule, RewardTier


UNIT = 10 ** 18
MAX_STAKE = 1_000_000 * UNIT


@pytest.fixture
def schedule():
    return RewardSchedule.from_config(StakingConfig())


class TestRewardSchedule:

    def test_default_tiers(self, schedule):
        assert [(t.stake_type, t.rate_bps) for t in schedule.tiers] == [
            (0, 12000), (1, 15000), (2, 20000),
        ]
        assert schedule.period_seconds == REWARD_PERIOD_SECONDS

    def test_hourly_ceilings(self, schedule):
        for stake_type, ceiling in ((0, 139), (1, 174), (2, 232)):
            hourly = schedule.hourly_reward(MAX_STAKE, stake_type)
            assert (ceiling - 1) * UNIT < hourly <= ceiling * UNIT

    def test_accrual_is_linear_in_time(self, schedule):
        one_day = schedule.accrued(MAX_STAKE, 86_400, 0)
        assert one_day == MAX_STAKE // 300
        assert schedule.accrued(MAX_STAKE, REWARD_PERIOD_SECONDS, 0) == MAX_STAKE * 12 // 10

    def test_truncates(self, schedule):
        # 1 base unit for 1 second is far below one reward unit
        assert schedule.accrued(1, 1, 2) == 0

    def test_zero_and_negative_inputs(self, schedule):
        assert schedule.accrued(0, 3600, 0) == 0
        assert schedule.accrued(MAX_STAKE, 0, 0) == 0
        assert schedule.accrued(MAX_STAKE, -10, 0) == 0

    def test_unknown_tier(self, schedule):
        assert not schedule.has_tier(5)
        with pytest.raises(InvalidStakeTypeError, match="Unknown stake type 5"):
            schedule.rate_for(5)
        with pytest.raises(InvalidStakeTypeError):
            schedule.accrued(MAX_STAKE, 3600, 5)

    def test_custom_config(self):
        config = StakingConfig(
            reward_period_seconds=3600,
            tiers=[TierConfig(stake_type=7, name="Hourly", rate_bps=100)],
        )
        schedule = RewardSchedule.from_config(config)
        assert schedule.accrued(10_000, 3600, 7) == 100
        assert schedule.tier(7).name == "Hourly"

    def test_invalid_construction(self):
        with pytest.raises(ConfigurationError):
            RewardSchedule([RewardTier(0, "Basic", 100)], period_seconds=0)
        with pytest.raises(ConfigurationError):
            RewardSchedule([], period_seconds=3600)
