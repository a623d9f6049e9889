"""
tierstake Staking Engine

Tracks per-account, per-stake-type deposits of a staking token and accrues
rewards in a reward token according to the tier's rate.

Settlement: every mutating call first folds the live accrual of the
position into its unpaid rewards and restarts the accrual window at `now`,
then pays as much of the unpaid amount as the reward pool holds. Whatever
the pool cannot cover stays on the position and is still reported as
`rewards`.
"""

import asyncio
import time
from collections import deque
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config import StakingConfig
from ..constants import EVENT_LOG_SIZE
from ..logger import get_logger
from ..tokens import TestToken
from .rewards import RewardSchedule
from .types import (
    InsufficientStakedBalanceError,
    InvalidAmountError,
    PositionState,
    RewardsPaidEvent,
    StakeAboveMaximumError,
    StakeBelowMinimumError,
    StakedEvent,
    StakePosition,
    StakingError,
    StakingInfo,
    UnstakedEvent,
)

logger = get_logger(__name__)


def _wall_clock() -> int:
    return int(time.time())


class StakingEngine:
    """
    Tiered staking engine.

    Mutations (`stake`, `unstake`, `unstake_all`, `claim_rewards`) are
    coroutines serialized by a single lock. Each one validates and moves
    custody tokens before writing any position state, so a failed call
    leaves the engine unchanged.

    Time is an explicit input: every call accepts `now` (seconds) and
    otherwise reads the injected `clock`. A mutation whose timestamp is
    earlier than the position's last accrual raises `StakingError`.
    """

    def __init__(
        self,
        staking_token: TestToken,
        reward_token: TestToken,
        config: Optional[StakingConfig] = None,
        *,
        clock: Optional[Callable[[], int]] = None,
        address: Optional[str] = None,
    ):
        """
        Args:
            staking_token: Token accepted as stake
            reward_token: Token paid as rewards
            config: Staking configuration (defaults when omitted)
            clock: Returns the current timestamp in seconds
            address: Engine custody address, assigned on chain registration
        """
        self.config = config or StakingConfig()
        self.config.validate()

        self.staking_token = staking_token
        self.reward_token = reward_token
        self.schedule = RewardSchedule.from_config(self.config)
        self.min_stake = self.config.min_stake_units
        self.max_stake = self.config.max_stake_units
        self.address = address

        self._clock = clock or _wall_clock
        self._lock = asyncio.Lock()

        self._positions: Dict[Tuple[str, int], StakePosition] = {}
        self._total_staked = 0
        self._events: deque = deque(maxlen=EVENT_LOG_SIZE)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _now(self, now: Optional[int]) -> int:
        return int(now) if now is not None else int(self._clock())

    def _custody_address(self) -> str:
        if not self.address:
            raise StakingError("Engine has no address; register it on a chain first")
        return self.address

    def _position(self, account: str, stake_type: int) -> Optional[StakePosition]:
        return self._positions.get((account, int(stake_type)))

    def _require_forward_time(self, position: Optional[StakePosition], ts: int) -> None:
        if position is not None and ts < position.start_timestamp:
            raise StakingError(
                f"Timestamp {ts} is before last accrual {position.start_timestamp}"
            )

    def _live_accrual(self, position: StakePosition, now: int) -> int:
        if not position.is_active:
            return 0
        return self.schedule.accrued(
            position.staked, now - position.start_timestamp, position.stake_type
        )

    def reward_pool(self) -> int:
        """Reward tokens available for payouts."""
        if not self.address:
            return 0
        balance = self.reward_token.balance_of(self.address)
        if self.reward_token is self.staking_token:
            balance -= self._total_staked
        return max(0, balance)

    async def _pay_rewards(self, position: StakePosition, now: int) -> Optional[RewardsPaidEvent]:
        owed = position.unpaid_rewards
        if owed <= 0:
            return None

        payout = min(owed, self.reward_pool())
        if payout <= 0:
            logger.warning(
                f"Reward pool empty, {owed} {self.reward_token.symbol} owed to "
                f"{position.account} type={position.stake_type}"
            )
            return None

        await self.reward_token.transfer(self.address, position.account, payout)
        position.unpaid_rewards = owed - payout

        event = RewardsPaidEvent(
            account=position.account,
            stake_type=position.stake_type,
            amount=payout,
            outstanding=position.unpaid_rewards,
            timestamp=now,
        )
        self._events.append(event)
        logger.info(
            f"Rewards paid: {position.account} type={position.stake_type} "
            f"{payout} {self.reward_token.symbol} (outstanding: {position.unpaid_rewards})"
        )
        return event

    def _settle(self, position: StakePosition, now: int) -> None:
        position.unpaid_rewards += self._live_accrual(position, now)
        position.start_timestamp = now

    # =========================================================================
    # QUERIES
    # =========================================================================

    @property
    def total_staked(self) -> int:
        return self._total_staked

    @property
    def events(self) -> List[Any]:
        """Most recent engine events, oldest first. Holds at most EVENT_LOG_SIZE entries."""
        return list(self._events)

    def get_position(self, account: str, stake_type: int) -> StakePosition:
        """Position for (account, stake_type); a blank one if never staked."""
        self.schedule.tier(stake_type)
        position = self._position(account, stake_type)
        if position is None:
            return StakePosition(account=account, stake_type=int(stake_type))
        return position

    def positions_of(self, account: str) -> List[StakePosition]:
        return [
            p for (owner, _), p in sorted(self._positions.items(), key=lambda kv: kv[0][1])
            if owner == account
        ]

    def calculate_rewards(self, account: str, stake_type: int, *, now: Optional[int] = None) -> int:
        """Reward tokens accrued by the position and not yet paid."""
        position = self.get_position(account, stake_type)
        return position.unpaid_rewards + self._live_accrual(position, self._now(now))

    def get_staking_info(self, account: str, stake_type: int, *, now: Optional[int] = None) -> StakingInfo:
        position = self.get_position(account, stake_type)
        return StakingInfo(
            staked=position.staked,
            rewards=self.calculate_rewards(account, stake_type, now=now),
        )

    def get_staking_time(self, account: str, stake_type: int, *, now: Optional[int] = None) -> int:
        """Seconds since the position's accrual window started (0 when empty)."""
        position = self.get_position(account, stake_type)
        if not position.is_active:
            return 0
        return max(0, self._now(now) - position.start_timestamp)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    async def stake(
        self,
        account: str,
        amount: int,
        stake_type: int,
        *,
        now: Optional[int] = None,
    ) -> StakedEvent:
        """
        Deposit `amount` of the staking token into the `stake_type` position.

        The caller must have approved the engine for `amount` beforehand.

        Raises:
            StakeBelowMinimumError: amount < min stake
            StakeAboveMaximumError: amount, or resulting position, > max stake
            InvalidStakeTypeError: no tier for stake_type
        """
        if amount < self.min_stake:
            raise StakeBelowMinimumError(amount, self.min_stake)
        if amount > self.max_stake:
            raise StakeAboveMaximumError(amount, self.max_stake)
        self.schedule.tier(stake_type)
        stake_type = int(stake_type)

        async with self._lock:
            custody = self._custody_address()
            ts = self._now(now)

            position = self._position(account, stake_type)
            current = position.staked if position else 0
            if current + amount > self.max_stake:
                raise StakeAboveMaximumError(current + amount, self.max_stake)
            self._require_forward_time(position, ts)

            await self.staking_token.transfer_from(custody, account, custody, amount)

            if position is None:
                position = StakePosition(account=account, stake_type=stake_type)
                self._positions[(account, stake_type)] = position

            self._settle(position, ts)
            position.staked = current + amount
            position.state = PositionState.STAKED
            self._total_staked += amount

            event = StakedEvent(account=account, stake_type=stake_type, amount=amount, timestamp=ts)
            self._events.append(event)
            logger.info(
                f"Staked: {account} type={stake_type} {amount} {self.staking_token.symbol} "
                f"(position: {position.staked})"
            )

            await self._pay_rewards(position, ts)
            return event

    async def unstake(
        self,
        account: str,
        amount: int,
        stake_type: int,
        *,
        now: Optional[int] = None,
    ) -> UnstakedEvent:
        """
        Withdraw `amount` of staked tokens from the position.

        Raises:
            InvalidAmountError: amount <= 0
            InsufficientStakedBalanceError: amount > staked
        """
        if amount <= 0:
            raise InvalidAmountError("Unstake amount must be positive")
        self.schedule.tier(stake_type)

        async with self._lock:
            return await self._withdraw(account, amount, int(stake_type), self._now(now))

    async def unstake_all(
        self,
        account: str,
        stake_type: int,
        *,
        now: Optional[int] = None,
    ) -> UnstakedEvent:
        """Withdraw the whole staked balance of the position."""
        self.schedule.tier(stake_type)

        async with self._lock:
            position = self._position(account, stake_type)
            staked = position.staked if position else 0
            if staked <= 0:
                raise InsufficientStakedBalanceError(0, 0)
            return await self._withdraw(account, staked, int(stake_type), self._now(now))

    async def _withdraw(self, account: str, amount: int, stake_type: int, ts: int) -> UnstakedEvent:
        position = self._position(account, stake_type)
        staked = position.staked if position else 0
        if amount > staked:
            raise InsufficientStakedBalanceError(amount, staked)
        self._require_forward_time(position, ts)

        custody = self._custody_address()
        await self.staking_token.transfer(custody, account, amount)

        self._settle(position, ts)
        position.staked = staked - amount
        position.state = (
            PositionState.EMPTY if position.staked == 0 else PositionState.PARTIALLY_WITHDRAWN
        )
        self._total_staked -= amount

        event = UnstakedEvent(account=account, stake_type=stake_type, amount=amount, timestamp=ts)
        self._events.append(event)
        logger.info(
            f"Unstaked: {account} type={stake_type} {amount} {self.staking_token.symbol} "
            f"(remaining: {position.staked})"
        )

        await self._pay_rewards(position, ts)
        return event

    async def claim_rewards(
        self,
        account: str,
        stake_type: int,
        *,
        now: Optional[int] = None,
    ) -> Optional[RewardsPaidEvent]:
        """
        Settle and pay the position's rewards without touching its stake.

        Returns None when nothing could be paid.
        """
        self.schedule.tier(stake_type)

        async with self._lock:
            position = self._position(account, stake_type)
            if position is None:
                return None
            ts = self._now(now)
            self._require_forward_time(position, ts)
            self._settle(position, ts)
            return await self._pay_rewards(position, ts)

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "stakingToken": self.staking_token.address,
            "rewardToken": self.reward_token.address,
            "minStake": str(self.min_stake),
            "maxStake": str(self.max_stake),
            "totalStaked": str(self._total_staked),
            "rewardPool": str(self.reward_pool()),
            "positions": len(self._positions),
            "tiers": {t.stake_type: t.rate_bps for t in self.schedule.tiers},
        }

    def __repr__(self) -> str:
        return (
            f"<StakingEngine {self.staking_token.symbol}->{self.reward_token.symbol} "
            f"staked={self._total_staked}>"
        )
