"""
tierstake TOML Configuration Loader

Loads the [staking] section of a TOML file with environment variable
overrides. Amounts in the file are whole tokens and are scaled to base units
by `StakingConfig.min_stake_units` / `max_stake_units`.

Environment variable mapping:
    [staking] min_stake             → TIERSTAKE_MIN_STAKE
    [staking] max_stake             → TIERSTAKE_MAX_STAKE
    [staking] reward_period_seconds → TIERSTAKE_REWARD_PERIOD_SECONDS

Example:

    [staking]
    min_stake = 1000
    max_stake = 1000000
    reward_period_seconds = 31104000

    [[staking.tiers]]
    stake_type = 0
    name = "Basic"
    rate_bps = 12000
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from ..constants import (
    DEFAULT_REWARD_TIERS,
    MAX_STAKE_TOKENS,
    MIN_STAKE_TOKENS,
    REWARD_PERIOD_SECONDS,
    TOKEN_DEFAULT_DECIMALS,
    TOKEN_MAX_DECIMALS,
)
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _to_decimal(value: Any, key: str) -> Decimal:
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ConfigurationError(f"{key} must be a number, got {value!r}")
    if not number.is_finite():
        raise ConfigurationError(f"{key} must be a finite number, got {value!r}")
    return number


def _to_int(value: Any, key: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be an integer, got {value!r}")


@dataclass
class TierConfig:
    """[[staking.tiers]] entry."""
    stake_type: int
    name: str
    rate_bps: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TierConfig":
        if "stake_type" not in data or "rate_bps" not in data:
            raise ConfigurationError("Each tier needs stake_type and rate_bps")
        stake_type = _to_int(data["stake_type"], "stake_type")
        return cls(
            stake_type=stake_type,
            name=data.get("name", f"Tier {stake_type}"),
            rate_bps=_to_int(data["rate_bps"], "rate_bps"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stake_type": self.stake_type,
            "name": self.name,
            "rate_bps": self.rate_bps,
        }


def _default_tiers() -> List[TierConfig]:
    return [
        TierConfig(stake_type=stake_type, name=name, rate_bps=rate_bps)
        for stake_type, (name, rate_bps) in sorted(DEFAULT_REWARD_TIERS.items())
    ]


@dataclass
class StakingConfig:
    """
    Staking engine configuration.

    Loaded from config.toml [staking] section.
    """

    # Stake band in whole tokens
    min_stake: Decimal = Decimal(MIN_STAKE_TOKENS)
    max_stake: Decimal = Decimal(MAX_STAKE_TOKENS)

    # Fractional digits of the staking token
    decimals: int = TOKEN_DEFAULT_DECIMALS

    # Length of the period rate_bps applies to
    reward_period_seconds: int = REWARD_PERIOD_SECONDS

    tiers: List[TierConfig] = field(default_factory=_default_tiers)

    @property
    def min_stake_units(self) -> int:
        return int(self.min_stake * (10 ** self.decimals))

    @property
    def max_stake_units(self) -> int:
        return int(self.max_stake * (10 ** self.decimals))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StakingConfig":
        tiers_data = data.get("tiers")
        tiers = (
            [TierConfig.from_dict(t) for t in tiers_data]
            if tiers_data is not None
            else _default_tiers()
        )
        return cls(
            min_stake=_to_decimal(data.get("min_stake", MIN_STAKE_TOKENS), "min_stake"),
            max_stake=_to_decimal(data.get("max_stake", MAX_STAKE_TOKENS), "max_stake"),
            decimals=_to_int(data.get("decimals", TOKEN_DEFAULT_DECIMALS), "decimals"),
            reward_period_seconds=_to_int(
                data.get("reward_period_seconds", REWARD_PERIOD_SECONDS), "reward_period_seconds"
            ),
            tiers=tiers,
        )

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "StakingConfig":
        """
        Load configuration from a TOML file.

        A missing file yields the default configuration. Environment
        overrides are applied and the result is validated.
        """
        path = Path(config_path)

        if not path.exists():
            logger.warning(f"Config file {path} not found, using defaults")
            config = cls()
        else:
            with open(path, "rb") as f:
                try:
                    config_data = tomli.load(f)
                except tomli.TOMLDecodeError as e:
                    raise ConfigurationError(f"Invalid TOML in {path}: {e}")
            config = cls.from_dict(config_data.get("staking", {}))
            logger.info(f"Loaded staking config from {path}")

        config.apply_env()
        config.validate()
        return config

    @classmethod
    def load(cls, config_path: Optional[Union[str, Path]] = None) -> "StakingConfig":
        """Defaults plus environment overrides, or a TOML file when given."""
        if config_path is not None:
            return cls.from_file(config_path)
        config = cls()
        config.apply_env()
        config.validate()
        return config

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("TIERSTAKE_MIN_STAKE"):
            self.min_stake = _to_decimal(v, "TIERSTAKE_MIN_STAKE")
        if v := os.environ.get("TIERSTAKE_MAX_STAKE"):
            self.max_stake = _to_decimal(v, "TIERSTAKE_MAX_STAKE")
        if v := os.environ.get("TIERSTAKE_REWARD_PERIOD_SECONDS"):
            self.reward_period_seconds = _to_int(v, "TIERSTAKE_REWARD_PERIOD_SECONDS")

    def validate(self) -> bool:
        """
        Validate configuration.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.decimals < 0 or self.decimals > TOKEN_MAX_DECIMALS:
            raise ConfigurationError(f"decimals must be 0-{TOKEN_MAX_DECIMALS}, got {self.decimals}")
        if self.min_stake <= 0:
            raise ConfigurationError("min_stake must be positive")
        if self.max_stake < self.min_stake:
            raise ConfigurationError(
                f"max_stake {self.max_stake} is below min_stake {self.min_stake}"
            )
        if self.reward_period_seconds <= 0:
            raise ConfigurationError("reward_period_seconds must be positive")
        if not self.tiers:
            raise ConfigurationError("At least one reward tier is required")

        seen = set()
        for tier in self.tiers:
            if tier.stake_type < 0:
                raise ConfigurationError(f"stake_type must be non-negative, got {tier.stake_type}")
            if tier.stake_type in seen:
                raise ConfigurationError(f"Duplicate stake_type {tier.stake_type}")
            if tier.rate_bps < 0:
                raise ConfigurationError(f"rate_bps for stake_type {tier.stake_type} cannot be negative")
            seen.add(tier.stake_type)

        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "min_stake": str(self.min_stake),
            "max_stake": str(self.max_stake),
            "decimals": self.decimals,
            "reward_period_seconds": self.reward_period_seconds,
            "tiers": [t.to_dict() for t in self.tiers],
        }
