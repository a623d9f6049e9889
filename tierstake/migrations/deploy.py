#!/usr/bin/env python3
"""
tierstake Deployment Migration

Deploys the staking token (STK), the reward token (RTK) and a staking
engine wired to both token addresses on a LocalChain.

Usage:
    python -m tierstake.migrations.deploy [--config config.toml] [--fund-rewards 1000000]
"""

import argparse
import asyncio
import json
import sys
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from ..chain import LocalChain
from ..config import StakingConfig
from ..constants import (
    REWARD_TOKEN_NAME,
    REWARD_TOKEN_SYMBOL,
    STAKING_TOKEN_NAME,
    STAKING_TOKEN_SYMBOL,
)
from ..exceptions import TierStakeException
from ..logger import get_logger
from ..staking import StakingEngine
from ..tokens import TestToken, to_base_units

logger = get_logger(__name__)


@dataclass
class Deployment:
    chain: LocalChain
    deployer: str
    staking_token: TestToken
    reward_token: TestToken
    engine: StakingEngine

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deployer": self.deployer,
            "stakingToken": self.staking_token.address,
            "rewardToken": self.reward_token.address,
            "staking": self.engine.address,
            "block": self.chain.latest_block().to_dict(),
        }


def deploy_staking(
    chain: LocalChain,
    deployer: Optional[str] = None,
    config: Optional[StakingConfig] = None,
) -> Deployment:
    """
    Deploy STK, then RTK, then the engine wired to their addresses.

    The engine reads time from the chain's latest block.
    """
    deployer = deployer or chain.accounts[0]
    config = config or StakingConfig.load()

    staking_token = TestToken(
        STAKING_TOKEN_NAME, STAKING_TOKEN_SYMBOL, decimals=config.decimals, deployer=deployer
    )
    chain.register(staking_token, deployer)

    reward_token = TestToken(
        REWARD_TOKEN_NAME, REWARD_TOKEN_SYMBOL, decimals=config.decimals, deployer=deployer
    )
    chain.register(reward_token, deployer)

    engine = StakingEngine(
        chain.contract_at(staking_token.address),
        chain.contract_at(reward_token.address),
        config,
        clock=chain.now,
    )
    chain.register(engine, deployer)

    logger.info(
        f"Staking deployed at {engine.address} "
        f"(stake: {staking_token.address}, reward: {reward_token.address})"
    )
    return Deployment(
        chain=chain,
        deployer=deployer,
        staking_token=staking_token,
        reward_token=reward_token,
        engine=engine,
    )


async def fund_rewards(deployment: Deployment, amount: int) -> None:
    """Transfer `amount` reward-token base units from the deployer to the engine."""
    await deployment.reward_token.transfer(
        deployment.deployer, deployment.engine.address, amount
    )
    logger.info(f"Reward pool funded with {amount} {deployment.reward_token.symbol}")


def _token_amount(value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid token amount: {value!r}")
    if not amount.is_finite() or amount < 0:
        raise argparse.ArgumentTypeError(f"invalid token amount: {value!r}")
    return amount


def main():
    parser = argparse.ArgumentParser(
        description="Deploy the tierstake tokens and staking engine on a local chain",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", help="Path to a TOML file with a [staking] section")
    parser.add_argument(
        "--fund-rewards",
        type=_token_amount,
        default=Decimal(0),
        help="Whole reward tokens to transfer to the engine after deployment",
    )
    args = parser.parse_args()

    try:
        config = StakingConfig.load(args.config)
        deployment = deploy_staking(LocalChain(), config=config)
        if args.fund_rewards > 0:
            asyncio.run(
                fund_rewards(deployment, to_base_units(args.fund_rewards, config.decimals))
            )
    except TierStakeException as e:
        print(f"Deployment failed: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(deployment.to_dict(), indent=2))


if __name__ == "__main__":
    main()
