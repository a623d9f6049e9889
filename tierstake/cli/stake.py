#!/usr/bin/env python3
"""
tierstake CLI

Command-line interface for inspecting reward tiers and simulating stakes on
a local chain.

Usage:
    tierstake tiers [--config FILE]
    tierstake simulate --amount TOKENS [--stake-type N] [--hours H] [--config FILE]
"""

import asyncio
from decimal import Decimal, InvalidOperation
from typing import Optional

import click

from ..chain import LocalChain
from ..config import StakingConfig
from ..constants import SECONDS_IN_HOUR
from ..exceptions import TierStakeException
from ..migrations import deploy_staking, fund_rewards
from ..staking import RewardSchedule
from ..tokens import from_base_units, to_base_units


class TokenAmount(click.ParamType):
    """Whole-token amount parsed as a finite, non-negative Decimal."""

    name = "amount"

    def convert(self, value, param, ctx):
        if isinstance(value, Decimal):
            return value
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            self.fail(f"{value!r} is not a valid token amount", param, ctx)
        if not amount.is_finite() or amount < 0:
            self.fail(f"{value!r} is not a valid token amount", param, ctx)
        return amount


TOKEN_AMOUNT = TokenAmount()


def load_config(config_path: Optional[str]) -> StakingConfig:
    try:
        return StakingConfig.load(config_path)
    except TierStakeException as e:
        raise click.ClickException(f"Invalid configuration: {e}")


@click.group()
@click.version_option(version="1.0.0", prog_name="tierstake")
def cli():
    """tierstake Command Line Interface

    Inspect reward tiers and simulate staking positions.
    """
    pass


@cli.command("tiers")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True), help="TOML config file")
def tiers_cmd(config_path: Optional[str]):
    """Show the configured reward tiers.

    The hourly reward column is for a maximum-size stake.
    """
    config = load_config(config_path)
    schedule = RewardSchedule.from_config(config)

    click.echo(f"Stake band: {config.min_stake} - {config.max_stake} tokens")
    click.echo(f"Reward period: {config.reward_period_seconds} seconds")
    click.echo()
    click.echo(f"{'Type':<6}{'Name':<12}{'Rate (bps)':>12}{'Per hour':>16}")
    for tier in schedule.tiers:
        hourly = from_base_units(
            schedule.hourly_reward(config.max_stake_units, tier.stake_type), config.decimals
        )
        click.echo(f"{tier.stake_type:<6}{tier.name:<12}{tier.rate_bps:>12}{hourly:>16.4f}")


@cli.command("simulate")
@click.option("--amount", "-a", type=TOKEN_AMOUNT, required=True, help="Whole tokens to stake")
@click.option("--stake-type", "-t", type=int, default=0, show_default=True, help="Reward tier")
@click.option("--hours", type=float, default=1.0, show_default=True, help="Hours to let elapse")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True), help="TOML config file")
def simulate_cmd(amount: Decimal, stake_type: int, hours: float, config_path: Optional[str]):
    """Stake on a fresh local chain and report accrued rewards.

    Examples:

        tierstake simulate --amount 1000000 --stake-type 2 --hours 24
    """
    if hours < 0:
        raise click.BadParameter("hours cannot be negative", param_hint="--hours")

    config = load_config(config_path)
    units = to_base_units(amount, config.decimals)

    async def run():
        deployment = deploy_staking(LocalChain(), config=config)
        owner = deployment.deployer
        engine = deployment.engine

        await deployment.staking_token.approve(owner, engine.address, units)
        await engine.stake(owner, units, stake_type)
        await fund_rewards(deployment, deployment.reward_token.balance_of(owner))

        deployment.chain.advance_time(int(hours * SECONDS_IN_HOUR))
        info = engine.get_staking_info(owner, stake_type)
        return info, engine.get_staking_time(owner, stake_type)

    try:
        info, staking_time = asyncio.run(run())
    except TierStakeException as e:
        raise click.ClickException(str(e))

    click.echo(f"Staked:       {from_base_units(info.staked, config.decimals)} STK (type {stake_type})")
    click.echo(f"Staking time: {staking_time} seconds")
    click.echo(f"Rewards:      {from_base_units(info.rewards, config.decimals)} RTK")


if __name__ == "__main__":
    cli()
