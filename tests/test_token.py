"""
Fungible Token Test Suite

Coverage: deploy validation, balances, transfer, approve, transferFrom,
mint, unit conversion, events and serialization.
"""

import os
import sys
from decimal import Decimal

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from tierstake.constants import TOKEN_DEFAULT_DECIMALS, TOKEN_DEFAULT_INITIAL_SUPPLY
from tierstake.tokens import erc20
from tierstake.tokens import (
    ApprovalEvent,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    TestToken,
    TokenError,
    TransferEvent,
    from_base_units,
    to_base_units,
)


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20
CAROL = "0x" + "c3" * 20
UNIT = 10 ** 18


def make_token(name="StakingToken", symbol="STK", supply=1_000_000, deployer=ALICE, **kwargs) -> TestToken:
    """Helper to create a token for testing."""
    return TestToken(name=name, symbol=symbol, initial_supply=supply, deployer=deployer, **kwargs)


class TestTokenDeploy:
    """Token construction and basic properties."""

    def test_deploy_basic(self):
        token = make_token()
        assert token.name == "StakingToken"
        assert token.symbol == "STK"
        assert token.decimals == TOKEN_DEFAULT_DECIMALS
        assert token.total_supply == 1_000_000 * UNIT
        assert token.balance_of(ALICE) == 1_000_000 * UNIT
        assert token.address is None

    def test_default_supply(self):
        token = TestToken("RewardToken", "RTK", deployer=ALICE)
        assert token.balance_of(ALICE) == TOKEN_DEFAULT_INITIAL_SUPPLY * UNIT

    def test_no_deployer_no_supply(self):
        token = TestToken("RewardToken", "RTK")
        assert token.total_supply == 0

    def test_custom_decimals(self):
        token = make_token(decimals=6, supply=10)
        assert token.balance_of(ALICE) == 10 * 10 ** 6

    def test_empty_name_raises(self):
        with pytest.raises(TokenError, match="name cannot be empty"):
            TestToken(name="", symbol="X")

    def test_empty_symbol_raises(self):
        with pytest.raises(TokenError, match="symbol cannot be empty"):
            TestToken(name="X", symbol="")

    def test_invalid_decimals_raises(self):
        with pytest.raises(TokenError, match="Decimals"):
            make_token(decimals=19)

    def test_negative_supply_raises(self):
        with pytest.raises(TokenError, match="negative"):
            make_token(supply=-1)

    def test_to_dict(self):
        d = make_token().to_dict()
        assert d["symbol"] == "STK"
        assert d["totalSupply"] == str(1_000_000 * UNIT)
        assert d["holders"] == 1

    def test_repr(self):
        assert "STK" in repr(make_token())


class TestTokenTransfer:

    @pytest.mark.asyncio
    async def test_basic_transfer(self):
        token = make_token()
        event = await token.transfer(ALICE, BOB, 100)
        assert isinstance(event, TransferEvent)
        assert token.balance_of(ALICE) == 1_000_000 * UNIT - 100
        assert token.balance_of(BOB) == 100

    @pytest.mark.asyncio
    async def test_insufficient_balance(self):
        token = make_token()
        with pytest.raises(InsufficientBalanceError):
            await token.transfer(BOB, ALICE, 1)

    @pytest.mark.asyncio
    async def test_zero_amount_raises(self):
        token = make_token()
        with pytest.raises(TokenError, match="positive"):
            await token.transfer(ALICE, BOB, 0)

    @pytest.mark.asyncio
    async def test_zero_address_raises(self):
        token = make_token()
        with pytest.raises(TokenError, match="zero address"):
            await token.transfer(ALICE, "0x" + "00" * 20, 1)

    @pytest.mark.asyncio
    async def test_transfer_event_dict(self):
        token = make_token()
        await token.transfer(ALICE, BOB, 5)
        d = token.events[-1].to_dict()
        assert d["event"] == "Transfer"
        assert d["from"] == ALICE
        assert d["amount"] == "5"


class TestTokenAllowance:

    @pytest.mark.asyncio
    async def test_approve(self):
        token = make_token()
        event = await token.approve(ALICE, BOB, 500)
        assert isinstance(event, ApprovalEvent)
        assert token.allowance(ALICE, BOB) == 500

    @pytest.mark.asyncio
    async def test_approve_overwrites(self):
        token = make_token()
        await token.approve(ALICE, BOB, 500)
        await token.approve(ALICE, BOB, 200)
        assert token.allowance(ALICE, BOB) == 200

    @pytest.mark.asyncio
    async def test_approve_negative_raises(self):
        token = make_token()
        with pytest.raises(TokenError, match="negative"):
            await token.approve(ALICE, BOB, -1)

    @pytest.mark.asyncio
    async def test_transfer_from(self):
        token = make_token()
        await token.approve(ALICE, BOB, 300)
        await token.transfer_from(BOB, ALICE, CAROL, 200)
        assert token.balance_of(CAROL) == 200
        assert token.allowance(ALICE, BOB) == 100

    @pytest.mark.asyncio
    async def test_transfer_from_over_allowance(self):
        token = make_token()
        await token.approve(ALICE, BOB, 100)
        with pytest.raises(InsufficientAllowanceError):
            await token.transfer_from(BOB, ALICE, CAROL, 101)
        assert token.balance_of(CAROL) == 0

    @pytest.mark.asyncio
    async def test_transfer_from_over_balance_keeps_allowance(self):
        token = make_token()
        await token.approve(BOB, ALICE, 100)
        with pytest.raises(InsufficientBalanceError):
            await token.transfer_from(ALICE, BOB, CAROL, 50)
        assert token.allowance(BOB, ALICE) == 100


class TestTokenMint:

    @pytest.mark.asyncio
    async def test_deployer_can_mint(self):
        token = make_token()
        await token.mint(ALICE, BOB, 10)
        assert token.balance_of(BOB) == 10
        assert token.total_supply == 1_000_000 * UNIT + 10

    @pytest.mark.asyncio
    async def test_others_cannot_mint(self):
        token = make_token()
        with pytest.raises(TokenError, match="not allowed"):
            await token.mint(BOB, BOB, 10)


class TestUnitConversion:

    def test_to_base_units(self):
        assert to_base_units(1000) == 1000 * UNIT
        assert to_base_units("0.5") == UNIT // 2
        assert to_base_units(Decimal("1.25"), 2) == 125

    def test_from_base_units(self):
        assert from_base_units(139 * UNIT) == Decimal(139)
        assert from_base_units(125, 2) == Decimal("1.25")


class TestTokenEventLog:

    @pytest.mark.asyncio
    async def test_keeps_only_latest_events(self, monkeypatch):
        monkeypatch.setattr(erc20, "EVENT_LOG_SIZE", 2)
        token = make_token()
        for amount in (1, 2, 3):
            await token.transfer(ALICE, BOB, amount)

        events = token.events
        assert len(events) == 2
        assert [e.amount for e in events] == [2, 3]
