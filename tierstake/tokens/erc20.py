"""
Fungible Test Token

Implements the ERC-20 style token used as both the staking token and the
reward token:
  - transfer, approve, transfer_from, balance_of, allowance
  - owner-side mint
  - Transfer / Approval event log

All amounts are integers in base units (whole tokens scaled by
10**decimals). Use `to_base_units` / `from_base_units` to convert.
"""

import time
from collections import deque
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Union

from ..constants import (
    EVENT_LOG_SIZE,
    TOKEN_DEFAULT_DECIMALS,
    TOKEN_DEFAULT_INITIAL_SUPPLY,
    TOKEN_MAX_DECIMALS,
)
from ..exceptions import TierStakeException
from ..logger import get_logger

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════

class TokenError(TierStakeException):
    """Base exception for token operations."""


class InsufficientBalanceError(TokenError):
    """Raised when sender balance is too low."""


class InsufficientAllowanceError(TokenError):
    """Raised when spender allowance is too low."""


# ══════════════════════════════════════════════════════════════════════
#  UNIT CONVERSION
# ══════════════════════════════════════════════════════════════════════

def to_base_units(amount: Union[Decimal, int, str], decimals: int = TOKEN_DEFAULT_DECIMALS) -> int:
    """Scale a whole-token amount to base units, truncating dust."""
    return int(Decimal(str(amount)) * (10 ** decimals))


def from_base_units(amount: int, decimals: int = TOKEN_DEFAULT_DECIMALS) -> Decimal:
    return Decimal(amount) / (10 ** decimals)


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TransferEvent:
    """Emitted on every successful transfer and mint."""
    token_symbol: str
    sender: str
    recipient: str
    amount: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Transfer",
            "token": self.token_symbol,
            "from": self.sender,
            "to": self.recipient,
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ApprovalEvent:
    """Emitted on every successful approve."""
    token_symbol: str
    owner: str
    spender: str
    amount: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Approval",
            "token": self.token_symbol,
            "owner": self.owner,
            "spender": self.spender,
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


ZERO_ADDRESS = "0x" + "00" * 20


# ══════════════════════════════════════════════════════════════════════
#  TEST TOKEN
# ══════════════════════════════════════════════════════════════════════

class TestToken:
    """
    Fungible token with ERC-20 semantics.

        - balance_of(address) → int
        - transfer(sender, recipient, amount)
        - approve(owner, spender, amount)
        - transfer_from(spender, sender, recipient, amount)
        - total_supply → int

    The deployer receives `initial_supply` whole tokens. `address` is
    assigned when the token is registered on a chain.
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        name: str,
        symbol: str,
        decimals: int = TOKEN_DEFAULT_DECIMALS,
        initial_supply: Union[Decimal, int] = TOKEN_DEFAULT_INITIAL_SUPPLY,
        deployer: str = "",
        *,
        address: Optional[str] = None,
    ):
        """
        Args:
            name: Human-readable token name
            symbol: Short ticker (e.g. "STK")
            decimals: Fractional digits
            initial_supply: Whole tokens minted to the deployer
            deployer: Address of deploying account
            address: Contract address, when already known
        """
        if not name:
            raise TokenError("Token name cannot be empty")
        if not symbol:
            raise TokenError("Token symbol cannot be empty")
        if decimals < 0 or decimals > TOKEN_MAX_DECIMALS:
            raise TokenError(f"Decimals must be 0-{TOKEN_MAX_DECIMALS}, got {decimals}")
        if initial_supply < 0:
            raise TokenError("Initial supply cannot be negative")

        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.deployer = deployer
        self.address = address

        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}  # (owner, spender)
        self._events: deque = deque(maxlen=EVENT_LOG_SIZE)
        self._total_supply = 0

        supply_units = to_base_units(initial_supply, decimals)
        if supply_units > 0 and deployer:
            self._mint(deployer, supply_units)

        logger.info(f"Token deployed: {symbol} ({name}), supply={initial_supply}")

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, address: str) -> int:
        return self._balances.get(address, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    # ── Core operations ───────────────────────────────────────────────

    def _move(self, sender: str, recipient: str, amount: int) -> TransferEvent:
        bal = self.balance_of(sender)
        if bal < amount:
            raise InsufficientBalanceError(
                f"{sender} balance {bal} < transfer amount {amount}"
            )

        self._balances[sender] = bal - amount
        self._balances[recipient] = self.balance_of(recipient) + amount

        event = TransferEvent(
            token_symbol=self.symbol,
            sender=sender,
            recipient=recipient,
            amount=amount,
        )
        self._events.append(event)
        return event

    async def transfer(self, sender: str, recipient: str, amount: int) -> TransferEvent:
        """Move `amount` base units from sender to recipient."""
        if amount <= 0:
            raise TokenError("Transfer amount must be positive")
        if not recipient or recipient == ZERO_ADDRESS:
            raise TokenError("Cannot transfer to the zero address")

        event = self._move(sender, recipient, amount)
        logger.debug(f"Transfer: {sender} → {recipient} {amount} {self.symbol}")
        return event

    async def approve(self, owner: str, spender: str, amount: int) -> ApprovalEvent:
        """Set spender allowance, replacing any previous value."""
        if amount < 0:
            raise TokenError("Allowance amount cannot be negative")

        self._allowances[(owner, spender)] = amount

        event = ApprovalEvent(
            token_symbol=self.symbol,
            owner=owner,
            spender=spender,
            amount=amount,
        )
        self._events.append(event)
        logger.debug(f"Approve: {owner} → {spender} allowance={amount} {self.symbol}")
        return event

    async def transfer_from(
        self,
        spender: str,
        sender: str,
        recipient: str,
        amount: int,
    ) -> TransferEvent:
        """Transfer on behalf of *sender* using spender's allowance."""
        if amount <= 0:
            raise TokenError("Transfer amount must be positive")

        allow = self.allowance(sender, spender)
        if allow < amount:
            raise InsufficientAllowanceError(
                f"Allowance {allow} < transfer amount {amount}"
            )

        event = self._move(sender, recipient, amount)
        self._allowances[(sender, spender)] = allow - amount

        logger.debug(
            f"transferFrom: spender={spender} {sender} → {recipient} {amount} {self.symbol}"
        )
        return event

    # ── Mint ──────────────────────────────────────────────────────────

    def _mint(self, recipient: str, amount: int) -> TransferEvent:
        self._total_supply += amount
        self._balances[recipient] = self.balance_of(recipient) + amount
        event = TransferEvent(
            token_symbol=self.symbol,
            sender=ZERO_ADDRESS,
            recipient=recipient,
            amount=amount,
        )
        self._events.append(event)
        return event

    async def mint(self, operator: str, recipient: str, amount: int) -> TransferEvent:
        """Mint new tokens. Only the deployer may mint."""
        if operator != self.deployer:
            raise TokenError(f"{operator} is not allowed to mint {self.symbol}")
        if amount <= 0:
            raise TokenError("Mint amount must be positive")

        event = self._mint(recipient, amount)
        logger.info(f"Mint: {amount} {self.symbol} → {recipient}")
        return event

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "address": self.address,
            "totalSupply": str(self._total_supply),
            "deployer": self.deployer,
            "holders": len([b for b in self._balances.values() if b > 0]),
        }

    def __repr__(self) -> str:
        return f"<TestToken {self.symbol} supply={self._total_supply}>"
