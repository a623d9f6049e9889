"""
Local Chain

In-process execution environment for the staking engine and its tokens:
  - deterministic funded account addresses
  - CREATE-style contract addresses (keccak(rlp([deployer, nonce])))
  - block timestamps with time travel (advance_block, advance_time,
    advance_block_and_set_time)

Nothing here is persisted; the chain lives as long as the object does.
"""

import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import rlp
from eth_utils import is_address, keccak, to_canonical_address, to_checksum_address

from ..constants import LOCAL_CHAIN_ACCOUNTS, LOCAL_CHAIN_SEED
from ..exceptions import ChainError, InvalidAddressError
from ..logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Block:
    number: int
    timestamp: int

    def to_dict(self) -> Dict[str, int]:
        return {"number": self.number, "timestamp": self.timestamp}


def derive_account(index: int, seed: bytes = LOCAL_CHAIN_SEED) -> str:
    """Deterministic checksummed address for local account `index`."""
    return to_checksum_address(keccak(seed + index.to_bytes(4, "big"))[12:])


def contract_address(deployer: str, nonce: int) -> str:
    """Address of the contract `deployer` creates with `nonce`."""
    if not is_address(deployer):
        raise InvalidAddressError(f"Invalid deployer address: {deployer}")
    encoded = rlp.encode([to_canonical_address(deployer), nonce])
    return to_checksum_address(keccak(encoded)[12:])


class LocalChain:
    """
    Block clock and contract registry.

    Each mined block advances the clock by `block_time` seconds unless an
    explicit timestamp is requested. Timestamps never go backwards.
    """

    def __init__(
        self,
        genesis_timestamp: Optional[int] = None,
        accounts: int = LOCAL_CHAIN_ACCOUNTS,
        block_time: int = 1,
    ):
        if accounts < 1:
            raise ChainError("LocalChain needs at least one account")
        if block_time < 0:
            raise ChainError("block_time cannot be negative")

        genesis = int(genesis_timestamp if genesis_timestamp is not None else time.time())
        self.block_time = block_time
        self._blocks: List[Block] = [Block(number=0, timestamp=genesis)]
        self._accounts = [derive_account(i) for i in range(accounts)]
        self._nonces: Dict[str, int] = {}
        self._contracts: Dict[str, Any] = {}

    # ── Accounts & contracts ──────────────────────────────────────────

    @property
    def accounts(self) -> List[str]:
        return list(self._accounts)

    def register(self, contract: Any, deployer: Optional[str] = None) -> str:
        """Assign a contract address to `contract` and record it."""
        deployer = deployer or self._accounts[0]
        nonce = self._nonces.get(deployer, 0)
        address = contract_address(deployer, nonce)
        self._nonces[deployer] = nonce + 1

        contract.address = address
        self._contracts[address] = contract
        logger.info(f"Deployed {type(contract).__name__} at {address} (deployer: {deployer})")
        return address

    def contract_at(self, address: str) -> Any:
        if not is_address(address):
            raise InvalidAddressError(f"Invalid address: {address}")
        try:
            return self._contracts[to_checksum_address(address)]
        except KeyError:
            raise ChainError(f"No contract at {address}")

    # ── Blocks & time ─────────────────────────────────────────────────

    def latest_block(self) -> Block:
        return self._blocks[-1]

    def now(self) -> int:
        """Timestamp of the latest block."""
        return self._blocks[-1].timestamp

    def _mine(self, timestamp: int) -> Block:
        latest = self._blocks[-1]
        if timestamp < latest.timestamp:
            raise ChainError(
                f"Block timestamp {timestamp} is before latest {latest.timestamp}"
            )
        block = Block(number=latest.number + 1, timestamp=timestamp)
        self._blocks.append(block)
        return block

    def advance_block(self) -> Block:
        return self._mine(self.now() + self.block_time)

    def advance_block_and_set_time(self, timestamp: int) -> Block:
        block = self._mine(int(timestamp))
        logger.debug(f"Time set: block {block.number} at {block.timestamp}")
        return block

    def advance_time(self, seconds: int) -> Block:
        if seconds < 0:
            raise ChainError("Cannot advance time by a negative amount")
        return self.advance_block_and_set_time(self.now() + int(seconds))

    def __repr__(self) -> str:
        return f"<LocalChain block={self.latest_block().number} contracts={len(self._contracts)}>"
