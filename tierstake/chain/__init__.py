"""
tierstake local execution environment

Provides:
  - LocalChain : block clock, time travel and contract registry
"""

from .local import Block, LocalChain, contract_address, derive_account

__all__ = [
    "Block",
    "LocalChain",
    "contract_address",
    "derive_account",
]
