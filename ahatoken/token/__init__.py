"""
Token contracts.

Provides:
  - ERC20Token : integer fungible token (reward asset)
  - AHAToken   : ERC-20 with schedule-gated minting
  - MintGate   : cumulative mint-allowance policy
"""

from .aha import AHAToken
from .erc20 import ERC20Token
from .mint_gate import MintGate, MintState

__all__ = [
    "AHAToken",
    "ERC20Token",
    "MintGate",
    "MintState",
]
