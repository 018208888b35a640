"""
AHA Harness Configuration

Loads harness sections from a TOML file.
Environment variables override TOML values.
"""

from .loader import (
    CheckpointRow,
    HarnessConfig,
    LedgerConfig,
    RewardTokenConfig,
    StakingConfig,
    TokenConfig,
    load_config,
)

__all__ = [
    "CheckpointRow",
    "HarnessConfig",
    "LedgerConfig",
    "RewardTokenConfig",
    "StakingConfig",
    "TokenConfig",
    "load_config",
]
