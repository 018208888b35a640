"""
AHA Harness TOML Configuration Loader

Loads every section of a harness config file with environment variable
overrides. Each section is a dataclass with ``from_dict`` and ``apply_env``.

Environment variable mapping:
    [token] max_supply              → AHA_MAX_SUPPLY
    [token] mint_on_deploy_fraction → AHA_MINT_ON_DEPLOY_FRACTION
    [reward_token] supply           → AHA_REWARD_TOKEN_SUPPLY
    [staking] reward_pool           → AHA_STAKE_REWARD_POOL
    [staking] sale_duration_s       → AHA_STAKE_SALE_DURATION_S
    [ledger] account_count          → AHA_ACCOUNT_COUNT
    [ledger] account_seed           → AHA_ACCOUNT_SEED
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..constants import (
    AHA_MAX_SUPPLY,
    AHA_MINT_ON_DEPLOY_FRACTION,
    AHA_TOKEN_NAME,
    AHA_TOKEN_SYMBOL,
    AHA_ACCOUNT_COUNT,
    AHA_ACCOUNT_SEED,
    ERC20_MAX_DECIMALS,
    FRACTION_DENOMINATOR,
    REWARD_TOKEN_DECIMALS,
    REWARD_TOKEN_NAME,
    REWARD_TOKEN_SUPPLY,
    REWARD_TOKEN_SYMBOL,
    STAKE_EVENT_CODE,
    STAKE_MAX_AMOUNT,
    STAKE_MIN_AMOUNT,
    STAKE_PARTICIPANTS,
    STAKE_REWARD_POOL,
    STAKE_SALE_DURATION_S,
)
from ..exceptions import ConfigurationError
from ..logger import get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass
class TokenConfig:
    """[token] section: the scheduled-supply token."""
    name: str = AHA_TOKEN_NAME
    symbol: str = AHA_TOKEN_SYMBOL
    max_supply: int = AHA_MAX_SUPPLY
    mint_on_deploy_fraction: int = AHA_MINT_ON_DEPLOY_FRACTION

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenConfig":
        return cls(
            name=data.get("name", AHA_TOKEN_NAME),
            symbol=data.get("symbol", AHA_TOKEN_SYMBOL),
            max_supply=int(data.get("max_supply", AHA_MAX_SUPPLY)),
            mint_on_deploy_fraction=int(
                data.get("mint_on_deploy_fraction", AHA_MINT_ON_DEPLOY_FRACTION)
            ),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("AHA_MAX_SUPPLY"):
            self.max_supply = int(v)
        if v := os.environ.get("AHA_MINT_ON_DEPLOY_FRACTION"):
            self.mint_on_deploy_fraction = int(v)

    def validate(self) -> None:
        if self.max_supply <= 0:
            raise ConfigurationError(f"max_supply must be positive, got {self.max_supply}")
        if not 0 <= self.mint_on_deploy_fraction <= FRACTION_DENOMINATOR:
            raise ConfigurationError(
                f"mint_on_deploy_fraction must be 0-{FRACTION_DENOMINATOR}, "
                f"got {self.mint_on_deploy_fraction}"
            )


@dataclass
class RewardTokenConfig:
    """[reward_token] section: the asset staking rewards are paid in."""
    name: str = REWARD_TOKEN_NAME
    symbol: str = REWARD_TOKEN_SYMBOL
    supply: int = REWARD_TOKEN_SUPPLY
    decimals: int = REWARD_TOKEN_DECIMALS

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RewardTokenConfig":
        return cls(
            name=data.get("name", REWARD_TOKEN_NAME),
            symbol=data.get("symbol", REWARD_TOKEN_SYMBOL),
            supply=int(data.get("supply", REWARD_TOKEN_SUPPLY)),
            decimals=int(data.get("decimals", REWARD_TOKEN_DECIMALS)),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("AHA_REWARD_TOKEN_SUPPLY"):
            self.supply = int(v)

    def validate(self) -> None:
        if self.supply < 0:
            raise ConfigurationError("reward token supply cannot be negative")
        if not 0 <= self.decimals <= ERC20_MAX_DECIMALS:
            raise ConfigurationError(f"decimals must be 0-{ERC20_MAX_DECIMALS}, got {self.decimals}")


@dataclass
class StakingConfig:
    """[staking] section: the default stake event scenario."""
    event_code: str = STAKE_EVENT_CODE
    reward_pool: int = STAKE_REWARD_POOL
    sale_duration_s: int = STAKE_SALE_DURATION_S
    participants: int = STAKE_PARTICIPANTS
    min_stake: int = STAKE_MIN_AMOUNT
    max_stake: int = STAKE_MAX_AMOUNT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StakingConfig":
        return cls(
            event_code=str(data.get("event_code", STAKE_EVENT_CODE)),
            reward_pool=int(data.get("reward_pool", STAKE_REWARD_POOL)),
            sale_duration_s=int(data.get("sale_duration_s", STAKE_SALE_DURATION_S)),
            participants=int(data.get("participants", STAKE_PARTICIPANTS)),
            min_stake=int(data.get("min_stake", STAKE_MIN_AMOUNT)),
            max_stake=int(data.get("max_stake", STAKE_MAX_AMOUNT)),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("AHA_STAKE_REWARD_POOL"):
            self.reward_pool = int(v)
        if v := os.environ.get("AHA_STAKE_SALE_DURATION_S"):
            self.sale_duration_s = int(v)

    def validate(self) -> None:
        if not self.event_code:
            raise ConfigurationError("staking event_code cannot be empty")
        if self.reward_pool <= 0:
            raise ConfigurationError(f"reward_pool must be positive, got {self.reward_pool}")
        if self.sale_duration_s <= 0:
            raise ConfigurationError(f"sale_duration_s must be positive, got {self.sale_duration_s}")
        if not 0 < self.min_stake <= self.max_stake:
            raise ConfigurationError(
                f"stake range must satisfy 0 < min <= max, got [{self.min_stake}, {self.max_stake}]"
            )


@dataclass
class LedgerConfig:
    """[ledger] section: generated accounts."""
    account_count: int = int(AHA_ACCOUNT_COUNT)
    account_seed: str = str(AHA_ACCOUNT_SEED)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LedgerConfig":
        return cls(
            account_count=int(data.get("account_count", int(AHA_ACCOUNT_COUNT))),
            account_seed=str(data.get("account_seed", str(AHA_ACCOUNT_SEED))),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("AHA_ACCOUNT_COUNT"):
            self.account_count = int(v)
        if v := os.environ.get("AHA_ACCOUNT_SEED"):
            self.account_seed = v

    def validate(self) -> None:
        if self.account_count < 1:
            raise ConfigurationError("ledger needs at least one account")


@dataclass
class CheckpointRow:
    """One [[checkpoints]] entry, relative to scenario build time."""
    seconds_from_now: int
    note: str
    point_one_percent: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CheckpointRow":
        try:
            return cls(
                seconds_from_now=int(data["seconds_from_now"]),
                note=str(data.get("note", "")),
                point_one_percent=int(data["point_one_percent"]),
            )
        except KeyError as e:
            raise ConfigurationError(f"checkpoint entry missing {e.args[0]!r}") from e

    def as_tuple(self) -> Tuple[int, str, int]:
        return (self.seconds_from_now, self.note, self.point_one_percent)


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass
class HarnessConfig:
    """Root configuration object."""
    token: TokenConfig = field(default_factory=TokenConfig)
    reward_token: RewardTokenConfig = field(default_factory=RewardTokenConfig)
    staking: StakingConfig = field(default_factory=StakingConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    checkpoints: List[CheckpointRow] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HarnessConfig":
        return cls(
            token=TokenConfig.from_dict(data.get("token", {})),
            reward_token=RewardTokenConfig.from_dict(data.get("reward_token", {})),
            staking=StakingConfig.from_dict(data.get("staking", {})),
            ledger=LedgerConfig.from_dict(data.get("ledger", {})),
            checkpoints=[CheckpointRow.from_dict(c) for c in data.get("checkpoints", [])],
        )

    def apply_env(self) -> None:
        self.token.apply_env()
        self.reward_token.apply_env()
        self.staking.apply_env()
        self.ledger.apply_env()

    def validate(self) -> None:
        self.token.validate()
        self.reward_token.validate()
        self.staking.validate()
        self.ledger.validate()
        if self.staking.participants >= self.ledger.account_count:
            raise ConfigurationError(
                f"{self.staking.participants} stakers need more than "
                f"{self.ledger.account_count} accounts (account 0 is the owner)"
            )

    def checkpoint_rows(self) -> List[Tuple[int, str, int]]:
        """Checkpoint rows from the file, or the bundled unlock table."""
        if self.checkpoints:
            return [row.as_tuple() for row in self.checkpoints]
        from ..schedule.data import DEFAULT_CHECKPOINTS
        return list(DEFAULT_CHECKPOINTS)


def load_config(path: Optional[str | Path] = None) -> HarnessConfig:
    """
    Load harness configuration.

    Args:
        path: TOML file. ``None`` means defaults plus environment overrides.

    Raises:
        ConfigurationError: unreadable file or invalid values
    """
    data: Dict[str, Any] = {}
    if path is not None:
        p = Path(path)
        try:
            with p.open("rb") as fh:
                data = tomllib.load(fh)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Config file not found: {p}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {p}: {e}") from e
        logger.info(f"Loaded harness config from {p}")

    config = HarnessConfig.from_dict(data)
    config.apply_env()
    config.validate()
    return config
