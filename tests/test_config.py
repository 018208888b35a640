"""
Configuration Test Suite

Coverage:
  - defaults, TOML loading, env overrides
  - validation errors
  - env-backed constants wrappers
"""

import os
import sys

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from ahatoken.config import HarnessConfig, StakingConfig, load_config
from ahatoken.constants import ConfigBool, ConfigString, parse_bool
from ahatoken.exceptions import ConfigurationError
from ahatoken.schedule import DEFAULT_CHECKPOINTS


ENV_KEYS = (
    "AHA_MAX_SUPPLY",
    "AHA_MINT_ON_DEPLOY_FRACTION",
    "AHA_REWARD_TOKEN_SUPPLY",
    "AHA_STAKE_REWARD_POOL",
    "AHA_STAKE_SALE_DURATION_S",
    "AHA_ACCOUNT_COUNT",
    "AHA_ACCOUNT_SEED",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def write_toml(tmp_path, text):
    path = tmp_path / "harness.toml"
    path.write_text(text)
    return path


class TestDefaults:

    def test_defaults(self):
        config = load_config()
        assert config.token.max_supply == 700_000_000
        assert config.token.mint_on_deploy_fraction == 300
        assert config.reward_token.symbol == "USDT"
        assert config.reward_token.supply == 100_000_000
        assert config.staking.reward_pool == 10_000_000
        assert config.staking.sale_duration_s == 5
        assert config.checkpoint_rows() == list(DEFAULT_CHECKPOINTS)


class TestTomlLoading:

    def test_sections(self, tmp_path):
        path = write_toml(tmp_path, """
[token]
name = "Test"
symbol = "TST"
max_supply = 1000
mint_on_deploy_fraction = 500

[reward_token]
supply = 42

[staking]
event_code = "launch"
participants = 3

[ledger]
account_count = 4
account_seed = "fixed"

[[checkpoints]]
seconds_from_now = 10
note = "half"
point_one_percent = 500
""")
        config = load_config(path)
        assert config.token.symbol == "TST"
        assert config.token.max_supply == 1000
        assert config.reward_token.supply == 42
        assert config.staking.event_code == "launch"
        assert config.ledger.account_seed == "fixed"
        assert config.checkpoint_rows() == [(10, "half", 500)]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "missing.toml")

    def test_invalid_toml(self, tmp_path):
        path = write_toml(tmp_path, "[token\nname=")
        with pytest.raises(ConfigurationError, match="Invalid TOML"):
            load_config(path)

    def test_checkpoint_missing_field(self, tmp_path):
        path = write_toml(tmp_path, "[[checkpoints]]\nnote = 'x'\n")
        with pytest.raises(ConfigurationError, match="missing"):
            load_config(path)


class TestEnvOverrides:

    def test_env_wins_over_file(self, tmp_path, monkeypatch):
        path = write_toml(tmp_path, "[token]\nmax_supply = 1000\n")
        monkeypatch.setenv("AHA_MAX_SUPPLY", "2000")
        monkeypatch.setenv("AHA_STAKE_REWARD_POOL", "77")
        monkeypatch.setenv("AHA_ACCOUNT_SEED", "env-seed")
        config = load_config(path)
        assert config.token.max_supply == 2000
        assert config.staking.reward_pool == 77
        assert config.ledger.account_seed == "env-seed"


class TestValidation:

    def test_bad_fraction(self):
        config = HarnessConfig.from_dict({"token": {"mint_on_deploy_fraction": 1001}})
        with pytest.raises(ConfigurationError):
            config.validate()

    def test_bad_supply(self, monkeypatch):
        monkeypatch.setenv("AHA_MAX_SUPPLY", "0")
        with pytest.raises(ConfigurationError, match="max_supply"):
            load_config()

    def test_stake_range(self):
        with pytest.raises(ConfigurationError, match="stake range"):
            StakingConfig(min_stake=10, max_stake=5).validate()

    def test_too_few_accounts(self):
        config = HarnessConfig.from_dict({"ledger": {"account_count": 5}, "staking": {"participants": 5}})
        with pytest.raises(ConfigurationError, match="accounts"):
            config.validate()


class TestConstantsWrappers:

    def test_parse_bool(self):
        assert parse_bool(" true ") is True
        assert parse_bool("FALSE") is False
        assert parse_bool("maybe") == "maybe"

    def test_config_string_keeps_default(self):
        value = ConfigString("DEBUG", "INFO")
        assert value == "DEBUG"
        assert value.default() == "INFO"

    def test_config_bool(self):
        value = ConfigBool(False, "True")
        assert not value
        assert str(value) == "False"
        assert value.default() == "True"
