"""
AHA Token Harness Constants

This module consolidates the global constants and environment configuration
used throughout the harness. Constants are organized by category for easy
reference and maintenance.
"""
import ast
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_TO_FILE':                     'False',
}

LEDGER_DEFAULTS = {
    'AHA_ACCOUNT_SEED':                'aha-ledger',
    'AHA_ACCOUNT_COUNT':               '10',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# ==================================================================================
# SUPPLY SCHEDULE
# ==================================================================================
# Unlock fractions are expressed in tenths of a percent of max supply.
FRACTION_DENOMINATOR = 1000
MIN_UNLOCK_FRACTION = 1
MAX_UNLOCK_FRACTION = FRACTION_DENOMINATOR


# ==================================================================================
# DEFAULT DEPLOYMENT PARAMETERS
# ==================================================================================
AHA_TOKEN_NAME = 'AHAToken'
AHA_TOKEN_SYMBOL = 'AHA'
AHA_MAX_SUPPLY = 700_000_000
AHA_MINT_ON_DEPLOY_FRACTION = 300  # 30.0% minted to the deployer

REWARD_TOKEN_NAME = 'Tether'
REWARD_TOKEN_SYMBOL = 'USDT'
REWARD_TOKEN_SUPPLY = 100_000_000
REWARD_TOKEN_DECIMALS = 18

ERC20_MAX_DECIMALS = 18

STAKE_EVENT_CODE = 'First stake'
STAKE_REWARD_POOL = 10_000_000
STAKE_SALE_DURATION_S = 5
STAKE_PARTICIPANTS = 5
STAKE_MIN_AMOUNT = 100
STAKE_MAX_AMOUNT = 1000


# ==================================================================================
# REVERT REASONS
# ==================================================================================
# Stable, matchable strings surfaced with every rejected contract call.
REASON_MINT_EXCEEDS_ALLOWANCE = 'AHAToken: mint amount exceding allowed amount'
REASON_SCHEDULE = 'AHAToken: invalid checkpoint schedule'
REASON_NOT_OWNER = 'Ownable: caller is not the owner'
REASON_INVALID_AMOUNT = 'AHAToken: amount must be positive'
REASON_INSUFFICIENT_BALANCE = 'ERC20: transfer amount exceeds balance'
REASON_INSUFFICIENT_ALLOWANCE = 'ERC20: insufficient allowance'
REASON_DUPLICATE_EVENT = 'AHATokenStake: event reward already deposited'
REASON_UNKNOWN_EVENT = 'AHATokenStake: event does not exist'
REASON_INVALID_WINDOW = 'AHATokenStake: invalid sale start and end'
REASON_SALE_NOT_OPEN = 'AHATokenStake: sale is not open'
REASON_SALE_STILL_OPEN = 'AHATokenStake: sale has not ended yet'
REASON_NOTHING_STAKED = 'AHATokenStake: nothing staked'


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
DEFAULTS = LOGGER_DEFAULTS | LEDGER_DEFAULTS
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Avoids exceptions by only calling ast.literal_eval for known literals.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        return ast.literal_eval(s.title())
    return v

for key, default_raw in DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)
