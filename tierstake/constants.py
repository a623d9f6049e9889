"""
tierstake Constants

This module consolidates the global constants and environment configuration
used throughout the codebase. Constants are organized by category for easy
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
    'LOG_FILE_OUTPUT':                 'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# ==================================================================================
# TOKEN PARAMETERS
# ==================================================================================
TOKEN_DEFAULT_DECIMALS = 18
TOKEN_MAX_DECIMALS = 18
TOKEN_DEFAULT_INITIAL_SUPPLY = 100_000_000  # whole tokens minted to the deployer

STAKING_TOKEN_NAME = 'StakingToken'
STAKING_TOKEN_SYMBOL = 'STK'
REWARD_TOKEN_NAME = 'RewardToken'
REWARD_TOKEN_SYMBOL = 'RTK'


# ==================================================================================
# STAKING PARAMETERS
# ==================================================================================
# Stake band, in whole tokens. Scaled by 10**decimals at load time.
MIN_STAKE_TOKENS = 1_000
MAX_STAKE_TOKENS = 1_000_000

SECONDS_IN_HOUR = 3600
SECONDS_IN_DAY = 24 * SECONDS_IN_HOUR

# Rates are simple (non-compounding) yearly rates over a 360-day reward year.
REWARD_PERIOD_SECONDS = 360 * SECONDS_IN_DAY
BPS_DENOMINATOR = 10_000

# stake_type -> (name, rate in basis points per reward period)
DEFAULT_REWARD_TIERS = {
    0: ('Basic', 12_000),
    1: ('Advanced', 15_000),
    2: ('Premium', 20_000),
}


# ==================================================================================
# LOCAL CHAIN PARAMETERS
# ==================================================================================
LOCAL_CHAIN_ACCOUNTS = 10
LOCAL_CHAIN_SEED = b'tierstake-local-chain'


# ==================================================================================
# EVENT LOGS
# ==================================================================================
# Most recent events kept per token and per engine; older entries are dropped.
EVENT_LOG_SIZE = 10_000


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

    def __hash__(self):
        return hash(bool(self))


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
DEFAULTS = dict(LOGGER_DEFAULTS)
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
