"""
govindex Constants

This module consolidates all global constants and environment configuration
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

INDEXER_DEFAULTS = {
    'GOVINDEX_NAME':                   'ens-governance',
    'GOVINDEX_CHAIN_ID':               '1',
    'GOVINDEX_EVENTS_PATH':            'data/events.jsonl',
}

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_FILE_OUTPUT':                 'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# WARNING: THE VALUES BELOW MIRROR THE INDEXED CONTRACTS. CHANGING THEM WHILE REPLAYING AN
# EXISTING EVENT LOG PRODUCES ENTITIES THAT NO LONGER MATCH THE ON-CHAIN STATE.

# ==================================================================================
# TOKEN PARAMETERS
# ==================================================================================
# ERC-20 token decimals used to derive decimal balances from raw integers
DEFAULT_DECIMALS = 18

# Mints originate from, and burns are sent to, the zero address
ZERO_ADDRESS = '0x0000000000000000000000000000000000000000'


# ==================================================================================
# GOVERNANCE PARAMETERS
# ==================================================================================
# Id of the process-wide governance aggregate
GOVERNANCE_NAME = 'ENS'

# GovernorCountingSimple support codes
VOTE_AGAINST = 0
VOTE_FOR = 1
VOTE_ABSTAIN = 2

# Joins voter address and proposal id into a Vote id
VOTE_ID_SEPARATOR = '-'


# ==================================================================================
# ENGINE PARAMETERS
# ==================================================================================
# Integrity faults kept in memory per engine (older ones are dropped, counts are not)
MAX_FAULTS_RETAINED = 10_000


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
DEFAULTS = INDEXER_DEFAULTS | LOGGER_DEFAULTS
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
        # ast.literal_eval expects "True"/"False"
        return ast.literal_eval(s.title())
    return v

for key, default_raw in DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    # Parses only boolean-literals. Leaves other values untouched.
    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)
