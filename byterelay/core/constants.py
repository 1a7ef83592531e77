"""
Project constants definitions
"""
from enum import IntEnum

# ============================================================
# Default Values
# ============================================================

DEFAULT_BUFFER_SIZE = 1024
DEFAULT_PORT = 5000
DEFAULT_BACKLOG = 5
DEFAULT_ACCEPT_POLL_INTERVAL = 0.5
DEFAULT_LOG_LEVEL = "WARNING"

MAX_PORT = 65535

# ============================================================
# Configuration
# ============================================================

ENV_PREFIX = "RELAY_"
CONFIG_SECTION = "relay"

# ============================================================
# Exit Codes
# ============================================================


class ExitCode(IntEnum):
    """Process exit codes"""
    OK = 0
    SETUP_ERROR = 1
    USAGE_ERROR = 2
    INVALID_NUMBER = 3
    TRANSFER_ERROR = 4
    ACCEPT_ERROR = 5
