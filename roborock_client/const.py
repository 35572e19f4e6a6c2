"""Protocol constants, enums, and command names for Roborock S5 vacuums."""

from enum import Enum, IntEnum

# Connection defaults (local WebSocket bridge to the miio command socket)
DEFAULT_PORT = 8053
DEFAULT_PATH = "/"

# Firmware generation boundary: status msg_ver >= 3 switches command shapes
GEN3_MSG_VER = 3

# Map canvas edge length in millimetres (50 mm/px * 1024 px)
DIMENSION_MM = 50 * 1024

# Device-enforced weighted marker budget (zone = 4, barrier = 2)
MAX_MARKER_WEIGHT = 68
ZONE_WEIGHT = 4
BARRIER_WEIGHT = 2

# --- miio command names (client → robot) ---
CMD_GET_STATUS = "get_status"
CMD_SET_CUSTOM_MODE = "set_custom_mode"

# Timers
CMD_GET_TIMER = "get_timer"
CMD_SET_TIMER = "set_timer"
CMD_UPDATE_TIMER = "upd_timer"
CMD_DELETE_TIMER = "del_timer"

# Persistent map / lab mode
CMD_SET_LAB_STATUS = "set_lab_status"
CMD_SAVE_MAP = "save_map"
CMD_GET_MAP = "get_map_v1"

# Map backups (gen3 only)
CMD_GET_RECOVER_MAPS = "get_recover_maps"
CMD_RECOVER_MAP = "recover_map"

# Start-clean action embedded into gen3 timers
TIMER_ACTION_START_CLEAN = "start_clean"
TIMER_GEN3_CLEAN_PARAMS = {
    "fan_power": 102,
    "segments": "",
    "repeat": 1,
    "clean_order_mode": 1,
}

# Reconnection parameters
RECONNECT_INITIAL_DELAY = 1.0  # seconds
RECONNECT_MAX_DELAY = 300.0  # 5 minutes
RECONNECT_BACKOFF_FACTOR = 2.0

# Heartbeat
HEARTBEAT_INTERVAL = 30.0  # seconds

# Command response timeout
COMMAND_RESPONSE_TIMEOUT = 5.0  # seconds

# Persisting zones/barriers is slow on the robot side
SAVE_MAP_TIMEOUT = 3.5  # seconds


class FanSpeed(str, Enum):
    """Abstract suction levels, independent of firmware encoding."""

    MIN = "min"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    MAX = "max"
    MOP = "mop"


class PersistentDataType(IntEnum):
    """Marker kind, first element of every save_map entry."""

    ZONE = 0
    BARRIER = 1
