"""Internal constants shared across the library."""

# ------------------------------------------------------------------
# Wire format
# ------------------------------------------------------------------

TOKEN_DELIMITER = "#"
KEY_VALUE_SEPARATOR = "="
STATUS_REQUEST = b"\n"
WIRE_ENCODING = "ascii"

SYNC_KEY = "Sync"

# ------------------------------------------------------------------
# Session / cache defaults
# ------------------------------------------------------------------

DEFAULT_IDLE_TIMEOUT: float = 5.0
DEFAULT_MAX_STATUS_AGE: float = 2.0
DEFAULT_BATCH_TTL: float = 60.0
DEFAULT_READ_SIZE: int = 4096

#: Longest run of characters without a delimiter the framer holds back.
PENDING_LIMIT_READS: int = 4
DEFAULT_MAX_PENDING: int = PENDING_LIMIT_READS * DEFAULT_READ_SIZE

#: Sentinel sightings the device must complete after a write before the
#: session may close, so the written value is echoed back.
PASSES_AFTER_WRITE: int = 2
