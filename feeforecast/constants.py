"""Constants used throughout the fee forecast application."""

# History log
DEFAULT_STORAGE_KEY = "feeforecast_fee_history"
DEFAULT_MAX_HISTORY = 1000  # Keep last 1000 observations
DEFAULT_DEDUP_WINDOW_MS = 60_000  # 1 minute minimum between stored points
MIN_POINTS_FOR_PREDICTION = 3
MIN_POINTS_FOR_FACTORS = 5
FACTOR_WINDOW = 10
TREND_WINDOW = 6

# Horizon step counts assume one observation roughly every 30 minutes
NEXT_HOUR_STEPS = 2
NEXT_6_HOURS_STEPS = 12
NEXT_24_HOURS_STEPS = 48

# Trend classification
TREND_CHANGE_THRESHOLD = 0.10
TREND_MULTIPLIERS = {
    "increasing": 1.1,
    "decreasing": 0.9,
    "stable": 1.0,
}

# Confidence scoring
BASE_CONFIDENCE = 0.5
MAX_DATA_CONFIDENCE_BONUS = 0.3
MAX_VOLATILITY_CONFIDENCE_BONUS = 0.2
STABLE_CONFIDENCE_BONUS = 0.1
MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 0.95
NEXT_6_HOURS_CONFIDENCE_DECAY = 0.9
NEXT_24_HOURS_CONFIDENCE_DECAY = 0.8

# Fee floor
MIN_FEE_SATVB = 1

# Explorer API
DEFAULT_API_BASE_URL = "https://mempool.space/api"
DEFAULT_HTTP_TIMEOUT_SECS = 10

# Log rotation defaults
DEFAULT_LOG_MAX_BYTES = 10_485_760  # 10MB
DEFAULT_LOG_BACKUP_COUNT = 30
