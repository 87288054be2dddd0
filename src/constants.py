"""Constants used throughout the codetrack application."""

# Window constants
WINDOW_LENGTHS = (30, 60, 90)
DEFAULT_WINDOW_LENGTH = 30

# Source constants
MAX_DATA_SOURCES = 5
DEFAULT_SOURCE_FILENAME = "codingTimeData.json"

# Sync constants
SYNC_INTERVAL_SECONDS = 3600
SOURCE_FETCH_TIMEOUT_SECONDS = 30

# Time constants
SECONDS_PER_HOUR = 3600

# Payload field names
PAYLOAD_DAILY_DATA_KEY = "dailyData"
PAYLOAD_TOTAL_TIME_KEY = "totalTime"
PAYLOAD_BREAKDOWN_KEYS = {
    "language_time": "languageTime",
    "repo_time": "repoTime",
    "file_time": "fileTime",
}

# File operation constants
DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Logging constants
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_MAX_BYTES = 10 * 1024 * 1024  # 10MB
LOG_BACKUP_COUNT = 5
LOG_DIR = "logs"
LOG_FILENAME = "codetrack.log"

# Error message constants
ERROR_NO_DATA = "No usage data has been published yet"
ERROR_NO_SOURCES = "No enabled data sources configured"
ERROR_ALL_SOURCES_FAILED = "None of the enabled data sources could be loaded"
ERROR_PUBLISH_FAILED = "Failed to publish usage data"

# Chart constants
CHART_HEIGHT_DEFAULT = 400
CHART_HEIGHT_SMALL = 300
GRID_CELL_SIZE = 18

# UI refresh constants
AUTOREFRESH_KEY = "autorefresh"
UPDATE_COUNT_KEY = "update_count"
