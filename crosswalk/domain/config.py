# Controller Configuration
import os

# Signal Timings (milliseconds)
RED_TIME_MS = 5000
GREEN_TIME_MS = 10000
YELLOW_TIME_MS = 2000

# Pedestrian Phase
WALK_TIME_MS = 15000
BLINK_WINDOW_MS = 5000   # Trailing part of the walk phase where the indicator blinks
BLINK_INTERVAL_MS = 500
BLINK_START_MS = WALK_TIME_MS - BLINK_WINDOW_MS

# Runtime
STRICT_TIMERS = os.getenv("CROSSWALK_STRICT_TIMERS", "0") == "1"
LOG_LEVEL = os.getenv("CROSSWALK_LOG_LEVEL", "INFO").upper()
