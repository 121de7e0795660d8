"""
Vitals Configuration

Central configuration for all Vitals components.
Runtime knobs here are the defaults; the CLI can override most of them.
"""

# =============================================================================
# WAVEFORM GEOMETRY
# =============================================================================

# Number of plotted points kept in the ring buffer (also the x axis span)
BUFFER_WIDTH = 1000

# Baseline y the cursor returns to on every wrap
CENTER_Y = 500.0

# Points further than this behind the cursor are erased
# 600 on a 1000 wide buffer leaves a 600 wide visible trail
DECAY_OFFSET = 600

# Sentinel coordinate for "nothing plotted here"
SENTINEL = (0.0, 0.0)

# =============================================================================
# PULSE PROFILE
# =============================================================================

# Vertical step applied to the baseline on each pulse tick
PULSE_STEP = 15.0

# Height of the vertical stroke drawn per pulse tick (buffer slots)
PULSE_SPAN = 15

# Phase edges, in cursor units past the pulse origin
# (0, 20] rise, (20, 50] fall, (50, 60] recover
PULSE_RISE_END = 20
PULSE_FALL_END = 50
PULSE_END = 60

# =============================================================================
# TIMING
# =============================================================================

# Tick period for the trace (milliseconds)
TICK_RATE_MS = 10

# Self-contained variant: pulse every N cursor units (None = liveness only)
AUTO_PULSE_PERIOD = None

# Keyboard poll timeout; bounds how long the reader takes to notice shutdown
INPUT_POLL_SECONDS = 0.1

# How long close() waits for each background thread
THREAD_JOIN_TIMEOUT = 1.0

# =============================================================================
# LIVENESS PROBE
# =============================================================================

PROBE_URL = "http://localhost:5000/api/test/test"

# Seconds between probe attempts
PROBE_INTERVAL = 3.0

# Socket timeout for one probe (None = library default)
PROBE_TIMEOUT = None

# =============================================================================
# DISPLAY
# =============================================================================

# Canvas axis bounds (x_min, x_max), (y_min, y_max)
X_BOUNDS = (0.0, float(BUFFER_WIDTH))
Y_BOUNDS = (0.0, 1000.0)

DEFAULT_STYLE = "heartbeat"

# curses color pair numbers: (foreground 256-color, fallback 8-color)
COLOR_PAIRS = {
    1: (120, "GREEN"),   # Light green (trace)
    2: (22, "GREEN"),    # Dim green (trail)
    3: (231, "WHITE"),   # White (cursor)
    4: (245, "WHITE"),   # Gray (frame)
    5: (226, "YELLOW"),  # Yellow (key hints)
    6: (196, "RED"),     # Red (pulse indicator)
}

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
