"""
Runchart Configuration

Central configuration for the live chart viewer.
Edit these values to tune the viewer to your preferences.
"""

# =============================================================================
# WINDOW SETTINGS
# =============================================================================

# Number of samples kept on screen (also the x-axis upper bound)
WINDOW_SIZE = 32

# Largest accepted sample, anything above parses as 0
MAX_SAMPLE = 2**64 - 1

# =============================================================================
# AXIS SETTINGS
# =============================================================================

# Padding added above the max and below the min, in percent of the value
PAD_PERCENT = 10

# Label increment = (top - bottom) // LABEL_STEPS
LABEL_STEPS = 25

# Endpoint labels for the x axis (newest sample on the left)
X_LABELS = ("Now", "Earlier")

# =============================================================================
# SOURCE SETTINGS
# =============================================================================

# Seconds to wait between two runs of the command
POLL_INTERVAL = 0.5

# Shell used to interpret the command string
SHELL = "/bin/sh"

# Max bytes buffered for a single piped line
STDIN_LINE_LIMIT = 1024 * 1024

# Title shown when reading from stdin
DEFAULT_TITLE = "stdin"

# =============================================================================
# COLOR SCHEMES
# =============================================================================

# Curses color pair ids
COLOR_LINE = 1    # Plotted line (cyan)
COLOR_AXIS = 2    # Axes and labels (white)
COLOR_TITLE = 3   # Border title

# Enable extra diagnostics on stderr
DEBUG = False
