"""
Global configuration settings for the simulation.

This file contains global variables that can be accessed and modified by
different parts of the application. The flags are set at runtime by the
argument parser in cli.py, and tests may toggle them directly.
"""

# When True, enables detailed logging to the console.
DEBUG = False

# When True, the town verifies its car/edge bookkeeping after every mutation
# and the simulation does the same after every tick.
CHECK_CONSISTENCY = False

# Where generated map images are written.
RESULTS_DIR = "data/results"

# Upper bound on ticks when the command line does not give one.
DEFAULT_MAX_TICKS = 1000
