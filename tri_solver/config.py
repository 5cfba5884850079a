"""
Tuning constants for the engine.

Every value here is only a default: the functions and classes that use one
also take it as a keyword argument.
"""

# How far drop-to-grid snapping looks around the drop cell
# (2 means a 5x5 square centered on the drop).
SNAP_SEARCH_RADIUS = 2

# Solver iterations between cooperative yields / progress reports.
YIELD_EVERY = 2000

# Seconds a paused solver waits between re-checks when no resume/cancel
# notification arrives (the wait itself does not spin).
PAUSE_POLL_SECONDS = 0.1

# Most solver events a worker keeps; the oldest is dropped when full.
EVENT_QUEUE_SIZE = 100
