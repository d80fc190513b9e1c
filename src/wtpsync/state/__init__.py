"""State/store layer.

This package is the single source of truth for how partial plant state
from polling (or the simulator) is merged into the snapshot that every
frame reads.
"""
