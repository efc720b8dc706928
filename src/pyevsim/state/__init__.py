"""State/store layer.

This package is the single source of truth for how updates from the tick
loop, the command surface and advisory merges are combined into the one live
vehicle snapshot.
"""
