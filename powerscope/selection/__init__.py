"""Selection management for stacked charts.

This package handles the per-chart and synced lollipop selection state
shared by every panel of a multi-chart view.
"""

from .selection_controller import (
    LONG_PRESS_SECONDS,
    SelectionController,
    SelectionPhase,
    SelectionState,
    nearest_point,
)

__all__ = [
    "LONG_PRESS_SECONDS",
    "SelectionController",
    "SelectionPhase",
    "SelectionState",
    "nearest_point",
]
