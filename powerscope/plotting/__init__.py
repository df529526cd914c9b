"""Plotting components for the power anomaly dashboard.

This package contains the chart-facing pieces of the dashboard:
- chart_panel: Scene building for one channel chart
- renderer: Painting scenes onto matplotlib axes
- gestures: Mouse gesture routing to the selection controller
"""

from .chart_panel import ChartPanel, Lollipop, PanelScene, change_onset, format_clock
from .gestures import GestureBinding
from .renderer import PanelRenderer

__all__ = [
    "ChartPanel",
    "Lollipop",
    "PanelScene",
    "change_onset",
    "format_clock",
    "GestureBinding",
    "PanelRenderer",
]
