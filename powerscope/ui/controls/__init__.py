"""Control panels for the power anomaly dashboard.

This package contains the Tk control panels composed by the application:
- zoom_panel: Zoom range radio buttons
- channel_panel: Channel visibility toggles
"""

from .channel_panel import ChannelPanel
from .zoom_panel import ZoomPanel

__all__ = [
    "ChannelPanel",
    "ZoomPanel",
]
