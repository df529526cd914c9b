"""Pointer gesture binding between a matplotlib canvas and the selection controller.

Translates button press, motion and release events on the stacked chart axes
into press / move / release calls, with event times from a monotonic clock so
the controller can recognise long presses.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Callable, Dict, Hashable, List, Optional

import pandas as pd
from matplotlib.dates import num2date

from ..selection import SelectionController

if TYPE_CHECKING:
    from matplotlib.backend_bases import FigureCanvasBase

    from .renderer import PanelRenderer


class GestureBinding:
    """Routes mouse events on chart axes to a SelectionController."""

    def __init__(
        self,
        canvas: FigureCanvasBase,
        controller: SelectionController,
        renderer: PanelRenderer,
        display_tz: Any,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the gesture binding.

        Args:
            canvas: Matplotlib canvas receiving the events
            controller: Selection controller of the chart group
            renderer: Renderer that owns the readout annotations
            display_tz: Timezone used to convert axis positions to timestamps
            clock: Monotonic time source in seconds
        """
        self.canvas = canvas
        self.controller = controller
        self.renderer = renderer
        self.display_tz = display_tz
        self.clock = clock

        self.axes_to_chart: Dict[Any, Hashable] = {}
        self.active_chart: Optional[Hashable] = None

        # Called after every state change so the host can repaint
        self.on_change: Optional[Callable[[], None]] = None

        self._motion_count = 0
        self._connection_ids: List[int] = [
            self.canvas.mpl_connect("button_press_event", self.on_press),
            self.canvas.mpl_connect("motion_notify_event", self.on_motion),
            self.canvas.mpl_connect("button_release_event", self.on_release),
        ]

    def bind_axes(self, axes_to_chart: Dict[Any, Hashable]) -> None:
        """Set which axes belong to which chart (after the layout changes)."""
        self.axes_to_chart = dict(axes_to_chart)

    def disconnect(self) -> None:
        for cid in self._connection_ids:
            self.canvas.mpl_disconnect(cid)
        self._connection_ids.clear()
        print("[Gesture] Disconnected from canvas")

    def event_time(self, event: Any) -> Optional[pd.Timestamp]:
        """Convert an event's x position to a timestamp in the display timezone."""
        xdata = event.xdata
        if xdata is None:
            return None
        try:
            return pd.Timestamp(num2date(xdata, tz=self.display_tz))
        except (ValueError, OverflowError) as e:
            print(f"[Gesture] Could not convert x position {xdata}: {e}")
            return None

    def on_press(self, event: Any) -> None:
        """Handle a mouse button press on a chart."""
        chart_id = self.axes_to_chart.get(event.inaxes)
        if chart_id is None:
            return

        self.active_chart = chart_id
        at = self.clock()

        if self._hits_readout(event):
            self.controller.press_readout(chart_id, at)
            print(f"[Gesture] Press on readout of '{chart_id}'")
            self._notify()
            return

        clicked_time = self.event_time(event)
        if clicked_time is None:
            return
        self.controller.press(chart_id, clicked_time, at)
        self._notify()

    def on_motion(self, event: Any) -> None:
        """Handle pointer motion while a press is held."""
        if self.active_chart is None:
            return
        # Motion outside the pressed chart is ignored
        chart_axes = next((ax for ax, cid in self.axes_to_chart.items() if cid == self.active_chart), None)
        if chart_axes is None:
            return
        if event.inaxes is not chart_axes:
            return

        moved_time = self.event_time(event)
        if moved_time is None:
            return

        self._motion_count += 1
        if self._motion_count % 50 == 1:
            print(f"[Gesture] Drag on '{self.active_chart}' at {moved_time}")

        self.controller.move(self.active_chart, moved_time, self.clock())
        self._notify()

    def on_release(self, event: Any) -> None:
        """Handle the end of a press."""
        if self.active_chart is None:
            return
        chart_id = self.active_chart
        self.active_chart = None
        self.controller.release(chart_id)
        self._notify()

    def poll(self) -> None:
        """Check for a long press held without motion; called from the host timer."""
        if self.controller.poll(self.clock()):
            self._notify()

    def _hits_readout(self, event: Any) -> bool:
        readout = self.renderer.readout_for(event.inaxes)
        if readout is None:
            return False
        try:
            inside, _ = readout.contains(event)
        except (AttributeError, RuntimeError) as e:
            print(f"[Gesture] Readout hit-test failed: {e}")
            return False
        return bool(inside)

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change()
