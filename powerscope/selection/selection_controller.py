"""Selection state shared by a group of stacked charts.

Each chart keeps its own "lollipop" selection, driven by taps and drags on
its plot area. A long press followed by a drag switches the whole group into
a synced selection that every chart renders at the same timestamp. When the
gesture is released the per-chart selections held before the press are put
back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Hashable, List, Optional, Sequence

import pandas as pd

from ..series_generator import DataPoint

ChartId = Hashable

# Minimum hold duration (seconds) before a press becomes a synced scrub
LONG_PRESS_SECONDS = 0.15


class SelectionPhase(Enum):
    IDLE = "idle"
    HOVERING = "hovering"
    SYNCED = "synced"


def nearest_point(points: Sequence[DataPoint], time: pd.Timestamp) -> Optional[DataPoint]:
    """Return the point closest to ``time``; the first minimum wins on ties."""
    best: Optional[DataPoint] = None
    best_distance: Optional[int] = None
    target = pd.Timestamp(time).value
    for point in points:
        distance = abs(point.time.value - target)
        if best_distance is None or distance < best_distance:
            best = point
            best_distance = distance
    return best


@dataclass
class _Hold:
    """An in-progress press gesture on one chart."""

    chart_id: ChartId
    started_at: float
    snapshot: Dict[ChartId, Optional[pd.Timestamp]]
    on_readout: bool = False
    moved: bool = False


@dataclass
class SelectionState:
    per_chart_time: Dict[ChartId, Optional[pd.Timestamp]] = field(default_factory=dict)
    synced_time: Optional[pd.Timestamp] = None


class SelectionController:
    """Tracks per-chart and synced selections for a chart group.

    This class encapsulates:
    - Snapping pointer positions to the nearest sampled point of a chart
    - The Idle / Hovering / Synced transitions driven by gestures
    - Restoring per-chart selections when a synced scrub ends
    - Resolving the effective selected point for each chart
    """

    def __init__(self, long_press_seconds: float = LONG_PRESS_SECONDS):
        """Initialize the selection controller.

        Args:
            long_press_seconds: Hold duration that turns a press into a synced scrub
        """
        self.long_press_seconds = long_press_seconds
        self.state = SelectionState()
        self._points: Dict[ChartId, List[DataPoint]] = {}
        self._hold: Optional[_Hold] = None
        self._move_count = 0

    # ------------------------------------------------------------------
    # Chart data
    # ------------------------------------------------------------------

    def set_points(self, chart_id: ChartId, points: Sequence[DataPoint]) -> None:
        """Replace the sampled points used for nearest-point lookups on a chart."""
        self._points[chart_id] = list(points)
        self.state.per_chart_time.setdefault(chart_id, None)

    def remove_chart(self, chart_id: ChartId) -> None:
        self._points.pop(chart_id, None)
        self.state.per_chart_time.pop(chart_id, None)
        if self._hold is not None and self._hold.chart_id == chart_id:
            self._hold = None

    def chart_ids(self) -> List[ChartId]:
        return list(self._points)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def phase(self) -> SelectionPhase:
        if self.state.synced_time is not None:
            return SelectionPhase.SYNCED
        if any(time is not None for time in self.state.per_chart_time.values()):
            return SelectionPhase.HOVERING
        return SelectionPhase.IDLE

    @property
    def synced_time(self) -> Optional[pd.Timestamp]:
        return self.state.synced_time

    def selected_time(self, chart_id: ChartId) -> Optional[pd.Timestamp]:
        """The chart's own (non-synced) selection."""
        return self.state.per_chart_time.get(chart_id)

    def effective_time(self, chart_id: ChartId) -> Optional[pd.Timestamp]:
        if self.state.synced_time is not None:
            return self.state.synced_time
        return self.state.per_chart_time.get(chart_id)

    def effective_point(self, chart_id: ChartId) -> Optional[DataPoint]:
        """Resolve the point a chart should display its lollipop at.

        The synced selection takes precedence over the chart's own selection.
        """
        target = self.effective_time(chart_id)
        if target is None:
            return None
        return nearest_point(self._points.get(chart_id, ()), target)

    def is_holding(self) -> bool:
        return self._hold is not None

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    def press(self, chart_id: ChartId, time: pd.Timestamp, at: float) -> Optional[DataPoint]:
        """Pointer-down on a chart's plot area.

        Args:
            chart_id: Chart receiving the press
            time: Time under the pointer
            at: Monotonic event time in seconds

        Returns:
            The point the chart's selection snapped to, or None when the chart
            has no points in view
        """
        self._hold = _Hold(chart_id=chart_id, started_at=at, snapshot=dict(self.state.per_chart_time))
        return self._select(chart_id, time)

    def press_readout(self, chart_id: ChartId, at: float) -> None:
        """Pointer-down on a chart's floating readout; the selection does not move."""
        self._hold = _Hold(
            chart_id=chart_id,
            started_at=at,
            snapshot=dict(self.state.per_chart_time),
            on_readout=True,
        )

    def move(self, chart_id: ChartId, time: pd.Timestamp, at: float) -> Optional[DataPoint]:
        """Pointer drag. Returns the point now shown on the dragged chart."""
        hold = self._hold
        self._move_count += 1

        if hold is None or hold.chart_id != chart_id:
            # Stray motion without a matching press
            return None

        # Only a press held still past the threshold turns into a synced scrub
        held_still = not hold.moved and at - hold.started_at >= self.long_press_seconds
        hold.moved = True
        if self.state.synced_time is None and held_still:
            self._enter_sync(chart_id)

        if self.state.synced_time is not None:
            closest = nearest_point(self._points.get(chart_id, ()), time)
            if closest is not None:
                self.state.synced_time = closest.time
            if self._move_count % 50 == 1:
                print(f"[Selection] Synced scrub at {self.state.synced_time}")
            return closest

        return self._select(chart_id, time)

    def poll(self, at: float) -> bool:
        """Recognise a long press that has been held without moving.

        Returns:
            True if the group entered the synced phase on this call
        """
        hold = self._hold
        if hold is None or hold.moved or self.state.synced_time is not None:
            return False
        if at - hold.started_at < self.long_press_seconds:
            return False
        return self._enter_sync(hold.chart_id)

    def release(self, chart_id: ChartId) -> None:
        """Pointer-up. Ends a synced scrub or completes a tap on the readout."""
        hold = self._hold
        self._hold = None

        if self.state.synced_time is not None:
            self.state.synced_time = None
            if hold is not None:
                self.state.per_chart_time = dict(hold.snapshot)
            print("[Selection] Sync ended, per-chart selections restored")
            return

        if hold is not None and hold.on_readout and not hold.moved and hold.chart_id == chart_id:
            self.tap_readout(chart_id)

    def tap_readout(self, chart_id: ChartId) -> bool:
        """Clear a chart's selection. Not allowed while the group is synced."""
        if self.state.synced_time is not None:
            return False
        if self.state.per_chart_time.get(chart_id) is None:
            return False
        self.state.per_chart_time[chart_id] = None
        print(f"[Selection] Cleared selection on '{chart_id}'")
        return True

    def reset(self) -> None:
        """Drop all selection state (view teardown)."""
        self.state = SelectionState(per_chart_time={chart_id: None for chart_id in self._points})
        self._hold = None
        print("[Selection] All selections cleared")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _select(self, chart_id: ChartId, time: pd.Timestamp) -> Optional[DataPoint]:
        closest = nearest_point(self._points.get(chart_id, ()), time)
        if closest is not None:
            self.state.per_chart_time[chart_id] = closest.time
        return closest

    def _enter_sync(self, chart_id: ChartId) -> bool:
        selected = self.state.per_chart_time.get(chart_id)
        if selected is None:
            return False
        self.state.synced_time = selected
        print(f"[Selection] Synced selection started from '{chart_id}' at {selected}")
        return True
