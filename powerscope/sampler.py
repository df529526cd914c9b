"""Zoom-dependent decimation of a series to its visible window.

The zoom range picks the visible window width; a per-channel table maps it
to a decimation stride and an axis tick spacing. Sampling synthesizes flat
boundary points so the line always spans the window and reaches "now".
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterator, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from .errors import ConfigurationError
from .series_generator import DataPoint, Series

# Gap after which the line is extended to "now" with the last real value
NOW_GAP = pd.Timedelta(seconds=60)


class ZoomRange(Enum):
    THIRTY_MIN = 30
    ONE_HOUR = 60
    TWO_HOURS = 120
    THREE_HOURS = 180

    @property
    def minutes(self) -> int:
        return self.value

    @property
    def label(self) -> str:
        if self.value < 60:
            return f"{self.value}m"
        return f"{self.value // 60}h"

    @classmethod
    def from_label(cls, label: str) -> "ZoomRange":
        for zoom in cls:
            if zoom.label == label:
                return zoom
        raise ValueError(f"Unknown zoom range label: {label!r}")


@dataclass(frozen=True)
class ZoomLevel:
    stride: int
    tick_minutes: int


class ZoomTable:
    """Immutable mapping from every ZoomRange to its ZoomLevel."""

    def __init__(self, levels: Mapping[ZoomRange, ZoomLevel]):
        missing = [zoom.label for zoom in ZoomRange if zoom not in levels]
        if missing:
            raise ConfigurationError(f"Zoom table is missing levels for: {', '.join(missing)}")
        for zoom, level in levels.items():
            if level.stride <= 0 or level.tick_minutes <= 0:
                raise ConfigurationError(
                    f"Zoom level for {zoom.label} must have positive stride and tick spacing, got {level}"
                )
        self._levels = MappingProxyType(dict(levels))

    def __getitem__(self, zoom: ZoomRange) -> ZoomLevel:
        return self._levels[zoom]

    def __iter__(self) -> Iterator[ZoomRange]:
        return iter(self._levels)

    def __len__(self) -> int:
        return len(self._levels)

    def stride(self, zoom: ZoomRange) -> int:
        return self._levels[zoom].stride

    def tick_minutes(self, zoom: ZoomRange) -> int:
        return self._levels[zoom].tick_minutes

    def __repr__(self) -> str:
        entries = ", ".join(
            f"{zoom.label}: {level.stride}/{level.tick_minutes}m" for zoom, level in self._levels.items()
        )
        return f"ZoomTable({entries})"


DEFAULT_ZOOM_TABLE = ZoomTable(
    {
        ZoomRange.THIRTY_MIN: ZoomLevel(stride=1, tick_minutes=3),
        ZoomRange.ONE_HOUR: ZoomLevel(stride=2, tick_minutes=6),
        ZoomRange.TWO_HOURS: ZoomLevel(stride=4, tick_minutes=12),
        ZoomRange.THREE_HOURS: ZoomLevel(stride=6, tick_minutes=18),
    }
)

COARSE_ZOOM_TABLE = ZoomTable(
    {
        ZoomRange.THIRTY_MIN: ZoomLevel(stride=1, tick_minutes=3),
        ZoomRange.ONE_HOUR: ZoomLevel(stride=4, tick_minutes=6),
        ZoomRange.TWO_HOURS: ZoomLevel(stride=8, tick_minutes=12),
        ZoomRange.THREE_HOURS: ZoomLevel(stride=12, tick_minutes=18),
    }
)


def window_bounds(zoom: ZoomRange, now: pd.Timestamp) -> Tuple[pd.Timestamp, pd.Timestamp]:
    """Return the visible window ``[now - (minutes - 1) min, now]``."""
    now = pd.Timestamp(now)
    lower = now - pd.Timedelta(minutes=zoom.minutes - 1)
    return lower, now


def visible_points(series: Series, zoom: ZoomRange, now: pd.Timestamp) -> List[DataPoint]:
    """Return the undecimated points of ``series`` inside the visible window."""
    lower, upper = window_bounds(zoom, now)
    return [point for point in series.points if lower <= point.time <= upper]


def _adjacent_point(series: Series, lower: pd.Timestamp) -> Optional[DataPoint]:
    """Latest point strictly before the window, used when the window holds none."""
    times = series.times_ns()
    if times.size == 0:
        return None
    idx = int(np.searchsorted(times, lower.value, side="left")) - 1
    if idx < 0:
        return None
    return series.points[idx]


def sample(
    series: Series,
    zoom: ZoomRange,
    now: pd.Timestamp,
    table: ZoomTable = DEFAULT_ZOOM_TABLE,
) -> List[DataPoint]:
    """Decimate ``series`` to the zoom window, synthesizing boundary points.

    Args:
        series: Source series (time-ordered)
        zoom: Selected zoom range
        now: Right edge of the window
        table: Channel zoom table giving the decimation stride

    Returns:
        Time-ordered points; empty when nothing lies in or before the window
    """
    lower, now = window_bounds(zoom, now)
    visible = visible_points(series, zoom, now)

    if not visible:
        adjacent = _adjacent_point(series, lower)
        if adjacent is None:
            return []
        # Carry the last known value flat across the whole window
        return [
            DataPoint(time=lower, value=adjacent.value, synthetic=True),
            DataPoint(time=now, value=adjacent.value, synthetic=True),
        ]

    stride = table.stride(zoom)
    sampled = visible[::stride]

    if sampled[0].time > lower:
        sampled.insert(0, DataPoint(time=lower, value=sampled[0].value, synthetic=True))

    last_real = visible[-1]
    if now - last_real.time > NOW_GAP:
        sampled.append(DataPoint(time=now, value=last_real.value, synthetic=True))

    return sampled
