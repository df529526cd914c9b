"""Scene building for a single channel chart.

A ChartPanel turns a series, the shared time domain and the current
selection into a PanelScene: plain geometry (line, markers, reference rules,
lollipop readout) that a renderer paints. One parametrized panel serves every
channel; units, colors, symbols and thresholds come from its ChannelConfig.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..channels import ChangeRule, ChannelConfig, ThresholdRule
from ..sampler import ZoomRange, sample, visible_points
from ..series_generator import DataPoint, Series
from ..time_domain import TimeDomain, visible_domain

# Readout box size and offset, as fractions of the plot area
LABEL_BOX_WIDTH = 0.16
LABEL_BOX_HEIGHT = 0.2
LABEL_OFFSET = 0.14

# Headroom added around auto-scaled y-limits
Y_MARGIN = 0.1

# Line color while a synced selection is shown on every chart
DIMMED_COLOR = "#c7c7cc"


def format_clock(time: pd.Timestamp) -> str:
    """Short 12-hour clock label, e.g. '4:52 PM'."""
    return f"{time:%I:%M %p}".lstrip("0")


def change_onset(series: Series, rule: ChangeRule) -> Optional[pd.Timestamp]:
    """Time of the first point that moved past ``rule.threshold`` from its predecessor."""
    if len(series) < 2:
        return None
    steps = np.diff(series.values())
    if not rule.rising:
        steps = -steps
    hits = np.flatnonzero(steps > rule.threshold)
    if hits.size == 0:
        return None
    return series.points[int(hits[0]) + 1].time


@dataclass(frozen=True)
class Lollipop:
    """Guide line, marker and floating label for the selected point."""

    point: DataPoint
    time_label: str
    value_label: str
    box_x: float
    box_y: float
    color: str

    @property
    def text(self) -> str:
        return f"{self.time_label}\n{self.value_label}"


@dataclass
class PanelScene:
    """Renderable description of one chart panel."""

    key: str
    title: str
    unit: str
    color: str
    marker: str
    line_times: List[pd.Timestamp] = field(default_factory=list)
    line_values: List[float] = field(default_factory=list)
    marker_times: List[pd.Timestamp] = field(default_factory=list)
    marker_values: List[float] = field(default_factory=list)
    thresholds: Tuple[ThresholdRule, ...] = ()
    now: Optional[pd.Timestamp] = None
    x_limits: Optional[Tuple[pd.Timestamp, pd.Timestamp]] = None
    y_limits: Tuple[float, float] = (0.0, 1.0)
    x_ticks: List[pd.Timestamp] = field(default_factory=list)
    opacity: float = 1.0
    lollipop: Optional[Lollipop] = None
    onset: Optional[pd.Timestamp] = None
    caption: Optional[str] = None
    dimmed: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.line_times


class ChartPanel:
    """Builds the scene for one channel chart."""

    def __init__(self, config: ChannelConfig):
        self.config = config

    @property
    def key(self) -> str:
        return self.config.key

    def sample(self, series: Series, zoom: ZoomRange, now: pd.Timestamp) -> List[DataPoint]:
        """Decimate a series with this channel's zoom table."""
        return sample(series, zoom, now, self.config.zoom_table)

    def render(
        self,
        series: Series,
        domain: TimeDomain,
        selection: Optional[DataPoint],
        thresholds: Optional[Sequence[ThresholdRule]],
        now: pd.Timestamp,
        *,
        zoom: ZoomRange = ZoomRange.THIRTY_MIN,
        sampled: Optional[Sequence[DataPoint]] = None,
        opacity: float = 1.0,
        dimmed: bool = False,
    ) -> PanelScene:
        """Build the scene for the current state.

        Args:
            series: Full series of the channel
            domain: Shared padded time domain of the chart group
            selection: Resolved selected point, or None for no lollipop
            thresholds: Reference rules; None uses the channel's configured ones
            now: Current time (NOW rule position and window edge)
            zoom: Active zoom range
            sampled: Pre-computed decimated points (sampled here when omitted)
            opacity: Fade opacity in [0, 1]
            dimmed: Draw the line in gray (a synced selection is active)

        Returns:
            PanelScene ready to be painted
        """
        config = self.config
        now = pd.Timestamp(now)
        rules = tuple(config.thresholds if thresholds is None else thresholds)
        markers = list(sampled) if sampled is not None else self.sample(series, zoom, now)

        # Full-resolution line, extended by the synthetic boundary points
        line = visible_points(series, zoom, now)
        line.extend(point for point in markers if point.synthetic)
        line.sort(key=lambda point: point.time.value)

        x_domain = visible_domain(domain, zoom, now)
        y_limits = self._y_limits([point.value for point in line], rules)

        scene = PanelScene(
            key=config.key,
            title=config.title,
            unit=config.unit,
            color=config.color,
            marker=config.marker,
            line_times=[point.time for point in line],
            line_values=[point.value for point in line],
            marker_times=[point.time for point in markers if not point.synthetic],
            marker_values=[point.value for point in markers if not point.synthetic],
            thresholds=rules,
            now=now,
            x_limits=(x_domain.lower, x_domain.upper),
            y_limits=y_limits,
            x_ticks=self._ticks(x_domain, config.zoom_table.tick_minutes(zoom)),
            opacity=min(max(opacity, 0.0), 1.0),
            dimmed=dimmed,
        )

        if config.change_rule is not None:
            scene.onset = change_onset(series, config.change_rule)
            if scene.onset is not None:
                scene.caption = f"Significant {config.change_rule.label} detected at {format_clock(scene.onset)}"

        if selection is not None:
            scene.lollipop = self._lollipop(selection, x_domain, y_limits)

        return scene

    def _lollipop(
        self,
        point: DataPoint,
        x_domain: TimeDomain,
        y_limits: Tuple[float, float],
    ) -> Lollipop:
        x_frac = x_domain.fraction(point.time)
        y_low, y_high = y_limits
        y_frac = (point.value - y_low) / (y_high - y_low) + LABEL_OFFSET

        # Keep the label box fully inside the plot area
        half_w = LABEL_BOX_WIDTH / 2
        half_h = LABEL_BOX_HEIGHT / 2
        box_x = min(max(x_frac, half_w), 1.0 - half_w)
        box_y = min(max(y_frac, half_h), 1.0 - half_h)

        return Lollipop(
            point=point,
            time_label=format_clock(point.time),
            value_label=self.config.format_value(point.value),
            box_x=box_x,
            box_y=box_y,
            color=self.config.color,
        )

    def _y_limits(self, values: Sequence[float], rules: Sequence[ThresholdRule]) -> Tuple[float, float]:
        if self.config.y_limits is not None:
            return self.config.y_limits

        candidates = list(values) + [rule.value for rule in rules]
        if not candidates:
            return (0.0, 1.0)
        low, high = min(candidates), max(candidates)
        span = high - low
        if span == 0:
            span = abs(high) or 1.0
        return (low - span * Y_MARGIN, high + span * Y_MARGIN)

    @staticmethod
    def _ticks(x_domain: TimeDomain, tick_minutes: int) -> List[pd.Timestamp]:
        if x_domain.span.value == 0:
            return [x_domain.lower]
        freq = pd.Timedelta(minutes=tick_minutes)
        start = x_domain.lower.ceil(freq, ambiguous=False, nonexistent="shift_forward")
        return list(pd.date_range(start=start, end=x_domain.upper, freq=freq))
