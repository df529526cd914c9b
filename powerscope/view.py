"""Stacked multi-chart view with periodic refresh and zoom fades.

The view owns the per-channel series, the shared TimeDomain, the sampled
points of every visible panel and the one SelectionController of the group.
It is driven from outside: the host calls ``tick`` from its timer and
``scenes`` whenever it repaints.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

import pandas as pd

from .channels import ChannelConfig
from .config import APPEAR_DELAY_SECONDS, DATA_REFRESH_SECONDS, FADE_DELAY_SECONDS, FADE_DURATION_SECONDS
from .errors import ConfigurationError
from .plotting.chart_panel import ChartPanel, PanelScene
from .sampler import ZoomRange
from .selection import SelectionController, SelectionPhase
from .series_generator import DataPoint, Series, SeriesGenerator
from .time_domain import TimeDomain, compute_padded_domain


def ease_in_out(t: float) -> float:
    """Symmetric ease-in-out curve on [0, 1]."""
    t = min(max(t, 0.0), 1.0)
    return 0.5 - 0.5 * math.cos(math.pi * t)


@dataclass(frozen=True)
class FadeTransition:
    """Opacity over time: 0 at ``started_at``, then an eased rise to 1.

    Times are monotonic seconds.
    """

    started_at: float
    delay: float = FADE_DELAY_SECONDS
    duration: float = FADE_DURATION_SECONDS

    def opacity(self, at: float) -> float:
        elapsed = at - self.started_at - self.delay
        if elapsed <= 0:
            return 0.0
        if self.duration <= 0 or elapsed >= self.duration:
            return 1.0
        return ease_in_out(elapsed / self.duration)

    def finished(self, at: float) -> bool:
        return at - self.started_at >= self.delay + self.duration


def utc_now() -> pd.Timestamp:
    return pd.Timestamp.now(tz="UTC")


class MultiChartView:
    """Vertically stacked chart panels sharing one time domain and one selection."""

    def __init__(
        self,
        channels: Sequence[ChannelConfig],
        generator: Optional[SeriesGenerator] = None,
        clock: Callable[[], pd.Timestamp] = utc_now,
        zoom: ZoomRange = ZoomRange.THIRTY_MIN,
        refresh_seconds: float = DATA_REFRESH_SECONDS,
        appear_at: Optional[float] = None,
    ):
        """Initialize the view and generate the first data set.

        Args:
            channels: Channel configs, top to bottom
            generator: Series generator (a fresh unseeded one when omitted)
            clock: Callable returning the current tz-aware time
            zoom: Initial zoom range
            refresh_seconds: Period between data regenerations
            appear_at: Monotonic time the view first appears; starts the
                initial fade-in when given

        Raises:
            ConfigurationError: No channels, duplicate keys or a non-positive
                refresh period
        """
        if not channels:
            raise ConfigurationError("MultiChartView needs at least one channel.")
        keys = [config.key for config in channels]
        duplicates = sorted({key for key in keys if keys.count(key) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate channel keys: {', '.join(duplicates)}")
        if refresh_seconds <= 0:
            raise ConfigurationError(f"refresh_seconds must be positive, got {refresh_seconds}")

        self.panels: Dict[str, ChartPanel] = {config.key: ChartPanel(config) for config in channels}
        self.order: List[str] = keys
        self.generator = generator or SeriesGenerator()
        self.clock = clock
        self.zoom = zoom
        self.refresh_period = pd.Timedelta(seconds=refresh_seconds)

        self.selection = SelectionController()
        self.visible: Dict[str, bool] = {key: True for key in keys}
        self.series: Dict[str, Series] = {}
        self.sampled: Dict[str, List[DataPoint]] = {}
        self.domain: Optional[TimeDomain] = None

        self.fade: Optional[FadeTransition] = None
        if appear_at is not None:
            self.fade = FadeTransition(appear_at, delay=APPEAR_DELAY_SECONDS)

        self._torn_down = False

        self.now = pd.Timestamp(self.clock())
        self.last_refresh = self.now
        self.refresh(self.now)

    @property
    def visible_keys(self) -> List[str]:
        return [key for key in self.order if self.visible[key]]

    @property
    def is_torn_down(self) -> bool:
        return self._torn_down

    def refresh(self, now: pd.Timestamp) -> None:
        """Regenerate every channel and replace all series at once."""
        now = pd.Timestamp(now)
        fresh = {key: self.generator.generate_for(self.panels[key].config, now) for key in self.order}
        self.series = fresh
        self.now = now
        self.last_refresh = now
        self._recompute()
        print(f"[View] Refreshed {len(fresh)} channels at {now}")

    def tick(self, now: Optional[pd.Timestamp] = None) -> bool:
        """Advance the clock; regenerate the data when the refresh period has elapsed.

        Args:
            now: Current time (the injected clock is used when omitted)

        Returns:
            True if the data was regenerated
        """
        if self._torn_down:
            return False
        now = pd.Timestamp(self.clock() if now is None else now)

        if now - self.last_refresh >= self.refresh_period:
            self.refresh(now)
            return True

        self.now = now
        self._recompute()
        return False

    def set_zoom(self, zoom: ZoomRange, at: float) -> bool:
        """Swap the zoom range and fade the panels back in.

        Series are untouched; only the samples and x-ranges change.

        Returns:
            True if the zoom changed
        """
        if self._torn_down or zoom is self.zoom:
            return False
        self.zoom = zoom
        self.fade = FadeTransition(at)
        self._recompute()
        print(f"[View] Zoom set to {zoom.label}")
        return True

    def toggle_channel(self, key: str) -> bool:
        """Show or hide a channel. The last visible channel stays visible.

        Returns:
            The channel's visibility after the call
        """
        if key not in self.visible:
            raise KeyError(f"Unknown channel '{key}'")

        if self.visible[key] and len(self.visible_keys) == 1:
            print(f"[View] Keeping '{key}' visible: at least one channel must remain")
            return True

        self.visible[key] = not self.visible[key]
        if not self.visible[key]:
            self.selection.remove_chart(key)
        self._recompute()
        return self.visible[key]

    def opacity(self, at: Optional[float]) -> float:
        if self.fade is None or at is None:
            return 1.0
        return self.fade.opacity(at)

    def is_transitioning(self, at: float) -> bool:
        return self.fade is not None and not self.fade.finished(at)

    def scenes(self, at: Optional[float] = None) -> List[PanelScene]:
        """Build one PanelScene per visible channel, top to bottom."""
        if self.domain is None:
            return []
        opacity = self.opacity(at)
        dimmed = self.selection.phase is SelectionPhase.SYNCED
        scenes = []
        for key in self.visible_keys:
            panel = self.panels[key]
            scenes.append(
                panel.render(
                    self.series[key],
                    self.domain,
                    self.selection.effective_point(key),
                    None,
                    self.now,
                    zoom=self.zoom,
                    sampled=self.sampled[key],
                    opacity=opacity,
                    dimmed=dimmed,
                )
            )
        return scenes

    def to_frame(self) -> pd.DataFrame:
        """Visible series stacked into one frame with ``channel``, ``time`` and ``value`` columns."""
        frames = []
        for key in self.visible_keys:
            frame = self.series[key].to_frame()
            frame.insert(0, "channel", key)
            frames.append(frame)
        return pd.concat(frames, ignore_index=True)

    def teardown(self) -> None:
        """Stop reacting to ticks and clear the selection."""
        self._torn_down = True
        self.selection.reset()
        print("[View] Torn down")

    def _recompute(self) -> None:
        visible = self.visible_keys
        self.domain = compute_padded_domain((self.series[key] for key in visible), self.now)
        self.sampled = {}
        for key in visible:
            points = self.panels[key].sample(self.series[key], self.zoom, self.now)
            self.sampled[key] = points
            self.selection.set_points(key, points)
