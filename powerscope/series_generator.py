"""Synthetic telemetry generation for the dashboard channels.

Each channel is generated over a fixed historical window at one-minute
resolution: a nominal plateau, then an anomalous regime from the breakpoint
onwards. Noise is drawn fresh on every call unless a seed is supplied.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    from .channels import ChannelConfig, ChannelProfile, RegimeProfile


class InvalidParameter(ValueError):
    """Raised when the generator is called with a malformed request."""


@dataclass(frozen=True)
class DataPoint:
    """A single (time, value) sample. ``synthetic`` marks sampler-made points."""

    time: pd.Timestamp
    value: float
    synthetic: bool = False


@dataclass(frozen=True)
class Series:
    """Time-ordered samples for one channel, replaced wholesale on refresh."""

    channel: str
    points: Tuple[DataPoint, ...] = ()

    def __len__(self) -> int:
        return len(self.points)

    @property
    def is_empty(self) -> bool:
        return not self.points

    @property
    def first(self) -> Optional[DataPoint]:
        return self.points[0] if self.points else None

    @property
    def last(self) -> Optional[DataPoint]:
        return self.points[-1] if self.points else None

    def times_ns(self) -> np.ndarray:
        return np.array([point.time.value for point in self.points], dtype=np.int64)

    def values(self) -> np.ndarray:
        return np.array([point.value for point in self.points], dtype=float)

    def to_frame(self) -> pd.DataFrame:
        """Return the series as a DataFrame with ``time`` and ``value`` columns."""
        return pd.DataFrame(
            {
                "time": [point.time for point in self.points],
                "value": [point.value for point in self.points],
            }
        )


class SeriesGenerator:
    """Produce two-phase synthetic series (nominal plateau, then anomaly)."""

    def __init__(self, *, seed: Optional[int] = None) -> None:
        """Initialize the generator.

        Args:
            seed: Optional seed for reproducible noise. ``None`` draws fresh
                randomness on every call, which gives the live feel.
        """
        self.seed = seed
        self._generation_count = 0

    def _rng(self) -> np.random.Generator:
        if self.seed is None:
            return np.random.default_rng()
        return np.random.default_rng(self.seed)

    def generate(
        self,
        channel: ChannelProfile,
        now: pd.Timestamp,
        window_minutes: int,
        breakpoint_minutes_ago: int,
        *,
        name: str = "",
    ) -> Series:
        """Generate one point per whole minute over ``[now - window, now]``.

        Args:
            channel: Regime profile of the channel
            now: Right edge of the window (inclusive)
            window_minutes: Width of the historical window in minutes
            breakpoint_minutes_ago: Minutes before ``now`` where the anomaly starts
            name: Channel key stored on the resulting series

        Returns:
            A new Series

        Raises:
            InvalidParameter: If the window or breakpoint are out of range
        """
        if window_minutes <= 0:
            raise InvalidParameter(f"window_minutes must be positive, got {window_minutes}")
        if breakpoint_minutes_ago < 0 or breakpoint_minutes_ago > window_minutes:
            raise InvalidParameter(
                f"breakpoint_minutes_ago must lie within [0, {window_minutes}], got {breakpoint_minutes_ago}"
            )

        now = pd.Timestamp(now)
        times = pd.date_range(
            end=now,
            periods=window_minutes + 1,
            freq=pd.Timedelta(minutes=1),
        )
        breakpoint_index = window_minutes - breakpoint_minutes_ago

        rng = self._rng()
        index = np.arange(window_minutes + 1)
        nominal = self._regime_values(channel.nominal, index, rng)
        anomalous = self._regime_values(channel.anomalous, index, rng)
        values = np.where(index < breakpoint_index, nominal, anomalous)

        if channel.transition_value is not None:
            values[breakpoint_index] = channel.transition_value

        points = tuple(
            DataPoint(time=timestamp, value=float(value))
            for timestamp, value in zip(times, values)
        )

        self._generation_count += 1
        if self._generation_count % 50 == 1:
            print(
                f"[Generator] '{name or 'series'}': {len(points)} points, "
                f"breakpoint {breakpoint_minutes_ago} min ago"
            )

        return Series(channel=name, points=points)

    def generate_for(self, config: ChannelConfig, now: pd.Timestamp) -> Series:
        """Generate a series using the window and breakpoint of a channel config."""
        profile = config.profile
        return self.generate(
            profile,
            now,
            profile.window_minutes,
            profile.breakpoint_minutes_ago,
            name=config.key,
        )

    @staticmethod
    def _regime_values(
        regime: RegimeProfile,
        index: np.ndarray,
        rng: np.random.Generator,
    ) -> np.ndarray:
        values = np.full(index.shape, regime.level, dtype=float)
        if regime.wave_amplitude:
            values += regime.wave_amplitude * np.sin(index * regime.wave_frequency)
        if regime.jitter:
            values += rng.uniform(-regime.jitter, regime.jitter, size=index.shape)
        if regime.alternate:
            # Intermittent pattern: every other minute steps up by ``alternate``
            values += np.where(index % 2 == 0, 0.0, regime.alternate)
        return values
