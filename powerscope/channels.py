"""Channel configuration structs.

A channel bundles everything a chart needs that is not logic: labels,
units, colors, marker symbols, threshold rules, the zoom table, and the
profile used to synthesize its telemetry. Configs are validated when they
are built so a malformed one never reaches rendering.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .errors import ConfigurationError
from .sampler import DEFAULT_ZOOM_TABLE, ZoomTable


@dataclass(frozen=True)
class RuleStyle:
    color: str = "gray"
    linestyle: str = "--"
    linewidth: float = 1.0


@dataclass(frozen=True)
class ThresholdRule:
    """Horizontal reference line drawn across a chart."""

    value: float
    label: str
    style: RuleStyle = field(default_factory=RuleStyle)


@dataclass(frozen=True)
class ChangeRule:
    """Minute-to-minute jump that marks the onset of an anomaly.

    ``rising`` rules look for a step up, others for a step down. ``label``
    names the event in the chart caption ("drop", "spike", ...).
    """

    threshold: float
    rising: bool = False
    label: str = "drop"

    def __post_init__(self) -> None:
        if self.threshold <= 0:
            raise ConfigurationError(f"Change threshold must be positive, got {self.threshold}")


@dataclass(frozen=True)
class RegimeProfile:
    """Shape of one regime: level, pseudo-periodic wave, bounded jitter."""

    level: float
    jitter: float = 0.0
    wave_amplitude: float = 0.0
    wave_frequency: float = 0.1
    alternate: float = 0.0

    def __post_init__(self) -> None:
        if self.jitter < 0:
            raise ConfigurationError(f"jitter must not be negative, got {self.jitter}")


@dataclass(frozen=True)
class ChannelProfile:
    """Generation parameters: nominal and anomalous regimes around a breakpoint."""

    nominal: RegimeProfile
    anomalous: RegimeProfile
    window_minutes: int = 180
    breakpoint_minutes_ago: int = 10
    transition_value: Optional[float] = None

    def __post_init__(self) -> None:
        if self.window_minutes <= 0:
            raise ConfigurationError(f"window_minutes must be positive, got {self.window_minutes}")
        if not 0 <= self.breakpoint_minutes_ago <= self.window_minutes:
            raise ConfigurationError(
                f"breakpoint_minutes_ago must lie within the {self.window_minutes}-minute window, "
                f"got {self.breakpoint_minutes_ago}"
            )


@dataclass(frozen=True)
class ChannelConfig:
    """Static description of one chart channel."""

    key: str
    title: str
    unit: str
    color: str
    profile: ChannelProfile
    marker: str = "o"
    value_format: str = "{:.0f}"
    thresholds: Tuple[ThresholdRule, ...] = ()
    zoom_table: ZoomTable = DEFAULT_ZOOM_TABLE
    y_limits: Optional[Tuple[float, float]] = None
    change_rule: Optional[ChangeRule] = None

    def __post_init__(self) -> None:
        if not self.key.strip():
            raise ConfigurationError("Channel key must not be empty.")
        if self.y_limits is not None and self.y_limits[0] >= self.y_limits[1]:
            raise ConfigurationError(f"y_limits must be increasing, got {self.y_limits}")
        try:
            self.value_format.format(1.0)
        except (ValueError, IndexError, KeyError) as e:
            raise ConfigurationError(f"Invalid value_format '{self.value_format}': {e}") from e

    def format_value(self, value: float) -> str:
        """Format a value with this channel's precision and unit."""
        return f"{self.value_format.format(value)} {self.unit}".rstrip()
