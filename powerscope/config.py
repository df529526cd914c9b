"""Static configuration for the power anomaly dashboard.

Channel presets, timing constants and environment overrides. The chart core
never reads these directly; the dashboard passes them in.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Optional, Tuple

from .channels import ChangeRule, ChannelConfig, ChannelProfile, RegimeProfile, RuleStyle, ThresholdRule
from .sampler import COARSE_ZOOM_TABLE

DISPLAY_TZ_NAME = "America/Los_Angeles"

# Refresh cadence (seconds)
NOW_TICK_SECONDS = 1.0
DATA_REFRESH_SECONDS = 60.0

# Zoom fade transition (seconds)
FADE_DELAY_SECONDS = 0.05
FADE_DURATION_SECONDS = 0.45
APPEAR_DELAY_SECONDS = 0.15

# Narrative countdown: Bus 3 overload expected this long after first launch
OVERLOAD_ANCHOR_KEY = "bus3OverloadTimer"
OVERLOAD_DURATION_MINUTES = 52

_BUS_CAPACITY = ThresholdRule(210.0, "Bus Capacity", RuleStyle(color="orange"))

POWER_BUS_CHANNELS: Tuple[ChannelConfig, ...] = (
    ChannelConfig(
        key="bus2",
        title="Bus 2",
        unit="V",
        color="mediumaquamarine",
        marker="s",
        value_format="{:.1f}",
        thresholds=(_BUS_CAPACITY,),
        zoom_table=COARSE_ZOOM_TABLE,
        y_limits=(50.0, 300.0),
        profile=ChannelProfile(
            nominal=RegimeProfile(level=200.0, wave_amplitude=2.5, wave_frequency=0.15),
            anomalous=RegimeProfile(level=220.0, wave_amplitude=1.0, wave_frequency=0.1),
            breakpoint_minutes_ago=15,
            transition_value=260.0,
        ),
    ),
    ChannelConfig(
        key="bus3",
        title="Bus 3",
        unit="V",
        color="darkturquoise",
        marker="^",
        value_format="{:.1f}",
        thresholds=(_BUS_CAPACITY,),
        zoom_table=COARSE_ZOOM_TABLE,
        y_limits=(50.0, 300.0),
        profile=ChannelProfile(
            nominal=RegimeProfile(level=90.0, wave_amplitude=2.0, wave_frequency=0.1),
            anomalous=RegimeProfile(level=190.0, wave_amplitude=1.0, wave_frequency=0.05),
            breakpoint_minutes_ago=14,
        ),
    ),
    ChannelConfig(
        key="bus1",
        title="Bus 1",
        unit="V",
        color="indigo",
        marker="o",
        value_format="{:.1f}",
        thresholds=(_BUS_CAPACITY,),
        zoom_table=COARSE_ZOOM_TABLE,
        y_limits=(50.0, 300.0),
        profile=ChannelProfile(
            nominal=RegimeProfile(level=170.0, wave_amplitude=2.0, wave_frequency=0.1),
            anomalous=RegimeProfile(level=170.0, wave_amplitude=2.0, wave_frequency=0.1),
            breakpoint_minutes_ago=0,
        ),
    ),
)

WATER_PURIFIER_CHANNELS: Tuple[ChannelConfig, ...] = (
    ChannelConfig(
        key="impeller_speed",
        title="Water Purifier Impeller Speed",
        unit="RPM",
        color="mediumaquamarine",
        marker="o",
        thresholds=(ThresholdRule(2100.0, "Low"),),
        change_rule=ChangeRule(500.0),
        profile=ChannelProfile(
            nominal=RegimeProfile(level=3000.0, jitter=50.0),
            anomalous=RegimeProfile(level=45.0, jitter=35.0),
        ),
    ),
    ChannelConfig(
        key="impeller_power",
        title="Water Purifier Impeller Power Draw",
        unit="V",
        color="darkturquoise",
        marker="s",
        thresholds=(ThresholdRule(360.0, "High"),),
        change_rule=ChangeRule(250.0, rising=True, label="spike"),
        profile=ChannelProfile(
            nominal=RegimeProfile(level=300.0, jitter=10.0),
            anomalous=RegimeProfile(level=650.0, jitter=10.0),
        ),
    ),
    ChannelConfig(
        key="purifier_output",
        title="Water Purifier Output",
        unit="L",
        color="indigo",
        marker="o",
        value_format="{:.1f}",
        thresholds=(ThresholdRule(4.0, "Low"),),
        change_rule=ChangeRule(2.0, label="output drop"),
        profile=ChannelProfile(
            nominal=RegimeProfile(level=8.0, jitter=0.2),
            anomalous=RegimeProfile(level=0.0, alternate=0.3),
        ),
    ),
)

SYSTEMS: Dict[str, Tuple[ChannelConfig, ...]] = {
    "power": POWER_BUS_CHANNELS,
    "water": WATER_PURIFIER_CHANNELS,
}

SYSTEM_TITLES: Dict[str, str] = {
    "power": "Power System",
    "water": "Water Purifier",
}


_DISPLAY_TZ_ENV = "POWERSCOPE_DISPLAY_TZ"
_REFRESH_ENV = "POWERSCOPE_REFRESH_SECONDS"
_SEED_ENV = "POWERSCOPE_SEED"
_SYSTEM_ENV = "POWERSCOPE_SYSTEM"


@dataclass(frozen=True)
class Settings:
    display_tz_name: str
    refresh_seconds: float
    seed: Optional[int]
    system: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_refresh_seconds(default: float) -> float:
    value = os.getenv(_REFRESH_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_seed() -> Optional[int]:
    value = os.getenv(_SEED_ENV)
    if value is None:
        return None
    candidate = value.strip()
    if not candidate:
        return None
    try:
        return int(candidate)
    except ValueError:
        return None


def _read_system(default: str) -> str:
    candidate = _read_str_env(_SYSTEM_ENV, default).lower()
    return candidate if candidate in SYSTEMS else default


@lru_cache
def load_settings() -> Settings:
    return Settings(
        display_tz_name=_read_str_env(_DISPLAY_TZ_ENV, DISPLAY_TZ_NAME),
        refresh_seconds=_read_refresh_seconds(DATA_REFRESH_SECONDS),
        seed=_read_seed(),
        system=_read_system("power"),
    )


# Event log shown on the LOG tab: (minutes before now, message); None is "Now"
TIMELINE_EVENTS: Tuple[Tuple[Optional[int], str], ...] = (
    (5, "Water Purification pump impeller speed near 0 RPM."),
    (5, "Water Purification pump draws higher current from Power Bus 2."),
    (4, "Power Bus 2 available voltage drops below low threshold."),
    (3, "System reroutes transit critical components from Bus 2 to Bus 3 to maintain transit operations."),
    (None, "Power Bus 3 can hold rerouted components for 52 min before critical overload."),
)
