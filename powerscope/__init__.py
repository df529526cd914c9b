"""Charting core of the power anomaly dashboard.

This package contains:
- series_generator: Synthetic per-minute telemetry with a regime breakpoint
- time_domain: Shared padded time axis for stacked charts
- sampler: Zoom windows, decimation and boundary synthesis
- selection: Per-chart and synced lollipop selection
- plotting: Scene building, painting and gesture routing
- view: Stacked multi-chart view with refresh and zoom fades
- anchors: Session anchors and countdowns
- app: Tk dashboard shell
"""

from .channels import ChangeRule, ChannelConfig, ChannelProfile, RegimeProfile, RuleStyle, ThresholdRule
from .errors import ConfigurationError
from .sampler import ZoomRange, sample
from .series_generator import DataPoint, InvalidParameter, Series, SeriesGenerator
from .time_domain import TimeDomain, compute_padded_domain
from .view import FadeTransition, MultiChartView

__all__ = [
    "ChangeRule",
    "ChannelConfig",
    "ChannelProfile",
    "RegimeProfile",
    "RuleStyle",
    "ThresholdRule",
    "ConfigurationError",
    "ZoomRange",
    "sample",
    "DataPoint",
    "InvalidParameter",
    "Series",
    "SeriesGenerator",
    "TimeDomain",
    "compute_padded_domain",
    "FadeTransition",
    "MultiChartView",
]
