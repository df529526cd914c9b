"""Shared padded time axis for stacked charts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

import pandas as pd

from .sampler import ZoomRange, window_bounds
from .series_generator import Series

DOMAIN_PADDING = pd.Timedelta(minutes=1)


@dataclass(frozen=True)
class TimeDomain:
    lower: pd.Timestamp
    upper: pd.Timestamp

    def __post_init__(self) -> None:
        if self.lower > self.upper:
            raise ValueError(f"TimeDomain lower bound {self.lower} is after upper bound {self.upper}")

    @property
    def span(self) -> pd.Timedelta:
        return self.upper - self.lower

    def fraction(self, time: pd.Timestamp) -> float:
        """Position of ``time`` across the domain, 0 at ``lower`` and 1 at ``upper``."""
        span_ns = self.span.value
        if span_ns == 0:
            return 0.5
        return (pd.Timestamp(time).value - self.lower.value) / span_ns


def compute_padded_domain(
    series_list: Iterable[Series],
    now: Optional[pd.Timestamp] = None,
) -> TimeDomain:
    """Compute the union domain of all series, padded one minute past the max.

    An empty input yields the degenerate domain ``{now, now}``.
    """
    contributing = [series for series in series_list if not series.is_empty]
    if not contributing:
        anchor = pd.Timestamp.now(tz="UTC") if now is None else pd.Timestamp(now)
        return TimeDomain(lower=anchor, upper=anchor)

    # Series are time-ordered, so the extremes are their end points
    lower = min(series.first.time for series in contributing)
    upper = max(series.last.time for series in contributing)
    return TimeDomain(lower=lower, upper=upper + DOMAIN_PADDING)


def visible_domain(domain: TimeDomain, zoom: ZoomRange, now: pd.Timestamp) -> TimeDomain:
    """Narrow the shared domain to the zoom window for a panel's x-range.

    The right edge never ends before ``now``, so the NOW rule and the line
    extended to it stay on the axes between refreshes.
    """
    now = pd.Timestamp(now)
    window_lower, _ = window_bounds(zoom, now)
    upper = max(domain.upper, now)
    lower = min(max(domain.lower, window_lower), upper)
    return TimeDomain(lower=lower, upper=upper)
