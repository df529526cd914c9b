"""Unit tests for the shared padded time domain."""

from __future__ import annotations

import pandas as pd
import pytest

from powerscope.sampler import ZoomRange
from powerscope.series_generator import DataPoint, Series
from powerscope.time_domain import DOMAIN_PADDING, TimeDomain, compute_padded_domain, visible_domain

NOW = pd.Timestamp("2025-07-02 16:52", tz="UTC")


def _series(channel: str, minutes_ago: list) -> Series:
    """Helper to build a series from minute offsets before NOW."""

    points = tuple(
        DataPoint(time=NOW - pd.Timedelta(minutes=offset), value=1.0) for offset in sorted(minutes_ago, reverse=True)
    )
    return Series(channel=channel, points=points)


def test_padded_domain_spans_all_series() -> None:
    domain = compute_padded_domain(
        [
            _series("a", [180, 90, 0]),
            _series("b", [200, 10]),
        ]
    )

    assert domain.lower == NOW - pd.Timedelta(minutes=200)
    assert domain.upper == NOW + pd.Timedelta(minutes=1)


def test_padding_is_one_minute() -> None:
    domain = compute_padded_domain([_series("a", [30, 5])])

    assert domain.upper - (NOW - pd.Timedelta(minutes=5)) == DOMAIN_PADDING == pd.Timedelta(minutes=1)


def test_empty_input_collapses_to_now() -> None:
    domain = compute_padded_domain([], NOW)

    assert domain.lower == domain.upper == NOW


def test_empty_series_are_ignored() -> None:
    domain = compute_padded_domain([Series(channel="empty"), _series("a", [3, 1])], NOW)

    assert domain.lower == NOW - pd.Timedelta(minutes=3)


def test_time_domain_rejects_inverted_bounds() -> None:
    with pytest.raises(ValueError):
        TimeDomain(lower=NOW, upper=NOW - pd.Timedelta(minutes=1))


def test_fraction_of_zero_span_is_centered() -> None:
    domain = TimeDomain(lower=NOW, upper=NOW)

    assert domain.fraction(NOW) == 0.5


def test_visible_domain_narrows_to_zoom_window() -> None:
    domain = compute_padded_domain([_series("a", [180, 0])])

    narrowed = visible_domain(domain, ZoomRange.THIRTY_MIN, NOW)

    assert narrowed.lower == NOW - pd.Timedelta(minutes=29)
    assert narrowed.upper == domain.upper


def test_visible_domain_keeps_short_history() -> None:
    domain = compute_padded_domain([_series("a", [20, 0])])

    narrowed = visible_domain(domain, ZoomRange.THREE_HOURS, NOW)

    assert narrowed.lower == domain.lower


def test_visible_domain_reaches_now_after_padding_runs_out() -> None:
    domain = compute_padded_domain([_series("a", [180, 0])])
    later = NOW + pd.Timedelta(seconds=90)

    narrowed = visible_domain(domain, ZoomRange.THIRTY_MIN, later)

    assert narrowed.upper == later
    assert narrowed.lower == later - pd.Timedelta(minutes=29)
