"""Unit tests for scene building and painting of a channel chart."""

from __future__ import annotations

import pandas as pd
import pytest
from matplotlib.figure import Figure

from powerscope.channels import ChangeRule, ChannelConfig, ChannelProfile, RegimeProfile, ThresholdRule
from powerscope.plotting import ChartPanel, PanelRenderer, format_clock
from powerscope.plotting.chart_panel import DIMMED_COLOR, LABEL_BOX_HEIGHT, LABEL_BOX_WIDTH, change_onset
from powerscope.sampler import ZoomRange
from powerscope.series_generator import DataPoint, Series, SeriesGenerator
from powerscope.time_domain import compute_padded_domain

NOW = pd.Timestamp("2025-07-02 16:52", tz="UTC")


def _config(**overrides) -> ChannelConfig:
    """Helper to build the impeller speed channel."""

    values = dict(
        key="impeller_speed",
        title="Impeller Speed",
        unit="RPM",
        color="mediumaquamarine",
        thresholds=(ThresholdRule(2100.0, "Low"),),
        profile=ChannelProfile(
            nominal=RegimeProfile(level=3000.0, jitter=50.0),
            anomalous=RegimeProfile(level=45.0, jitter=35.0),
        ),
    )
    values.update(overrides)
    return ChannelConfig(**values)


def _series(config: ChannelConfig) -> Series:
    return SeriesGenerator().generate_for(config, NOW)


def _minutes(*values: float) -> Series:
    """One point per minute, the last one at NOW."""
    last = len(values) - 1
    return Series(
        channel="impeller_speed",
        points=tuple(DataPoint(NOW - pd.Timedelta(minutes=last - i), value) for i, value in enumerate(values)),
    )


def test_format_clock_drops_leading_zero() -> None:
    assert format_clock(pd.Timestamp("2025-07-02 16:52")) == "4:52 PM"
    assert format_clock(pd.Timestamp("2025-07-02 11:05")) == "11:05 AM"


def test_format_value_uses_channel_precision_and_unit() -> None:
    assert _config().format_value(2999.6) == "3000 RPM"
    assert _config(value_format="{:.1f}", unit="L").format_value(8.04) == "8.0 L"


def test_render_builds_line_markers_and_rules() -> None:
    config = _config()
    panel = ChartPanel(config)
    series = _series(config)
    domain = compute_padded_domain([series])

    scene = panel.render(series, domain, None, None, NOW, zoom=ZoomRange.ONE_HOUR)

    assert len(scene.line_times) == 60
    assert len(scene.marker_times) == 30
    assert scene.thresholds == config.thresholds
    assert scene.now == NOW
    assert scene.x_limits == (NOW - pd.Timedelta(minutes=59), NOW + pd.Timedelta(minutes=1))
    assert scene.lollipop is None
    assert not scene.is_empty


def test_render_line_includes_synthetic_boundary_points() -> None:
    config = _config()
    panel = ChartPanel(config)
    points = tuple(
        DataPoint(time=NOW - pd.Timedelta(minutes=offset), value=3000.0) for offset in range(20, 4, -1)
    )
    series = Series(channel=config.key, points=points)
    domain = compute_padded_domain([series])

    scene = panel.render(series, domain, None, None, NOW)

    assert scene.line_times[0] == NOW - pd.Timedelta(minutes=29)
    assert scene.line_times[-1] == NOW
    assert len(scene.marker_times) == len(points)


def test_render_threshold_override() -> None:
    config = _config()
    series = _series(config)
    rules = (ThresholdRule(360.0, "High"),)

    scene = ChartPanel(config).render(series, compute_padded_domain([series]), None, rules, NOW)

    assert scene.thresholds == rules


def test_render_y_limits_cover_values_and_thresholds() -> None:
    config = _config()
    series = _series(config)

    scene = ChartPanel(config).render(series, compute_padded_domain([series]), None, None, NOW)
    low, high = scene.y_limits

    assert low < min(scene.line_values)
    assert high > max(scene.line_values)
    assert low < 2100.0 < high


def test_render_fixed_y_limits() -> None:
    config = _config(y_limits=(50.0, 300.0))
    series = _series(config)

    scene = ChartPanel(config).render(series, compute_padded_domain([series]), None, None, NOW)

    assert scene.y_limits == (50.0, 300.0)


def test_render_ticks_follow_zoom_spacing() -> None:
    config = _config()
    series = _series(config)

    scene = ChartPanel(config).render(
        series, compute_padded_domain([series]), None, None, NOW, zoom=ZoomRange.TWO_HOURS
    )
    gaps = {later - earlier for earlier, later in zip(scene.x_ticks, scene.x_ticks[1:])}

    assert gaps == {pd.Timedelta(minutes=12)}
    assert scene.x_ticks[0] >= scene.x_limits[0]


def test_render_lollipop_label_stays_inside_plot() -> None:
    config = _config()
    series = _series(config)
    latest = series.last

    scene = ChartPanel(config).render(series, compute_padded_domain([series]), latest, None, NOW)
    lollipop = scene.lollipop

    assert lollipop.point == latest
    assert lollipop.time_label == "4:52 PM"
    assert lollipop.value_label.endswith(" RPM")
    assert LABEL_BOX_WIDTH / 2 <= lollipop.box_x <= 1 - LABEL_BOX_WIDTH / 2
    assert LABEL_BOX_HEIGHT / 2 <= lollipop.box_y <= 1 - LABEL_BOX_HEIGHT / 2
    assert lollipop.text == f"{lollipop.time_label}\n{lollipop.value_label}"


@pytest.mark.parametrize(("requested", "expected"), [(-0.5, 0.0), (0.4, 0.4), (3.0, 1.0)])
def test_render_clamps_opacity(requested: float, expected: float) -> None:
    config = _config()
    series = _series(config)

    scene = ChartPanel(config).render(series, compute_padded_domain([series]), None, None, NOW, opacity=requested)

    assert scene.opacity == expected


def test_render_empty_series() -> None:
    config = _config()
    empty = Series(channel=config.key)

    scene = ChartPanel(config).render(empty, compute_padded_domain([], NOW), None, None, NOW)

    assert scene.is_empty
    assert scene.marker_times == []


def test_renderer_paints_scene_on_axes() -> None:
    config = _config()
    series = _series(config)
    scene = ChartPanel(config).render(series, compute_padded_domain([series]), series.last, None, NOW)
    fig = Figure()
    ax = fig.add_subplot(111)
    renderer = PanelRenderer(display_tz="UTC")

    renderer.paint(ax, scene)

    assert ax.get_title(loc="left") == "Impeller Speed"
    assert ax.get_ylabel() == "RPM"
    assert any(line.get_label() == "_markers" for line in ax.get_lines())
    assert renderer.readout_for(ax) is not None
    assert "RPM" in renderer.readout_for(ax).get_text()


def test_renderer_repaint_drops_stale_readout() -> None:
    config = _config()
    series = _series(config)
    domain = compute_padded_domain([series])
    panel = ChartPanel(config)
    fig = Figure()
    ax = fig.add_subplot(111)
    renderer = PanelRenderer()

    renderer.paint(ax, panel.render(series, domain, series.last, None, NOW))
    renderer.paint(ax, panel.render(series, domain, None, None, NOW))

    assert renderer.readout_for(ax) is None


def test_change_onset_finds_first_step_down() -> None:
    series = _minutes(3000.0, 2990.0, 3010.0, 200.0, 40.0, 3000.0)

    assert change_onset(series, ChangeRule(500.0)) == NOW - pd.Timedelta(minutes=2)


def test_change_onset_rising_rule_ignores_drops() -> None:
    series = _minutes(300.0, 650.0, 640.0, 100.0)

    assert change_onset(series, ChangeRule(250.0, rising=True, label="spike")) == NOW - pd.Timedelta(minutes=2)
    assert change_onset(_minutes(650.0, 300.0), ChangeRule(250.0, rising=True)) is None


def test_change_onset_needs_a_jump_past_the_threshold() -> None:
    assert change_onset(_minutes(3000.0, 2600.0, 2200.0), ChangeRule(500.0)) is None
    assert change_onset(_minutes(3000.0, 2500.0), ChangeRule(500.0)) is None
    assert change_onset(_minutes(3000.0), ChangeRule(500.0)) is None


def test_render_captions_the_onset() -> None:
    config = _config(change_rule=ChangeRule(500.0))
    series = _minutes(3000.0, 3010.0, 45.0, 40.0)

    scene = ChartPanel(config).render(series, compute_padded_domain([series]), None, None, NOW)

    assert scene.onset == NOW - pd.Timedelta(minutes=1)
    assert scene.caption == "Significant drop detected at 4:51 PM"


def test_render_without_change_rule_has_no_caption() -> None:
    series = _minutes(3000.0, 45.0)

    scene = ChartPanel(_config()).render(series, compute_padded_domain([series]), None, None, NOW)

    assert scene.onset is None
    assert scene.caption is None
    assert not scene.dimmed


def test_renderer_paints_dimmed_line_and_caption() -> None:
    config = _config(change_rule=ChangeRule(500.0))
    series = _minutes(3000.0, 3010.0, 45.0, 40.0)
    scene = ChartPanel(config).render(series, compute_padded_domain([series]), None, None, NOW, dimmed=True)
    fig = Figure()
    ax = fig.add_subplot(111)

    PanelRenderer(display_tz="UTC").paint(ax, scene)

    lines = {line.get_label(): line for line in ax.get_lines()}
    assert lines["Impeller Speed"].get_color() == DIMMED_COLOR
    assert lines["_markers"].get_color() == DIMMED_COLOR
    assert ax.get_title(loc="right") == "Significant drop detected at 4:51 PM"
