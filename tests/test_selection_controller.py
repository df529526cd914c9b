"""Unit tests for the per-chart and synced selection state machine."""

from __future__ import annotations

import pandas as pd

from powerscope.selection import LONG_PRESS_SECONDS, SelectionController, SelectionPhase, nearest_point
from powerscope.series_generator import DataPoint

NOW = pd.Timestamp("2025-07-02 16:52", tz="UTC")


def _at(minutes_ago: float) -> pd.Timestamp:
    return NOW - pd.Timedelta(minutes=minutes_ago)


def _points(*minutes_ago: int) -> list:
    """Helper to build time-ordered points valued by their offset."""

    return [DataPoint(time=_at(offset), value=float(offset)) for offset in sorted(minutes_ago, reverse=True)]


def _controller() -> SelectionController:
    controller = SelectionController()
    controller.set_points("bus2", _points(30, 20, 10, 0))
    controller.set_points("bus3", _points(30, 25, 20, 15, 10, 5, 0))
    return controller


def test_nearest_point_first_minimum_wins() -> None:
    points = _points(10, 8)

    closest = nearest_point(points, _at(9))

    assert closest == points[0]
    assert nearest_point([], NOW) is None


def test_press_snaps_to_nearest_point() -> None:
    controller = _controller()

    closest = controller.press("bus2", _at(12), at=0.0)

    assert closest.time == _at(10)
    assert controller.selected_time("bus2") == _at(10)
    assert controller.selected_time("bus3") is None
    assert controller.phase is SelectionPhase.HOVERING


def test_drag_before_threshold_updates_per_chart_selection() -> None:
    controller = _controller()
    controller.press("bus2", _at(30), at=0.0)

    controller.move("bus2", _at(19), at=0.05)
    controller.move("bus2", _at(1), at=0.5)

    assert controller.selected_time("bus2") == _at(0)
    assert controller.synced_time is None


def test_long_press_then_drag_syncs_every_chart() -> None:
    controller = _controller()
    controller.press("bus2", _at(20), at=0.0)

    assert controller.poll(at=LONG_PRESS_SECONDS) is True
    assert controller.phase is SelectionPhase.SYNCED
    assert controller.synced_time == _at(20)

    controller.move("bus2", _at(4), at=0.3)

    assert controller.synced_time == _at(0)
    assert controller.effective_point("bus3").time == _at(0)


def test_move_after_still_hold_enters_sync() -> None:
    controller = _controller()
    controller.press("bus3", _at(15), at=1.0)

    controller.move("bus3", _at(6), at=1.2)

    assert controller.phase is SelectionPhase.SYNCED
    assert controller.synced_time == _at(5)


def test_poll_before_threshold_does_nothing() -> None:
    controller = _controller()
    controller.press("bus2", _at(20), at=0.0)

    assert controller.poll(at=0.1) is False
    assert controller.synced_time is None


def test_synced_selection_takes_precedence() -> None:
    controller = _controller()
    controller.press("bus3", _at(25), at=0.0)
    controller.release("bus3")
    controller.press("bus2", _at(10), at=1.0)
    controller.poll(at=1.2)

    assert controller.selected_time("bus3") == _at(25)
    assert controller.effective_point("bus3").time == _at(10)
    assert controller.effective_point("bus2").time == _at(10)


def test_release_restores_selections_from_before_the_press() -> None:
    controller = _controller()
    controller.press("bus2", _at(30), at=0.0)
    controller.release("bus2")
    controller.press("bus3", _at(5), at=1.0)
    controller.release("bus3")
    before = dict(controller.state.per_chart_time)

    controller.press("bus2", _at(0), at=2.0)
    controller.poll(at=2.2)
    controller.move("bus2", _at(20), at=2.3)
    controller.release("bus2")

    assert controller.synced_time is None
    assert controller.state.per_chart_time == before
    assert controller.phase is SelectionPhase.HOVERING


def test_tap_on_readout_clears_selection() -> None:
    controller = _controller()
    controller.press("bus2", _at(10), at=0.0)
    controller.release("bus2")

    controller.press_readout("bus2", at=1.0)
    controller.release("bus2")

    assert controller.selected_time("bus2") is None
    assert controller.phase is SelectionPhase.IDLE


def test_readout_long_press_does_not_clear() -> None:
    controller = _controller()
    controller.press("bus2", _at(10), at=0.0)
    controller.release("bus2")

    controller.press_readout("bus2", at=1.0)
    controller.poll(at=1.5)
    controller.release("bus2")

    assert controller.selected_time("bus2") == _at(10)


def test_tap_readout_refused_while_synced() -> None:
    controller = _controller()
    controller.press("bus2", _at(10), at=0.0)
    controller.poll(at=0.2)

    assert controller.tap_readout("bus2") is False
    assert controller.selected_time("bus2") == _at(10)


def test_repeated_moves_are_idempotent() -> None:
    controller = _controller()
    controller.press("bus3", _at(14), at=0.0)

    controller.move("bus3", _at(14), at=0.01)
    first = dict(controller.state.per_chart_time)
    controller.move("bus3", _at(14), at=0.02)

    assert controller.state.per_chart_time == first


def test_move_without_press_is_ignored() -> None:
    controller = _controller()

    assert controller.move("bus2", _at(10), at=0.0) is None
    assert controller.phase is SelectionPhase.IDLE


def test_reset_clears_everything() -> None:
    controller = _controller()
    controller.press("bus2", _at(10), at=0.0)
    controller.poll(at=0.2)

    controller.reset()

    assert controller.phase is SelectionPhase.IDLE
    assert not controller.is_holding()
    assert controller.effective_point("bus2") is None


def test_remove_chart_drops_its_selection() -> None:
    controller = _controller()
    controller.press("bus2", _at(10), at=0.0)
    controller.release("bus2")

    controller.remove_chart("bus2")

    assert "bus2" not in controller.chart_ids()
    assert controller.effective_point("bus2") is None
