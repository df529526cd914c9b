"""Session anchors for narrative countdowns.

A countdown is measured from an anchor timestamp that is written once, the
first time anyone asks for it, and then stays fixed for the session.
"""

from __future__ import annotations

from typing import Dict, Optional, Protocol

import pandas as pd


class AnchorStore(Protocol):
    """Storage for named anchor timestamps."""

    def get(self, key: str) -> Optional[pd.Timestamp]:
        ...

    def set_if_absent(self, key: str, value: pd.Timestamp) -> pd.Timestamp:
        ...


class InMemoryAnchorStore:
    """AnchorStore kept in a dict; anchors last as long as the process."""

    def __init__(self) -> None:
        self._anchors: Dict[str, pd.Timestamp] = {}

    def get(self, key: str) -> Optional[pd.Timestamp]:
        return self._anchors.get(key)

    def set_if_absent(self, key: str, value: pd.Timestamp) -> pd.Timestamp:
        if key not in self._anchors:
            self._anchors[key] = pd.Timestamp(value)
        return self._anchors[key]


def minutes_phrase(minutes: int) -> str:
    """'1 minute' or 'N minutes'."""
    return "1 minute" if minutes == 1 else f"{minutes} minutes"


def format_minutes(minutes: int) -> str:
    """'1 minute.' or 'N minutes.'"""
    return f"{minutes_phrase(minutes)}."


class Countdown:
    """Time remaining until ``anchor + duration``."""

    def __init__(self, store: AnchorStore, key: str, duration: pd.Timedelta):
        if pd.Timedelta(duration) <= pd.Timedelta(0):
            raise ValueError(f"Countdown duration must be positive, got {duration}")
        self.store = store
        self.key = key
        self.duration = pd.Timedelta(duration)

    def anchor(self, now: pd.Timestamp) -> pd.Timestamp:
        """The anchor for this countdown, initialised to ``now`` on first use."""
        return self.store.set_if_absent(self.key, now)

    def remaining(self, now: pd.Timestamp) -> pd.Timedelta:
        """Time left, never negative."""
        now = pd.Timestamp(now)
        left = self.anchor(now) + self.duration - now
        return max(left, pd.Timedelta(0))

    def remaining_minutes(self, now: pd.Timestamp) -> int:
        """Whole minutes left, truncated."""
        return int(self.remaining(now).total_seconds()) // 60

    def expired(self, now: pd.Timestamp) -> bool:
        return self.remaining(now) == pd.Timedelta(0)

    def phrase(self, now: pd.Timestamp) -> str:
        return minutes_phrase(self.remaining_minutes(now))

    def text(self, now: pd.Timestamp) -> str:
        return format_minutes(self.remaining_minutes(now))

    def clock_text(self, now: pd.Timestamp) -> str:
        """Remaining time as MM:SS, "00:00" once expired."""
        seconds = int(self.remaining(now).total_seconds())
        return f"{seconds // 60:02d}:{seconds % 60:02d}"
