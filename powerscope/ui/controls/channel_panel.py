"""Channel visibility control panel.

One checkbutton per channel of the active system. The view refuses to hide
the last visible channel; the checkbutton is set back when that happens.
"""

from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Callable, Dict, Sequence

from ...channels import ChannelConfig


class ChannelPanel:
    """Panel of channel toggles."""

    def __init__(self, parent: ttk.Frame, on_toggle: Callable[[str], bool]):
        """Initialize the channel panel.

        Args:
            parent: Parent frame to place this panel in
            on_toggle: Called with a channel key; returns the channel's
                visibility after the toggle
        """
        self.on_toggle = on_toggle
        self.frame = ttk.LabelFrame(parent, text="Channels")
        self.vars: Dict[str, tk.BooleanVar] = {}
        self._buttons = []

    def set_channels(self, channels: Sequence[ChannelConfig]) -> None:
        """Rebuild the toggles for a new channel list (all visible)."""
        for button in self._buttons:
            button.destroy()
        self._buttons = []
        self.vars = {}

        for row, config in enumerate(channels):
            var = tk.BooleanVar(value=True)
            button = ttk.Checkbutton(
                self.frame,
                text=config.title,
                variable=var,
                command=lambda key=config.key: self._on_click(key),
            )
            button.grid(row=row, column=0, sticky="w", padx=4, pady=2)
            self.vars[config.key] = var
            self._buttons.append(button)

    def _on_click(self, key: str) -> None:
        visible = self.on_toggle(key)
        # Reflect the view's decision (it may refuse to hide the last channel)
        self.vars[key].set(visible)

    def pack(self, **kwargs) -> None:
        """Pack the frame with given options."""
        self.frame.pack(**kwargs)

    def grid(self, **kwargs) -> None:
        """Grid the frame with given options."""
        self.frame.grid(**kwargs)
