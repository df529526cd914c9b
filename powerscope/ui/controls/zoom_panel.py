"""Zoom range control panel.

Radio buttons for the 30m / 1h / 2h / 3h windows.
"""

from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Callable

from ...sampler import ZoomRange


class ZoomPanel:
    """Panel with one radio button per zoom range."""

    def __init__(self, parent: ttk.Frame, initial: ZoomRange, on_change: Callable[[ZoomRange], None]):
        """Initialize the zoom panel.

        Args:
            parent: Parent frame to place this panel in
            initial: Zoom range selected at start
            on_change: Called with the new ZoomRange when the user picks one
        """
        self.on_change = on_change
        self.frame = ttk.LabelFrame(parent, text="Zoom")

        self.zoom_var = tk.StringVar(value=initial.label)
        for column, zoom in enumerate(ZoomRange):
            ttk.Radiobutton(
                self.frame,
                text=zoom.label,
                value=zoom.label,
                variable=self.zoom_var,
                command=self._on_select,
            ).grid(row=0, column=column, sticky="w", padx=4, pady=2)

    @property
    def zoom(self) -> ZoomRange:
        return ZoomRange.from_label(self.zoom_var.get())

    def _on_select(self) -> None:
        self.on_change(self.zoom)

    def pack(self, **kwargs) -> None:
        """Pack the frame with given options."""
        self.frame.pack(**kwargs)

    def grid(self, **kwargs) -> None:
        """Grid the frame with given options."""
        self.frame.grid(**kwargs)
