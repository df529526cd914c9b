from __future__ import annotations

import os
import time
from enum import Enum
from tkinter import filedialog, messagebox, ttk
from typing import Dict, List, Optional

import pandas as pd
import matplotlib

matplotlib.use("TkAgg")
import matplotlib.pyplot as plt
from dateutil import tz
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg
import tkinter as tk

from .anchors import Countdown, InMemoryAnchorStore
from .config import (
    NOW_TICK_SECONDS,
    OVERLOAD_ANCHOR_KEY,
    OVERLOAD_DURATION_MINUTES,
    SYSTEM_TITLES,
    SYSTEMS,
    TIMELINE_EVENTS,
    Settings,
    load_settings,
)
from .errors import ConfigurationError
from .plotting import GestureBinding, PanelRenderer, format_clock
from .sampler import ZoomRange
from .series_generator import SeriesGenerator
from .ui.controls import ChannelPanel, ZoomPanel
from .view import MultiChartView

# Frame interval while a fade runs or a press is held (milliseconds)
ANIMATION_FRAME_MS = 33


class DashboardTab(Enum):
    SCHEMATIC = "Schematic"
    DATA = "Data"
    LOG = "Log"


class PowerScopeApp(tk.Tk):
    def __init__(self, settings: Optional[Settings] = None):
        super().__init__()
        self.settings = settings or load_settings()
        self.title("PowerScope - Anomaly Dashboard")

        self.update_idletasks()
        screen_width = self.winfo_screenwidth()
        screen_height = self.winfo_screenheight()

        # ~80% of screen, capped at reasonable maximums
        window_width = min(int(screen_width * 0.8), 1600)
        window_height = min(int(screen_height * 0.85), 1000)
        position_x = (screen_width - window_width) // 2
        position_y = (screen_height - window_height) // 2
        self.geometry(f"{window_width}x{window_height}+{position_x}+{position_y}")
        self.minsize(800, 600)

        print(f"[App] Screen: {screen_width}x{screen_height}px, window: {window_width}x{window_height}px")

        self.rowconfigure(0, weight=1)
        self.columnconfigure(0, weight=1)

        # Time display timezone (12-hour local clock)
        self.display_tz = tz.gettz(self.settings.display_tz_name)
        if self.display_tz is None:
            print(f"[App] Unknown timezone '{self.settings.display_tz_name}', falling back to UTC")
            self.display_tz = tz.UTC

        self.generator = SeriesGenerator(seed=self.settings.seed)
        self.anchors = InMemoryAnchorStore()
        self.countdown = Countdown(
            self.anchors,
            OVERLOAD_ANCHOR_KEY,
            pd.Timedelta(minutes=OVERLOAD_DURATION_MINUTES),
        )
        self.countdown.anchor(self.now())

        self.view: Optional[MultiChartView] = None
        self.axes_to_key: Dict[object, str] = {}
        self._tick_job: Optional[str] = None
        self._frame_job: Optional[str] = None

        # === Tabs ===
        self.notebook = ttk.Notebook(self)
        self.notebook.grid(row=0, column=0, sticky="nsew")
        self.tab_frames: Dict[DashboardTab, ttk.Frame] = {}
        for tab in DashboardTab:
            frame = ttk.Frame(self.notebook)
            self.notebook.add(frame, text=tab.value)
            self.tab_frames[tab] = frame

        self._build_schematic_tab(self.tab_frames[DashboardTab.SCHEMATIC])
        self._build_data_tab(self.tab_frames[DashboardTab.DATA])
        self._build_log_tab(self.tab_frames[DashboardTab.LOG])
        self.notebook.bind("<<NotebookTabChanged>>", self._on_tab_changed)

        self.load_system(self.settings.system)
        self.show_tab(DashboardTab.DATA)

        self.protocol("WM_DELETE_WINDOW", self.on_close)
        self._tick_job = self.after(int(NOW_TICK_SECONDS * 1000), self._on_tick)

    def now(self) -> pd.Timestamp:
        return pd.Timestamp.now(tz=self.display_tz)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _build_schematic_tab(self, parent: ttk.Frame) -> None:
        parent.columnconfigure(0, weight=1)
        ttk.Label(parent, text="Power Bus 3 Overload", font=("TkDefaultFont", 16, "bold")).grid(
            row=0, column=0, sticky="w", padx=12, pady=(12, 4)
        )
        self.countdown_var = tk.StringVar()
        ttk.Label(parent, textvariable=self.countdown_var, font=("TkFixedFont", 28)).grid(
            row=1, column=0, sticky="w", padx=12, pady=4
        )
        self.hint_var = tk.StringVar()
        ttk.Label(parent, textvariable=self.hint_var, wraplength=600).grid(
            row=2, column=0, sticky="w", padx=12, pady=4
        )

        flow = ttk.LabelFrame(parent, text="Schematic")
        flow.grid(row=3, column=0, sticky="ew", padx=12, pady=12)
        for column, (label, state) in enumerate(
            [("Water Purifier", "FAULT"), ("Bus 2", "DEGRADED"), ("Bus 3", "OVERLOAD RISK"), ("Bus 1", "NOMINAL")]
        ):
            box = ttk.LabelFrame(flow, text=label)
            box.grid(row=0, column=column, padx=8, pady=8, sticky="n")
            ttk.Label(box, text=state).pack(padx=12, pady=8)

    def _build_data_tab(self, parent: ttk.Frame) -> None:
        parent.rowconfigure(1, weight=1)
        parent.columnconfigure(0, weight=1)

        top = ttk.Frame(parent)
        top.grid(row=0, column=0, sticky="ew", padx=8, pady=4)

        systems = ttk.LabelFrame(top, text="System")
        systems.pack(side=tk.LEFT, padx=4, fill=tk.Y)
        self.system_var = tk.StringVar(value=self.settings.system)
        for key, title in SYSTEM_TITLES.items():
            ttk.Radiobutton(
                systems,
                text=title,
                value=key,
                variable=self.system_var,
                command=lambda: self.load_system(self.system_var.get()),
            ).pack(side=tk.LEFT, padx=4, pady=2)

        self.zoom_panel = ZoomPanel(top, ZoomRange.THIRTY_MIN, self.set_zoom)
        self.zoom_panel.pack(side=tk.LEFT, padx=4, fill=tk.Y)

        self.channel_panel = ChannelPanel(top, self.toggle_channel)
        self.channel_panel.pack(side=tk.LEFT, padx=4, fill=tk.Y)

        ttk.Button(top, text="Export PNG", command=lambda: self.export_graph("png")).pack(side=tk.LEFT, padx=5)
        ttk.Button(top, text="Export CSV", command=self.export_data).pack(side=tk.LEFT, padx=5)
        self.status = tk.StringVar(value="")
        ttk.Label(top, textvariable=self.status).pack(side=tk.LEFT, padx=10)

        self.fig = plt.Figure(figsize=(10, 7), dpi=100)
        self.canvas = FigureCanvasTkAgg(self.fig, master=parent)
        self.canvas.get_tk_widget().grid(row=1, column=0, sticky="nsew", padx=8, pady=8)

        self.renderer = PanelRenderer(display_tz=self.display_tz)
        self.gestures: Optional[GestureBinding] = None

    def _build_log_tab(self, parent: ttk.Frame) -> None:
        parent.rowconfigure(0, weight=1)
        parent.columnconfigure(0, weight=1)
        self.log_tree = ttk.Treeview(parent, columns=("time", "message"), show="headings")
        self.log_tree.heading("time", text="Time")
        self.log_tree.heading("message", text="Event")
        self.log_tree.column("time", width=100, stretch=False)
        self.log_tree.column("message", width=700)
        self.log_tree.grid(row=0, column=0, sticky="nsew", padx=8, pady=8)
        self._refresh_log()

    def show_tab(self, tab: DashboardTab) -> None:
        """Bring a dashboard tab to the front."""
        self.notebook.select(self.tab_frames[tab])
        self.refresh_tab(tab)

    def current_tab(self) -> DashboardTab:
        selected = self.notebook.select()
        for tab, frame in self.tab_frames.items():
            if str(frame) == selected:
                return tab
        return DashboardTab.DATA

    def _on_tab_changed(self, event) -> None:
        self.refresh_tab(self.current_tab())

    def refresh_tab(self, tab: DashboardTab) -> None:
        """Update the contents of one tab."""
        if tab is DashboardTab.SCHEMATIC:
            self._refresh_countdown()
        elif tab is DashboardTab.DATA:
            self.redraw()
        elif tab is DashboardTab.LOG:
            self._refresh_log()

    # ------------------------------------------------------------------
    # Charts
    # ------------------------------------------------------------------

    def load_system(self, system: str) -> None:
        """Replace the chart view with the channels of ``system``."""
        channels = SYSTEMS.get(system)
        if channels is None:
            messagebox.showerror("Unknown system", f"No channel preset named '{system}'.")
            return

        if self.view is not None:
            self.view.teardown()
        if self.gestures is not None:
            self.gestures.disconnect()

        try:
            self.view = MultiChartView(
                channels,
                generator=self.generator,
                clock=self.now,
                zoom=self.zoom_panel.zoom,
                refresh_seconds=self.settings.refresh_seconds,
                appear_at=time.monotonic(),
            )
        except ConfigurationError as e:
            messagebox.showerror("Configuration Error", str(e))
            self.view = None
            return

        self.channel_panel.set_channels(channels)
        self.gestures = GestureBinding(self.canvas, self.view.selection, self.renderer, self.display_tz)
        self.gestures.on_change = self._on_gesture

        self._layout_axes()
        self.status.set(f"{SYSTEM_TITLES.get(system, system)}: {len(channels)} channels")
        print(f"[App] Loaded system '{system}' with {len(channels)} channels")
        self._schedule_frames()

    def _layout_axes(self) -> None:
        self.fig.clear()
        keys = self.view.visible_keys if self.view is not None else []
        self.axes_to_key = {}
        if keys:
            axes = self.fig.subplots(len(keys), 1, squeeze=False)[:, 0]
            self.axes_to_key = {ax: key for ax, key in zip(axes, keys)}
            self.fig.subplots_adjust(left=0.08, right=0.97, top=0.95, bottom=0.07, hspace=0.45)
        if self.gestures is not None:
            self.gestures.bind_axes(self.axes_to_key)
        self.redraw()

    def redraw(self) -> None:
        if self.view is None:
            return
        scenes = {scene.key: scene for scene in self.view.scenes(time.monotonic())}
        for ax, key in self.axes_to_key.items():
            scene = scenes.get(key)
            if scene is None:
                continue
            try:
                self.renderer.paint(ax, scene)
            except (ValueError, TypeError) as e:
                print(f"[App] Could not paint '{key}': {e}")
                ax.clear()
        self.canvas.draw_idle()

    def _on_gesture(self) -> None:
        self.redraw()
        self._schedule_frames()

    def set_zoom(self, zoom: ZoomRange) -> None:
        if self.view is None:
            return
        if self.view.set_zoom(zoom, time.monotonic()):
            self.redraw()
            self._schedule_frames()

    def toggle_channel(self, key: str) -> bool:
        if self.view is None:
            return False
        visible_before = list(self.view.visible_keys)
        visible = self.view.toggle_channel(key)
        if self.view.visible_keys != visible_before:
            self._layout_axes()
        else:
            self.status.set("At least one channel must stay visible")
        return visible

    def export_graph(self, fmt: str) -> None:
        filetypes = [(f"{fmt.upper()} files", f"*.{fmt}"), ("All files", "*.*")]
        path = filedialog.asksaveasfilename(defaultextension=f".{fmt}", filetypes=filetypes)
        if not path:
            return
        try:
            self.fig.savefig(path, format=fmt, bbox_inches="tight")
            messagebox.showinfo("Export successful", f"Charts exported as {os.path.basename(path)}")
        except (OSError, ValueError) as e:
            messagebox.showerror("Export error", str(e))

    def export_data(self) -> None:
        """Save the visible channels' series as CSV."""
        if self.view is None:
            return
        filetypes = [("CSV files", "*.csv"), ("All files", "*.*")]
        path = filedialog.asksaveasfilename(defaultextension=".csv", filetypes=filetypes)
        if not path:
            return
        try:
            self.view.to_frame().to_csv(path, index=False)
            messagebox.showinfo("Export successful", f"Data exported as {os.path.basename(path)}")
        except OSError as e:
            messagebox.showerror("Export error", str(e))

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _on_tick(self) -> None:
        """Once per second: advance NOW, refresh data when due, update text."""
        self._tick_job = None
        if self.view is not None:
            self.view.tick(self.now())
            self.redraw()
        self._refresh_countdown()
        self._tick_job = self.after(int(NOW_TICK_SECONDS * 1000), self._on_tick)

    def _schedule_frames(self) -> None:
        if self._frame_job is None:
            self._frame_job = self.after(ANIMATION_FRAME_MS, self._on_frame)

    def _on_frame(self) -> None:
        """Animation frame: fade opacity and long-press recognition."""
        self._frame_job = None
        if self.view is None:
            return
        if self.gestures is not None:
            self.gestures.poll()

        at = time.monotonic()
        fading = self.view.is_transitioning(at)
        if fading:
            self.redraw()
        if fading or self.view.selection.is_holding():
            self._frame_job = self.after(ANIMATION_FRAME_MS, self._on_frame)
        else:
            # One last paint at full opacity
            self.redraw()

    def _refresh_countdown(self) -> None:
        now = self.now()
        self.countdown_var.set(self.countdown.clock_text(now))
        self.hint_var.set(
            f"{self.countdown.phrase(now)} until Bus-3 overload, followed by loss of power supply "
            "to components and attitude control."
        )

    def _refresh_log(self) -> None:
        now = self.now()
        self.log_tree.delete(*self.log_tree.get_children())
        rows: List[tuple] = []
        for minutes_ago, message in TIMELINE_EVENTS:
            label = "Now" if minutes_ago is None else format_clock(now - pd.Timedelta(minutes=minutes_ago))
            rows.append((label, message))
        for row in rows:
            self.log_tree.insert("", tk.END, values=row)

    def on_close(self) -> None:
        if self._tick_job is not None:
            self.after_cancel(self._tick_job)
            self._tick_job = None
        if self._frame_job is not None:
            self.after_cancel(self._frame_job)
            self._frame_job = None
        if self.view is not None:
            self.view.teardown()
        if self.gestures is not None:
            self.gestures.disconnect()
        self.destroy()


def main() -> None:
    app = PowerScopeApp()
    app.mainloop()


if __name__ == "__main__":
    main()
