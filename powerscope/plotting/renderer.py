"""Painting of panel scenes onto matplotlib axes.

Draws the full-resolution line, the decimated markers, threshold rules,
the NOW marker and the lollipop readout described by a PanelScene.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import matplotlib.dates as mdates

from .chart_panel import DIMMED_COLOR, PanelScene

if TYPE_CHECKING:
    import matplotlib.axes


class PanelRenderer:
    """Paints PanelScenes and keeps track of the readout artist per axes."""

    def __init__(self, display_tz: Any = None, show_grid: bool = True):
        """Initialize the renderer.

        Args:
            display_tz: Timezone for time axis formatting
            show_grid: Whether to draw grid lines at the axis ticks
        """
        self.display_tz = display_tz
        self.show_grid = show_grid

        # Readout annotation per axes, used for hit-testing taps on the label
        self.readouts: Dict[Any, Any] = {}
        self._paint_count = 0

    def paint(self, ax: matplotlib.axes.Axes, scene: PanelScene, show_x_labels: bool = True) -> None:
        """Clear ``ax`` and draw ``scene`` on it.

        Args:
            ax: Matplotlib axes
            scene: Scene built by a ChartPanel
            show_x_labels: Whether tick labels are drawn (off for stacked upper panels)
        """
        ax.clear()
        self.readouts.pop(ax, None)
        alpha = scene.opacity
        line_color = DIMMED_COLOR if scene.dimmed else scene.color

        ax.set_title(scene.title, loc="left", fontsize=10, fontweight="bold")
        if scene.caption:
            ax.set_title(scene.caption, loc="right", fontsize=8, color="gray")
        ax.set_ylabel(scene.unit)

        if scene.x_limits is not None and scene.x_limits[0] < scene.x_limits[1]:
            ax.set_xlim(scene.x_limits[0], scene.x_limits[1])
        ax.set_ylim(*scene.y_limits)

        if scene.line_times:
            ax.plot(
                scene.line_times,
                scene.line_values,
                color=line_color,
                linewidth=2,
                alpha=alpha,
                label=scene.title,
            )
        if scene.marker_times:
            ax.plot(
                scene.marker_times,
                scene.marker_values,
                linestyle="none",
                marker=scene.marker,
                markersize=4,
                color=line_color,
                alpha=alpha,
                label="_markers",
            )

        for rule in scene.thresholds:
            ax.axhline(
                rule.value,
                color=rule.style.color,
                linestyle=rule.style.linestyle,
                linewidth=rule.style.linewidth,
                alpha=alpha,
            )
            ax.annotate(
                rule.label,
                xy=(0.01, rule.value),
                xycoords=("axes fraction", "data"),
                xytext=(0, 2),
                textcoords="offset points",
                color=rule.style.color,
                fontsize=8,
                ha="left",
                va="bottom",
                alpha=alpha,
            )

        if scene.now is not None:
            ax.axvline(scene.now, color="red", linewidth=2, zorder=90)
            ax.annotate(
                "NOW",
                xy=(scene.now, 1.0),
                xycoords=("data", "axes fraction"),
                xytext=(0, -4),
                textcoords="offset points",
                ha="center",
                va="top",
                fontsize=7,
                fontweight="bold",
                color="red",
                bbox=dict(boxstyle="round,pad=0.3", facecolor="white", edgecolor="none", alpha=0.8),
                zorder=91,
            )

        # Time axis ticks follow the zoom level's spacing
        if scene.x_ticks:
            ax.set_xticks(scene.x_ticks)
        ax.xaxis.set_major_formatter(mdates.DateFormatter("%I:%M %p", tz=self.display_tz))
        ax.tick_params(axis="x", labelbottom=show_x_labels, labelsize=8)
        ax.tick_params(axis="y", labelsize=8)
        if self.show_grid:
            ax.grid(True, axis="x", linestyle=":", alpha=0.6)

        if scene.lollipop is not None:
            self._paint_lollipop(ax, scene)

        self._paint_count += 1
        if self._paint_count % 50 == 1:
            print(
                f"[Render] '{scene.key}': {len(scene.line_times)} line points, "
                f"{len(scene.marker_times)} markers, opacity={alpha:.2f}"
            )

    def _paint_lollipop(self, ax: matplotlib.axes.Axes, scene: PanelScene) -> None:
        lollipop = scene.lollipop
        point = lollipop.point
        alpha = scene.opacity

        ax.axvline(
            point.time,
            color=lollipop.color,
            linestyle=(0, (4, 2)),
            linewidth=2,
            alpha=0.7 * alpha,
            zorder=100,
        )
        ax.scatter(
            [point.time],
            [point.value],
            color=lollipop.color,
            marker=scene.marker,
            s=80,
            zorder=101,
            edgecolors="white",
            linewidths=1.5,
            alpha=alpha,
        )

        bbox_props = dict(
            boxstyle="round,pad=0.5",
            facecolor="white",
            edgecolor=lollipop.color,
            alpha=0.95 * alpha,
            linewidth=1,
        )
        self.readouts[ax] = ax.annotate(
            lollipop.text,
            xy=(point.time, point.value),
            xytext=(lollipop.box_x, lollipop.box_y),
            textcoords="axes fraction",
            fontsize=8,
            ha="center",
            va="center",
            bbox=bbox_props,
            alpha=alpha,
            zorder=102,
        )

    def readout_for(self, ax: Any) -> Optional[Any]:
        """Return the readout annotation drawn on ``ax``, if any."""
        return self.readouts.get(ax)
