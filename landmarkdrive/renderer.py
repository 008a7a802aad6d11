"""Rendering a simulated drive to a video, one animation step per frame."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

import imageio.v2 as imageio
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from .animator import ManualFrameScheduler, Route
from .config import Landmark, TraversalConfig
from .controller import TraversalController, TraversalState
from .geometry import bounds, cumulative_distances
from .icons import load_vehicle_icon
from .notifications import Notification, NotificationQueue
from .proximity import ProximityDetector
from .surface import MatplotlibSurface

log = logging.getLogger("landmarkdrive.renderer")


class TraversalRenderer:
    """Run a traversal against a matplotlib surface and export every frame.

    The video frame loop is the host display: each frame ticks the frame
    scheduler once, so the vehicle advances one route point per frame. The
    notification queue runs on the frame clock rather than wall time.
    """

    def __init__(self, config: TraversalConfig, route: Route, landmarks: Sequence[Landmark]) -> None:
        self.config = config
        self.route = route
        self.landmarks = list(landmarks)
        self._now_ms = 0.0
        self._setup_canvas()

        self.scheduler = ManualFrameScheduler()
        self.notifications = NotificationQueue(clock=lambda: self._now_ms)
        self.controller = TraversalController(
            self.scheduler,
            surface=self.surface,
            notifications=self.notifications,
            detector=ProximityDetector(config.proximity_threshold),
            crossing_ttl_ms=config.notification_ttl_ms,
            completion_ttl_ms=config.completion_ttl_ms,
        )

    # ------------------------------------------------------------------
    # Canvas
    # ------------------------------------------------------------------

    def _setup_canvas(self) -> None:
        dpi = 100
        figsize = (self.config.width / dpi, self.config.height / dpi)
        self._fig, self._ax = plt.subplots(figsize=figsize, dpi=dpi)
        self._fig.patch.set_facecolor("#06142a")
        self._ax.set_facecolor("#0a1f3f")
        self._ax.set_xticks([])
        self._ax.set_yticks([])

        points = list(self.route) + [landmark.coordinates for landmark in self.landmarks]
        lon_min, lat_min, lon_max, lat_max = bounds(points, self.config.margin_degrees)
        self._ax.set_xlim(lon_min, lon_max)
        self._ax.set_ylim(lat_min, lat_max)
        self._ax.set_aspect("equal", adjustable="datalim")

        if self.config.title:
            self._ax.set_title(self.config.title, color="white", fontsize=16, pad=16)

        zoom = max(self.config.width, self.config.height) / 4000.0
        self.surface = MatplotlibSurface(self._ax, load_vehicle_icon(self.config.vehicle), icon_zoom=zoom)
        self._draw_landmark_layer()

        self._notification_text = self._ax.text(
            0.98,
            0.98,
            "",
            transform=self._ax.transAxes,
            color="#ffffff",
            fontsize=11,
            ha="right",
            va="top",
            bbox=dict(facecolor="#000000", alpha=0.7, boxstyle="round,pad=0.5"),
            visible=False,
            zorder=10,
        )
        self._summary_text = self._ax.text(
            0.02,
            0.02,
            "",
            transform=self._ax.transAxes,
            color="#ffffff",
            fontsize=10,
            ha="left",
            va="bottom",
            bbox=dict(facecolor="#000000", alpha=0.7, boxstyle="round,pad=0.5"),
            visible=False,
            zorder=10,
        )
        self._fig.tight_layout()

    def _draw_landmark_layer(self) -> None:
        # static backdrop of every landmark; crossed ones get their own surface marker on top
        self.landmark_labels = []
        if not self.landmarks:
            self.landmark_layer = None
            return
        lons = [landmark.coordinates[0] for landmark in self.landmarks]
        lats = [landmark.coordinates[1] for landmark in self.landmarks]
        self.landmark_layer, = self._ax.plot(
            lons, lats, marker="v", markersize=7, color="#e4572e", alpha=0.35, linestyle="none", zorder=3
        )
        for landmark in self.landmarks:
            self.landmark_labels.append(
                self._ax.annotate(
                    landmark.name,
                    xy=landmark.coordinates,
                    xytext=(0, -12),
                    textcoords="offset points",
                    ha="center",
                    va="top",
                    fontsize=7,
                    color="#d5e5ff",
                    alpha=0.6,
                    zorder=3,
                )
            )

    def summary_text(self) -> str:
        lines = ["Trip Summary"]
        lines.append(f"Route length: {cumulative_distances(self.route)[-1]:.1f} km over {len(self.route)} points")
        crossed = self.controller.crossings
        lines.append(f"Landmarks crossed: {len(crossed)} of {len(self.landmarks)}")
        for index, landmark in enumerate(crossed, start=1):
            lines.append(f"{index}. {landmark.name}")
        return "\n".join(lines)

    def _draw_notifications(self, notifications: List[Notification]) -> None:
        if notifications:
            self._notification_text.set_text("\n".join(entry.text for entry in notifications))
            self._notification_text.set_visible(True)
        else:
            self._notification_text.set_visible(False)

    def _capture(self) -> np.ndarray:
        self._fig.canvas.draw()
        image = np.asarray(self._fig.canvas.buffer_rgba())
        return image[:, :, :3].copy()

    # ------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------

    def frames(self) -> Iterator[np.ndarray]:
        """Yield RGB frames for the whole drive, followed by the end pause and summary."""

        fps = self.config.frame_rate
        frame_index = 0

        def advance_clock() -> None:
            self._now_ms = frame_index * 1000.0 / fps
            self.notifications.expire(self._now_ms)

        self.controller.begin_traversal(self.route, self.landmarks)
        while self.scheduler.pending:
            advance_clock()
            self.scheduler.tick()
            self._draw_notifications(self.notifications.list())
            yield self._capture()
            frame_index += 1

        for _ in range(int(round(max(self.config.pause_at_end, 0.0) * fps))):
            advance_clock()
            self._draw_notifications(self.notifications.list())
            yield self._capture()
            frame_index += 1

        summary_frames = int(round(max(self.config.summary_display_seconds, 0.0) * fps))
        if summary_frames > 0:
            self._summary_text.set_text(self.summary_text())
            self._summary_text.set_visible(True)
        for _ in range(summary_frames):
            advance_clock()
            self._draw_notifications(self.notifications.list())
            yield self._capture()
            frame_index += 1

    def render(self, output_path: Optional[Path] = None) -> Path:
        output_path = Path(output_path or self.config.output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            writer_ctx = imageio.get_writer(
                output_path,
                fps=self.config.frame_rate,
                codec="libx264",
                format="FFMPEG",
                macro_block_size=None,
                quality=8,
            )
        except ImportError as exc:
            raise ImportError(
                "FFMPEG support is required to export videos. Install the "
                "'imageio-ffmpeg' package (for example via 'pip install "
                "imageio-ffmpeg') and try again."
            ) from exc

        count = 0
        try:
            with writer_ctx as writer:
                for image in self.frames():
                    writer.append_data(image)
                    count += 1
        finally:
            plt.close(self._fig)

        if self.controller.state is not TraversalState.COMPLETED:
            log.warning("Traversal ended in state %s", self.controller.state.value)
        log.info("Wrote %d frames to %s", count, output_path)
        return output_path
