"""Drawing surfaces the render synchroniser can drive."""
from __future__ import annotations

import itertools
import re
from dataclasses import dataclass
from html import unescape
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

import numpy as np
from matplotlib.axes import Axes
from matplotlib.offsetbox import AnnotationBbox, OffsetImage

from .geometry import Coordinate, bearing_degrees, planar_distance
from .icons import rotate_icon

MarkerHandle = int

VEHICLE = "vehicle"
LANDMARK = "landmark"


class DrawingSurface(Protocol):
    """The capabilities of a stateful map the engine draws on."""

    def draw_line(self, line_id: str, geometry: Sequence[Coordinate], style: Mapping[str, Any]) -> None:
        ...

    def remove_line(self, line_id: str) -> None:
        ...

    def has_line(self, line_id: str) -> bool:
        ...

    def place_marker(self, position: Coordinate, kind: str = LANDMARK) -> MarkerHandle:
        ...

    def move_marker(self, handle: MarkerHandle, position: Coordinate) -> None:
        ...

    def attach_popup(self, handle: MarkerHandle, html: str) -> None:
        ...

    def remove_marker(self, handle: MarkerHandle) -> None:
        ...


_TAG_RE = re.compile(r"<[^>]+>")

# map-style paint properties to matplotlib keyword arguments
_STYLE_KEYS = {
    "line-color": "color",
    "line-width": "linewidth",
    "line-opacity": "alpha",
}


def html_to_text(markup: str) -> str:
    return unescape(_TAG_RE.sub("", markup)).strip()


@dataclass
class _Marker:
    kind: str
    position: Coordinate
    artist: Any
    image_box: Optional[OffsetImage] = None
    popup: Any = None
    bearing: float = 0.0


class MatplotlibSurface:
    """A :class:`DrawingSurface` backed by a matplotlib ``Axes``.

    Longitude maps to x and latitude to y. Drawing a line whose id is already
    present raises ``ValueError``, as map libraries do for duplicate layer ids.
    """

    def __init__(self, ax: Axes, vehicle_icon: Optional[np.ndarray] = None, icon_zoom: float = 0.5) -> None:
        self._ax = ax
        self._vehicle_icon = vehicle_icon
        self._icon_zoom = icon_zoom
        self._lines: Dict[str, Any] = {}
        self._markers: Dict[MarkerHandle, _Marker] = {}
        self._handles = itertools.count(1)

    @property
    def line_ids(self) -> List[str]:
        return list(self._lines)

    def markers(self, kind: Optional[str] = None) -> List[MarkerHandle]:
        return [handle for handle, marker in self._markers.items() if kind is None or marker.kind == kind]

    def marker_position(self, handle: MarkerHandle) -> Coordinate:
        return self._markers[handle].position

    def popup_text(self, handle: MarkerHandle) -> Optional[str]:
        popup = self._markers[handle].popup
        return popup.get_text() if popup is not None else None

    # ------------------------------------------------------------------
    # Lines
    # ------------------------------------------------------------------

    def draw_line(self, line_id: str, geometry: Sequence[Coordinate], style: Mapping[str, Any]) -> None:
        if line_id in self._lines:
            raise ValueError(f"Line {line_id!r} already exists on this surface")
        kwargs = {"color": "#0074D9", "linewidth": 4, "solid_capstyle": "round", "zorder": 2}
        for key, value in style.items():
            kwargs[_STYLE_KEYS.get(key, key)] = value
        lons = [lon for lon, _ in geometry]
        lats = [lat for _, lat in geometry]
        self._lines[line_id], = self._ax.plot(lons, lats, **kwargs)

    def remove_line(self, line_id: str) -> None:
        try:
            line = self._lines.pop(line_id)
        except KeyError:
            raise ValueError(f"No line {line_id!r} on this surface") from None
        line.remove()

    def has_line(self, line_id: str) -> bool:
        return line_id in self._lines

    # ------------------------------------------------------------------
    # Markers
    # ------------------------------------------------------------------

    def place_marker(self, position: Coordinate, kind: str = LANDMARK) -> MarkerHandle:
        handle = next(self._handles)
        image_box = None
        if kind == VEHICLE and self._vehicle_icon is not None:
            image_box = OffsetImage(self._vehicle_icon, zoom=self._icon_zoom)
            artist = AnnotationBbox(image_box, position, frameon=False, zorder=5)
            self._ax.add_artist(artist)
        elif kind == VEHICLE:
            artist, = self._ax.plot([position[0]], [position[1]], marker="o", markersize=12, color="#1f77b4", linestyle="none", zorder=5)
        else:
            artist, = self._ax.plot([position[0]], [position[1]], marker="v", markersize=10, color="#e4572e", linestyle="none", zorder=4)
        self._markers[handle] = _Marker(kind=kind, position=position, artist=artist, image_box=image_box)
        return handle

    def move_marker(self, handle: MarkerHandle, position: Coordinate) -> None:
        marker = self._markers[handle]
        if marker.image_box is not None and planar_distance(marker.position, position) > 0:
            marker.bearing = bearing_degrees(marker.position, position)
            marker.image_box.set_data(rotate_icon(self._vehicle_icon, marker.bearing))
        marker.position = position
        if isinstance(marker.artist, AnnotationBbox):
            marker.artist.xy = position
        else:
            marker.artist.set_data([position[0]], [position[1]])
        if marker.popup is not None:
            marker.popup.xy = position

    def attach_popup(self, handle: MarkerHandle, html: str) -> None:
        marker = self._markers[handle]
        text = html_to_text(html)
        if marker.popup is not None:
            marker.popup.set_text(text)
            return
        marker.popup = self._ax.annotate(
            text,
            xy=marker.position,
            xytext=(0, 10),
            textcoords="offset points",
            ha="center",
            va="bottom",
            fontsize=9,
            fontweight="bold",
            color="#ffffff",
            bbox=dict(facecolor="#000000", alpha=0.6, boxstyle="round,pad=0.3"),
            zorder=6,
        )

    def remove_marker(self, handle: MarkerHandle) -> None:
        marker = self._markers.pop(handle)
        marker.artist.remove()
        if marker.popup is not None:
            marker.popup.remove()
