import itertools

import matplotlib

matplotlib.use("Agg")

import pytest

from landmarkdrive.animator import ManualFrameScheduler
from landmarkdrive.config import Landmark


class FakeSurface:
    """In-memory drawing surface that records every call."""

    def __init__(self):
        self.calls = []
        self.lines = {}
        self.markers = {}
        self.popups = {}
        self._handles = itertools.count(1)

    def draw_line(self, line_id, geometry, style):
        assert line_id not in self.lines, f"line {line_id!r} drawn twice"
        self.calls.append(("draw_line", line_id))
        self.lines[line_id] = (tuple(geometry), dict(style))

    def remove_line(self, line_id):
        self.calls.append(("remove_line", line_id))
        del self.lines[line_id]

    def has_line(self, line_id):
        return line_id in self.lines

    def place_marker(self, position, kind="landmark"):
        handle = next(self._handles)
        self.calls.append(("place_marker", kind, position))
        self.markers[handle] = {"kind": kind, "position": position}
        return handle

    def move_marker(self, handle, position):
        self.calls.append(("move_marker", handle, position))
        self.markers[handle]["position"] = position

    def attach_popup(self, handle, html):
        self.calls.append(("attach_popup", handle))
        self.popups[handle] = html

    def remove_marker(self, handle):
        self.calls.append(("remove_marker", handle))
        del self.markers[handle]
        self.popups.pop(handle, None)

    def markers_of(self, kind):
        return [marker for marker in self.markers.values() if marker["kind"] == kind]

    def count(self, name):
        return sum(1 for call in self.calls if call[0] == name)


class ManualClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture
def surface():
    return FakeSurface()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def scheduler():
    return ManualFrameScheduler()


@pytest.fixture
def straight_route():
    # ten points heading north, 0.1 degrees apart
    return [(10.0, 45.0 + 0.1 * i) for i in range(10)]


@pytest.fixture
def landmark_at_five(straight_route):
    return Landmark(name="Old Mill", coordinates=straight_route[5])


def run_to_end(scheduler, limit=10_000):
    frames = 0
    while scheduler.pending:
        scheduler.tick()
        frames += 1
        assert frames < limit, "scheduler never drained"
    return frames


@pytest.fixture
def drain():
    return run_to_end
