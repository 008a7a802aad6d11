import pytest

from landmarkdrive import renderer as renderer_module
from landmarkdrive.config import Landmark, TraversalConfig
from landmarkdrive.controller import TraversalState
from landmarkdrive.renderer import TraversalRenderer

ROUTE = ((0.0, 0.0), (0.0, 0.01), (0.0, 0.02))


@pytest.fixture
def config(tmp_path):
    return TraversalConfig(
        route=ROUTE,
        frame_rate=10,
        width=200,
        height=150,
        pause_at_end=0.2,
        summary_display_seconds=0.2,
        notification_ttl_ms=100,
        output_path=tmp_path / "out.mp4",
    )


def test_frames_cover_drive_pause_and_summary(config):
    renderer = TraversalRenderer(config, ROUTE, [Landmark("Cafe", (0.0, 0.01))])

    frames = list(renderer.frames())

    assert len(frames) == 3 + 2 + 2
    assert frames[0].shape == (150, 200, 3)
    assert renderer.controller.state is TraversalState.COMPLETED
    assert renderer.controller.visited == {"Cafe"}
    assert len(renderer.surface.markers("landmark")) == 1
    assert "Landmarks crossed: 1 of 1" in renderer.summary_text()


def test_all_landmarks_visible_before_crossing(config):
    landmarks = [Landmark("Cafe", (0.0, 0.01)), Landmark("Far Hill", (0.3, 0.3))]
    renderer = TraversalRenderer(config, ROUTE, landmarks)

    xs, ys = renderer.landmark_layer.get_data()
    assert list(zip(xs, ys)) == [(0.0, 0.01), (0.3, 0.3)]
    assert [label.get_text() for label in renderer.landmark_labels] == ["Cafe", "Far Hill"]
    assert renderer.surface.markers("landmark") == []

    list(renderer.frames())

    # the static layer is untouched; only the crossed landmark gets a surface marker
    assert len(renderer.landmark_layer.get_xdata()) == 2
    assert len(renderer.surface.markers("landmark")) == 1


def test_no_landmark_layer_without_landmarks(config):
    renderer = TraversalRenderer(config, ROUTE, [])
    assert renderer.landmark_layer is None
    assert renderer.landmark_labels == []


def test_notifications_follow_frame_clock(config):
    renderer = TraversalRenderer(config, ROUTE, [Landmark("Cafe", (0.0, 0.0))])
    frames = renderer.frames()

    next(frames)  # crossing pushed at 0 ms
    assert [entry.text for entry in renderer.notifications.list()] == ["You have crossed the landmark: Cafe"]
    next(frames)  # frame clock at 100 ms, the 100 ms TTL has elapsed
    assert renderer.notifications.list() == []


class FakeWriter:
    def __init__(self):
        self.frames = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def append_data(self, image):
        self.frames.append(image)


def test_render_writes_every_frame(config, monkeypatch):
    writer = FakeWriter()
    calls = {}

    def fake_get_writer(path, **kwargs):
        calls["path"] = path
        calls.update(kwargs)
        return writer

    monkeypatch.setattr(renderer_module.imageio, "get_writer", fake_get_writer)

    output = TraversalRenderer(config, ROUTE, []).render()

    assert output == config.output_path
    assert calls["fps"] == 10
    assert len(writer.frames) == 7
