import pytest

from landmarkdrive.animator import ManualFrameScheduler, PathAnimator, validate_route
from landmarkdrive.errors import InvalidRouteError


class Recorder:
    def __init__(self):
        self.events = []

    def step(self, position, index):
        self.events.append(("step", index, position))

    def complete(self):
        self.events.append(("complete",))


def test_one_step_per_frame_then_complete(scheduler, drain):
    route = [(0.0, 0.0), (0.0, 0.01), (0.0, 0.02)]
    recorder = Recorder()
    animator = PathAnimator(scheduler)
    animator.start(route, recorder.step, recorder.complete)

    assert recorder.events == []  # nothing before the first frame
    scheduler.tick()
    assert recorder.events == [("step", 0, (0.0, 0.0))]
    scheduler.tick()
    assert len(recorder.events) == 2

    drain(scheduler)
    assert recorder.events == [
        ("step", 0, (0.0, 0.0)),
        ("step", 1, (0.0, 0.01)),
        ("step", 2, (0.0, 0.02)),
        ("complete",),
    ]
    assert animator.running is False
    assert animator.state.current_index == 3


@pytest.mark.parametrize("length", [1, 2, 7, 50])
def test_exactly_n_steps_and_one_completion(scheduler, drain, length):
    route = [(float(i), 0.0) for i in range(length)]
    recorder = Recorder()
    PathAnimator(scheduler).start(route, recorder.step, recorder.complete)

    frames = drain(scheduler)

    assert frames == length
    assert [event[1] for event in recorder.events if event[0] == "step"] == list(range(length))
    assert recorder.events[-1] == ("complete",)
    assert recorder.events.count(("complete",)) == 1


def test_single_point_route_completes_in_same_frame(scheduler):
    recorder = Recorder()
    PathAnimator(scheduler).start([(1.0, 2.0)], recorder.step, recorder.complete)

    scheduler.tick()

    assert recorder.events == [("step", 0, (1.0, 2.0)), ("complete",)]
    assert scheduler.pending == 0


def test_cancel_stops_all_callbacks(scheduler, drain):
    recorder = Recorder()
    animator = PathAnimator(scheduler)
    animator.start([(float(i), 0.0) for i in range(10)], recorder.step, recorder.complete)
    scheduler.tick()
    scheduler.tick()

    animator.cancel()
    drain(scheduler)

    assert [event[1] for event in recorder.events] == [0, 1]
    assert animator.running is False


def test_cancel_is_idempotent(scheduler):
    animator = PathAnimator(scheduler)
    animator.cancel()
    animator.start([(0.0, 0.0)], lambda p, i: None, lambda: None)
    animator.cancel()
    animator.cancel()
    assert scheduler.pending == 0


def test_cancel_from_step_callback_prevents_completion(scheduler, drain):
    animator = PathAnimator(scheduler)
    recorder = Recorder()

    def step(position, index):
        recorder.step(position, index)
        if index == 1:
            animator.cancel()

    animator.start([(0.0, 0.0), (1.0, 0.0), (2.0, 0.0)], step, recorder.complete)
    drain(scheduler)

    assert [event[1] for event in recorder.events] == [0, 1]


def test_start_while_running_is_rejected(scheduler):
    animator = PathAnimator(scheduler)
    animator.start([(0.0, 0.0), (1.0, 0.0)], lambda p, i: None, lambda: None)
    with pytest.raises(RuntimeError):
        animator.start([(0.0, 0.0)], lambda p, i: None, lambda: None)


def test_restart_after_cancel_begins_at_zero(scheduler, drain):
    animator = PathAnimator(scheduler)
    old, new = Recorder(), Recorder()
    animator.start([(float(i), 0.0) for i in range(5)], old.step, old.complete)
    scheduler.tick()
    animator.cancel()
    animator.start([(9.0, 9.0), (8.0, 8.0)], new.step, new.complete)

    drain(scheduler)

    assert len(old.events) == 1
    assert new.events == [("step", 0, (9.0, 9.0)), ("step", 1, (8.0, 8.0)), ("complete",)]


def test_route_is_copied_on_start(scheduler, drain):
    route = [(0.0, 0.0), (1.0, 1.0)]
    recorder = Recorder()
    PathAnimator(scheduler).start(route, recorder.step, recorder.complete)
    route.append((2.0, 2.0))

    drain(scheduler)

    assert len([event for event in recorder.events if event[0] == "step"]) == 2


@pytest.mark.parametrize("route", [[], None, "0,0", [(1.0,)], [("a", "b")], {"type": "LineString"}])
def test_malformed_routes_rejected_at_start(scheduler, route):
    animator = PathAnimator(scheduler)
    with pytest.raises(InvalidRouteError):
        animator.start(route, lambda p, i: None, lambda: None)
    assert animator.state is None
    assert scheduler.pending == 0


def test_validate_route_returns_float_tuples():
    assert validate_route([[1, 2], (3, 4, 100)]) == ((1.0, 2.0), (3.0, 4.0))


def test_manual_scheduler_defers_requests_made_during_tick():
    scheduler = ManualFrameScheduler()
    seen = []

    def first():
        seen.append("first")
        scheduler.request_frame(lambda: seen.append("second"))

    scheduler.request_frame(first)
    assert scheduler.tick() == 1
    assert seen == ["first"]
    assert scheduler.tick() == 1
    assert seen == ["first", "second"]
    assert scheduler.frame == 2


def test_manual_scheduler_skips_frames_cancelled_mid_tick():
    scheduler = ManualFrameScheduler()
    seen = []
    handles = {}

    handles["a"] = scheduler.request_frame(lambda: scheduler.cancel_frame(handles["b"]))
    handles["b"] = scheduler.request_frame(lambda: seen.append("b"))

    assert scheduler.tick() == 1
    assert seen == []
