import math

import pytest

from circlematrix.controller.animation import RotationAnimationDriver, ease_in_out_cubic
from circlematrix.controller.scheduler import ManualFrameScheduler


class Rig:
    def __init__(self, clock, speed=1.0, rotation=0.0):
        self.scheduler = ManualFrameScheduler()
        self.rotation = rotation
        self.speed = speed
        self.finished = 0
        self.driver = RotationAnimationDriver(
            scheduler=self.scheduler,
            read_rotation=lambda: self.rotation,
            read_speed=lambda: self.speed,
            on_frame=self._on_frame,
            on_finished=self._on_finished,
            clock=clock,
        )

    def _on_frame(self, angle):
        self.rotation = angle

    def _on_finished(self):
        self.finished += 1


def test_ease_in_out_cubic():
    assert ease_in_out_cubic(0.0) == 0.0
    assert ease_in_out_cubic(0.5) == pytest.approx(0.5)
    assert ease_in_out_cubic(1.0) == 1.0
    assert ease_in_out_cubic(0.25) == pytest.approx(0.0625)


def test_full_sweep_adds_two_pi(clock):
    rig = Rig(clock, rotation=0.4)
    rig.driver.toggle()
    clock.advance(4.0)
    rig.scheduler.step()
    assert rig.rotation == pytest.approx(0.4 + 2 * math.pi)
    assert rig.finished == 1
    assert rig.scheduler.pending == 0


@pytest.mark.parametrize("speed, duration", [(0.5, 8.0), (1.0, 4.0), (2.0, 2.0), (4.0, 1.0)])
def test_duration_is_inverse_to_speed(clock, speed, duration):
    rig = Rig(clock, speed=speed)
    rig.driver.toggle()
    assert rig.driver.duration == pytest.approx(duration)

    clock.advance(duration * 0.99)
    rig.scheduler.step()
    assert rig.driver.is_animating

    clock.advance(duration * 0.02)
    rig.scheduler.step()
    assert not rig.driver.is_animating


def test_cancel_keeps_interpolated_rotation(clock):
    rig = Rig(clock)
    rig.driver.toggle()
    clock.advance(1.0)
    rig.scheduler.step()
    assert rig.rotation == pytest.approx(0.0625 * 2 * math.pi)

    assert rig.driver.toggle() is False
    assert rig.scheduler.pending == 0
    clock.advance(10.0)
    rig.scheduler.run_until_idle()
    assert rig.rotation == pytest.approx(0.0625 * 2 * math.pi)
    assert rig.finished == 0


def test_restart_sweeps_from_current_rotation(clock):
    rig = Rig(clock)
    rig.driver.toggle()
    clock.advance(2.0)
    rig.scheduler.step()
    rig.driver.cancel()
    midway = rig.rotation

    rig.driver.toggle()
    assert rig.driver.start_rotation == pytest.approx(midway)
    assert rig.driver.target_rotation == pytest.approx(midway + 2 * math.pi)


def test_progress_follows_clock_not_frames(clock):
    rig = Rig(clock)
    rig.driver.toggle()
    for _ in range(100):
        rig.scheduler.step()
    assert rig.rotation == 0.0
    assert rig.driver.is_animating


def test_failing_frame_stops_the_sweep(clock):
    rig = Rig(clock)
    rig.driver.toggle()

    def broken(angle):
        raise RuntimeError("frame failed")

    rig.driver.on_frame = broken
    clock.advance(1.0)
    with pytest.raises(RuntimeError):
        rig.scheduler.step()
    assert not rig.driver.is_animating
    assert rig.scheduler.pending == 0
    assert rig.finished == 1

    rig.driver.on_frame = rig._on_frame
    assert rig.driver.toggle() is True
