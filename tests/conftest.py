import math

import pytest

from peekguard.alerts.scheduler import Scheduler
from peekguard.tracking.face import FaceObservation

LEFT_EYE_CENTER = (30.0, 50.0)
RIGHT_EYE_CENTER = (70.0, 50.0)

# Binary-exact step so scheduled deadlines are hit exactly
TICK = 0.25


def _eye(center, width):
    """Horizontal eye outline with the given corner distance and centroid."""
    cx, cy = center
    return (
        (cx - width / 2, cy),
        (cx - width / 4, cy),
        (cx + width / 4, cy),
        (cx + width / 2, cy),
    )


def _square(area, origin=(0.0, 0.0)):
    side = math.sqrt(area)
    x, y = origin
    return ((x, y), (x + side, y), (x + side, y + side), (x, y + side))


def _make_face(confidence=0.9, roll_deg=0.0, yaw_deg=0.0,
               left_width=10.0, right_width=10.0,
               left_pupil_dx=0.0, right_pupil_dx=0.0, pupil_dy=0.0,
               area=400.0):
    """Frontal face by default: equal eyes, pupils on the eye centroids."""
    lx, ly = LEFT_EYE_CENTER
    rx, ry = RIGHT_EYE_CENTER
    return FaceObservation(
        confidence=confidence,
        roll=math.radians(roll_deg),
        yaw=math.radians(yaw_deg),
        left_eye=_eye(LEFT_EYE_CENTER, left_width),
        right_eye=_eye(RIGHT_EYE_CENTER, right_width),
        left_pupil=((lx + left_pupil_dx, ly + pupil_dy),),
        right_pupil=((rx + right_pupil_dx, ry + pupil_dy),),
        all_points=_square(area),
    )


@pytest.fixture
def make_face():
    return _make_face


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return Scheduler(clock=clock)


@pytest.fixture
def advance(clock, scheduler):
    """Move the fake clock forward in TICK steps, firing due timers."""
    def _advance(seconds: float):
        for _ in range(round(seconds / TICK)):
            clock.now += TICK
            scheduler.run_due()
    return _advance
