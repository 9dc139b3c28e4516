"""Inputs to the alert state machine.

PeepingCountChanged comes from the tracking thread; the rest are user
commands from the control panel.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PeepingCountChanged:
    count: int
    faces: tuple = field(default_factory=tuple)


@dataclass(frozen=True)
class ToggleFlashingMode:
    pass


@dataclass(frozen=True)
class ToggleTracking:
    pass


@dataclass(frozen=True)
class Preview:
    pass


@dataclass(frozen=True)
class CameraAccessRejected:
    reason: str = ""


@dataclass(frozen=True)
class Quit:
    pass
