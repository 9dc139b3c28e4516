from dataclasses import dataclass


@dataclass(frozen=True)
class FaceObservation:
    """One detected face for a single frame.

    Point sets are tuples of (x, y) in normalized image coordinates with +y
    pointing up. Any set may be None when the detector did not produce it.
    """

    confidence: float = 1.0

    # Head pose in radians
    roll: float = 0.0
    yaw: float = 0.0

    left_eye: tuple | None = None
    right_eye: tuple | None = None
    left_pupil: tuple | None = None
    right_pupil: tuple | None = None

    # Full face outline, used only as a relative size proxy
    all_points: tuple | None = None
