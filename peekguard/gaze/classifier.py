"""Per-face "is this person looking at the screen" decision.

Three noisy signals are combined, and any one of them can veto:

    1. head pose angles reported by the detector (roll, yaw)
    2. eye width asymmetry, a yaw proxy from eye foreshortening
    3. horizontal pupil displacement inside the wider-appearing eye

Malformed or partial observations never count as looking.
"""

import logging
import math
from enum import Enum

from peekguard.config import GazeConfig
from peekguard.tracking.face import FaceObservation
from peekguard.utils.geometry import EyeMetrics, point_range

log = logging.getLogger("peekguard")


class Quadrant(Enum):
    TOP_LEFT = "top_left"
    TOP_RIGHT = "top_right"
    BOTTOM_RIGHT = "bottom_right"
    BOTTOM_LEFT = "bottom_left"


_RIGHT_QUADRANTS = (Quadrant.TOP_RIGHT, Quadrant.BOTTOM_RIGHT)
_LEFT_QUADRANTS = (Quadrant.TOP_LEFT, Quadrant.BOTTOM_LEFT)


def pupil_quadrant(center: tuple, pupil: tuple) -> Quadrant:
    """Quadrant of the eye box the pupil sits in, relative to the eye centroid.

    Left/right is reliable. Top/bottom is only approximate; thresholds
    downstream are tuned against it as it is.
    """
    top = pupil[1] > center[1]
    if pupil[0] < center[0]:
        return Quadrant.TOP_LEFT if top else Quadrant.BOTTOM_LEFT
    return Quadrant.TOP_RIGHT if top else Quadrant.BOTTOM_RIGHT


def _rounded_degrees(radians: float) -> int:
    """Degrees rounded half away from zero, as a magnitude."""
    return math.floor(abs(math.degrees(radians)) + 0.5)


def eye_metrics(face: FaceObservation) -> tuple[EyeMetrics, EyeMetrics] | None:
    left = point_range(face.left_eye)
    right = point_range(face.right_eye)
    if left is None or right is None:
        return None
    return left, right


class GazeClassifier:
    """Decides whether a single face is plausibly looking at the screen."""

    def __init__(self, config: GazeConfig | None = None):
        self._cfg = config or GazeConfig()

    def is_looking_at_screen(self, face: FaceObservation) -> bool:
        cfg = self._cfg

        # Written so a NaN confidence fails too
        if not face.confidence >= cfg.min_confidence:
            return False

        if not (math.isfinite(face.roll) and math.isfinite(face.yaw)):
            log.debug("Face rejected: non-finite pose angles")
            return False

        # Coarse pose gate: roughly one 30 deg roll step, one 45 deg yaw step
        if (_rounded_degrees(face.roll) >= cfg.max_roll_deg
                or _rounded_degrees(face.yaw) >= cfg.max_yaw_deg):
            return False

        if not (face.left_eye and face.right_eye
                and face.left_pupil and face.right_pupil):
            log.debug("Face rejected: incomplete eye landmarks")
            return False

        metrics = eye_metrics(face)
        if metrics is None:
            log.debug("Face rejected: unusable eye outlines")
            return False
        left, right = metrics

        total_width = left.width + right.width
        if total_width <= 0:
            log.debug("Face rejected: degenerate eye outlines")
            return False

        eye_width_diff_pct = abs(left.width - right.width) / total_width * 100
        has_high_offset = eye_width_diff_pct >= cfg.high_offset_pct

        # The wider-appearing eye is the one facing the camera
        looking_right = left.width > right.width
        eye = left if looking_right else right
        pupil = face.left_pupil[0] if looking_right else face.right_pupil[0]

        if eye.width <= 0 or not all(math.isfinite(v) for v in pupil[:2]):
            return False

        pupil_offset_pct = abs(pupil[0] - eye.center[0]) / (eye.width / 2) * 100
        quadrant = pupil_quadrant(eye.center, pupil)

        log.debug(
            f"Gaze: width diff {eye_width_diff_pct:.1f}%, "
            f"pupil offset {pupil_offset_pct:.1f}%, {quadrant.value}, "
            f"looking {'right' if looking_right else 'left'}"
        )

        if looking_right:
            high_pupil_offset = (pupil_offset_pct > cfg.pupil_offset_pct
                                 and pupil[0] > eye.center[0])
            outward = quadrant in _RIGHT_QUADRANTS
        else:
            high_pupil_offset = (pupil_offset_pct > cfg.pupil_offset_pct
                                 and pupil[0] < eye.center[0])
            outward = quadrant in _LEFT_QUADRANTS

        if high_pupil_offset:
            return False
        if has_high_offset and outward:
            return False
        return True
