import logging
from dataclasses import dataclass, field

from peekguard.gaze.classifier import GazeClassifier
from peekguard.tracking.face import FaceObservation
from peekguard.utils.geometry import polygon_area

log = logging.getLogger("peekguard")


@dataclass(frozen=True)
class PeepingResult:
    """Faces looking at the screen, primary user excluded."""

    faces: tuple = field(default_factory=tuple)

    @property
    def count(self) -> int:
        return len(self.faces)


def face_area(face: FaceObservation) -> float:
    """Relative face size; a face without a contour counts as zero."""
    return polygon_area(face.all_points)


def exclude_primary_user(candidates, area=face_area) -> list:
    """Drop the face presumed to be the device owner from the lookers.

    A lone looker is the owner. With several, the largest face (closest to
    the camera) is the owner; the rest are returned largest first. Ties go
    to the earliest face in input order.
    """
    if len(candidates) <= 1:
        return []

    ordered = sorted(candidates, key=area, reverse=True)
    return ordered[1:]


class PeepingAggregator:
    """Turns one frame's faces into a peeping count."""

    def __init__(self, classifier: GazeClassifier | None = None):
        self._classifier = classifier or GazeClassifier()

    def aggregate(self, faces) -> PeepingResult:
        candidates = [f for f in faces if self._classifier.is_looking_at_screen(f)]
        log.debug(f"{len(candidates)} of {len(faces)} faces looking at screen")
        return PeepingResult(faces=tuple(exclude_primary_user(candidates)))
