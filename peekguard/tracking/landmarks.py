"""Converts a MediaPipe 478-point face mesh into a FaceObservation.

MediaPipe landmarks are normalized with +y pointing down; observations use
+y up, so y is flipped here. Iris centres only exist on the refined mesh
(478 points); without them the pupils are left empty.
"""

import math

import numpy as np

from peekguard.tracking.face import FaceObservation

# Subject's left eye (right side of an unmirrored image), closed contour
LEFT_EYE = (362, 382, 381, 380, 374, 373, 390, 249,
            263, 466, 388, 387, 386, 385, 384, 398)
RIGHT_EYE = (33, 7, 163, 144, 145, 153, 154, 155,
             133, 173, 157, 158, 159, 160, 161, 246)

LEFT_IRIS_CENTER = 473
RIGHT_IRIS_CENTER = 468
REFINED_MESH_SIZE = 478

FACE_OVAL = (10, 338, 297, 332, 284, 251, 389, 356, 454, 323, 361, 288,
             397, 365, 379, 378, 400, 377, 152, 148, 176, 149, 150, 136,
             172, 58, 132, 93, 234, 127, 162, 21, 54, 103, 67, 109)


def _points(landmarks, indices) -> tuple:
    return tuple((float(landmarks[i].x), 1.0 - float(landmarks[i].y)) for i in indices)


def pose_from_matrix(matrix) -> tuple[float, float]:
    """(roll, yaw) in radians from a 4x4 facial transformation matrix."""
    r = np.asarray(matrix, dtype=float)[:3, :3]
    yaw = math.atan2(-r[2, 0], math.hypot(r[2, 1], r[2, 2]))
    roll = math.atan2(r[1, 0], r[0, 0])
    return roll, yaw


def observation_from_mesh(landmarks, matrix=None,
                          confidence: float = 1.0) -> FaceObservation:
    if matrix is not None:
        roll, yaw = pose_from_matrix(matrix)
    else:
        roll, yaw = 0.0, 0.0

    left_pupil = right_pupil = None
    if len(landmarks) >= REFINED_MESH_SIZE:
        left_pupil = _points(landmarks, (LEFT_IRIS_CENTER,))
        right_pupil = _points(landmarks, (RIGHT_IRIS_CENTER,))

    return FaceObservation(
        confidence=confidence,
        roll=roll,
        yaw=yaw,
        left_eye=_points(landmarks, LEFT_EYE),
        right_eye=_points(landmarks, RIGHT_EYE),
        left_pupil=left_pupil,
        right_pupil=right_pupil,
        all_points=_points(landmarks, FACE_OVAL),
    )
