"""Tests for face-mesh to FaceObservation conversion."""

import math
from types import SimpleNamespace

import numpy as np
import pytest

from peekguard.tracking.landmarks import (
    FACE_OVAL,
    LEFT_EYE,
    LEFT_IRIS_CENTER,
    RIGHT_EYE,
    observation_from_mesh,
    pose_from_matrix,
)


def _mesh(size=478):
    return [SimpleNamespace(x=i / 1000.0, y=0.25) for i in range(size)]


def _rot_y(theta):
    c, s = math.cos(theta), math.sin(theta)
    m = np.eye(4)
    m[:3, :3] = [[c, 0, s], [0, 1, 0], [-s, 0, c]]
    return m


def _rot_z(phi):
    c, s = math.cos(phi), math.sin(phi)
    m = np.eye(4)
    m[:3, :3] = [[c, -s, 0], [s, c, 0], [0, 0, 1]]
    return m


class TestPoseFromMatrix:
    def test_identity(self):
        roll, yaw = pose_from_matrix(np.eye(4))
        assert roll == pytest.approx(0.0)
        assert yaw == pytest.approx(0.0)

    def test_yaw(self):
        roll, yaw = pose_from_matrix(_rot_y(math.radians(30)))
        assert yaw == pytest.approx(math.radians(30))
        assert roll == pytest.approx(0.0)

    def test_roll(self):
        roll, yaw = pose_from_matrix(_rot_z(math.radians(-20)))
        assert roll == pytest.approx(math.radians(-20))
        assert yaw == pytest.approx(0.0, abs=1e-9)


class TestObservationFromMesh:
    def test_point_sets(self):
        face = observation_from_mesh(_mesh())
        assert len(face.left_eye) == len(LEFT_EYE)
        assert len(face.right_eye) == len(RIGHT_EYE)
        assert len(face.all_points) == len(FACE_OVAL)
        assert face.left_pupil == ((LEFT_IRIS_CENTER / 1000.0, 0.75),)

    def test_y_axis_is_flipped(self):
        face = observation_from_mesh(_mesh())
        assert all(y == pytest.approx(0.75) for _, y in face.left_eye)

    def test_unrefined_mesh_has_no_pupils(self):
        face = observation_from_mesh(_mesh(size=468))
        assert face.left_pupil is None
        assert face.right_pupil is None
        assert face.left_eye is not None

    def test_pose_defaults_to_frontal(self):
        face = observation_from_mesh(_mesh())
        assert face.roll == 0.0
        assert face.yaw == 0.0
        assert face.confidence == 1.0

    def test_pose_from_matrix_is_used(self):
        face = observation_from_mesh(_mesh(), _rot_y(math.radians(50)), confidence=0.8)
        assert math.degrees(face.yaw) == pytest.approx(50)
        assert face.confidence == 0.8
