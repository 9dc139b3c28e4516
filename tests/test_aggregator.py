"""Tests for peeping aggregation and the primary-user policy."""

import dataclasses

import pytest

from peekguard.gaze.aggregator import (
    PeepingAggregator,
    PeepingResult,
    exclude_primary_user,
    face_area,
)


@pytest.fixture
def aggregator():
    return PeepingAggregator()


class TestExcludePrimaryUser:
    def test_no_candidates(self):
        assert exclude_primary_user([]) == []

    def test_single_candidate_is_primary(self):
        assert exclude_primary_user(["owner"], area=len) == []

    def test_largest_is_removed_rest_largest_first(self):
        result = exclude_primary_user(["bb", "dddd", "a", "ccc"], area=len)
        assert result == ["ccc", "bb", "a"]

    def test_ties_remove_earliest(self):
        first, second = ["x", "y"], ["y", "x"]
        result = exclude_primary_user([first, second], area=len)
        assert result == [second]
        assert result[0] is second


class TestAggregate:
    def test_no_faces(self, aggregator):
        result = aggregator.aggregate([])
        assert result == PeepingResult()
        assert result.count == 0

    def test_nobody_looking(self, aggregator, make_face):
        result = aggregator.aggregate([make_face(yaw_deg=60), make_face(confidence=0.1)])
        assert result.count == 0

    def test_single_looker_is_primary_user(self, aggregator, make_face):
        a = make_face()
        b = make_face(yaw_deg=50)
        result = aggregator.aggregate([a, b])
        assert result.count == 0
        assert result.faces == ()

    def test_larger_face_is_excluded(self, aggregator, make_face):
        a = make_face(area=500.0)
        a_prime = make_face(area=900.0)
        result = aggregator.aggregate([a, a_prime])
        assert result.count == 1
        assert result.faces[0] is a

    def test_k_lookers_give_k_minus_one(self, aggregator, make_face):
        faces = [make_face(area=100.0), make_face(area=900.0), make_face(area=400.0),
                 make_face(yaw_deg=80, area=5000.0)]
        result = aggregator.aggregate(faces)
        assert result.count == 2
        assert [face_area(f) for f in result.faces] == pytest.approx([400.0, 100.0])

    def test_face_without_contour_has_zero_area(self, aggregator, make_face):
        no_contour = dataclasses.replace(make_face(), all_points=None)
        owner = make_face(area=50.0)
        result = aggregator.aggregate([no_contour, owner])
        assert result.faces == (no_contour,)

    def test_idempotent(self, aggregator, make_face):
        faces = (make_face(area=100.0), make_face(area=200.0), make_face(area=300.0))
        assert aggregator.aggregate(faces) == aggregator.aggregate(faces)

    def test_malformed_face_does_not_break_frame(self, aggregator, make_face):
        broken = dataclasses.replace(make_face(area=10000.0), left_pupil=None)
        result = aggregator.aggregate([broken, make_face(area=100.0), make_face(area=200.0)])
        assert result.count == 1
