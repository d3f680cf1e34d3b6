"""
Unit tests for the medial-axis radius pass.
"""

import pytest

from arbor.core.segments import Segment, SegmentSet
from arbor.core.types import Point3D
from arbor.ops.medial_axis import compute_medial_axis_radii, downstream_reach
from arbor_policies import MedialAxisPolicy


@pytest.fixture
def fork():
    """Trunk of length 1 with a long and a short child."""
    segments = SegmentSet()
    segments.append(Segment(Point3D(0, 0, 0), Point3D(0, 1, 0), 0.1))
    segments.append(Segment(Point3D(0, 1, 0), Point3D(0, 4, 0), 0.1, depth=1, parent=0))
    segments.append(Segment(Point3D(0, 1, 0), Point3D(1, 1, 0), 0.1, depth=1, parent=0))
    return segments


class TestDownstreamReach:

    def test_reach_covers_descendants(self, fork):
        assert downstream_reach(fork) == pytest.approx([4.0, 3.0, 1.0])

    def test_empty(self):
        assert downstream_reach(SegmentSet()) == []


class TestMedialAxisRadii:

    def test_leaf_radius_is_scaled_length(self, fork):
        compute_medial_axis_radii(fork, radius_noise=1.5)
        assert fork[2].radius == pytest.approx(1e-8 * 1.0 * 1.5)
        assert fork[0].radius == pytest.approx(1e-8 * 4.0 * 1.5)

    def test_parent_at_least_as_thick_as_children(self, fork):
        compute_medial_axis_radii(fork)
        for seg in fork:
            if seg.parent is not None:
                assert fork[seg.parent].radius >= seg.radius

    def test_noise_dropped_when_not_preserved(self, fork):
        policy = MedialAxisPolicy(reach_scale=0.5, preserve_radius_noise=False)
        compute_medial_axis_radii(fork, radius_noise=3.0, policy=policy)
        assert fork[1].radius == pytest.approx(1.5)

    def test_only_radius_changes(self, fork):
        before = [(s.start, s.end, s.depth, s.parent) for s in fork]
        result = compute_medial_axis_radii(fork)
        assert result is fork
        assert [(s.start, s.end, s.depth, s.parent) for s in fork] == before

    def test_invalid_policy(self, fork):
        with pytest.raises(ValueError):
            compute_medial_axis_radii(fork, policy=MedialAxisPolicy(reach_scale=-1.0))
