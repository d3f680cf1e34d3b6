"""
Unit tests for Segment and SegmentSet.
"""

import logging

import numpy as np
import pytest

from arbor.core import segments as segments_module
from arbor.core.segments import NO_PARENT, SEGMENT_STRIDE, Segment, SegmentSet
from arbor.core.types import Point3D


def make_fork():
    segments = SegmentSet()
    segments.append(Segment(Point3D(0.0, 0.0, 0.0), Point3D(0.0, 1.0, 0.0), 0.2))
    segments.append(Segment(Point3D(0.0, 1.0, 0.0), Point3D(1.0, 2.0, 0.0), 0.1, 1, 0))
    segments.append(Segment(Point3D(0.0, 1.0, 0.0), Point3D(-1.0, 2.0, 0.0), 0.1, 1, 0))
    return segments


class TestSegment:

    def test_length_and_direction(self):
        seg = Segment(Point3D(1.0, 1.0, 1.0), Point3D(1.0, 1.0, 4.0), 0.5)
        assert seg.length == pytest.approx(3.0)
        np.testing.assert_allclose(seg.direction, [0.0, 0.0, 1.0])

    def test_degenerate_direction(self):
        p = Point3D(1.0, 2.0, 3.0)
        np.testing.assert_array_equal(Segment(p, p, 0.1).direction, np.zeros(3))

    def test_bounds_inflated_by_radius(self):
        mn, mx = Segment(Point3D(0.0, 0.0, 0.0), Point3D(2.0, -1.0, 0.0), 0.5).bounds()
        np.testing.assert_allclose(mn, [-0.5, -1.5, -0.5])
        np.testing.assert_allclose(mx, [2.5, 0.5, 0.5])


class TestSegmentSet:

    def test_append_returns_index(self):
        segments = SegmentSet()
        assert segments.append(Segment(Point3D(0, 0, 0), Point3D(0, 1, 0), 0.1)) == 0
        assert len(segments) == 1
        assert bool(segments)

    def test_parent_must_already_exist(self):
        segments = SegmentSet()
        with pytest.raises(ValueError):
            segments.append(Segment(Point3D(0, 0, 0), Point3D(0, 1, 0), 0.1, 1, 0))

    def test_roots_and_children(self):
        segments = make_fork()
        assert segments.roots() == [0]
        assert segments.children_map() == {0: [1, 2], 1: [], 2: []}
        assert segments.max_depth == 1

    def test_bounds(self):
        mn, mx = make_fork().bounds()
        np.testing.assert_allclose(mn, [-1.1, -0.2, -0.2])
        np.testing.assert_allclose(mx, [1.1, 2.1, 0.2])

    def test_empty_bounds(self):
        mn, mx = SegmentSet().bounds()
        np.testing.assert_array_equal(mn, np.zeros(3))
        np.testing.assert_array_equal(mx, np.zeros(3))

    def test_validate_flags_depth_mismatch(self):
        segments = make_fork()
        assert segments.validate() == []
        segments[2].depth = 5
        errors = segments.validate()
        assert len(errors) == 1
        assert "segment 2" in errors[0]

    def test_validate_flags_negative_radius(self):
        segments = make_fork()
        segments[0].radius = -1.0
        assert segments.validate()


class TestBuffers:

    def test_buffer_layout(self):
        buf = make_fork().to_buffer()
        assert buf.shape == (3, SEGMENT_STRIDE)
        assert buf.dtype == np.float32
        np.testing.assert_allclose(buf[1], [0, 1, 0, 0.1, 1, 2, 0, 1, 0], rtol=1e-6)
        assert buf[0, 8] == NO_PARENT

    def test_buffer_round_trip(self):
        segments = make_fork()
        restored = SegmentSet.from_buffer(segments.to_buffer())
        assert [s.parent for s in restored] == [None, 0, 0]
        assert [s.depth for s in restored] == [0, 1, 1]

    def test_dict_round_trip(self):
        segments = make_fork()
        restored = SegmentSet.from_dict(segments.to_dict())
        assert [s.to_dict() for s in restored] == [s.to_dict() for s in segments]

    def test_empty_buffer(self):
        assert SegmentSet().to_buffer().shape == (0, SEGMENT_STRIDE)

    def test_parent_indices_are_exact_int32(self):
        parents = make_fork().parent_indices()
        assert parents.dtype == np.int32
        assert parents.tolist() == [NO_PARENT, 0, 0]

    def test_large_index_not_exact_in_float32(self):
        index = segments_module.FLOAT32_EXACT_INDEX + 1
        assert int(np.float32(index)) != index
        assert int(np.int32(index)) == index

    def test_oversized_buffer_warns(self, monkeypatch, caplog):
        monkeypatch.setattr(segments_module, "FLOAT32_EXACT_INDEX", 2)
        with caplog.at_level(logging.WARNING, logger="arbor.core.segments"):
            make_fork().to_buffer()
        assert "exact float32 index range" in caplog.text
