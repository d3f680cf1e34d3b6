"""
Tests for the networkx and trimesh adapters.
"""

import networkx as nx
import numpy as np
import pytest

from arbor.adapters import from_networkx_graph, segment_to_cylinder, to_networkx_graph, to_trimesh
from arbor.core.segments import Segment, SegmentSet
from arbor.core.types import Point3D
from arbor_policies import MeshSynthesisPolicy


@pytest.fixture
def chain():
    segments = SegmentSet()
    segments.append(Segment(Point3D(0.0, 0.0, 0.0), Point3D(0.0, 1.0, 0.0), 0.1))
    segments.append(Segment(Point3D(0.0, 1.0, 0.0), Point3D(0.0, 2.0, 0.0), 0.05, 1, 0))
    segments.append(Segment(Point3D(0.0, 1.0, 0.0), Point3D(1.0, 1.0, 0.0), 0.05, 1, 0))
    return segments


class TestNetworkXAdapter:
    """Test conversion to and from networkx."""

    def test_to_networkx_graph(self, chain):
        G = to_networkx_graph(chain)

        assert isinstance(G, nx.DiGraph)
        assert G.number_of_nodes() == 3
        assert set(G.edges) == {(0, 1), (0, 2)}
        assert G.nodes[1]["radius"] == 0.05
        assert G.nodes[0]["length"] == pytest.approx(1.0)

    def test_round_trip(self, chain):
        restored = from_networkx_graph(to_networkx_graph(chain))

        assert [s.to_dict() for s in restored] == [s.to_dict() for s in chain]

    def test_renumbers_edited_graph(self, chain):
        G = to_networkx_graph(chain)
        G = nx.relabel_nodes(G, {0: 10, 1: 5, 2: 7})
        restored = from_networkx_graph(G)

        assert restored.roots() == [0]
        assert restored.validate() == []

    def test_rejects_multiple_parents(self, chain):
        G = to_networkx_graph(chain)
        G.add_edge(1, 2)
        with pytest.raises(ValueError):
            from_networkx_graph(G)


class TestMeshAdapter:
    """Test cylinder meshing."""

    def test_one_cylinder_per_segment(self, chain):
        mesh, report = to_trimesh(chain, MeshSynthesisPolicy(segments_per_circle=8))

        assert report.success
        assert report.metrics["meshed_segments"] == 3
        assert len(mesh.faces) == report.metrics["face_count"] > 0

    def test_cylinder_spans_segment(self, chain):
        cylinder = segment_to_cylinder(chain[0], 0.1, 12)
        mn, mx = cylinder.bounds

        assert mn[1] == pytest.approx(0.0)
        assert mx[1] == pytest.approx(1.0)
        assert 0.09 < mx[0] <= 0.1 + 1e-9

    def test_open_tubes_have_fewer_faces(self, chain):
        capped = segment_to_cylinder(chain[0], 0.1, 8, cap_ends=True)
        open_tube = segment_to_cylinder(chain[0], 0.1, 8, cap_ends=False)

        assert 0 < len(open_tube.faces) < len(capped.faces)

    def test_zero_radius_skipped_unless_widened(self):
        segments = SegmentSet([Segment(Point3D(0, 0, 0), Point3D(0, 1, 0), 0.0)])

        mesh, report = to_trimesh(segments)
        assert len(mesh.faces) == 0
        assert report.metrics["skipped_thin"] == 1
        assert report.warnings

        mesh, report = to_trimesh(segments, MeshSynthesisPolicy(min_radius=0.01))
        assert report.metrics["widened"] == 1
        assert len(mesh.faces) > 0

    def test_zero_length_skipped(self):
        p = Point3D(1.0, 1.0, 1.0)
        mesh, report = to_trimesh(SegmentSet([Segment(p, p, 0.1)]))

        assert report.metrics["skipped_short"] == 1
        assert np.asarray(mesh.vertices).shape[0] == 0
