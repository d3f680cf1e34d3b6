"""
Adapter between SegmentSet and networkx graphs.

The graph has one node per segment (keyed by segment index) and a directed
edge parent -> child, so subtree queries become descendant queries.
"""

import networkx as nx

from ..core.segments import Segment, SegmentSet
from ..core.types import Point3D


def to_networkx_graph(segments: SegmentSet) -> nx.DiGraph:
    """
    Convert segments to a directed forest.

    Node attributes: start, end (xyz tuples), radius, depth, length.
    """
    G = nx.DiGraph()
    for i, seg in enumerate(segments):
        G.add_node(
            i,
            start=seg.start.to_tuple(),
            end=seg.end.to_tuple(),
            radius=seg.radius,
            depth=seg.depth,
            length=seg.length,
        )
    for i, seg in enumerate(segments):
        if seg.parent is not None:
            G.add_edge(seg.parent, i)
    return G


def from_networkx_graph(G: nx.DiGraph) -> SegmentSet:
    """
    Rebuild segments from a graph produced by to_networkx_graph.

    Nodes are emitted in topological order (ties by index) and renumbered,
    so parents precede children even if the graph was edited.

    Raises
    ------
    ValueError
        If the graph is not a forest
    """
    if G.number_of_nodes() and not nx.is_forest(G.to_undirected(as_view=True)):
        raise ValueError("Graph is not a forest")
    if any(G.in_degree(n) > 1 for n in G.nodes):
        raise ValueError("Graph node has more than one parent")

    order = list(nx.lexicographical_topological_sort(G))
    new_index = {node: i for i, node in enumerate(order)}

    out = SegmentSet()
    for node in order:
        data = G.nodes[node]
        preds = list(G.predecessors(node))
        parent = new_index[preds[0]] if preds else None
        depth = 0 if parent is None else out[parent].depth + 1
        out.append(Segment(
            start=Point3D.from_array(data["start"]),
            end=Point3D.from_array(data["end"]),
            radius=float(data["radius"]),
            depth=depth,
            parent=parent,
        ))
    return out


__all__ = ["to_networkx_graph", "from_networkx_graph"]
