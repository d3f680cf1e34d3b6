"""
Adapters from generated segments to graph and mesh libraries.
"""

from .networkx_adapter import to_networkx_graph, from_networkx_graph
from .mesh_adapter import to_trimesh, segment_to_cylinder

__all__ = [
    "to_networkx_graph",
    "from_networkx_graph",
    "to_trimesh",
    "segment_to_cylinder",
]
