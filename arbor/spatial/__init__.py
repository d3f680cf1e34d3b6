"""Spatial acceleration structures over generated segments."""

from .bvh import BVH, BVHNode, build_bvh, segment_boxes, BVH_NODE_DTYPE, LEAF_FLAG

__all__ = ["BVH", "BVHNode", "build_bvh", "segment_boxes", "BVH_NODE_DTYPE", "LEAF_FLAG"]
