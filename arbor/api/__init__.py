"""High-level API for generating and exporting branch structures."""

from .generate import GeneratedStructure, generate_structure, describe_grammar
from .export import make_run_dir, write_json, save_renderer_buffers, save_mesh, export_all

__all__ = [
    "GeneratedStructure",
    "generate_structure",
    "describe_grammar",
    "make_run_dir",
    "write_json",
    "save_renderer_buffers",
    "save_mesh",
    "export_all",
]
