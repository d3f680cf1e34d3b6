"""
Command-line front end for arbor (the ``arbor`` console script).
"""

from .cli import main, build_parser

__all__ = ["main", "build_parser"]
