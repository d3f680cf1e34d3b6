"""
Tests for arbor: grammar rewriting, turtle interpretation, spatial index,
adapters, CLI and end-to-end generation.
"""
