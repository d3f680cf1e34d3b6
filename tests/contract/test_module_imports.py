"""
Test that all modules can be imported without collisions.

This module validates that the key modules in the codebase can be
imported cleanly without circular dependencies or naming collisions.
"""

import importlib

import pytest


class TestArborPoliciesImport:
    """Test arbor_policies package imports cleanly."""

    def test_arbor_policies_import(self):
        """Test arbor_policies package imports cleanly."""
        import arbor_policies

        assert hasattr(arbor_policies, "RewritePolicy")
        assert hasattr(arbor_policies, "TurtlePolicy")
        assert hasattr(arbor_policies, "MedialAxisPolicy")
        assert hasattr(arbor_policies, "HybridizationPolicy")
        assert hasattr(arbor_policies, "RandomTreePolicy")
        assert hasattr(arbor_policies, "SpatialIndexPolicy")
        assert hasattr(arbor_policies, "MeshSynthesisPolicy")
        assert hasattr(arbor_policies, "OutputPolicy")
        assert hasattr(arbor_policies, "OperationReport")


class TestArborImport:
    """Test arbor package imports cleanly."""

    def test_top_level_exports(self):
        import arbor

        assert callable(arbor.generate_structure)
        assert callable(arbor.build_bvh)
        assert arbor.__version__

    @pytest.mark.parametrize("module", [
        "arbor.core",
        "arbor.ops",
        "arbor.spatial",
        "arbor.adapters",
        "arbor.backends",
        "arbor.api",
        "arbor.utils",
    ])
    def test_subpackage_imports(self, module):
        assert importlib.import_module(module) is not None

    def test_backend_registry(self):
        from arbor.backends import get_available_backends, get_backend, get_backend_config

        assert get_available_backends() == ["lsystem", "random_tree"]
        assert get_backend("lsystem").name == "lsystem"
        assert get_backend("space_colonization") is None
        assert get_backend_config("random_tree") is not None


class TestGrammarspecImport:
    """Test grammarspec imports without pulling in a cycle."""

    def test_expression_package_first(self):
        import grammarspec

        assert hasattr(grammarspec, "compile_expression")

    @pytest.mark.parametrize("module", [
        "grammarspec.expr",
        "grammarspec.syntax",
        "grammarspec.presets",
        "grammarspec.library",
    ])
    def test_submodule_imports(self, module):
        assert importlib.import_module(module) is not None


class TestCLIImport:
    """Test the CLI module imports cleanly."""

    def test_cli_entry_point(self):
        from arbor_cli import main, build_parser

        assert callable(main)
        assert build_parser().prog == "arbor"
