"""
Tests for the arbor command-line interface.
"""

import json

import pytest

from arbor_cli.cli import EXIT_GRAMMAR, EXIT_OK, EXIT_USAGE, main
from grammarspec.library import preset_names


class TestPresetsCommand:

    def test_lists_builtin_names(self, capsys):
        assert main(["presets"]) == EXIT_OK
        out = capsys.readouterr().out.split()
        assert out == preset_names()

    def test_describe(self, capsys):
        assert main(["presets", "--describe"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "Preset: oak" in out
        assert "rules (1):" in out

    def test_file_with_bad_rule(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"presets": [{"axiom": "F", "rules": ["F F"]}]}))
        assert main(["presets", "--file", str(path)]) == EXIT_GRAMMAR
        assert "arbor:" in capsys.readouterr().err

    def test_missing_file(self, tmp_path):
        assert main(["presets", "--file", str(tmp_path / "none.json")]) == EXIT_GRAMMAR


class TestGenerateCommand:

    def test_generate_preset(self, tmp_path, capsys):
        code = main(["generate", "--preset", "stalk", "--seed", "1", "--output", str(tmp_path)])
        assert code == EXIT_OK
        assert "Generated 8 segments" in capsys.readouterr().out
        [run_dir] = list(tmp_path.iterdir())
        assert run_dir.name.startswith("stalk_")
        assert (run_dir / "buffers.npz").exists()
        assert (run_dir / "report.json").exists()

    def test_generate_with_mesh(self, tmp_path):
        code = main([
            "generate", "-p", "fern", "-s", "2", "-n", "2",
            "--mesh", "obj", "--output", str(tmp_path),
        ])
        assert code == EXIT_OK
        [run_dir] = list(tmp_path.iterdir())
        assert (run_dir / "structure.obj").exists()

    def test_generate_random_tree(self, tmp_path):
        code = main(["generate", "--backend", "random_tree", "--seed", "3", "-o", str(tmp_path)])
        assert code == EXIT_OK

    def test_unknown_preset(self, tmp_path, capsys):
        code = main(["generate", "--preset", "baobab", "--output", str(tmp_path)])
        assert code == EXIT_GRAMMAR
        assert "baobab" in capsys.readouterr().err

    def test_preset_and_backend_are_exclusive(self):
        with pytest.raises(SystemExit) as exc:
            main(["generate", "--preset", "oak", "--backend", "random_tree"])
        assert exc.value.code == EXIT_USAGE

    @pytest.mark.parametrize("extra", [["--iterations", "3"], ["--file", "presets.json"]])
    def test_random_tree_rejects_grammar_flags(self, tmp_path, capsys, extra):
        code = main(["generate", "--backend", "random_tree", "-o", str(tmp_path)] + extra)
        assert code == EXIT_USAGE
        assert "random_tree" in capsys.readouterr().err
        assert list(tmp_path.iterdir()) == []


class TestHybridizeCommand:

    def test_two_parents_to_stdout(self, capsys):
        assert main(["hybridize", "oak", "birch", "--alpha", "0.25"]) == EXIT_OK
        doc = json.loads(capsys.readouterr().out)
        assert doc["presets"][0]["name"] == "oak x birch"

    def test_random_parents_to_file_then_reload(self, tmp_path, capsys):
        path = tmp_path / "child.json"
        assert main(["hybridize", "--seed", "8", "--output", str(path)]) == EXIT_OK
        assert path.exists()
        capsys.readouterr()

        assert main(["presets", "--file", str(path)]) == EXIT_OK
        assert " x " in capsys.readouterr().out

    def test_one_parent_is_usage_error(self):
        assert main(["hybridize", "oak"]) == EXIT_USAGE

    def test_alpha_without_parents_rejected(self, capsys):
        assert main(["hybridize", "--alpha", "0.3"]) == EXIT_USAGE
        assert "--alpha" in capsys.readouterr().err

    def test_alpha_out_of_range(self):
        assert main(["hybridize", "oak", "birch", "--alpha", "2"]) == EXIT_GRAMMAR

    def test_pool_too_small(self, tmp_path):
        path = tmp_path / "one.json"
        path.write_text(json.dumps({"presets": [{"name": "solo", "axiom": "F"}]}))
        assert main(["hybridize", "--file", str(path)]) == EXIT_GRAMMAR


class TestUsage:

    def test_no_command(self, capsys):
        assert main([]) == EXIT_USAGE

    def test_unknown_command(self):
        with pytest.raises(SystemExit) as exc:
            main(["frobnicate"])
        assert exc.value.code == EXIT_USAGE
