"""
Unit tests for preset loading and the built-in library.
"""

import json

import pytest

from grammarspec.library import builtin_presets, get_preset, preset_names
from grammarspec.presets import (
    ORGANIC_RANGES,
    PresetLoadError,
    grammar_to_preset,
    load_presets,
    preset_from_dict,
    save_presets,
)
from grammarspec.syntax import parse_axiom


MINIMAL = {"name": "twig", "axiom": "F A", "rules": ["A -> F [ + A ] A"]}


class TestPresetFromDict:
    """Tests for single preset mappings."""

    def test_minimal_preset_gets_organic_ranges(self):
        grammar = preset_from_dict(MINIMAL)
        assert grammar.name == "twig"
        assert grammar.axiom == parse_axiom("F A")
        assert len(grammar.rules) == 1
        for key, value in ORGANIC_RANGES.items():
            assert getattr(grammar, key) == value
        assert grammar.auto_randomise is True

    def test_no_injection_keeps_defaults(self):
        grammar = preset_from_dict(MINIMAL, inject_random=False)
        assert grammar.angle_jitter_deg == (0.0, 0.0)
        assert grammar.auto_randomise is False

    def test_explicit_ranges_win(self):
        grammar = preset_from_dict(dict(MINIMAL, depth_taper=[0.5, 0.55]))
        assert grammar.depth_taper == (0.5, 0.55)
        assert grammar.radius_scale == ORGANIC_RANGES["radius_scale"]

    def test_default_name_uses_index(self):
        assert preset_from_dict({"axiom": "F"}, index=3).name == "preset_3"

    def test_unknown_keys_are_warned_not_fatal(self, caplog):
        grammar = preset_from_dict(dict(MINIMAL, colour="green"))
        assert grammar.name == "twig"
        assert "colour" in caplog.text

    @pytest.mark.parametrize("bad", [
        {"name": "x"},
        {"axiom": 3},
        {"axiom": "F", "rules": "F -> F"},
        {"axiom": "F(", "rules": []},
        {"axiom": "F", "rules": ["F G -> F"]},
        {"axiom": "F", "iterations": "six"},
        {"axiom": "F", "depth_taper": [0.5]},
        {"axiom": "F", "tropism": 2.0},
        {"axiom": "F", "medial_axis": "false"},
        {"axiom": "F", "medial_axis": 1},
        {"axiom": "F", "auto_randomise": "yes"},
    ])
    def test_malformed_presets(self, bad):
        with pytest.raises(PresetLoadError):
            preset_from_dict(bad)

    def test_boolean_flags_kept(self):
        grammar = preset_from_dict(
            {"axiom": "F", "medial_axis": False, "auto_randomise": True}, inject_random=False
        )
        assert grammar.medial_axis is False
        assert grammar.auto_randomise is True


class TestLoadPresets:
    """Tests for whole documents."""

    def test_load_from_file_preserves_order(self, tmp_path):
        path = tmp_path / "presets.json"
        path.write_text(json.dumps({"presets": [MINIMAL, {"name": "stub", "axiom": "F"}]}))
        presets = load_presets(path)
        assert [name for name, _ in presets] == ["twig", "stub"]

    def test_load_from_bare_list(self):
        assert len(load_presets([MINIMAL])) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(PresetLoadError):
            load_presets(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{ presets: ")
        with pytest.raises(PresetLoadError):
            load_presets(path)

    def test_document_without_presets(self):
        with pytest.raises(PresetLoadError):
            load_presets({"grammars": []})

    def test_save_and_reload(self, tmp_path):
        grammar = preset_from_dict(dict(MINIMAL, rules=["A(s) : s - 0.1 -> F(s) A(s*0.5)"]))
        path = save_presets([grammar], tmp_path / "out" / "saved.json")
        [(name, loaded)] = load_presets(path)
        assert name == "twig"
        assert loaded == grammar

    def test_preset_dict_uses_text_forms(self):
        d = grammar_to_preset(preset_from_dict(MINIMAL))
        assert d["axiom"] == "F A"
        assert isinstance(d["rules"][0], str)
        json.dumps(d)


class TestLibrary:
    """Tests for the built-in presets."""

    def test_all_builtins_load(self):
        presets = builtin_presets()
        assert [name for name, _ in presets] == preset_names()
        for _, grammar in presets:
            assert grammar.validate() == []
            assert grammar.auto_randomise is False

    def test_get_preset(self):
        stalk = get_preset("stalk")
        assert stalk.iterations == 3

    def test_get_unknown_preset(self):
        with pytest.raises(KeyError):
            get_preset("baobab")
