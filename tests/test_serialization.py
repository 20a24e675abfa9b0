"""Unit tests for YAML persistence of models and build configurations."""

from __future__ import annotations

import pytest
import yaml

from taxhmm.algorithms.builder import build_profile_hmm
from taxhmm.algorithms.viterbi import decode
from taxhmm.errors import IntegrityError, MalformedInputError
from taxhmm.types import BuildConfig, State
from taxhmm.utils.serialization import (
    dump_build_config,
    load_build_config,
    load_profile_hmm,
    model_to_dict,
    save_profile_hmm,
)


def _model():
    return build_profile_hmm(["AACGTTAG", "AAC-TTAG", "AACGTT--"], name="G_Demo")


def test_model_dict_uses_state_names():
    """Test that the plain-dict form is keyed by printable state names."""
    payload = model_to_dict(_model())

    assert payload["name"] == "G_Demo"
    assert payload["n_columns"] == 8
    assert payload["hard_delete_states"] == ["D_3", "D_6"]
    assert "M_0" in payload["initial"]
    assert set(payload["emissions"]["M_0"]) == {"A", "C", "G", "T"}
    assert not any(name.startswith("D_") for name in payload["transitions"])


def test_saved_model_loads_back_identically(tmp_path):
    """Test that a YAML round trip preserves tables, metadata and scores."""
    model = _model()
    path = tmp_path / "G_Demo.yaml"
    save_profile_hmm(model, path)
    loaded = load_profile_hmm(path)

    assert loaded.name == model.name
    assert loaded.n_columns == model.n_columns
    assert loaded.n_training_seqs == model.n_training_seqs
    assert loaded.hard_delete_states == model.hard_delete_states
    assert loaded.initial_distribution() == model.initial_distribution()
    assert loaded.transition_table() == model.transition_table()
    assert loaded.emission_table() == model.emission_table()

    original = decode(model, "AACGTTAG")
    reloaded = decode(loaded, "AACGTTAG")
    assert reloaded.score == original.score
    assert reloaded.path == original.path


def test_saved_model_is_plain_yaml(tmp_path):
    """Test that the file is readable with a safe YAML loader."""
    path = tmp_path / "model.yaml"
    save_profile_hmm(_model(), path)

    with path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle)
    assert payload["model"]["transitions"]["M_0"]["I_1"] > 0.0


def test_loaded_model_is_validated(tmp_path):
    """Test that a hand-edited file breaking row sums is rejected."""
    payload = {"model": model_to_dict(_model())}
    payload["model"]["transitions"]["M_0"]["I_1"] = 0.5
    path = tmp_path / "bad.yaml"
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(payload, handle)

    with pytest.raises(IntegrityError, match="Integrity violation"):
        load_profile_hmm(path)


def test_build_config_round_trip(tmp_path):
    """Test that a build configuration survives dump and load."""
    config = BuildConfig(pseudocount_mass=0.02, soft_delete_tax=0.005, alphabet=("A", "C"))
    path = tmp_path / "build.yaml"
    dump_build_config(config, path)

    assert load_build_config(path) == config


def test_partial_build_config_keeps_defaults(tmp_path):
    """Test that omitted keys fall back to the defaults."""
    path = tmp_path / "build.yaml"
    path.write_text("build:\n  p_insert_to_self: 0.05\n", encoding="utf-8")
    config = load_build_config(path)

    assert config.p_insert_to_self == 0.05
    assert config.pseudocount_mass == BuildConfig().pseudocount_mass


def test_build_config_rejects_unknown_keys(tmp_path):
    """Test that misspelled keys are reported."""
    path = tmp_path / "build.yaml"
    path.write_text("build:\n  pseudocount: 0.05\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_build_config(path)


def test_build_config_validates_rates(tmp_path):
    """Test that out-of-range rates in a file are rejected."""
    path = tmp_path / "build.yaml"
    path.write_text("build:\n  soft_delete_tax: 1.5\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_build_config(path)


def test_state_names_parse_back():
    """Test that every state name in a saved model parses to the same state."""
    payload = model_to_dict(_model())

    for name in payload["transitions"]:
        assert str(State.parse(name)) == name


def test_unreadable_model_file_is_malformed_input(tmp_path):
    """Test that broken YAML or missing tables are reported as malformed input."""
    broken = tmp_path / "broken.yaml"
    broken.write_text("model: [unclosed\n", encoding="utf-8")
    missing = tmp_path / "missing.yaml"
    missing.write_text("model:\n  name: G_Demo\n", encoding="utf-8")

    with pytest.raises(MalformedInputError):
        load_profile_hmm(broken)
    with pytest.raises(MalformedInputError):
        load_profile_hmm(missing)
