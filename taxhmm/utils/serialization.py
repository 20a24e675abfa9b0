"""Serialization utilities for profile HMMs and build configurations (load and save)."""

from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import yaml

from taxhmm.algorithms.distribution import Distribution, JointTable
from taxhmm.algorithms.hmm import ProfileHMM
from taxhmm.errors import MalformedInputError
from taxhmm.types.parameters import BuildConfig
from taxhmm.types.state import State

PathLike = Union[str, Path]


def _round(value: float, precision: int | None) -> float:
    return round(value, precision) if precision is not None else value


def _distribution_to_dict(
    dist: Mapping[Any, float], precision: int | None
) -> Dict[str, float]:
    return {str(key): _round(float(prob), precision) for key, prob in dist.items()}


def model_to_dict(
    model: ProfileHMM, float_precision: int | None = None
) -> Dict[str, Any]:
    """
    Convert a ProfileHMM into a plain dictionary suitable for YAML.

    Only the linear tables and metadata are kept; log-odds mirrors are derived
    again on load. Rounding (``float_precision``) can push long rows past the
    integrity tolerance, so it is off by default.
    """
    return {
        "name": model.name,
        "n_columns": model.n_columns,
        "n_training_seqs": model.n_training_seqs,
        "hard_delete_states": [str(state) for state in model.hard_delete_states],
        "initial": _distribution_to_dict(model.initial_distribution(), float_precision),
        "transitions": {
            str(source): _distribution_to_dict(row, float_precision)
            for source, row in model.transition_table().items()
        },
        "emissions": {
            str(state): _distribution_to_dict(row, float_precision)
            for state, row in model.emission_table().items()
        },
    }


def model_from_dict(payload: Mapping[str, Any]) -> ProfileHMM:
    """Rebuild a ProfileHMM from ``model_to_dict`` output."""
    initial: Distribution[State] = Distribution(
        (State.parse(name), float(prob)) for name, prob in payload["initial"].items()
    )

    transitions: JointTable[State, State] = JointTable()
    for source, row in payload["transitions"].items():
        transitions[State.parse(source)] = Distribution(
            (State.parse(dest), float(prob)) for dest, prob in row.items()
        )

    emissions: JointTable[State, str] = JointTable()
    for state, row in payload["emissions"].items():
        emissions[State.parse(state)] = Distribution(
            (str(symbol), float(prob)) for symbol, prob in row.items()
        )

    hard_deletes = [
        State.delete(State.parse(name).index, hard=True)
        for name in payload.get("hard_delete_states", [])
    ]
    return ProfileHMM(
        initial=initial,
        transitions=transitions,
        emissions=emissions,
        name=payload.get("name"),
        n_columns=int(payload.get("n_columns", 0)),
        n_training_seqs=int(payload.get("n_training_seqs", 0)),
        hard_delete_states=hard_deletes,
    )


def save_profile_hmm(model: ProfileHMM, yaml_path: PathLike) -> None:
    """Write a ProfileHMM to a YAML file."""
    path = Path(yaml_path)
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump({"model": model_to_dict(model)}, handle, sort_keys=False)


def load_profile_hmm(yaml_path: PathLike) -> ProfileHMM:
    """Load a ProfileHMM from a YAML file written by ``save_profile_hmm``."""
    path = Path(yaml_path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
        return model_from_dict(payload.get("model", payload))
    except yaml.YAMLError as exc:
        raise MalformedInputError(f"Not a valid YAML file: {exc}", str(path)) from exc
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise MalformedInputError(f"Missing or malformed model field: {exc}", str(path)) from exc


def dump_build_config(config: BuildConfig, yaml_path: PathLike) -> None:
    """Write a BuildConfig to a YAML file."""
    values = asdict(config)
    values["alphabet"] = list(config.alphabet)
    with Path(yaml_path).open("w", encoding="utf-8") as handle:
        yaml.safe_dump({"build": values}, handle, sort_keys=False)


def load_build_config(yaml_path: PathLike) -> BuildConfig:
    """Load a BuildConfig from YAML; missing keys keep their defaults."""
    with Path(yaml_path).open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}

    values = dict(payload.get("build", payload))
    unknown = set(values) - set(BuildConfig.__dataclass_fields__)
    if unknown:
        raise ValueError(f"Unknown build config keys: {sorted(unknown)}")
    if "alphabet" in values:
        values["alphabet"] = tuple(str(symbol) for symbol in values["alphabet"])
    return BuildConfig(**values)


__all__ = [
    "model_to_dict",
    "model_from_dict",
    "save_profile_hmm",
    "load_profile_hmm",
    "dump_build_config",
    "load_build_config",
]
