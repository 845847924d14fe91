from __future__ import annotations

from dataclasses import dataclass
from functools import cache
from pathlib import Path
from typing import Any

import yaml
from beartype import beartype

from dyseq.utils.errors import InputValidationError

_DEFAULTS_CONFIG = Path(__file__).resolve().parent / "config" / "defaults.yaml"
_COST_MODES = ("grid_costs", "constant_costs", "matrix_costs")


@beartype
@dataclass(frozen=True)
class GridSequenceDefaults:
    """Default values for grid-sequence clustering runs.

    Attributes:
        cut_points (tuple[float, float, float]): Grid thresholds.
        cost_mode (str): Cost-matrix construction mode.
        indel_cost (float): Insertion/deletion cost.
        substitution_cost (float): Off-diagonal cost for `constant_costs`.
        missing_cost (float | str | None): Missing-state cost or `"auto"`.
        n_clusters (int): Number of clusters to cut.
        show_summary (bool): Whether to print the Rich run summary.
    """

    cut_points: tuple[float, float, float]
    cost_mode: str
    indel_cost: float
    substitution_cost: float
    missing_cost: float | str | None
    n_clusters: int
    show_summary: bool


@beartype
def grid_sequence_defaults(config_path: Path | None = None) -> GridSequenceDefaults:
    """Load defaults from `config/defaults.yaml`.

    Args:
        config_path (Path | None): Alternative YAML file with the same layout.

    Returns:
        GridSequenceDefaults: Parsed defaults.
    """

    raw = _load_yaml_config(config_path or _DEFAULTS_CONFIG)
    grid = _section(raw, "grid")
    costs = _section(raw, "costs")
    clustering = _section(raw, "clustering")
    general = raw.get("general") or {}
    if not isinstance(general, dict):
        raise InputValidationError("Defaults config `general` must be a mapping.")

    cut_points = grid.get("cut_points")
    if not isinstance(cut_points, list) or len(cut_points) != 3:
        raise InputValidationError(
            "Invalid `grid.cut_points` in defaults; expected three numbers."
        )

    cost_mode = str(costs.get("mode", "grid_costs"))
    if cost_mode not in _COST_MODES:
        raise InputValidationError(
            f"Invalid `costs.mode` in defaults: {cost_mode}. "
            f"Available: {', '.join(_COST_MODES)}"
        )

    missing_cost = costs.get("missing_cost")
    if missing_cost is not None and missing_cost != "auto":
        missing_cost = float(missing_cost)

    return GridSequenceDefaults(
        cut_points=tuple(float(value) for value in cut_points),
        cost_mode=cost_mode,
        indel_cost=float(costs.get("indel_cost", 1.0)),
        substitution_cost=float(costs.get("substitution_cost", 2.0)),
        missing_cost=missing_cost,
        n_clusters=int(clustering.get("n_clusters", 3)),
        show_summary=bool(general.get("show_summary", True)),
    )


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key)
    if not isinstance(value, dict):
        raise InputValidationError(f"Defaults config must define `{key}` mapping.")
    return value


@cache
def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load one YAML config file and validate mapping root."""

    if not config_path.exists() or not config_path.is_file():
        raise InputValidationError(f"Missing config file: {config_path.resolve()}")

    with config_path.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise InputValidationError(
            f"Config file `{config_path.name}` must contain a YAML mapping."
        )
    return loaded
