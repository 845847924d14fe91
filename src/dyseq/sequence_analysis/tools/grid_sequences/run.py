from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pandas as pd
from beartype import beartype
from rich import box
from rich.console import Console
from rich.table import Table

from dyseq.utils.errors import InputValidationError
from dyseq.utils.metadata import ComponentMetadata, catalog_entry
from dyseq.utils.templates.tools.sequence_analysis import (
    SequenceAnalysisTool,
    ToolParameterDefinition,
)

from .costs import CostMatrix, constant_costs, grid_costs, matrix_costs
from .defaults import GridSequenceDefaults, grid_sequence_defaults
from .labeling import quantile_cut_points
from .palette import state_colour
from .pipeline import GridSequenceResult, analyse_grid_sequences

_CONSOLE = Console()

COST_MODES: dict[str, str] = {
    "grid_costs": "Manhattan distance between grid cells",
    "constant_costs": "One constant cost for every state change",
    "matrix_costs": "Explicit substitution matrix read from CSV",
}


@beartype
class GridSequenceClustering(SequenceAnalysisTool):
    """Cluster dyads by the similarity of their grid-state sequences.

    Both partners' scores are binned with three cut points into a 4x4 grid,
    each dyad becomes a sequence of grid states, sequences are compared with
    optimal matching, and a Ward dendrogram is cut into `n_clusters` groups.

    Runtime parameters:
        - `input_path`: Input long-format CSV (one row per dyad and time).
        - `output_path`: Output CSV for cluster assignments.
        - `id_col`: Dyad identifier column.
        - `time_col`: Time index column.
        - `value_cols`: Exactly two columns, first then second partner.
        - `cut_points`: Three ascending thresholds, or `"quantile"` to use
          the quartiles of both partners' pooled values.
        - `cost_mode`: `grid_costs`, `constant_costs` or `matrix_costs`.
        - `indel_cost`: Insertion/deletion cost.
        - `substitution_cost`: Off-diagonal cost for `constant_costs`.
        - `cost_matrix_path`: Substitution CSV for `matrix_costs`; first
          column holds the row state labels.
        - `missing_cost`: Number, `"auto"` or `"none"`.
        - `n_clusters`: Number of clusters.
        - `cluster_names`: Optional names for clusters `1..n_clusters`.
        - `distance_output_path`: Optional CSV for the distance matrix.
        - `show_summary`: Print a Rich summary after the run.

    Omitted optional parameters fall back to `config/defaults.yaml`.

    Examples:
        ```python
        from dyseq.sequence_analysis import GridSequenceClustering

        tool = GridSequenceClustering()
        summary = tool.fit_preprocess(
            input_path="./data/dyads_long.csv",
            output_path="./outputs/clusters.csv",
            id_col="dyad",
            time_col="day",
            value_cols=["affect_partner1", "affect_partner2"],
            cut_points=[2.0, 3.0, 4.0],
            cost_mode="grid_costs",
            indel_cost=3.0,
            n_clusters=3,
        )
        ```
    """

    metadata = ComponentMetadata(
        name="grid_sequences",
        full_name="Grid-Sequence Clustering",
        abstract_description=(
            "Bin paired partner scores into grid states, align dyads with "
            "optimal matching and group them with Ward clustering."
        ),
        tutorial_goal=(
            "Find typical joint patterns in how two partners' scores evolve "
            "together over time."
        ),
        tutorial_how_it_works=(
            "Each time point becomes one of 16 grid cells; optimal matching "
            "counts the cheapest edits between dyads' cell sequences and Ward "
            "linkage groups dyads with similar sequences."
        ),
    )

    def __init__(self) -> None:
        self._config: dict[str, Any] | None = None
        self._last_result: GridSequenceResult | None = None

    @classmethod
    @beartype
    def params_definition(cls) -> tuple[ToolParameterDefinition, ...]:
        """Return the parameter schema used by the bridge catalog."""

        defaults = grid_sequence_defaults()
        return (
            ToolParameterDefinition("input_path", "path", True, None, "Long-format CSV."),
            ToolParameterDefinition(
                "output_path", "path", True, None, "Cluster assignment CSV."
            ),
            ToolParameterDefinition("id_col", "string", True, None, "Dyad identifier."),
            ToolParameterDefinition("time_col", "string", True, None, "Time index."),
            ToolParameterDefinition(
                "value_cols",
                "list",
                True,
                None,
                "First and second partner value columns.",
            ),
            ToolParameterDefinition(
                "cut_points",
                "list",
                False,
                list(defaults.cut_points),
                "Three ascending thresholds or `quantile`.",
            ),
            ToolParameterDefinition(
                "indel_cost", "float", False, defaults.indel_cost, "Indel cost."
            ),
            ToolParameterDefinition(
                "substitution_cost",
                "float",
                False,
                defaults.substitution_cost,
                "Constant substitution cost (constant_costs only).",
            ),
            ToolParameterDefinition(
                "cost_matrix_path",
                "path",
                False,
                None,
                "Substitution matrix CSV (matrix_costs only).",
            ),
            ToolParameterDefinition(
                "missing_cost",
                "string",
                False,
                defaults.missing_cost,
                "Missing-state cost, `auto` or `none`.",
            ),
            ToolParameterDefinition(
                "n_clusters", "int", False, defaults.n_clusters, "Cluster count."
            ),
            ToolParameterDefinition(
                "cluster_names",
                "list",
                False,
                None,
                "Optional names for clusters 1..n_clusters.",
            ),
            ToolParameterDefinition(
                "distance_output_path",
                "path",
                False,
                None,
                "Optional distance-matrix CSV.",
            ),
            ToolParameterDefinition(
                "show_summary",
                "bool",
                False,
                defaults.show_summary,
                "Print a run summary.",
            ),
        )

    @beartype
    def fit(self, **kwargs: Any) -> GridSequenceClustering:
        """Validate and store the clustering configuration.

        Args:
            **kwargs (Any): Configuration keys listed in the class docstring.

        Returns:
            GridSequenceClustering: The fitted tool instance.
        """

        defaults = grid_sequence_defaults()

        input_path_raw = kwargs.get("input_path")
        output_path_raw = kwargs.get("output_path")
        if input_path_raw is None:
            raise InputValidationError("Missing required parameter: input_path")
        if output_path_raw is None:
            raise InputValidationError("Missing required parameter: output_path")
        id_col = _as_required_string(kwargs, "id_col")
        time_col = _as_required_string(kwargs, "time_col")

        input_path = Path(str(input_path_raw)).expanduser()
        output_path = Path(str(output_path_raw)).expanduser()
        _validate_csv_path(input_path, field_name="input_path")
        _validate_output_csv_path(output_path, field_name="output_path")

        value_cols = _as_optional_string_list(kwargs.get("value_cols"))
        if len(value_cols) != 2:
            raise InputValidationError(
                "value_cols must name exactly two columns (first partner, second partner)."
            )

        header = pd.read_csv(input_path, nrows=0)
        _ensure_columns(header, [id_col, time_col, *value_cols])

        cut_points = _as_cut_points(kwargs.get("cut_points"), defaults)
        cost_mode = _normalise_cost_mode(kwargs.get("cost_mode", defaults.cost_mode))

        cost_matrix_path: Path | None = None
        if cost_mode == "matrix_costs":
            raw_matrix_path = _as_optional_string(_as_path_text(kwargs.get("cost_matrix_path")))
            if not raw_matrix_path:
                raise InputValidationError(
                    "Missing required parameter `cost_matrix_path` for `matrix_costs`."
                )
            cost_matrix_path = Path(raw_matrix_path).expanduser()
            _validate_csv_path(cost_matrix_path, field_name="cost_matrix_path")

        distance_output_path: Path | None = None
        distance_raw = _as_optional_string(_as_path_text(kwargs.get("distance_output_path")))
        if distance_raw:
            distance_output_path = Path(distance_raw).expanduser()
            _validate_output_csv_path(
                distance_output_path, field_name="distance_output_path"
            )

        n_clusters = _as_optional_int(kwargs.get("n_clusters"))
        cluster_names = _as_optional_string_list(kwargs.get("cluster_names"))

        self._config = {
            "input_path": input_path,
            "output_path": output_path,
            "id_col": id_col,
            "time_col": time_col,
            "value_cols": tuple(value_cols),
            "cut_points": cut_points,
            "cost_mode": cost_mode,
            "indel_cost": _as_float(
                kwargs.get("indel_cost", defaults.indel_cost), field_name="indel_cost"
            ),
            "substitution_cost": _as_float(
                kwargs.get("substitution_cost", defaults.substitution_cost),
                field_name="substitution_cost",
            ),
            "cost_matrix_path": cost_matrix_path,
            "missing_cost": _as_missing_cost(
                kwargs.get("missing_cost", defaults.missing_cost)
            ),
            "n_clusters": n_clusters if n_clusters is not None else defaults.n_clusters,
            "cluster_names": tuple(cluster_names) or None,
            "distance_output_path": distance_output_path,
            "show_summary": _as_bool(
                kwargs.get("show_summary", defaults.show_summary),
                field_name="show_summary",
            ),
        }
        return self

    @beartype
    def preprocess(self, **kwargs: Any) -> dict[str, Any]:
        """Run the clustering and write the assignment output.

        Args:
            **kwargs (Any): Optional configuration keys identical to `fit(...)`.
                If provided, they override any existing fitted configuration.

        Returns:
            dict[str, Any]: Serialised run summary with output paths, sizes
            and cost settings.
        """

        if kwargs:
            self.fit(**kwargs)
        if self._config is None:
            raise InputValidationError(
                "No configuration provided. Call `fit(...)` first or pass kwargs to `preprocess(...)`."
            )

        config = self._config
        data = pd.read_csv(config["input_path"])
        value_cols = list(config["value_cols"])
        _ensure_columns(data, [config["id_col"], config["time_col"], *value_cols])

        cut_points = config["cut_points"]
        if cut_points == "quantile":
            pooled = pd.concat([data[value_cols[0]], data[value_cols[1]]])
            cut_points = quantile_cut_points(pd.to_numeric(pooled, errors="coerce"))

        costs = _build_costs(config)
        result = analyse_grid_sequences(
            data,
            id_col=config["id_col"],
            time_col=config["time_col"],
            value_cols=value_cols,
            cut_points=cut_points,
            costs=costs,
            n_clusters=config["n_clusters"],
            cluster_names=config["cluster_names"],
        )
        self._last_result = result

        output_path: Path = config["output_path"]
        output_path.parent.mkdir(parents=True, exist_ok=True)
        result.assignments.to_csv(output_path, index=False)

        distance_output_path: Path | None = config["distance_output_path"]
        if distance_output_path is not None:
            distance_output_path.parent.mkdir(parents=True, exist_ok=True)
            result.distances.to_csv(distance_output_path)

        if config["show_summary"]:
            _print_run_summary(result=result, cut_points=tuple(cut_points))

        return {
            "cost_mode": config["cost_mode"],
            "output_path": str(output_path.resolve()),
            "distance_output_path": (
                str(distance_output_path.resolve()) if distance_output_path else None
            ),
            "n_subjects": len(result.sequences),
            "sequence_length": result.sequences.length,
            "n_clusters": result.n_clusters,
            "cluster_sizes": {
                str(row.cluster_name): int(row.n_subjects)
                for row in result.sizes.itertuples(index=False)
            },
            "cut_points": [float(value) for value in cut_points],
            "indel_cost": costs.indel,
            "missing_cost": costs.missing_cost,
        }

    @property
    def result(self) -> GridSequenceResult:
        """In-memory result of the last `preprocess(...)` call."""

        if self._last_result is None:
            raise RuntimeError("preprocess must be called before accessing result.")
        return self._last_result


@beartype
def run_grid_sequence_clustering(
    *, technique: str, params: Mapping[str, Any]
) -> dict[str, Any]:
    """Run one grid-sequence clustering technique for the JSON bridge.

    !!! warning

        This `run_*` function is primarily for the bridge and should not be
        treated as the Python library API. In Python scripts or notebooks,
        use `GridSequenceClustering` or `analyse_grid_sequences` directly.

    Args:
        technique (str): Cost mode key (`grid_costs`, `constant_costs` or
            `matrix_costs`).
        params (Mapping[str, Any]): Parameters forwarded to
            `GridSequenceClustering.fit_preprocess(...)`.

    Returns:
        dict[str, Any]: Serialised run summary.
    """

    payload = dict(params)
    payload["cost_mode"] = _normalise_cost_mode(technique)
    payload.setdefault("show_summary", False)
    return GridSequenceClustering().fit_preprocess(**payload)


@beartype
def list_grid_sequence_techniques() -> list[dict[str, Any]]:
    """Return the catalog of cost-mode techniques with parameter schemas."""

    parameters = [
        {
            "key": definition.key,
            "type": definition.type,
            "required": definition.required,
            "default": definition.default,
            "description": definition.description,
        }
        for definition in GridSequenceClustering.params_definition()
    ]
    metadata = catalog_entry(GridSequenceClustering)
    return [
        {
            "id": mode,
            "name": description,
            "tool": metadata,
            "parameters": [
                parameter
                for parameter in parameters
                if _parameter_applies(parameter["key"], mode)
            ],
        }
        for mode, description in COST_MODES.items()
    ]


def _parameter_applies(key: str, mode: str) -> bool:
    if key == "substitution_cost":
        return mode == "constant_costs"
    if key == "cost_matrix_path":
        return mode == "matrix_costs"
    return True


def _build_costs(config: Mapping[str, Any]) -> CostMatrix:
    mode = config["cost_mode"]
    indel = config["indel_cost"]
    missing_cost = config["missing_cost"]
    if mode == "constant_costs":
        return constant_costs(
            config["substitution_cost"], indel, missing_cost=missing_cost
        )
    if mode == "matrix_costs":
        table = pd.read_csv(config["cost_matrix_path"], index_col=0)
        return matrix_costs(table, indel, missing_cost=missing_cost)
    return grid_costs(indel, missing_cost=missing_cost)


@beartype
def _print_run_summary(
    *, result: GridSequenceResult, cut_points: tuple[float, ...]
) -> None:
    """Render end-of-run summary tables with Rich."""

    _CONSOLE.rule("Grid-Sequence Clustering - Run Summary")

    run_table = Table(box=box.SIMPLE_HEAD, show_header=True, header_style="bold cyan")
    run_table.add_column("Setting")
    run_table.add_column("Value", overflow="fold")
    run_table.add_row("Dyads", f"{len(result.sequences):,}")
    run_table.add_row("Sequence length", str(result.sequences.length))
    run_table.add_row("Cut points", ", ".join(f"{value:g}" for value in cut_points))
    run_table.add_row("Indel cost", f"{result.costs.indel:g}")
    run_table.add_row(
        "Missing cost",
        "-" if result.costs.missing_cost is None else f"{result.costs.missing_cost:g}",
    )
    run_table.add_row("Clusters", str(result.n_clusters))
    _CONSOLE.print(run_table)

    size_table = Table(box=box.SIMPLE_HEAD, show_header=True, header_style="bold cyan")
    size_table.add_column("Cluster")
    size_table.add_column("Dyads", justify="right")
    size_table.add_column("Share", justify="right")
    for row in result.sizes.itertuples(index=False):
        size_table.add_row(
            str(row.cluster_name), f"{row.n_subjects:,}", f"{row.share:.1%}"
        )
    _CONSOLE.print(size_table)

    distribution = result.state_distribution
    state_table = Table(
        title="Most frequent states per cluster",
        box=box.SIMPLE_HEAD,
        show_header=True,
        header_style="bold cyan",
    )
    state_table.add_column("Cluster")
    state_table.add_column("Top states", overflow="fold")
    for cluster_id, shares in distribution.iterrows():
        top = shares.sort_values(ascending=False).head(3)
        cells = [
            f"[{state_colour(str(state))}]{state}[/] {share:.0%}"
            for state, share in top.items()
            if share > 0
        ]
        state_table.add_row(str(cluster_id), "  ".join(cells))
    _CONSOLE.print(state_table)


@beartype
def _normalise_cost_mode(raw: Any) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise InputValidationError("Missing required cost mode.")
    token = raw.strip().lower().replace("-", "_")
    if token not in COST_MODES:
        choices = ", ".join(COST_MODES)
        raise InputValidationError(f"Unknown cost mode `{raw}`. Available: {choices}")
    return token


@beartype
def _as_cut_points(value: Any, defaults: GridSequenceDefaults) -> tuple[float, ...] | str:
    if value is None:
        return defaults.cut_points
    if isinstance(value, str):
        if value.strip().lower() == "quantile":
            return "quantile"
        value = [item for item in value.split(",") if item.strip()]
    if not isinstance(value, list | tuple):
        raise InputValidationError(
            "cut_points must be a list of three numbers or `quantile`."
        )
    cut_points = tuple(_as_float(item, field_name="cut_points") for item in value)
    if len(cut_points) != 3:
        raise InputValidationError("cut_points must contain exactly three values.")
    return cut_points


@beartype
def _as_missing_cost(value: Any) -> float | str | None:
    if value is None:
        return None
    if isinstance(value, str):
        token = value.strip().lower()
        if token in {"", "none", "null"}:
            return None
        if token == "auto":
            return "auto"
    return _as_float(value, field_name="missing_cost")


@beartype
def _as_path_text(value: Any) -> Any:
    if isinstance(value, Path):
        return str(value)
    return value


@beartype
def _as_required_string(values: Mapping[str, Any], key: str) -> str:
    value = values.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InputValidationError(f"Missing required parameter: {key}")
    return value.strip()


@beartype
def _as_optional_string(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        trimmed = value.strip()
        return trimmed if trimmed else None
    raise InputValidationError("Expected a string value.")


@beartype
def _as_optional_string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, list | tuple):
        parsed: list[str] = []
        for item in value:
            if not isinstance(item, str):
                raise InputValidationError("List parameters must contain strings.")
            stripped = item.strip()
            if stripped:
                parsed.append(stripped)
        return parsed
    raise InputValidationError("Expected a CSV string or string list.")


@beartype
def _as_optional_int(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    if isinstance(value, bool):
        raise InputValidationError("`n_clusters` must be an integer value.")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise InputValidationError(
                "`n_clusters` must be an integer value."
            ) from exc
    raise InputValidationError("`n_clusters` must be an integer value.")


@beartype
def _as_float(value: Any, *, field_name: str) -> float:
    if isinstance(value, bool):
        raise InputValidationError(f"`{field_name}` must be a float value.")
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str) and value.strip():
        try:
            return float(value.strip())
        except ValueError as exc:
            raise InputValidationError(
                f"`{field_name}` must be a float value."
            ) from exc
    raise InputValidationError(f"`{field_name}` must be a float value.")


@beartype
def _as_bool(value: Any, *, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return bool(value)
    if isinstance(value, str):
        token = value.strip().lower()
        if token in {"1", "true", "yes", "y", "on"}:
            return True
        if token in {"0", "false", "no", "n", "off"}:
            return False
    raise InputValidationError(f"`{field_name}` must be a boolean value.")


@beartype
def _ensure_columns(data: pd.DataFrame, required: list[str]) -> None:
    missing = [column for column in required if column not in data.columns]
    if missing:
        raise InputValidationError(
            f"Missing required columns: {', '.join(sorted(missing))}"
        )


@beartype
def _validate_csv_path(path: Path, *, field_name: str) -> None:
    if not path.exists():
        raise InputValidationError(f"{field_name} does not exist: {path}")
    if not path.is_file():
        raise InputValidationError(f"{field_name} is not a file: {path}")
    if path.suffix.lower() != ".csv":
        raise InputValidationError(f"{field_name} must point to a .csv file.")


@beartype
def _validate_output_csv_path(path: Path, *, field_name: str) -> None:
    if path.suffix.lower() != ".csv":
        raise InputValidationError(f"{field_name} must point to a .csv file.")
