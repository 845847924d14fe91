from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from dyseq.bridge.operation_registry import OperationRegistry
from dyseq.utils.errors import InputValidationError

from .tools.grid_sequences.run import (
    list_grid_sequence_techniques,
    run_grid_sequence_clustering,
)


def register_operations(registry: OperationRegistry) -> None:
    """Register sequence-analysis operation handlers on a registry."""

    registry.register(
        "sequence_analysis.grid_sequences.catalog",
        lambda _: {"techniques": list_grid_sequence_techniques()},
        description="List grid-sequence clustering techniques.",
    )
    registry.register(
        "sequence_analysis.grid_sequences.run",
        lambda params: _run_tool_operation(
            params=params, runner=run_grid_sequence_clustering
        ),
        description="Run one grid-sequence clustering technique.",
    )


def _run_tool_operation(*, params: Mapping[str, Any], runner: Any) -> dict[str, Any]:
    technique, raw_params = _extract_technique_and_params(params)
    return runner(technique=technique, params=raw_params)


def _extract_technique_and_params(
    params: Mapping[str, Any],
) -> tuple[str, dict[str, Any]]:
    technique = _as_required_string(params, "technique")
    raw_params = _as_object(params, "params")
    return technique, raw_params


def _as_required_string(params: Mapping[str, Any], key: str) -> str:
    value = params.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InputValidationError(f"Missing required string parameter: {key}")
    return value.strip()


def _as_object(params: Mapping[str, Any], key: str) -> dict[str, Any]:
    value = params.get(key, {})
    if not isinstance(value, dict):
        raise InputValidationError(f"`{key}` must be an object.")
    return value
