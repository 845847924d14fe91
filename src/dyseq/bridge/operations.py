from __future__ import annotations

from collections.abc import Mapping
from functools import cache
from typing import Any

from dyseq.sequence_analysis.operations import (
    register_operations as register_sequence_analysis_operations,
)

from .operation_registry import OperationRegistry


@cache
def build_registry() -> OperationRegistry:
    """Return the registry holding every bridge operation."""

    registry = OperationRegistry()
    register_sequence_analysis_operations(registry)
    registry.register(
        "operations.list",
        lambda _: {"operations": registry.describe()},
        description="List registered bridge operations.",
    )
    return registry


def execute_operation(operation: str, params: Mapping[str, Any]) -> dict[str, Any]:
    """Dispatch one operation through the shared registry."""

    return build_registry().execute(operation, params)
