from __future__ import annotations

import importlib
from typing import Any

from dyseq.utils.templates.tools.sequence_analysis import (
    SequenceAnalysisTool,
    ToolParameterDefinition,
)

_GRID_SEQUENCES = "dyseq.sequence_analysis.tools.grid_sequences"

_LAZY_EXPORTS: dict[str, tuple[str, str]] = {
    "CostMatrix": (f"{_GRID_SEQUENCES}.costs", "CostMatrix"),
    "Dendrogram": (f"{_GRID_SEQUENCES}.clustering", "Dendrogram"),
    "GridSequenceClustering": (f"{_GRID_SEQUENCES}.run", "GridSequenceClustering"),
    "GridSequenceResult": (f"{_GRID_SEQUENCES}.pipeline", "GridSequenceResult"),
    "SequenceSet": (f"{_GRID_SEQUENCES}.assembly", "SequenceSet"),
    "StateGrid": (f"{_GRID_SEQUENCES}.labeling", "StateGrid"),
    "analyse_grid_sequences": (f"{_GRID_SEQUENCES}.pipeline", "analyse_grid_sequences"),
    "assemble_sequences": (f"{_GRID_SEQUENCES}.assembly", "assemble_sequences"),
    "build_dendrogram": (f"{_GRID_SEQUENCES}.clustering", "build"),
    "constant_costs": (f"{_GRID_SEQUENCES}.costs", "constant_costs"),
    "cut_dendrogram": (f"{_GRID_SEQUENCES}.clustering", "cut"),
    "grid_costs": (f"{_GRID_SEQUENCES}.costs", "grid_costs"),
    "list_grid_sequence_techniques": (
        f"{_GRID_SEQUENCES}.run",
        "list_grid_sequence_techniques",
    ),
    "matrix_costs": (f"{_GRID_SEQUENCES}.costs", "matrix_costs"),
    "om_distance": (f"{_GRID_SEQUENCES}.optimal_matching", "om_distance"),
    "pairwise_distances": (f"{_GRID_SEQUENCES}.optimal_matching", "pairwise_distances"),
}

__all__ = [
    "CostMatrix",
    "Dendrogram",
    "GridSequenceClustering",
    "GridSequenceResult",
    "SequenceAnalysisTool",
    "SequenceSet",
    "StateGrid",
    "ToolParameterDefinition",
    "analyse_grid_sequences",
    "assemble_sequences",
    "build_dendrogram",
    "constant_costs",
    "cut_dendrogram",
    "grid_costs",
    "list_grid_sequence_techniques",
    "matrix_costs",
    "om_distance",
    "pairwise_distances",
]


def __getattr__(name: str) -> Any:
    target = _LAZY_EXPORTS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attribute = target
    value = getattr(importlib.import_module(module_name), attribute)
    globals()[name] = value
    return value
