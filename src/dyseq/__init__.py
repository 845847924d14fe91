from __future__ import annotations

from dyseq.utils.errors import (
    AlphabetMismatch,
    DegenerateSubstitutionCost,
    InputValidationError,
    InvalidClusterCount,
    LibraryError,
    MalformedCostMatrix,
    OperationNotFoundError,
    TriangleInequalityWarning,
)

__version__ = "0.1.0"

__all__ = [
    "AlphabetMismatch",
    "DegenerateSubstitutionCost",
    "InputValidationError",
    "InvalidClusterCount",
    "LibraryError",
    "MalformedCostMatrix",
    "OperationNotFoundError",
    "TriangleInequalityWarning",
]
