from __future__ import annotations

import math
import warnings
from collections.abc import Sequence
from dataclasses import dataclass
from numbers import Real
from typing import Literal

import numpy as np
import pandas as pd
from beartype import beartype

from dyseq.utils.errors import (
    AlphabetMismatch,
    InputValidationError,
    MalformedCostMatrix,
    TriangleInequalityWarning,
)

from .labeling import MISSING_STATE, STATE_ALPHABET, grid_position

MissingCost = Real | Literal["auto"] | None

_TOLERANCE = 1e-9


@beartype
@dataclass(frozen=True, eq=False)
class CostMatrix:
    """Validated substitution and indel costs over a state alphabet.

    Construct through `constant_costs`, `matrix_costs` or `grid_costs`
    rather than directly.

    Attributes:
        alphabet (tuple[str, ...]): Ordered state symbols indexing `substitution`.
        substitution (np.ndarray): Square, symmetric, zero-diagonal costs.
        indel (float): Cost of inserting or deleting one state.
        missing_cost (float | None): Cost of substituting `MISSING_STATE` for
            any state. `None` means missing states are not accepted.
    """

    alphabet: tuple[str, ...]
    substitution: np.ndarray
    indel: float
    missing_cost: float | None = None

    def __post_init__(self) -> None:
        _validate_alphabet(self.alphabet)
        _validate_substitution(self.substitution, size=len(self.alphabet))
        if not math.isfinite(self.indel) or self.indel <= 0:
            raise MalformedCostMatrix("indel cost must be a positive finite number.")
        if self.missing_cost is not None and (
            not math.isfinite(self.missing_cost) or self.missing_cost < 0
        ):
            raise MalformedCostMatrix(
                "missing cost must be a non-negative finite number."
            )
        matrix = np.array(self.substitution, dtype=float)
        matrix.setflags(write=False)
        object.__setattr__(self, "substitution", matrix)
        _warn_on_triangle_violation(matrix, self.alphabet)

    @property
    def with_missing(self) -> bool:
        """Whether `MISSING_STATE` is an accepted symbol."""

        return self.missing_cost is not None

    @property
    def symbols(self) -> tuple[str, ...]:
        """Alphabet plus `MISSING_STATE` when missing states are accepted."""

        if self.with_missing:
            return (*self.alphabet, MISSING_STATE)
        return self.alphabet

    def extended_matrix(self) -> np.ndarray:
        """Return the substitution table indexed by `symbols`.

        The missing row and column hold `missing_cost`; substituting a missing
        state for another missing state costs nothing.
        """

        if not self.with_missing:
            return self.substitution
        size = len(self.alphabet)
        extended = np.full((size + 1, size + 1), float(self.missing_cost))
        extended[:size, :size] = self.substitution
        extended[size, size] = 0.0
        return extended

    def substitution_cost(self, first: str, second: str) -> float:
        """Return the cost of substituting `first` by `second`."""

        lookup = {symbol: idx for idx, symbol in enumerate(self.symbols)}
        for symbol in (first, second):
            if symbol not in lookup:
                raise AlphabetMismatch(symbol, self.symbols)
        return float(self.extended_matrix()[lookup[first], lookup[second]])

    def encode(self, sequence: Sequence[str]) -> np.ndarray:
        """Translate a state sequence into integer codes over `symbols`.

        Raises:
            AlphabetMismatch: If a symbol is absent from `symbols`, including
                `MISSING_STATE` when no missing cost is configured.
        """

        lookup = {symbol: idx for idx, symbol in enumerate(self.symbols)}
        codes = np.empty(len(sequence), dtype=np.intp)
        for position, symbol in enumerate(sequence):
            code = lookup.get(symbol)
            if code is None:
                raise AlphabetMismatch(str(symbol), self.symbols)
            codes[position] = code
        return codes

    def max_substitution(self) -> float:
        """Largest off-diagonal substitution cost."""

        return _max_off_diagonal(self.substitution)

    def to_frame(self) -> pd.DataFrame:
        """Return the substitution table (including missing) as a labelled frame."""

        return pd.DataFrame(
            self.extended_matrix(), index=list(self.symbols), columns=list(self.symbols)
        )


@beartype
def constant_costs(
    substitution: Real,
    indel: Real,
    *,
    alphabet: Sequence[str] = STATE_ALPHABET,
    missing_cost: MissingCost = None,
) -> CostMatrix:
    """Build costs where every distinct pair of states costs `substitution`.

    Args:
        substitution (float): Off-diagonal substitution cost.
        indel (float): Insertion/deletion cost.
        alphabet (Sequence[str]): State symbols.
        missing_cost (float | "auto" | None): Missing-state cost; `"auto"`
            resolves to half the largest substitution cost.

    Returns:
        CostMatrix: Validated costs.
    """

    size = len(alphabet)
    matrix = np.full((size, size), float(substitution))
    np.fill_diagonal(matrix, 0.0)
    return _build(alphabet, matrix, indel, missing_cost)


@beartype
def matrix_costs(
    matrix: np.ndarray | pd.DataFrame | Sequence[Sequence[Real]],
    indel: Real,
    *,
    alphabet: Sequence[str] = STATE_ALPHABET,
    missing_cost: MissingCost = None,
) -> CostMatrix:
    """Build costs from an explicit substitution matrix.

    A labelled `DataFrame` whose index and columns cover the alphabet is
    reordered to the alphabet first; any other input is taken positionally.

    Raises:
        MalformedCostMatrix: If the matrix is ragged, non-square, asymmetric,
            has a non-zero diagonal or negative entries.
    """

    if isinstance(matrix, pd.DataFrame):
        labels = [str(label) for label in alphabet]
        index = [str(label) for label in matrix.index]
        columns = [str(label) for label in matrix.columns]
        if set(labels) <= set(index) and set(labels) <= set(columns):
            frame = matrix.copy()
            frame.index = index
            frame.columns = columns
            matrix = frame.loc[labels, labels]
        raw = matrix.to_numpy()
    else:
        raw = matrix
    try:
        array = np.asarray(raw, dtype=float)
    except (TypeError, ValueError) as exc:
        raise MalformedCostMatrix(
            f"Cost matrix must be a rectangular numeric table: {exc}"
        ) from exc
    return _build(alphabet, array, indel, missing_cost)


@beartype
def grid_costs(
    indel: Real,
    *,
    missing_cost: MissingCost = None,
) -> CostMatrix:
    """Build costs from Manhattan distances between 4x4 grid cells.

    Neighbouring cells cost 1; opposite corners cost 6.
    """

    positions = np.array([grid_position(symbol) for symbol in STATE_ALPHABET])
    matrix = np.abs(positions[:, None, :] - positions[None, :, :]).sum(axis=2)
    return _build(STATE_ALPHABET, matrix.astype(float), indel, missing_cost)


def _build(
    alphabet: Sequence[str],
    matrix: np.ndarray,
    indel: Real,
    missing_cost: MissingCost,
) -> CostMatrix:
    symbols = tuple(str(symbol) for symbol in alphabet)
    _validate_substitution(matrix, size=len(symbols))
    if missing_cost == "auto":
        resolved: float | None = _max_off_diagonal(matrix) / 2.0
    elif missing_cost is None:
        resolved = None
    else:
        resolved = float(missing_cost)
    return CostMatrix(
        alphabet=symbols,
        substitution=matrix,
        indel=float(indel),
        missing_cost=resolved,
    )


def _validate_alphabet(alphabet: tuple[str, ...]) -> None:
    if not alphabet:
        raise InputValidationError("alphabet must contain at least one state.")
    if len(set(alphabet)) != len(alphabet):
        raise InputValidationError("alphabet symbols must be unique.")
    if MISSING_STATE in alphabet:
        raise InputValidationError(
            f"`{MISSING_STATE}` is reserved for missing states and cannot be "
            "part of the alphabet."
        )


def _validate_substitution(matrix: np.ndarray, *, size: int) -> None:
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise MalformedCostMatrix(
            f"Cost matrix must be square; got shape {matrix.shape}."
        )
    if matrix.shape[0] != size:
        raise MalformedCostMatrix(
            f"Cost matrix is {matrix.shape[0]}x{matrix.shape[1]} but the "
            f"alphabet has {size} states."
        )
    if not np.isfinite(matrix).all():
        raise MalformedCostMatrix("Cost matrix entries must be finite.")
    if (matrix < 0).any():
        raise MalformedCostMatrix("Cost matrix entries must be non-negative.")
    if not np.allclose(np.diag(matrix), 0.0, atol=_TOLERANCE):
        raise MalformedCostMatrix("Cost matrix diagonal must be zero.")
    if not np.allclose(matrix, matrix.T, atol=_TOLERANCE):
        raise MalformedCostMatrix("Cost matrix must be symmetric.")


def _max_off_diagonal(matrix: np.ndarray) -> float:
    if matrix.shape[0] < 2:
        return 0.0
    mask = ~np.eye(matrix.shape[0], dtype=bool)
    return float(matrix[mask].max())


def _warn_on_triangle_violation(matrix: np.ndarray, alphabet: tuple[str, ...]) -> None:
    # cost[i, j] <= cost[i, k] + cost[k, j] for every intermediate k
    detour = (matrix[:, :, None] + matrix[None, :, :]).min(axis=1)
    violations = np.argwhere(matrix > detour + _TOLERANCE)
    if violations.size == 0:
        return
    first, second = violations[0]
    warnings.warn(
        "Substitution costs violate the triangle inequality "
        f"(e.g. {alphabet[first]}->{alphabet[second]}); optimal-matching "
        "distances may not be a metric.",
        TriangleInequalityWarning,
        stacklevel=3,
    )

