from __future__ import annotations

import math
from collections.abc import Sequence
from numbers import Real
from typing import Any

import numpy as np
import pandas as pd
from beartype import beartype

from dyseq.utils.errors import InputValidationError

GRID_SIZE = 4
STATE_ALPHABET: tuple[str, ...] = tuple("ABCDEFGHIJKLMNOP")
MISSING_STATE = "*"


@beartype
def grid_position(symbol: str) -> tuple[int, int]:
    """Return the `(row, col)` grid cell of a state symbol.

    Rows index the first partner's bin and columns the second partner's bin.
    """

    try:
        index = STATE_ALPHABET.index(symbol)
    except ValueError as exc:
        raise InputValidationError(f"Unknown grid state `{symbol}`.") from exc
    return divmod(index, GRID_SIZE)


@beartype
class StateGrid:
    """Map paired partner values onto the 16 cells of a 4x4 grid.

    Three ascending cut points split each partner's scale into four bins.
    Bins are lower-inclusive, so a value equal to a cut point falls into the
    upper bin:

    ```text
    v <  c1        -> 0
    c1 <= v < c2   -> 1
    c2 <= v < c3   -> 2
    v >= c3        -> 3
    ```

    The state symbol is `STATE_ALPHABET[bin(v1) * 4 + bin(v2)]`; a missing
    value on either axis yields `MISSING_STATE`.

    Args:
        cut_points (Sequence[Real]): Exactly three strictly ascending,
            finite thresholds.

    Examples:
        ```python
        grid = StateGrid((2.0, 3.0, 4.0))
        grid.label(1.5, 4.2)  # "D"
        ```
    """

    def __init__(self, cut_points: Sequence[Real]) -> None:
        cuts = tuple(float(value) for value in cut_points)
        if len(cuts) != GRID_SIZE - 1:
            raise InputValidationError(
                f"cut_points must contain exactly {GRID_SIZE - 1} values; "
                f"got {len(cuts)}."
            )
        if not all(math.isfinite(value) for value in cuts):
            raise InputValidationError("cut_points must be finite numbers.")
        if any(low >= high for low, high in zip(cuts, cuts[1:])):
            raise InputValidationError("cut_points must be strictly ascending.")
        self.cut_points = cuts

    def bin(self, value: Real) -> int:
        """Return the 0-based bin index of one value."""

        return int(np.searchsorted(self.cut_points, value, side="right"))

    def label(self, first: Any, second: Any) -> str:
        """Label one time step from the two partners' values."""

        if _is_missing(first) or _is_missing(second):
            return MISSING_STATE
        row = self.bin(float(first))
        col = self.bin(float(second))
        return STATE_ALPHABET[row * GRID_SIZE + col]

    def label_frame(
        self,
        data: pd.DataFrame,
        first_col: str,
        second_col: str,
    ) -> pd.Series:
        """Label every row of a long-format table.

        Args:
            data (pd.DataFrame): One row per subject and time point.
            first_col (str): First partner's value column.
            second_col (str): Second partner's value column.

        Returns:
            pd.Series: State symbols aligned with `data.index`.
        """

        missing = [col for col in (first_col, second_col) if col not in data.columns]
        if missing:
            raise InputValidationError(
                f"Missing required columns: {', '.join(missing)}"
            )
        first = pd.to_numeric(data[first_col], errors="coerce").to_numpy(dtype=float)
        second = pd.to_numeric(data[second_col], errors="coerce").to_numpy(
            dtype=float
        )
        rows = np.searchsorted(self.cut_points, first, side="right")
        cols = np.searchsorted(self.cut_points, second, side="right")
        alphabet = np.asarray(STATE_ALPHABET, dtype=object)
        labels = alphabet[rows * GRID_SIZE + cols]
        labels[np.isnan(first) | np.isnan(second)] = MISSING_STATE
        return pd.Series(labels, index=data.index, name="state", dtype=object)


@beartype
def quantile_cut_points(
    values: Sequence[Real] | np.ndarray | pd.Series,
) -> tuple[float, float, float]:
    """Derive cut points from the quartiles of pooled partner values.

    Args:
        values: Pooled scores from both partners; NaNs are ignored.

    Returns:
        tuple[float, float, float]: 25th, 50th and 75th percentiles.
    """

    array = np.asarray(values, dtype=float)
    array = array[~np.isnan(array)]
    if array.size == 0:
        raise InputValidationError("Cannot derive cut points from empty values.")
    q1, q2, q3 = (float(value) for value in np.quantile(array, [0.25, 0.5, 0.75]))
    if not q1 < q2 < q3:
        raise InputValidationError(
            "Quartile cut points are not strictly ascending; the values have "
            "too little spread. Supply cut_points explicitly."
        )
    return q1, q2, q3


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False
