from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from dyseq.sequence_analysis.tools.grid_sequences.costs import (  # noqa: E402
    CostMatrix,
    matrix_costs,
)


def _dyad_rows(dyad: int, first: list[float], second: list[float]) -> list[dict]:
    return [
        {"dyad": dyad, "day": day, "partner_a": a, "partner_b": b}
        for day, (a, b) in enumerate(zip(first, second), start=1)
    ]


@pytest.fixture
def dyad_frame() -> pd.DataFrame:
    """Six dyads over four days: three low-low, three high-high."""

    rows: list[dict] = []
    rows += _dyad_rows(1, [1.0, 1.0, 1.0, 1.0], [1.0, 1.0, 1.0, 1.0])
    rows += _dyad_rows(2, [1.0, 1.0, 1.0, 1.0], [1.0, 1.0, 1.0, 2.5])
    rows += _dyad_rows(3, [1.0, np.nan, 1.0, 1.0], [1.0, 1.0, 1.0, 1.0])
    rows += _dyad_rows(4, [5.0, 5.0, 5.0, 5.0], [5.0, 5.0, 5.0, 5.0])
    rows += _dyad_rows(5, [5.0, 5.0, 5.0, 5.0], [5.0, 5.0, 5.0, 3.5])
    rows += _dyad_rows(6, [5.0, 5.0, 5.0, 5.0], [5.0, 5.0, 5.0, 5.0])
    return pd.DataFrame(rows)


@pytest.fixture
def line_costs() -> CostMatrix:
    """States A-D on a line; substitution cost is the index difference."""

    positions = np.arange(4)
    matrix = np.abs(positions[:, None] - positions[None, :]).astype(float)
    return matrix_costs(matrix, 2.0, alphabet=("A", "B", "C", "D"))
