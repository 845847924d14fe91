from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from dyseq.sequence_analysis.tools.grid_sequences.labeling import (
    MISSING_STATE,
    STATE_ALPHABET,
    StateGrid,
    grid_position,
    quantile_cut_points,
)
from dyseq.utils.errors import InputValidationError


@pytest.fixture
def grid() -> StateGrid:
    return StateGrid((2, 3, 4))


def test_alphabet_has_sixteen_states_and_distinct_sentinel() -> None:
    assert len(STATE_ALPHABET) == 16
    assert MISSING_STATE not in STATE_ALPHABET


@pytest.mark.parametrize(
    ("first", "second", "expected"),
    [
        (1.5, 4.2, "D"),
        (2.0, 2.0, "F"),
        (4.0, 1.0, "M"),
        (5.0, 5.0, "P"),
        (1.0, 1.0, "A"),
        (2.99, 3.0, "G"),
    ],
)
def test_label_bins_are_lower_inclusive(
    grid: StateGrid, first: float, second: float, expected: str
) -> None:
    assert grid.label(first, second) == expected


@pytest.mark.parametrize("first,second", [(None, 3.0), (np.nan, 1.0), (1.0, pd.NA)])
def test_missing_value_yields_sentinel(grid: StateGrid, first, second) -> None:
    assert grid.label(first, second) == MISSING_STATE


@pytest.mark.parametrize("cuts", [(1.0, 2.0), (3.0, 2.0, 4.0), (1.0, 1.0, 2.0)])
def test_invalid_cut_points_are_rejected(cuts) -> None:
    with pytest.raises(InputValidationError):
        StateGrid(cuts)


def test_label_frame_matches_scalar_labels(grid: StateGrid) -> None:
    frame = pd.DataFrame(
        {"a": [1.0, 2.5, np.nan, 4.5], "b": [1.0, 3.5, 2.0, 0.5]},
        index=[10, 11, 12, 13],
    )

    labels = grid.label_frame(frame, "a", "b")

    assert labels.to_list() == ["A", "G", MISSING_STATE, "M"]
    assert labels.index.to_list() == [10, 11, 12, 13]
    assert labels.to_list() == [
        grid.label(a, b) for a, b in zip(frame["a"], frame["b"])
    ]


def test_label_frame_requires_columns(grid: StateGrid) -> None:
    with pytest.raises(InputValidationError, match="Missing required columns"):
        grid.label_frame(pd.DataFrame({"a": [1.0]}), "a", "b")


def test_grid_position_round_trips_symbol_index() -> None:
    assert grid_position("A") == (0, 0)
    assert grid_position("G") == (1, 2)
    assert grid_position("P") == (3, 3)
    with pytest.raises(InputValidationError):
        grid_position(MISSING_STATE)


def test_quantile_cut_points_use_pooled_quartiles() -> None:
    assert quantile_cut_points([1.0, 2.0, np.nan, 3.0, 4.0, 5.0]) == pytest.approx(
        (2.0, 3.0, 4.0)
    )


def test_quantile_cut_points_reject_flat_values() -> None:
    with pytest.raises(InputValidationError, match="strictly ascending"):
        quantile_cut_points([2.0, 2.0, 2.0, 2.0])
