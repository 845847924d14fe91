from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from dyseq.sequence_analysis.tools.grid_sequences.costs import (
    CostMatrix,
    constant_costs,
    grid_costs,
    matrix_costs,
)
from dyseq.sequence_analysis.tools.grid_sequences.labeling import MISSING_STATE
from dyseq.utils.errors import (
    AlphabetMismatch,
    MalformedCostMatrix,
    TriangleInequalityWarning,
)


def test_constant_costs_fill_every_off_diagonal_entry() -> None:
    costs = constant_costs(2, 1, alphabet=("A", "B", "C"))

    assert costs.substitution_cost("A", "B") == 2.0
    assert costs.substitution_cost("C", "A") == 2.0
    assert costs.substitution_cost("B", "B") == 0.0
    assert costs.indel == 1.0
    assert not costs.with_missing


def test_grid_costs_are_manhattan_distances_between_cells() -> None:
    costs = grid_costs(3)

    assert costs.substitution_cost("A", "B") == 1.0
    assert costs.substitution_cost("A", "E") == 1.0
    assert costs.substitution_cost("A", "F") == 2.0
    assert costs.substitution_cost("A", "P") == 6.0
    assert costs.max_substitution() == 6.0


def test_auto_missing_cost_is_half_the_largest_substitution() -> None:
    costs = grid_costs(3, missing_cost="auto")

    assert costs.missing_cost == pytest.approx(3.0)
    assert costs.substitution_cost(MISSING_STATE, "A") == pytest.approx(3.0)
    assert costs.substitution_cost(MISSING_STATE, MISSING_STATE) == 0.0
    assert costs.symbols[-1] == MISSING_STATE


def test_malformed_three_by_four_matrix_is_rejected() -> None:
    matrix = [[0, 1, 2, 3], [1, 0, 1, 2], [2, 1, 0, 1]]

    with pytest.raises(MalformedCostMatrix, match="square"):
        matrix_costs(matrix, 1.0, alphabet=("A", "B", "C"))


@pytest.mark.parametrize(
    ("matrix", "message"),
    [
        ([[0.0, 1.0], [2.0, 0.0]], "symmetric"),
        ([[1.0, 1.0], [1.0, 0.0]], "diagonal"),
        ([[0.0, -1.0], [-1.0, 0.0]], "non-negative"),
        ([[0.0, np.inf], [np.inf, 0.0]], "finite"),
    ],
)
def test_invalid_matrices_are_rejected(matrix, message: str) -> None:
    with pytest.raises(MalformedCostMatrix, match=message):
        matrix_costs(np.array(matrix), 1.0, alphabet=("A", "B"))


def test_ragged_matrix_is_rejected() -> None:
    with pytest.raises(MalformedCostMatrix):
        matrix_costs([[0.0, 1.0], [1.0]], 1.0, alphabet=("A", "B"))


def test_matrix_size_must_match_alphabet() -> None:
    with pytest.raises(MalformedCostMatrix, match="alphabet has 3"):
        matrix_costs(np.zeros((2, 2)), 1.0, alphabet=("A", "B", "C"))


def test_non_positive_indel_is_rejected() -> None:
    with pytest.raises(MalformedCostMatrix, match="indel"):
        constant_costs(1.0, 0.0, alphabet=("A", "B"))


def test_labelled_frame_is_reordered_to_alphabet() -> None:
    frame = pd.DataFrame(
        [[0.0, 2.0, 1.0], [2.0, 0.0, 1.0], [1.0, 1.0, 0.0]],
        index=["C", "B", "A"],
        columns=["C", "B", "A"],
    )

    costs = matrix_costs(frame, 1.0, alphabet=("A", "B", "C"))

    assert costs.substitution_cost("B", "C") == 2.0
    assert costs.substitution_cost("A", "B") == 1.0


def test_triangle_inequality_violation_warns_but_builds() -> None:
    matrix = np.array([[0.0, 1.0, 5.0], [1.0, 0.0, 1.0], [5.0, 1.0, 0.0]])

    with pytest.warns(TriangleInequalityWarning, match="A->C"):
        costs = matrix_costs(matrix, 3.0, alphabet=("A", "B", "C"))

    assert costs.substitution_cost("A", "C") == 5.0


def test_encode_rejects_unknown_symbols() -> None:
    costs = constant_costs(1.0, 1.0, alphabet=("A", "B"))

    assert costs.encode(["B", "A"]).tolist() == [1, 0]
    with pytest.raises(AlphabetMismatch) as excinfo:
        costs.encode(["A", "Z"])
    assert excinfo.value.symbol == "Z"
    with pytest.raises(AlphabetMismatch, match=r"\*"):
        costs.encode(["A", MISSING_STATE])


def test_substitution_table_is_read_only() -> None:
    costs = grid_costs(3)

    assert isinstance(costs, CostMatrix)
    with pytest.raises(ValueError):
        costs.substitution[0, 1] = 10.0


def test_to_frame_labels_rows_and_columns() -> None:
    frame = grid_costs(3, missing_cost=1.5).to_frame()

    assert frame.shape == (17, 17)
    assert frame.loc["A", "P"] == 6.0
    assert frame.loc[MISSING_STATE, "K"] == 1.5
