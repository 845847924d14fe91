from __future__ import annotations

import pandas as pd
import pytest

from dyseq.sequence_analysis.tools.grid_sequences.costs import grid_costs
from dyseq.sequence_analysis.tools.grid_sequences.describe import (
    cluster_sizes,
    state_distribution,
)
from dyseq.sequence_analysis.tools.grid_sequences.pipeline import (
    analyse_grid_sequences,
)
from dyseq.utils.errors import InputValidationError, InvalidClusterCount


def _analyse(frame: pd.DataFrame, **overrides):
    params = {
        "id_col": "dyad",
        "time_col": "day",
        "value_cols": ["partner_a", "partner_b"],
        "cut_points": (2.0, 3.0, 4.0),
        "costs": grid_costs(3.0, missing_cost="auto"),
        "n_clusters": 2,
    }
    params.update(overrides)
    return analyse_grid_sequences(frame, **params)


def test_low_and_high_dyads_separate(dyad_frame: pd.DataFrame) -> None:
    result = _analyse(dyad_frame)

    mapping = dict(
        zip(result.assignments["subject_id"], result.assignments["cluster_id"])
    )
    assert mapping == {1: 1, 2: 1, 3: 1, 4: 2, 5: 2, 6: 2}
    assert result.n_clusters == 2


def test_intermediate_outputs_are_exposed(dyad_frame: pd.DataFrame) -> None:
    result = _analyse(dyad_frame)

    assert result.sequences.sequences[1] == ("A", "A", "A", "B")
    assert result.sequences.sequences[2] == ("A", "*", "A", "A")
    assert result.sequences.sequences[4] == ("P", "P", "P", "O")
    assert result.distances.shape == (6, 6)
    assert result.distances.loc[1, 2] == pytest.approx(1.0)
    assert result.distances.loc[4, 6] == 0.0
    assert result.dendrogram.n_subjects == 6


def test_sizes_and_state_distribution(dyad_frame: pd.DataFrame) -> None:
    result = _analyse(dyad_frame)

    assert result.sizes["n_subjects"].tolist() == [3, 3]
    assert result.sizes["share"].tolist() == pytest.approx([0.5, 0.5])
    distribution = result.state_distribution
    assert distribution.sum(axis=1).tolist() == pytest.approx([1.0, 1.0])
    assert distribution.loc[1].idxmax() == "A"
    assert distribution.loc[2].idxmax() == "P"
    assert distribution.loc[1, "A"] == pytest.approx(10 / 12)


def test_describe_helpers_work_on_their_own(dyad_frame: pd.DataFrame) -> None:
    result = _analyse(dyad_frame, n_clusters=3)

    sizes = cluster_sizes(result.assignments)
    assert sizes["n_subjects"].sum() == 6
    distribution = state_distribution(result.sequences, result.assignments)
    assert list(distribution.index) == [1, 2, 3]


def test_custom_cluster_names_flow_through(dyad_frame: pd.DataFrame) -> None:
    result = _analyse(dyad_frame, cluster_names=["low", "high"])

    assert result.sizes["cluster_name"].tolist() == ["low", "high"]


def test_cluster_count_checked_before_alignment(dyad_frame: pd.DataFrame) -> None:
    with pytest.raises(InvalidClusterCount):
        _analyse(dyad_frame, n_clusters=7)


def test_value_cols_must_name_two_columns(dyad_frame: pd.DataFrame) -> None:
    with pytest.raises(InputValidationError, match="exactly two"):
        _analyse(dyad_frame, value_cols=["partner_a"])


def test_missing_states_need_a_missing_cost(dyad_frame: pd.DataFrame) -> None:
    with pytest.raises(InputValidationError, match=r"\*"):
        _analyse(dyad_frame, costs=grid_costs(3.0))
