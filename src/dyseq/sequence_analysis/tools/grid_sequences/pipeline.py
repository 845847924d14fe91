from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from numbers import Real

import pandas as pd
from beartype import beartype

from dyseq.utils.errors import InputValidationError

from .assembly import SequenceSet, assemble_sequences
from .clustering import Dendrogram, build, cut, validate_cluster_count
from .costs import CostMatrix
from .describe import cluster_sizes, state_distribution
from .labeling import StateGrid
from .optimal_matching import pairwise_distances


@beartype
@dataclass(frozen=True)
class GridSequenceResult:
    """Outputs of one grid-sequence clustering run.

    Attributes:
        sequences (SequenceSet): Labelled sequences, one per dyad.
        costs (CostMatrix): Costs used for alignment.
        distances (pd.DataFrame): Pairwise optimal-matching distances.
        dendrogram (Dendrogram): Ward merge tree.
        assignments (pd.DataFrame): `subject_id`, `cluster_id`, `cluster_name`.
        sizes (pd.DataFrame): Cluster sizes and shares.
        state_distribution (pd.DataFrame): Per-cluster state frequencies.
    """

    sequences: SequenceSet
    costs: CostMatrix
    distances: pd.DataFrame
    dendrogram: Dendrogram
    assignments: pd.DataFrame
    sizes: pd.DataFrame
    state_distribution: pd.DataFrame

    @property
    def n_clusters(self) -> int:
        return int(self.assignments["cluster_id"].nunique())


@beartype
def analyse_grid_sequences(
    data: pd.DataFrame,
    *,
    id_col: str,
    time_col: str,
    value_cols: Sequence[str],
    cut_points: Sequence[Real],
    costs: CostMatrix,
    n_clusters: int,
    cluster_names: Sequence[str] | None = None,
) -> GridSequenceResult:
    """Label, align and cluster dyadic time series in memory.

    High-level algorithm (pseudocode):

    ```text
    1) Label every (dyad, time) row with a grid state from both partners' values.
    2) Pivot to one equal-length state sequence per dyad.
    3) Compute pairwise optimal-matching distances with the supplied costs.
    4) Build a Ward dendrogram and cut it into `n_clusters` groups.
    5) Summarise cluster sizes and state distributions.
    ```

    Args:
        data (pd.DataFrame): Long table, one row per dyad and time point.
        id_col (str): Dyad identifier column.
        time_col (str): Time index column.
        value_cols (Sequence[str]): Exactly two columns: first partner's
            value, then second partner's value.
        cut_points (Sequence[Real]): Three ascending grid thresholds.
        costs (CostMatrix): Alignment costs over the 16 grid states.
        n_clusters (int): Number of clusters to cut.
        cluster_names (Sequence[str] | None): Optional cluster names.

    Returns:
        GridSequenceResult: Every intermediate and final output.
    """

    value_cols = list(value_cols)
    if len(value_cols) != 2:
        raise InputValidationError(
            "value_cols must name exactly two columns (first partner, second partner)."
        )
    missing = [col for col in (id_col, time_col, *value_cols) if col not in data.columns]
    if missing:
        raise InputValidationError(f"Missing required columns: {', '.join(missing)}")

    grid = StateGrid(cut_points)
    labelled = data[[id_col, time_col]].copy()
    labelled["state"] = grid.label_frame(data, value_cols[0], value_cols[1])
    sequence_set = assemble_sequences(
        labelled, id_col=id_col, time_col=time_col, state_col="state"
    )
    validate_cluster_count(n_clusters, len(sequence_set))

    distances = pairwise_distances(
        sequence_set.sequences, costs, subject_ids=sequence_set.subject_ids
    )
    dendrogram = build(distances)
    assignments = cut(dendrogram, n_clusters, cluster_names=cluster_names)
    return GridSequenceResult(
        sequences=sequence_set,
        costs=costs,
        distances=distances,
        dendrogram=dendrogram,
        assignments=assignments,
        sizes=cluster_sizes(assignments),
        state_distribution=state_distribution(sequence_set, assignments),
    )

