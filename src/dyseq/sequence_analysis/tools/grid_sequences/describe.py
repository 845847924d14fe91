from __future__ import annotations

import pandas as pd
from beartype import beartype

from dyseq.utils.errors import InputValidationError

from .assembly import SequenceSet


@beartype
def cluster_sizes(assignments: pd.DataFrame) -> pd.DataFrame:
    """Count subjects per cluster.

    Returns:
        pd.DataFrame: Columns `cluster_id`, `cluster_name`, `n_subjects`,
        `share`, ordered by `cluster_id`.
    """

    _ensure_assignment_columns(assignments)
    sizes = (
        assignments.groupby(["cluster_id", "cluster_name"], sort=True)
        .size()
        .rename("n_subjects")
        .reset_index()
    )
    sizes["share"] = sizes["n_subjects"] / sizes["n_subjects"].sum()
    return sizes


@beartype
def state_distribution(
    sequence_set: SequenceSet,
    assignments: pd.DataFrame,
) -> pd.DataFrame:
    """Relative frequency of every state within each cluster.

    All time points of all member sequences are pooled.

    Returns:
        pd.DataFrame: One row per `cluster_id`, one column per observed state;
        rows sum to 1.
    """

    _ensure_assignment_columns(assignments)
    membership = assignments.set_index("subject_id")["cluster_id"]
    unknown = [sid for sid in sequence_set.subject_ids if sid not in membership.index]
    if unknown:
        raise InputValidationError(
            f"Subjects without a cluster assignment: {unknown[:5]}"
        )
    long = (
        sequence_set.to_frame()
        .reset_index()
        .melt(id_vars="subject_id", var_name="time", value_name="state")
    )
    long["cluster_id"] = long["subject_id"].map(membership)
    counts = pd.crosstab(long["cluster_id"], long["state"])
    return counts.div(counts.sum(axis=1), axis=0).sort_index(axis=1)


def _ensure_assignment_columns(assignments: pd.DataFrame) -> None:
    required = ["subject_id", "cluster_id", "cluster_name"]
    missing = [col for col in required if col not in assignments.columns]
    if missing:
        raise InputValidationError(
            f"Missing required assignment columns: {', '.join(missing)}"
        )
