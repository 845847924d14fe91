from __future__ import annotations

from collections.abc import Hashable, Sequence
from dataclasses import dataclass

import numpy as np
import pandas as pd
from beartype import beartype
from scipy.cluster.hierarchy import linkage
from scipy.spatial.distance import squareform

from dyseq.utils.errors import InputValidationError, InvalidClusterCount

_TOLERANCE = 1e-9


@beartype
@dataclass(frozen=True, eq=False)
class Dendrogram:
    """Binary merge tree over subjects.

    Attributes:
        subject_ids (tuple[Hashable, ...]): Leaves, in the order used for
            linkage (ascending subject id).
        linkage_matrix (np.ndarray): SciPy linkage matrix with `n - 1` rows of
            `(left, right, height, size)`. Leaves are `0..n-1`; the node
            created by row `r` is `n + r`.
    """

    subject_ids: tuple[Hashable, ...]
    linkage_matrix: np.ndarray

    @property
    def n_subjects(self) -> int:
        return len(self.subject_ids)

    @property
    def heights(self) -> np.ndarray:
        """Merge heights in merge order."""

        return self.linkage_matrix[:, 2].copy()

    def merges(self) -> pd.DataFrame:
        """Return the merge table with one row per internal node."""

        return pd.DataFrame(
            {
                "step": np.arange(1, self.n_subjects, dtype=int),
                "left": self.linkage_matrix[:, 0].astype(int),
                "right": self.linkage_matrix[:, 1].astype(int),
                "height": self.linkage_matrix[:, 2],
                "size": self.linkage_matrix[:, 3].astype(int),
            }
        )


@beartype
def build(distances: pd.DataFrame) -> Dendrogram:
    """Agglomerate subjects with Ward's minimum-variance linkage.

    Only pairwise distances are available, so merges follow the Lance-Williams
    update for Ward linkage, which merges the pair of clusters `A, B`
    minimising `|A||B| / (|A| + |B|) * ||c_A - c_B||^2`.

    Subjects are sorted by identifier before linkage, so the same distance
    matrix always yields the same tree regardless of its row order.

    Args:
        distances (pd.DataFrame): Square symmetric distance matrix whose index
            and columns hold the same subject ids.

    Returns:
        Dendrogram: Merge tree and heights.
    """

    _validate_distances(distances)
    ordered = distances.sort_index(axis=0).sort_index(axis=1)
    subject_ids = tuple(ordered.index.to_list())
    if len(subject_ids) == 1:
        return Dendrogram(subject_ids=subject_ids, linkage_matrix=np.empty((0, 4)))

    matrix = ordered.to_numpy(dtype=float)
    condensed = squareform(matrix, checks=False)
    tree = linkage(condensed, method="ward")
    return Dendrogram(subject_ids=subject_ids, linkage_matrix=tree)


@beartype
def cut(
    dendrogram: Dendrogram,
    k: int,
    *,
    cluster_names: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Cut the tree into exactly `k` clusters.

    The `k - 1` highest merges are undone by replaying only the first `n - k`
    merges. Clusters are numbered `1..k` in order of their first member in
    `dendrogram.subject_ids`.

    Args:
        dendrogram (Dendrogram): Tree produced by `build`.
        k (int): Number of clusters.
        cluster_names (Sequence[str] | None): Optional names for clusters
            `1..k`; defaults to `cluster_1`, `cluster_2`, ...

    Returns:
        pd.DataFrame: Columns `subject_id`, `cluster_id`, `cluster_name`.

    Raises:
        InvalidClusterCount: If `k < 1` or `k > n`.
    """

    n_subjects = dendrogram.n_subjects
    validate_cluster_count(k, n_subjects)
    names = _normalise_cluster_names(k, cluster_names)

    parent = list(range(2 * n_subjects - 1))

    def find(node: int) -> int:
        while parent[node] != node:
            parent[node] = parent[parent[node]]
            node = parent[node]
        return node

    for step, row in enumerate(dendrogram.linkage_matrix[: n_subjects - k]):
        merged = n_subjects + step
        parent[find(int(row[0]))] = merged
        parent[find(int(row[1]))] = merged

    labels: dict[int, int] = {}
    cluster_ids = []
    for leaf in range(n_subjects):
        root = find(leaf)
        cluster_ids.append(labels.setdefault(root, len(labels) + 1))

    return pd.DataFrame(
        {
            "subject_id": list(dendrogram.subject_ids),
            "cluster_id": cluster_ids,
            "cluster_name": [names[cluster_id - 1] for cluster_id in cluster_ids],
        }
    )


@beartype
def validate_cluster_count(k: int, n_subjects: int) -> None:
    """Raise `InvalidClusterCount` unless `1 <= k <= n_subjects`."""

    if k < 1 or k > n_subjects:
        raise InvalidClusterCount(
            f"Cluster count must be between 1 and {n_subjects}; got {k}."
        )


def _normalise_cluster_names(
    k: int, cluster_names: Sequence[str] | None
) -> tuple[str, ...]:
    if cluster_names is None:
        return tuple(f"cluster_{idx}" for idx in range(1, k + 1))
    if len(cluster_names) != k:
        raise InputValidationError("cluster_names length must match k.")
    return tuple(cluster_names)


def _validate_distances(distances: pd.DataFrame) -> None:
    if distances.empty:
        raise InputValidationError("Distance matrix is empty.")
    if distances.shape[0] != distances.shape[1]:
        raise InputValidationError(
            f"Distance matrix must be square; got shape {distances.shape}."
        )
    if not distances.index.is_unique:
        raise InputValidationError("Distance matrix subject ids must be unique.")
    if set(distances.index) != set(distances.columns):
        raise InputValidationError(
            "Distance matrix index and columns must hold the same subject ids."
        )
    aligned = distances.loc[distances.index, distances.index]
    try:
        matrix = aligned.to_numpy(dtype=float)
    except (TypeError, ValueError) as exc:
        raise InputValidationError("Distance matrix must be numeric.") from exc
    if not np.isfinite(matrix).all():
        raise InputValidationError("Distance matrix entries must be finite.")
    if (matrix < 0).any():
        raise InputValidationError("Distance matrix entries must be non-negative.")
    if not np.allclose(np.diag(matrix), 0.0, atol=_TOLERANCE):
        raise InputValidationError("Distance matrix diagonal must be zero.")
    if not np.allclose(matrix, matrix.T, atol=_TOLERANCE):
        raise InputValidationError("Distance matrix must be symmetric.")
