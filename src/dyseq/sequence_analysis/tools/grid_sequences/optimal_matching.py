from __future__ import annotations

import warnings
from collections.abc import Hashable, Sequence

import numpy as np
import pandas as pd
from beartype import beartype

from dyseq.utils.errors import DegenerateSubstitutionCost, InputValidationError

from .costs import CostMatrix


@beartype
def om_distance(
    first: Sequence[str],
    second: Sequence[str],
    costs: CostMatrix,
) -> float:
    """Return the optimal-matching distance between two state sequences.

    The distance is the cheapest series of insertions, deletions and
    substitutions turning `first` into `second`, computed with the
    Wagner-Fischer recurrence:

    ```text
    cell(i, j) = min(cell(i-1, j)   + indel,
                     cell(i, j-1)   + indel,
                     cell(i-1, j-1) + sub(first[i], second[j]))
    ```

    Sequences may differ in length; an empty sequence is `indel * len(other)`
    away from any other sequence.

    Args:
        first (Sequence[str]): State symbols.
        second (Sequence[str]): State symbols.
        costs (CostMatrix): Substitution and indel costs.

    Returns:
        float: Minimum alignment cost.
    """

    _warn_on_degenerate_costs(costs)
    table = costs.extended_matrix()
    return _align(costs.encode(first), costs.encode(second), table, costs.indel)


@beartype
def pairwise_distances(
    sequences: Sequence[Sequence[str]],
    costs: CostMatrix,
    *,
    subject_ids: Sequence[Hashable] | None = None,
) -> pd.DataFrame:
    """Compute the full symmetric optimal-matching distance matrix.

    Every sequence is encoded before any alignment runs, so an unknown symbol
    fails the whole call up front. Identical sequences are aligned once; the
    upper triangle over unique sequences is computed and mirrored.

    Args:
        sequences (Sequence[Sequence[str]]): One state sequence per subject.
        costs (CostMatrix): Substitution and indel costs.
        subject_ids (Sequence[Hashable] | None): Row/column labels; defaults
            to positional indices.

    Returns:
        pd.DataFrame: `n x n` distances indexed by subject id.
    """

    if subject_ids is None:
        labels: list[Hashable] = list(range(len(sequences)))
    else:
        labels = list(subject_ids)
        if len(labels) != len(sequences):
            raise InputValidationError(
                "subject_ids length must match the number of sequences."
            )

    encoded = [costs.encode(sequence) for sequence in sequences]
    _warn_on_degenerate_costs(costs)

    unique: dict[tuple[int, ...], int] = {}
    membership = np.empty(len(encoded), dtype=np.intp)
    for position, codes in enumerate(encoded):
        key = tuple(int(code) for code in codes)
        membership[position] = unique.setdefault(key, len(unique))

    distinct = [np.asarray(key, dtype=np.intp) for key in unique]
    table = costs.extended_matrix()
    reduced = np.zeros((len(distinct), len(distinct)), dtype=float)
    for row in range(len(distinct)):
        for col in range(row + 1, len(distinct)):
            value = _align(distinct[row], distinct[col], table, costs.indel)
            reduced[row, col] = value
            reduced[col, row] = value

    distances = reduced[np.ix_(membership, membership)]
    index = pd.Index(labels, name="subject_id")
    return pd.DataFrame(distances, index=index, columns=index.copy())


def _align(
    first: np.ndarray,
    second: np.ndarray,
    table: np.ndarray,
    indel: float,
) -> float:
    """Run the edit-distance recurrence on integer-coded sequences.

    Rows are filled one at a time. Within a row the horizontal (insertion)
    dependency is resolved with a running minimum:
    `cell[j] = min_k<=j(candidate[k] + (j - k) * indel)`.

    The pair is put in a fixed order first so that float rounding, and thus
    the result, does not depend on argument order.
    """

    if (second.size, second.tolist()) < (first.size, first.tolist()):
        first, second = second, first
    n_first = first.size
    n_second = second.size
    if n_first == 0 or n_second == 0:
        return float(indel * max(n_first, n_second))

    steps = np.arange(n_second + 1, dtype=float) * indel
    previous = steps.copy()
    for i in range(1, n_first + 1):
        candidate = np.empty(n_second + 1, dtype=float)
        candidate[0] = i * indel
        substitution = previous[:-1] + table[first[i - 1], second]
        deletion = previous[1:] + indel
        candidate[1:] = np.minimum(substitution, deletion)
        previous = np.minimum.accumulate(candidate - steps) + steps
    return float(previous[-1])


def _warn_on_degenerate_costs(costs: CostMatrix) -> None:
    table = costs.extended_matrix()
    limit = 2.0 * costs.indel
    offending = np.argwhere(np.triu(table, k=1) > limit)
    if offending.size == 0:
        return
    symbols = costs.symbols
    pairs = ", ".join(
        f"{symbols[row]}-{symbols[col]}" for row, col in offending[:5]
    )
    more = "" if len(offending) <= 5 else f" and {len(offending) - 5} more"
    warnings.warn(
        f"{len(offending)} substitution cost(s) exceed twice the indel cost "
        f"({limit:g}): {pairs}{more}. An optimal alignment never uses them.",
        DegenerateSubstitutionCost,
        stacklevel=3,
    )
