from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass

import pandas as pd
from beartype import beartype

from dyseq.utils.errors import InputValidationError

from .labeling import MISSING_STATE


@beartype
@dataclass(frozen=True)
class SequenceSet:
    """Equal-length state sequences, one per subject.

    Attributes:
        subject_ids (tuple[Hashable, ...]): Subject identifiers in row order.
        time_points (tuple[Hashable, ...]): Shared, ordered time axis.
        sequences (tuple[tuple[str, ...], ...]): One state sequence per subject.
    """

    subject_ids: tuple[Hashable, ...]
    time_points: tuple[Hashable, ...]
    sequences: tuple[tuple[str, ...], ...]

    def __post_init__(self) -> None:
        if len(self.subject_ids) != len(self.sequences):
            raise InputValidationError(
                "subject_ids and sequences must have the same length."
            )
        if len(set(self.subject_ids)) != len(self.subject_ids):
            raise InputValidationError("subject_ids must be unique.")
        width = len(self.time_points)
        for subject_id, sequence in zip(self.subject_ids, self.sequences):
            if len(sequence) != width:
                raise InputValidationError(
                    f"Sequence for subject `{subject_id}` has length "
                    f"{len(sequence)}; expected {width}."
                )

    def __len__(self) -> int:
        return len(self.sequences)

    @property
    def length(self) -> int:
        """Number of time points in every sequence."""

        return len(self.time_points)

    def to_frame(self) -> pd.DataFrame:
        """Return the wide subject-by-time table of states."""

        frame = pd.DataFrame(
            list(self.sequences),
            index=pd.Index(self.subject_ids, name="subject_id"),
            columns=list(self.time_points),
        )
        return frame


@beartype
def assemble_sequences(
    data: pd.DataFrame,
    *,
    id_col: str,
    time_col: str,
    state_col: str = "state",
) -> SequenceSet:
    """Pivot labelled long-format rows into one state sequence per subject.

    Subjects are ordered by identifier and time points ascending. A subject
    without a row for some time point receives `MISSING_STATE` there, so every
    sequence spans the run's full time axis.

    Args:
        data (pd.DataFrame): One row per subject and time point.
        id_col (str): Subject (dyad) identifier column.
        time_col (str): Time index column.
        state_col (str): Column holding state symbols.

    Returns:
        SequenceSet: Equal-length sequences ready for distance computation.
    """

    missing = [col for col in (id_col, time_col, state_col) if col not in data.columns]
    if missing:
        raise InputValidationError(f"Missing required columns: {', '.join(missing)}")
    if data.empty:
        raise InputValidationError("Input data is empty.")
    if data[[id_col, time_col]].isna().any().any():
        raise InputValidationError(
            f"`{id_col}` and `{time_col}` must not contain missing values."
        )

    duplicated = data.duplicated(subset=[id_col, time_col], keep=False)
    if duplicated.any():
        example = data.loc[duplicated, [id_col, time_col]].iloc[0]
        raise InputValidationError(
            "Duplicate rows for subject/time pair "
            f"({example[id_col]!r}, {example[time_col]!r})."
        )

    wide = (
        data[[id_col, time_col, state_col]]
        .pivot(index=id_col, columns=time_col, values=state_col)
        .sort_index(axis=0)
        .sort_index(axis=1)
    )
    wide = wide.astype(object).where(wide.notna(), MISSING_STATE)

    sequences = tuple(
        tuple(str(state) for state in row) for row in wide.itertuples(index=False)
    )
    return SequenceSet(
        subject_ids=tuple(wide.index.to_list()),
        time_points=tuple(wide.columns.to_list()),
        sequences=sequences,
    )
