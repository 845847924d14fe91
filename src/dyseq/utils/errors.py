from __future__ import annotations


class LibraryError(Exception):
    """Base error for library execution failures."""


class InputValidationError(LibraryError):
    """Raised when operation input parameters fail validation."""


class OperationNotFoundError(LibraryError):
    """Raised when an operation key is not registered."""


class MalformedCostMatrix(InputValidationError):
    """Raised when a substitution-cost matrix is not square, symmetric,
    zero-diagonal and non-negative."""


class AlphabetMismatch(InputValidationError):
    """Raised when a sequence holds a symbol the cost matrix does not index.

    Attributes:
        symbol (str): The offending symbol.
    """

    def __init__(self, symbol: str, alphabet: tuple[str, ...]) -> None:
        self.symbol = symbol
        super().__init__(
            f"Symbol `{symbol}` is not part of the cost-matrix alphabet "
            f"({', '.join(alphabet)})."
        )


class InvalidClusterCount(InputValidationError):
    """Raised when a requested cluster count falls outside `[1, n]`."""


class DegenerateSubstitutionCost(UserWarning):
    """Substitution costs above twice the indel cost can never be used by an
    optimal alignment."""


class TriangleInequalityWarning(UserWarning):
    """The substitution costs do not satisfy the triangle inequality, so the
    resulting distances may not form a metric."""
