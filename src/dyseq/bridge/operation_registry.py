from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from dyseq.utils.errors import OperationNotFoundError

OperationHandler = Callable[[Mapping[str, Any]], dict[str, Any]]


@dataclass(frozen=True)
class RegisteredOperation:
    """One dotted bridge operation, e.g. `sequence_analysis.grid_sequences.run`.

    Attributes:
        name (str): Full dotted key used for dispatch.
        handler (OperationHandler): Callable receiving the `params` object.
        description (str): Shown by `operations.list`.
    """

    name: str
    handler: OperationHandler
    description: str = ""

    @property
    def namespace(self) -> str:
        """Key without its final segment (`sequence_analysis.grid_sequences`)."""

        head, _, _ = self.name.rpartition(".")
        return head


class OperationRegistry:
    """Dispatch table for bridge operations keyed by dotted names."""

    def __init__(self) -> None:
        self._operations: dict[str, RegisteredOperation] = {}

    def register(
        self,
        name: str,
        handler: OperationHandler,
        *,
        description: str = "",
    ) -> None:
        """Add one handler under a unique dotted key.

        Raises:
            ValueError: If the key is empty, has an empty segment or is
                already registered.
        """
        operation = name.strip()
        if not operation or any(not part for part in operation.split(".")):
            raise ValueError(f"Invalid operation name: {name!r}")
        if operation in self._operations:
            raise ValueError(f"Operation already registered: {operation}")
        self._operations[operation] = RegisteredOperation(
            name=operation,
            handler=handler,
            description=description.strip(),
        )

    def execute(self, operation: str, params: Mapping[str, Any]) -> dict[str, Any]:
        """Run the handler registered under `operation`.

        Raises:
            OperationNotFoundError: If `operation` is not registered. The
                message lists the operations sharing its namespace.
        """
        key = operation.strip()
        descriptor = self._operations.get(key)
        if descriptor is None:
            namespace, _, _ = key.rpartition(".")
            siblings = self.names(namespace=namespace) if namespace else []
            hint = f" Available: {', '.join(siblings)}" if siblings else ""
            raise OperationNotFoundError(f"Unknown operation: {operation}.{hint}")
        return descriptor.handler(params)

    def names(self, *, namespace: str | None = None) -> list[str]:
        """Sorted operation keys, optionally restricted to one namespace."""
        return sorted(
            name
            for name, descriptor in self._operations.items()
            if namespace is None or descriptor.namespace == namespace
        )

    def describe(self) -> list[dict[str, str]]:
        """`{name, namespace, description}` rows for every operation."""
        return [
            {
                "name": name,
                "namespace": self._operations[name].namespace,
                "description": self._operations[name].description,
            }
            for name in self.names()
        ]
