from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class ComponentMetadata:
    """Catalog description attached to a tool class as `metadata`.

    Attributes:
        name (str): Key used in bridge catalogs (`grid_sequences`).
        full_name (str): Display name used in catalogs and summary tables.
        abstract_description (str): Short summary shown in catalogs.
        tutorial_goal (str | None): What an analyst gets out of the tool.
        tutorial_how_it_works (str | None): Plain-language method outline.
    """

    name: str
    full_name: str
    abstract_description: str = "View Docstring/Documentation"
    tutorial_goal: str | None = None
    tutorial_how_it_works: str | None = None


def catalog_entry(component: object) -> dict[str, Any]:
    """Return the JSON catalog entry for a tool class or instance.

    Unset optional fields are omitted.

    Raises:
        TypeError: If the component carries no `ComponentMetadata`.
    """
    metadata = getattr(component, "metadata", None)
    if not isinstance(metadata, ComponentMetadata):
        raise TypeError(
            f"{component!r} must define `metadata` as ComponentMetadata; "
            f"got {type(metadata).__name__}."
        )
    return {key: value for key, value in asdict(metadata).items() if value}
