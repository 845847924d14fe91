from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from beartype import beartype

from dyseq.utils.metadata import ComponentMetadata


@beartype
@dataclass(frozen=True)
class ToolParameterDefinition:
    """Describe one tool parameter for the bridge catalog.

    Attributes:
        key (str): Parameter key accepted by `fit(...)`.
        type (str): Loose type label (`string`, `float`, `int`, `list`, ...).
        required (bool): Whether the caller must supply the value.
        default (Any): Value used when the caller omits the key.
        description (str): Prompt text.
    """

    key: str
    type: str
    required: bool
    default: Any = None
    description: str = ""


@beartype
class SequenceAnalysisTool:
    """Authoring template for sequence-analysis tools.

    A compliant tool should:
        - expose a clear class name and `metadata` object
        - accept `**kwargs` in `fit(...)` and `preprocess(...)`
        - validate input early and fail with explicit messages
        - return Python-native outputs
        - keep bridge translation in separate `run.py` wrappers

    Method contract:
        - `fit(**kwargs)`
          validation and configuration step
        - `preprocess(**kwargs)`
          execution step
        - `fit_preprocess(**kwargs)`
          convenience method calling `fit(...)` then `preprocess(...)`
    """

    metadata = ComponentMetadata(
        name="base",
        full_name="Sequence Analysis Tool",
    )

    @classmethod
    @beartype
    def params_definition(cls) -> tuple[ToolParameterDefinition, ...]:
        """Return an optional parameter schema for the bridge catalog."""

        return ()

    @beartype
    def fit(self, **kwargs: Any) -> SequenceAnalysisTool:
        """Run an optional configuration step.

        Args:
            **kwargs (Any): Tool-specific configuration values. Concrete
                tools document their supported keys.

        Returns:
            SequenceAnalysisTool: The fitted tool instance.
        """

        _ = kwargs
        return self

    @beartype
    def preprocess(self, **kwargs: Any) -> Any:
        """Execute the tool.

        Raises:
            NotImplementedError: Always raised by the base template.
        """

        _ = kwargs
        raise NotImplementedError

    @beartype
    def fit_preprocess(self, **kwargs: Any) -> Any:
        """Run `fit(...)` then `preprocess(...)` with one shared payload.

        Args:
            **kwargs (Any): Tool-specific values forwarded unchanged to both
                `fit(...)` and `preprocess(...)`.

        Returns:
            Any: Tool-specific output payload returned by `preprocess(...)`.
        """

        self.fit(**kwargs)
        return self.preprocess(**kwargs)
