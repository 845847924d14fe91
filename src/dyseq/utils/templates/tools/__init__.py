from .sequence_analysis import SequenceAnalysisTool, ToolParameterDefinition

__all__ = [
    "SequenceAnalysisTool",
    "ToolParameterDefinition",
]
