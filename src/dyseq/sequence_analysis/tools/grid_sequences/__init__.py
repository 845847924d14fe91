from .assembly import SequenceSet, assemble_sequences
from .clustering import Dendrogram, build, cut, validate_cluster_count
from .costs import CostMatrix, constant_costs, grid_costs, matrix_costs
from .describe import cluster_sizes, state_distribution
from .labeling import (
    MISSING_STATE,
    STATE_ALPHABET,
    StateGrid,
    grid_position,
    quantile_cut_points,
)
from .optimal_matching import om_distance, pairwise_distances
from .pipeline import GridSequenceResult, analyse_grid_sequences
from .run import GridSequenceClustering, list_grid_sequence_techniques

__all__ = [
    "MISSING_STATE",
    "STATE_ALPHABET",
    "CostMatrix",
    "Dendrogram",
    "GridSequenceClustering",
    "GridSequenceResult",
    "SequenceSet",
    "StateGrid",
    "analyse_grid_sequences",
    "assemble_sequences",
    "build",
    "cluster_sizes",
    "constant_costs",
    "cut",
    "grid_costs",
    "grid_position",
    "list_grid_sequence_techniques",
    "matrix_costs",
    "om_distance",
    "pairwise_distances",
    "quantile_cut_points",
    "state_distribution",
    "validate_cluster_count",
]
