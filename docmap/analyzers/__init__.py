"""Graph building, reference extraction and structural comparison."""

from .cross_refs import EdgeIssue, check_edge_consistency, merge_reverse_references
from .diff import detect_option_drift, diff
from .feature_graph import build_feature_graph, graph_from_dict, graph_to_dict
from .references import extract_component_imports, is_component_name

__all__ = [
    "EdgeIssue",
    "build_feature_graph",
    "check_edge_consistency",
    "detect_option_drift",
    "diff",
    "extract_component_imports",
    "graph_from_dict",
    "graph_to_dict",
    "is_component_name",
    "merge_reverse_references",
]
