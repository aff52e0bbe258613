"""Visualization module for decision tree layout."""

from .tree_layout import (
    LayoutConfig,
    LayoutNode,
    LayoutEdge,
    TreeLayout,
    DEFAULT_LAYOUT_CONFIG,
    calculate_layout,
    get_path_from_trace,
    get_path_from_result,
    generate_edge_path,
)

__all__ = [
    "LayoutConfig",
    "LayoutNode",
    "LayoutEdge",
    "TreeLayout",
    "DEFAULT_LAYOUT_CONFIG",
    "calculate_layout",
    "get_path_from_trace",
    "get_path_from_result",
    "generate_edge_path",
]
