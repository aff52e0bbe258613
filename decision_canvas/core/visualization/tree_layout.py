"""
Tree Layout - Positions a decision tree for rendering.

Widths are reserved bottom-up (a subtree is at least as wide as its
children side by side), then spans are handed out top-down left to right.
Leaves sit at the centre of their span and every other node at the mean of
its children's x, so sibling subtrees never overlap however skewed the tree.
The layout is purely structural and never evaluates conditions.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from decision_canvas.core.config import Settings, get_settings
from decision_canvas.rules.conditions import describe_condition
from decision_canvas.rules.schema import EvaluationResult, LeafNode, TraceNode
from decision_canvas.rules.tree import Node, structural_children


# =============================================================================
# Data Classes for Layout Representation
# =============================================================================


@dataclass(frozen=True)
class LayoutConfig:
    """Node sizing and spacing, in pixels."""

    node_width: float = 180.0
    node_height: float = 60.0
    horizontal_spacing: float = 40.0
    level_spacing: float = 80.0
    padding: float = 20.0
    collapsed_groups: frozenset[str] = frozenset()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> LayoutConfig:
        """Build a config from application settings."""
        settings = settings or get_settings()
        return cls(
            node_width=settings.layout_node_width,
            node_height=settings.layout_node_height,
            horizontal_spacing=settings.layout_horizontal_spacing,
            level_spacing=settings.layout_level_spacing,
            padding=settings.layout_padding,
        )

    def level_y(self, depth: int) -> float:
        """Vertical centre of nodes at a depth."""
        return self.padding + self.node_height / 2 + depth * (self.node_height + self.level_spacing)


DEFAULT_LAYOUT_CONFIG = LayoutConfig()


@dataclass
class LayoutNode:
    """A positioned node. ``x``/``y`` are the centre of the node box."""

    id: str
    node_type: str
    label: str
    node: Node
    x: float
    y: float
    width: float
    height: float
    depth: int
    span_left: float
    span_right: float
    is_on_path: bool = False


@dataclass
class LayoutEdge:
    """An edge from the bottom of a parent to the top of a child."""

    id: str
    source_id: str
    target_id: str
    label: str
    source_x: float
    source_y: float
    target_x: float
    target_y: float
    is_on_path: bool = False


@dataclass
class TreeLayout:
    """Complete layout of a tree."""

    nodes: list[LayoutNode] = field(default_factory=list)
    edges: list[LayoutEdge] = field(default_factory=list)
    width: float = 0.0
    height: float = 0.0

    def __post_init__(self) -> None:
        self._by_id = {node.id: node for node in self.nodes}

    def get_node(self, node_id: str) -> LayoutNode | None:
        """Get a node by ID."""
        return self._by_id.get(node_id)


class _Box:
    """Working state for one node during layout."""

    __slots__ = ("node", "depth", "children", "width", "left", "x")

    def __init__(self, node: Node, depth: int):
        self.node = node
        self.depth = depth
        self.children: list[_Box] = []
        self.width = 0.0
        self.left = 0.0
        self.x = 0.0


# =============================================================================
# Layout
# =============================================================================


def _layout_children(node: Node, config: LayoutConfig) -> list[Node]:
    if node.type == "group" and (node.collapsed or node.node_id in config.collapsed_groups):
        return []
    return structural_children(node)


def _node_label(node: Node) -> str:
    node_type = node.type
    if node_type == "condition":
        return node.annotation or describe_condition(node.condition)
    elif node_type == "leaf":
        return node.decision
    elif node_type == "group":
        return node.label
    elif node_type == "router":
        return ", ".join(branch.jurisdiction for branch in node.branches) or node.node_id
    return node.description or node.node_id


def _edge_label(parent: Node, child: Node) -> str:
    if parent.type == "condition":
        return "true" if child is parent.children.true else "false"
    if parent.type == "router":
        for branch in parent.branches:
            if branch.target_node_id == child.node_id:
                return branch.jurisdiction
    return ""


def calculate_layout(
    root: Node,
    config: LayoutConfig = DEFAULT_LAYOUT_CONFIG,
    path_node_ids: Iterable[str] | None = None,
) -> TreeLayout:
    """Compute node and edge positions for a whole tree.

    Args:
        root: Root node of the rule tree
        config: Node sizing and spacing
        path_node_ids: Node ids to flag as lying on the evaluation path

    Returns:
        Positioned nodes (pre-order) and edges
    """
    on_path = set(path_node_ids or ())

    # Pre-order walk; children are appended left to right
    order: list[_Box] = []
    stack: list[tuple[Node, int, _Box | None]] = [(root, 0, None)]
    while stack:
        node, depth, parent = stack.pop()
        box = _Box(node, depth)
        if parent is not None:
            parent.children.append(box)
        order.append(box)
        for child in reversed(_layout_children(node, config)):
            stack.append((child, depth + 1, box))

    # Reserve width bottom-up
    for box in reversed(order):
        if box.children:
            children_width = sum(c.width for c in box.children)
            children_width += config.horizontal_spacing * (len(box.children) - 1)
            box.width = max(config.node_width, children_width)
        else:
            box.width = config.node_width

    # Hand out spans top-down
    order[0].left = config.padding
    for box in order:
        if not box.children:
            continue
        children_width = sum(c.width for c in box.children)
        children_width += config.horizontal_spacing * (len(box.children) - 1)
        cursor = box.left + (box.width - children_width) / 2
        for child in box.children:
            child.left = cursor
            cursor += child.width + config.horizontal_spacing

    # Leaves centred in their span, parents over the mean of their children
    for box in reversed(order):
        if box.children:
            box.x = sum(c.x for c in box.children) / len(box.children)
        else:
            box.x = box.left + box.width / 2

    nodes: list[LayoutNode] = []
    edges: list[LayoutEdge] = []
    max_depth = 0
    for box in order:
        node = box.node
        max_depth = max(max_depth, box.depth)
        y = config.level_y(box.depth)
        nodes.append(
            LayoutNode(
                id=node.node_id,
                node_type=node.type,
                label=_node_label(node),
                node=node,
                x=box.x,
                y=y,
                width=config.node_width,
                height=config.node_height,
                depth=box.depth,
                span_left=box.left,
                span_right=box.left + box.width,
                is_on_path=node.node_id in on_path,
            )
        )
        for child in box.children:
            edges.append(
                LayoutEdge(
                    id=f"{node.node_id}->{child.node.node_id}",
                    source_id=node.node_id,
                    target_id=child.node.node_id,
                    label=_edge_label(node, child.node),
                    source_x=box.x,
                    source_y=y + config.node_height / 2,
                    target_x=child.x,
                    target_y=config.level_y(child.depth) - config.node_height / 2,
                    is_on_path=node.node_id in on_path and child.node.node_id in on_path,
                )
            )

    return TreeLayout(
        nodes=nodes,
        edges=edges,
        width=order[0].width + 2 * config.padding,
        height=config.level_y(max_depth) + config.node_height / 2 + config.padding,
    )


# =============================================================================
# Utility Functions
# =============================================================================


def get_path_from_trace(
    trace: Iterable[TraceNode],
    final_node: LeafNode | None = None,
) -> set[str]:
    """Node ids touched by a trace, plus the final leaf when given."""
    ids = {step.node_id for step in trace}
    if final_node is not None:
        ids.add(final_node.node_id)
    return ids


def get_path_from_result(result: EvaluationResult) -> set[str]:
    """Node ids on a full evaluation path, including anchors passed through."""
    ids = get_path_from_trace(result.trace, result.leaf)
    ids.update(result.anchors)
    return ids


def generate_edge_path(edge: LayoutEdge) -> str:
    """SVG path data for an edge as a vertical cubic curve."""
    mid_y = (edge.source_y + edge.target_y) / 2
    return (
        f"M {edge.source_x:g} {edge.source_y:g} "
        f"C {edge.source_x:g} {mid_y:g}, {edge.target_x:g} {mid_y:g}, "
        f"{edge.target_x:g} {edge.target_y:g}"
    )
