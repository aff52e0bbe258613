"""Read-only rule tree introspection and structural validation.

``TreeIndex`` maps node ids to nodes once per tree so trace correlation,
group entry and router targets resolve without searching the tree.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Union

from .errors import DecisionTreeError, MalformedTreeError
from .schema import (
    ConditionNode,
    ConflictAnchorNode,
    GroupNode,
    LeafNode,
    RouterNode,
)

Node = Union[ConditionNode, LeafNode, GroupNode, RouterNode, ConflictAnchorNode]


def structural_children(node: Node) -> list[Node]:
    """Direct children of a node in structural (display) order."""
    node_type = node.type
    if node_type == "condition":
        return [node.children.true, node.children.false]
    elif node_type == "leaf":
        return []
    elif node_type in ("group", "router"):
        return list(node.children)
    elif node_type == "conflict_anchor":
        return [node.child]
    raise DecisionTreeError(f"Unknown node type: {node_type!r}")


def iter_nodes(root: Node) -> Iterator[Node]:
    """Yield every node in pre-order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(structural_children(node)))


def count_nodes(root: Node) -> int:
    """Total number of nodes in the tree."""
    return sum(1 for _ in iter_nodes(root))


def collect_fact_paths(root: Node) -> list[str]:
    """Deduplicated fact paths referenced by any condition, first-seen order."""
    paths: list[str] = []
    seen: set[str] = set()
    for node in iter_nodes(root):
        if node.type == "condition" and node.condition.fact not in seen:
            seen.add(node.condition.fact)
            paths.append(node.condition.fact)
    return paths


def collect_leaves(root: Node) -> list[LeafNode]:
    """All leaves under a node, left to right."""
    return [node for node in iter_nodes(root) if node.type == "leaf"]


class TreeIndex:
    """Id-to-node index over a validated tree."""

    def __init__(self, root: Node):
        self.root = root
        self._nodes: dict[str, Node] = {}
        self._parents: dict[str, str | None] = {}
        self.problems: list[str] = []
        self._index()

    @classmethod
    def build(cls, root: Node) -> TreeIndex:
        """Index a tree and reject it if it is malformed.

        Raises:
            MalformedTreeError: duplicate ids, shared nodes or dangling references.
        """
        index = cls(root)
        if index.problems:
            raise MalformedTreeError(index.problems)
        return index

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, node_id: str) -> Node | None:
        """Get a node by ID."""
        return self._nodes.get(node_id)

    def parent_of(self, node_id: str) -> str | None:
        """Id of a node's structural parent (None for the root)."""
        return self._parents.get(node_id)

    def is_descendant(self, node_id: str, ancestor_id: str) -> bool:
        """Whether ``node_id`` lies strictly below ``ancestor_id``."""
        current = self._parents.get(node_id)
        while current is not None:
            if current == ancestor_id:
                return True
            current = self._parents.get(current)
        return False

    def _index(self) -> None:
        visited: set[int] = set()
        stack: list[tuple[Node, str | None]] = [(self.root, None)]

        while stack:
            node, parent_id = stack.pop()
            if id(node) in visited:
                self.problems.append(f"Node '{node.node_id}' appears more than once")
                continue
            visited.add(id(node))

            if node.node_id in self._nodes:
                self.problems.append(f"Duplicate node id '{node.node_id}'")
                continue
            self._nodes[node.node_id] = node
            self._parents[node.node_id] = parent_id

            try:
                children = structural_children(node)
            except DecisionTreeError as e:
                self.problems.append(str(e))
                continue
            for child in reversed(children):
                stack.append((child, node.node_id))

        for node in self._nodes.values():
            if node.type == "group":
                self._check_group(node)
            elif node.type == "router":
                self._check_router(node)

    def _check_reference(self, owner: Node, field: str, target_id: str) -> None:
        if target_id not in self._nodes:
            self.problems.append(
                f"{owner.type} '{owner.node_id}' {field} '{target_id}' does not exist"
            )
        elif not self.is_descendant(target_id, owner.node_id):
            self.problems.append(
                f"{owner.type} '{owner.node_id}' {field} '{target_id}' is outside its subtree"
            )

    def _check_group(self, group: GroupNode) -> None:
        if not group.children:
            self.problems.append(f"group '{group.node_id}' has no children")
        self._check_reference(group, "entryNodeId", group.entry_node_id)
        if group.exit_node_id is not None:
            self._check_reference(group, "exitNodeId", group.exit_node_id)

    def _check_router(self, router: RouterNode) -> None:
        if not router.branches:
            self.problems.append(f"router '{router.node_id}' has no branches")
        for branch in router.branches:
            self._check_reference(router, "targetNodeId", branch.target_node_id)


def validate_tree(root: Node) -> list[str]:
    """List the structural problems of a tree (empty when valid)."""
    return TreeIndex(root).problems
