"""Tests for tree layout."""

from collections import defaultdict

import pytest

from decision_canvas.core.visualization import (
    LayoutConfig,
    calculate_layout,
    generate_edge_path,
    get_path_from_result,
    get_path_from_trace,
)
from decision_canvas.rules import (
    Condition,
    ConditionChildren,
    ConditionNode,
    LeafNode,
    count_nodes,
    evaluate_tree,
    parse_tree,
)


def build_skewed_tree(depth: int, right: bool = False) -> ConditionNode:
    """Chain of conditions with every other child a leaf."""
    node = LeafNode(node_id="leaf_end", decision="end", status="compliant")
    for level in reversed(range(depth)):
        side = LeafNode(node_id=f"leaf_{level}", decision=f"stop_{level}", status="blocked")
        children = (
            ConditionChildren(true=side, false=node)
            if right
            else ConditionChildren(true=node, false=side)
        )
        node = ConditionNode(
            node_id=f"check_{level}",
            condition=Condition(fact=f"step_{level}", op="eq", value=True),
            children=children,
        )
    return node


def assert_no_overlap(layout, config: LayoutConfig) -> None:
    """No two nodes or spans on the same level may overlap."""
    levels = defaultdict(list)
    for node in layout.nodes:
        levels[node.depth].append(node)
    for nodes in levels.values():
        nodes.sort(key=lambda n: n.x)
        for left, right in zip(nodes, nodes[1:]):
            assert right.x - left.x >= config.node_width + config.horizontal_spacing - 1e-6
            assert left.span_right <= right.span_left + 1e-6


class TestCalculateLayout:
    """Tests for node and edge positions."""

    def test_simple_tree_positions(self, simple_tree):
        """Test leaves left to right and the root centred above them."""
        layout = calculate_layout(simple_tree)

        root = layout.get_node("root")
        yes = layout.get_node("leaf_register")
        no = layout.get_node("leaf_ok")

        assert (yes.x, yes.y) == (110, 190)
        assert (no.x, no.y) == (330, 190)
        assert (root.x, root.y) == (220, 50)
        assert root.x == (yes.x + no.x) / 2
        assert layout.width == 440
        assert layout.height == 240

    def test_labels(self, simple_tree):
        """Test node and edge labels."""
        layout = calculate_layout(simple_tree)

        assert layout.get_node("root").label == 'instrument.type eq "security_token"'
        assert layout.get_node("leaf_register").label == "register"
        assert {e.id: e.label for e in layout.edges} == {
            "root->leaf_register": "true",
            "root->leaf_ok": "false",
        }

    def test_router_edge_labels(self, routed_rule):
        """Test router edges are labelled with the branch jurisdiction."""
        layout = calculate_layout(routed_rule.tree)
        labels = {e.target_id: e.label for e in layout.edges if e.source_id == "jurisdiction_router"}
        assert labels == {"eu_root": "EU", "uk_root": "UK"}

    def test_every_node_laid_out(self, nested_tree, routed_rule):
        """Test each structural node gets exactly one position."""
        for tree in (nested_tree, routed_rule.tree):
            layout = calculate_layout(tree)
            assert len(layout.nodes) == count_nodes(tree)
            assert len(layout.edges) == count_nodes(tree) - 1
            assert len({n.id for n in layout.nodes}) == len(layout.nodes)

    def test_parent_centred_over_children(self, nested_tree):
        """Test that every parent sits at the mean x of its children."""
        layout = calculate_layout(nested_tree)
        children = defaultdict(list)
        for edge in layout.edges:
            children[edge.source_id].append(layout.get_node(edge.target_id).x)

        for parent_id, xs in children.items():
            assert layout.get_node(parent_id).x == pytest.approx(sum(xs) / len(xs))

    def test_no_overlap_nested(self, nested_tree, routed_rule):
        """Test sibling subtrees keep apart on mixed trees."""
        config = LayoutConfig()
        assert_no_overlap(calculate_layout(nested_tree, config), config)
        assert_no_overlap(calculate_layout(routed_rule.tree, config), config)

    @pytest.mark.parametrize("right", [False, True])
    def test_deeply_skewed_tree(self, right):
        """Test that very deep one-sided trees lay out without overlap."""
        config = LayoutConfig(horizontal_spacing=10)
        tree = build_skewed_tree(1500, right=right)
        layout = calculate_layout(tree, config)

        assert len(layout.nodes) == 3001
        assert max(n.depth for n in layout.nodes) == 1500
        assert_no_overlap(layout, config)

    def test_edges_join_box_borders(self, simple_tree):
        """Test edges run from the bottom of the parent to the top of the child."""
        config = LayoutConfig()
        layout = calculate_layout(simple_tree, config)
        edge = next(e for e in layout.edges if e.target_id == "leaf_ok")

        assert edge.source_y == layout.get_node("root").y + config.node_height / 2
        assert edge.target_y == layout.get_node("leaf_ok").y - config.node_height / 2
        assert (edge.source_x, edge.target_x) == (220, 330)

    def test_custom_spacing(self, simple_tree):
        """Test that sizing and spacing come from the config."""
        config = LayoutConfig(node_width=100, node_height=40, horizontal_spacing=20,
                              level_spacing=60, padding=0)
        layout = calculate_layout(simple_tree, config)

        assert layout.get_node("leaf_register").x == 50
        assert layout.get_node("leaf_ok").x == 170
        assert layout.get_node("leaf_ok").y == 20 + 40 + 60
        assert layout.width == 220

    def test_deterministic(self, nested_tree):
        """Test that repeated layouts are identical."""
        first = calculate_layout(nested_tree)
        second = calculate_layout(nested_tree)

        assert [(n.id, n.x, n.y) for n in first.nodes] == [(n.id, n.x, n.y) for n in second.nodes]
        assert [e.id for e in first.edges] == [e.id for e in second.edges]


class TestCollapsedGroups:
    """Tests for hiding group contents."""

    def test_collapsed_by_config(self, nested_tree):
        """Test collapsing a group by id in the layout config."""
        layout = calculate_layout(nested_tree, LayoutConfig(collapsed_groups=frozenset({"authorization"})))

        assert [n.id for n in layout.nodes] == [
            "root",
            "authorization",
            "amount_check",
            "leaf_prospectus",
            "leaf_exempt",
        ]
        assert layout.get_node("auth_check") is None

    def test_collapsed_in_tree(self):
        """Test the collapsed flag stored on the group itself."""
        tree = parse_tree({
            "nodeId": "group",
            "type": "group",
            "label": "Eligibility",
            "entryNodeId": "leaf_inner",
            "collapsed": True,
            "children": [{"nodeId": "leaf_inner", "type": "leaf", "decision": "ok", "status": "compliant"}],
        })
        layout = calculate_layout(tree)

        assert [n.id for n in layout.nodes] == ["group"]
        assert layout.get_node("group").label == "Eligibility"
        assert layout.edges == []


class TestPathHighlighting:
    """Tests for marking the evaluated path."""

    FACTS = {"instrument": {"type": "security_token"}, "issuer": {"authorized": True}}

    def test_path_from_trace(self, nested_tree):
        """Test converting a trace to node ids."""
        result = evaluate_tree(nested_tree, self.FACTS)

        assert get_path_from_trace(result.trace) == {"root", "auth_check"}
        assert get_path_from_trace(result.trace, result.leaf) == {
            "root",
            "auth_check",
            "leaf_authorized",
        }

    def test_path_from_result_includes_anchors(self, nested_tree):
        """Test anchors passed through are on the path."""
        result = evaluate_tree(nested_tree, self.FACTS)
        assert get_path_from_result(result) == {"root", "auth_check", "anchor_eu", "leaf_authorized"}

    def test_on_path_flags(self, nested_tree):
        """Test nodes and edges are flagged from the given ids."""
        result = evaluate_tree(nested_tree, self.FACTS)
        layout = calculate_layout(nested_tree, path_node_ids=get_path_from_result(result))

        on_path = {n.id for n in layout.nodes if n.is_on_path}
        assert on_path == {"root", "auth_check", "anchor_eu", "leaf_authorized"}

        edges = {e.id: e.is_on_path for e in layout.edges}
        assert edges["anchor_eu->leaf_authorized"] is True
        assert edges["auth_check->anchor_eu"] is True
        assert edges["auth_check->leaf_blocked"] is False

    def test_no_path(self, simple_tree):
        """Test that nothing is flagged without path ids."""
        layout = calculate_layout(simple_tree)
        assert not any(n.is_on_path for n in layout.nodes)
        assert not any(e.is_on_path for e in layout.edges)


class TestEdgePath:
    """Tests for SVG edge paths."""

    def test_curve(self, simple_tree):
        """Test the cubic curve between parent and child."""
        layout = calculate_layout(simple_tree)
        edge = next(e for e in layout.edges if e.id == "root->leaf_register")
        assert generate_edge_path(edge) == "M 220 80 C 220 120, 110 120, 110 160"
