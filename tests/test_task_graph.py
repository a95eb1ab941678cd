import logging

import networkx as nx
import pytest

from cost_tree import RenderOptions, TaskGraph, new_composite, new_leaf


def test_walk_is_depth_first_in_child_order(cake):
    names = [(depth, node.name) for depth, node in TaskGraph(cake).walk()]
    assert names == [
        (0, "cake"),
        (1, "batter"),
        (2, "dry"),
        (2, "liquids"),
        (2, "mix"),
        (1, "pan"),
        (1, "bake"),
        (1, "frost"),
    ]


def test_iter_leaves(cake):
    assert [leaf.name for leaf in TaskGraph(cake).iter_leaves()] == [
        "dry", "liquids", "mix", "pan", "bake", "frost",
    ]


def test_find(cake):
    graph = TaskGraph(cake)
    assert graph.find("mix") is cake[0][2]
    assert graph.find("missing") is None


def test_find_all_returns_every_match():
    group = new_composite("group")
    first, second = new_leaf("step", 1), new_leaf("step", 2)
    group << first << second
    assert TaskGraph(group).find_all("step") == [first, second]


def test_get_lineage(cake):
    graph = TaskGraph(cake)
    dry = graph.find("dry")
    assert [node.name for node in graph.get_lineage(dry)] == ["cake", "batter", "dry"]
    assert graph.get_lineage(cake) == [cake]


def test_get_lineage_of_subtree_stops_at_view_root(cake):
    batter = cake[0]
    graph = TaskGraph(batter)
    assert [node.name for node in graph.get_lineage(batter[1])] == ["batter", "liquids"]
    assert graph.get_lineage(batter) == [batter]


def test_get_lineage_outside_tree_raises(cake):
    with pytest.raises(ValueError):
        TaskGraph(cake).get_lineage(new_leaf("stranger", 1))


def test_get_lineage_context(cake):
    graph = TaskGraph(cake)
    context = graph.get_lineage_context(graph.find("mix"))
    assert context.splitlines() == [
        "=== TASK CONTEXT ===",
        "cake (6 min)",
        "  └─ batter (3 min)",
        "    └─ mix (1 min)",
        "=== END CONTEXT ===",
    ]


def test_get_lineage_context_truncates(caplog):
    top = current = new_composite("top")
    for i in range(30):
        child = new_composite(f"a fairly long step name number {i}")
        current.add(child)
        current = child

    graph = TaskGraph(top, RenderOptions(max_context_length=200))
    with caplog.at_level(logging.WARNING, logger="cost_tree"):
        context = graph.get_lineage_context(current)

    assert len(context) <= 200
    assert context.startswith("=== TASK CONTEXT ===\ntop (0 min)")
    assert context.endswith("└─ a fairly long step name number 29 (0 min)\n=== END CONTEXT ===")
    assert "... (context truncated)" in context
    assert "truncated" in caplog.text


def test_get_lineage_context_drops_middle_levels_first():
    top = current = new_composite("top")
    for i in range(10):
        child = new_composite(f"level {i}")
        current.add(child)
        current = child
    target = new_leaf("target", 1)
    current.add(target)

    context = TaskGraph(top).get_lineage_context(target, max_length=150)
    lines = context.splitlines()

    assert len(context) <= 150
    assert lines[1] == "top (1 min)"
    assert lines[2].endswith("level 0 (1 min)")
    assert lines[-3] == "... (context truncated)"
    assert lines[-2].endswith("└─ target (1 min)")
    assert "level 9" not in context


def test_get_lineage_context_clips_long_names():
    root = new_composite("r" * 200)
    leaf = new_leaf("leaf", 1)
    root.add(leaf)
    graph = TaskGraph(root)

    context = graph.get_lineage_context(leaf, max_length=100)
    assert len(context) <= 100
    assert "leaf (1 min)" in context

    assert len(graph.get_lineage_context(root, max_length=80)) <= 80


@pytest.mark.parametrize("max_length", [0, 79])
def test_get_lineage_context_rejects_tiny_limit(cake, max_length):
    graph = TaskGraph(cake)
    with pytest.raises(ValueError):
        graph.get_lineage_context(graph.find("mix"), max_length=max_length)


def test_get_children_and_descendants(cake):
    graph = TaskGraph(cake)
    assert [node.name for node in graph.get_children(cake)] == ["batter", "pan", "bake", "frost"]
    assert graph.get_children(graph.find("pan")) == []
    assert [node.name for node in graph.get_descendants(cake[0])] == ["dry", "liquids", "mix"]


def test_view_reflects_mutations(cake, package):
    graph = TaskGraph(cake)
    assert graph.get_task_stats()["total_cost"] == 6
    cake.add(package)
    assert graph.get_task_stats()["total_cost"] == 8
    assert graph.find("label") is package[1]


def test_get_task_stats(cake, package):
    cake.add(package)
    assert TaskGraph(cake).get_task_stats() == {
        "total": 11,
        "leaf_tasks": 8,
        "composite_tasks": 3,
        "max_depth": 2,
        "total_cost": 8,
    }


def test_to_digraph(cake):
    graph = TaskGraph(cake).to_digraph()
    batter = cake[0]

    assert graph.number_of_nodes() == 8
    assert graph.number_of_edges() == 7
    assert nx.is_tree(graph)
    assert graph.nodes[batter] == {"name": "batter", "cost": 3, "kind": "composite"}
    assert {child.name for child in graph.successors(batter)} == {"dry", "liquids", "mix"}
    assert {node.name for node in nx.descendants(graph, batter)} == {"dry", "liquids", "mix"}


def test_to_digraph_counts_duplicate_children():
    group = new_composite("group")
    leaf = new_leaf("stir", 1)
    group << leaf << leaf
    graph = TaskGraph(group).to_digraph()
    assert graph.number_of_edges() == 1
    assert graph[group][leaf]["count"] == 2


def test_detect_cycles_on_well_formed_tree(cake):
    assert TaskGraph(cake).detect_cycles() == []


def test_export_to_dict(cake):
    exported = TaskGraph(cake[0]).export_to_dict()
    assert exported["root"] == {
        "name": "batter",
        "kind": "composite",
        "cost": 3,
        "children": [
            {"name": "dry", "kind": "leaf", "cost": 1},
            {"name": "liquids", "kind": "leaf", "cost": 1},
            {"name": "mix", "kind": "leaf", "cost": 1},
        ],
    }
    assert exported["stats"]["total"] == 4


def test_export_single_leaf():
    exported = TaskGraph(new_leaf("solo", 2)).export_to_dict()
    assert exported["root"] == {"name": "solo", "kind": "leaf", "cost": 2}
