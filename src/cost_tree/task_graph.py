"""Task tree traversal, analysis and export."""

import logging
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

import networkx as nx

from .config import MIN_CONTEXT_LENGTH, RenderOptions
from .task_node import CompositeTask, LeafTask, TaskNode

logger = logging.getLogger(__name__)

CONTEXT_HEADER = "=== TASK CONTEXT ==="
CONTEXT_FOOTER = "=== END CONTEXT ==="
TRUNCATED_MARKER = "... (context truncated)"


def _clip(line: str, width: int) -> str:
    if len(line) <= width:
        return line
    return line[:width - 1] + "…"


def _truncate_context(lines: List[str], max_length: int) -> str:
    """Shorten lineage lines to fit ``max_length``, keeping the root and target lines."""
    fixed = len("\n".join([CONTEXT_HEADER, TRUNCATED_MARKER, CONTEXT_FOOTER]))

    if len(lines) == 1:
        # One newline per kept line
        root = _clip(lines[0], max_length - fixed - 1)
        return "\n".join([CONTEXT_HEADER, root, TRUNCATED_MARKER, CONTEXT_FOOTER])

    root, middle, target = lines[0], lines[1:-1], lines[-1]
    available = max_length - fixed - 2
    root = _clip(root, max(available // 2, available - len(target)))
    target = _clip(target, available - len(root))

    budget = available - len(root) - len(target)
    kept = []
    for line in middle:
        if len(line) + 1 > budget:
            break
        kept.append(line)
        budget -= len(line) + 1

    return "\n".join([CONTEXT_HEADER, root, *kept, TRUNCATED_MARKER, target, CONTEXT_FOOTER])


class TaskGraph:
    """
    Read-only view over the task tree below ``root``.

    The view holds no copy of the structure: every query walks the live
    nodes, so changes made through ``add``/``remove`` are always visible.
    Traversals use an explicit stack rather than recursion.
    """

    def __init__(self, root: TaskNode, options: Optional[RenderOptions] = None):
        """Initialize the view with its root node and optional display options."""
        self.root = root
        self.options = options or RenderOptions()

    def walk(self) -> Iterator[Tuple[int, TaskNode]]:
        """Yield ``(depth, node)`` for every node, depth-first in child order."""
        stack: List[Tuple[int, TaskNode]] = [(0, self.root)]
        while stack:
            depth, node = stack.pop()
            yield depth, node
            if isinstance(node, CompositeTask):
                stack.extend((depth + 1, child) for child in reversed(node.children))

    def iter_leaves(self) -> Iterator[LeafTask]:
        for _, node in self.walk():
            if isinstance(node, LeafTask):
                yield node

    def find(self, name: str) -> Optional[TaskNode]:
        """Get the first node named ``name`` in depth-first order."""
        for _, node in self.walk():
            if node.name == name:
                return node
        return None

    def find_all(self, name: str) -> List[TaskNode]:
        return [node for _, node in self.walk() if node.name == name]

    def contains(self, node: TaskNode) -> bool:
        """Check whether ``node`` is the root or sits below it."""
        return node is self.root or any(ancestor is self.root for ancestor in node.ancestors())

    def get_lineage(self, node: TaskNode) -> List[TaskNode]:
        """Get the path from the root to the specified node."""
        if not self.contains(node):
            raise ValueError(f"Task '{node.name}' is not part of the tree rooted at '{self.root.name}'")

        path = [node]
        if node is self.root:
            return path

        for ancestor in node.ancestors():
            path.append(ancestor)
            if ancestor is self.root:
                break

        return list(reversed(path))

    def get_lineage_context(self, node: TaskNode, max_length: Optional[int] = None) -> str:
        """
        Get the lineage of ``node`` as indented text, one line per level.

        Args:
            node: Task whose lineage is described
            max_length: Maximum length of the returned text; defaults to
                ``options.max_context_length``

        Returns:
            Context text of at most ``max_length`` characters. When it has to
            be shortened, the root and ``node`` lines are kept and middle
            levels are dropped first.

        Raises:
            ValueError: if ``max_length`` is below ``MIN_CONTEXT_LENGTH`` or
                ``node`` is outside the tree.
        """
        if max_length is None:
            max_length = self.options.max_context_length
        if max_length < MIN_CONTEXT_LENGTH:
            raise ValueError(f"max_length must be at least {MIN_CONTEXT_LENGTH}, got {max_length}")

        lineage = self.get_lineage(node)

        lines = []
        for i, task in enumerate(lineage):
            indent = "  " * i
            arrow = "└─ " if i > 0 else ""
            lines.append(f"{indent}{arrow}{task.summary(self.options)}")

        full_context = "\n".join([CONTEXT_HEADER, *lines, CONTEXT_FOOTER])
        if len(full_context) <= max_length:
            return full_context

        logger.warning("Lineage context for %r truncated to at most %d characters", node.name, max_length)
        return _truncate_context(lines, max_length)

    def get_children(self, node: TaskNode) -> List[TaskNode]:
        """Get direct children of a node (empty for leaves)."""
        if isinstance(node, CompositeTask):
            return list(node.children)
        return []

    def get_descendants(self, node: TaskNode) -> List[TaskNode]:
        """Get every node below ``node``, depth-first."""
        return [descendant for _, descendant in TaskGraph(node, self.options).walk()][1:]

    def get_task_stats(self) -> Dict[str, Any]:
        """Get statistics about the tasks in the tree."""
        stats: Dict[str, Any] = {
            "total": 0,
            "leaf_tasks": 0,
            "composite_tasks": 0,
            "max_depth": 0,
            "total_cost": self.root.cost(),
        }

        for depth, node in self.walk():
            stats["total"] += 1
            if node.is_leaf():
                stats["leaf_tasks"] += 1
            else:
                stats["composite_tasks"] += 1
            stats["max_depth"] = max(stats["max_depth"], depth)

        return stats

    def to_digraph(self) -> nx.DiGraph:
        """
        Build a NetworkX snapshot of the tree.

        Nodes are the task objects themselves, carrying ``name``, ``cost``
        and ``kind`` attributes; edges point from parent to child. A child
        added to the same composite more than once yields a single edge
        whose ``count`` attribute records the multiplicity.
        """
        graph = nx.DiGraph()
        seen: Set[TaskNode] = set()
        for _, node in self.walk():
            if node in seen:
                continue
            seen.add(node)
            graph.add_node(
                node,
                name=node.name,
                cost=node.cost(),
                kind="leaf" if node.is_leaf() else "composite",
            )
            for child in self.get_children(node):
                if graph.has_edge(node, child):
                    graph[node][child]["count"] += 1
                else:
                    graph.add_edge(node, child, count=1)
        return graph

    def detect_cycles(self) -> List[List[TaskNode]]:
        """Detect cycles in the tree snapshot; a well-formed tree has none."""
        return list(nx.simple_cycles(self.to_digraph()))

    def export_to_dict(self) -> Dict[str, Any]:
        """Export the tree to nested plain data."""
        def _export(node: TaskNode) -> Dict[str, Any]:
            return {
                "name": node.name,
                "kind": "leaf" if node.is_leaf() else "composite",
                "cost": node.cost(),
            }

        exported = _export(self.root)
        # Iterative, no recursion limit on depth
        stack: List[Tuple[TaskNode, Dict[str, Any]]] = [(self.root, exported)]
        while stack:
            node, data = stack.pop()
            if isinstance(node, CompositeTask):
                data["children"] = []
                for child in node.children:
                    child_data = _export(child)
                    data["children"].append(child_data)
                    stack.append((child, child_data))

        return {"root": exported, "stats": self.get_task_stats()}
