"""Rich tree rendering for task trees."""

from typing import List, Optional, Tuple

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from .config import RenderOptions
from .task_node import CompositeTask, TaskNode


def format_task_label(node: TaskNode, options: RenderOptions) -> Text:
    """Format a node label, composites in bold."""
    style = "bold" if isinstance(node, CompositeTask) else "white"
    label = Text(node.name, style=style)
    if options.show_costs:
        label.append(f" ({options.format_cost(node.cost())})", style="cyan")
    return label


def build_rich_tree(node: TaskNode, options: Optional[RenderOptions] = None) -> Tree:
    """Return a *rich.tree.Tree* visualisation of the tree below ``node``."""
    options = options or RenderOptions()
    tree = Tree(format_task_label(node, options))

    stack: List[Tuple[TaskNode, Tree]] = [(node, tree)]
    while stack:
        task, tree_node = stack.pop()
        if isinstance(task, CompositeTask):
            for child in task.children:
                stack.append((child, tree_node.add(format_task_label(child, options))))

    return tree


def print_tree(node: TaskNode, console: Optional[Console] = None, options: Optional[RenderOptions] = None) -> None:
    """Print the tree below ``node``."""
    (console or Console()).print(build_rich_tree(node, options))
