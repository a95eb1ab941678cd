"""Cost Tree - Composable hierarchies of timed tasks."""

import logging

__version__ = "0.1.0"

from .config import RenderOptions
from .task_node import CompositeTask, InvalidArgument, LeafTask, TaskNode, new_composite, new_leaf
from .task_graph import TaskGraph
from .render import build_rich_tree, print_tree

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "TaskNode",
    "LeafTask",
    "CompositeTask",
    "InvalidArgument",
    "new_leaf",
    "new_composite",
    "TaskGraph",
    "RenderOptions",
    "build_rich_tree",
    "print_tree",
]
