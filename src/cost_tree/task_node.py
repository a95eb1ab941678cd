"""Task node data model and core functionality."""

import logging
import math
import weakref
from abc import abstractmethod
from typing import Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator

from .config import RenderOptions

logger = logging.getLogger(__name__)


class InvalidArgument(ValueError):
    """Raised when a node is built with bad input or a mutation would break the tree."""


class TaskNode(BaseModel):
    """
    Common base for every node in a task tree.

    Leaves and composites expose the same query surface (``name``,
    ``cost()``, ``parent``) so callers can treat a whole tree uniformly.
    Nodes compare and hash by identity.
    """

    model_config = ConfigDict(validate_assignment=True)

    name: str = Field(..., min_length=1, max_length=200, frozen=True, description="Display name")

    _parent: Optional[weakref.ReferenceType] = PrivateAttr(default=None)

    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    @property
    def parent(self) -> Optional["CompositeTask"]:
        """Composite currently containing this node, if any."""
        if self._parent is None:
            return None
        return self._parent()

    def _set_parent(self, parent: Optional["CompositeTask"]) -> None:
        self._parent = weakref.ref(parent) if parent is not None else None

    @abstractmethod
    def cost(self) -> float:
        """Return the cost of this node."""

    @abstractmethod
    def leaf_count(self) -> int:
        """Return the number of basic (leaf) tasks at or below this node."""

    def is_leaf(self) -> bool:
        """Check if this is a leaf task."""
        return False

    def is_root(self) -> bool:
        """Check if this is a root task (no parent)."""
        return self.parent is None

    def ancestors(self) -> Iterator["CompositeTask"]:
        """Yield enclosing composites, nearest first."""
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def root(self) -> "TaskNode":
        """Return the topmost node of the tree this node belongs to."""
        top: TaskNode = self
        for ancestor in self.ancestors():
            top = ancestor
        return top

    def depth(self) -> int:
        """Get the number of composites enclosing this node."""
        return sum(1 for _ in self.ancestors())

    def summary(self, options: Optional[RenderOptions] = None) -> str:
        """Get a one-line summary, e.g. ``batter (3 min)``."""
        options = options or RenderOptions()
        if not options.show_costs:
            return self.name
        return f"{self.name} ({options.format_cost(self.cost())})"

    def __str__(self) -> str:
        return f"{type(self).__name__}({self.name}, cost={self.cost()})"

    def __repr__(self) -> str:
        parent = self.parent
        parent_name = parent.name if parent is not None else None
        return f"{type(self).__name__}(name='{self.name}', parent='{parent_name}')"


class LeafTask(TaskNode):
    """A basic task with a fixed cost set at construction."""

    model_config = ConfigDict(validate_assignment=True, populate_by_name=True)

    fixed_cost: float = Field(..., alias="cost", ge=0, frozen=True, description="Intrinsic cost, e.g. minutes")

    @field_validator("fixed_cost", mode="before")
    @classmethod
    def _number(cls, value: object) -> object:
        # bool is an int subclass; strings would be coerced in lax mode
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("cost must be a number")
        return value

    @field_validator("fixed_cost")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("cost must be a finite number")
        return value

    def cost(self) -> float:
        return self.fixed_cost

    def leaf_count(self) -> int:
        return 1

    def is_leaf(self) -> bool:
        return True


class CompositeTask(TaskNode):
    """
    A task made of an ordered list of subtasks.

    The cost is the sum of the children's costs and is recomputed on every
    call, so mutations anywhere below are always reflected.
    """

    _children: List[TaskNode] = PrivateAttr(default_factory=list)

    @property
    def children(self) -> Tuple[TaskNode, ...]:
        """Snapshot of the direct children in insertion order."""
        return tuple(self._children)

    def add(self, child: TaskNode) -> None:
        """
        Append ``child`` and make this composite its parent.

        A child owned by another composite is detached from it first.

        Raises:
            InvalidArgument: if ``child`` is not a node, is this composite,
                or is one of its ancestors.
        """
        if not isinstance(child, TaskNode):
            raise InvalidArgument(f"Cannot add {type(child).__name__} to '{self.name}': not a task node")
        if child is self:
            raise InvalidArgument(f"Cannot add '{self.name}' to itself")
        for ancestor in self.ancestors():
            if ancestor is child:
                raise InvalidArgument(
                    f"Cannot add '{child.name}' to '{self.name}': it is an ancestor and would create a cycle"
                )

        previous = child.parent
        if previous is not None and previous is not self:
            previous._detach(child)
            logger.debug("Moved %r from %r to %r", child.name, previous.name, self.name)

        self._children.append(child)
        child._set_parent(self)
        logger.debug("Added %r to %r", child.name, self.name)

    def remove(self, child: TaskNode) -> bool:
        """
        Remove the first occurrence of ``child`` (by identity).

        Returns:
            True if a child was removed, False if ``child`` was not a direct child.
        """
        for index, existing in enumerate(self._children):
            if existing is child:
                del self._children[index]
                break
        else:
            return False

        # The same node may have been added more than once
        if child not in self:
            child._set_parent(None)
        logger.debug("Removed %r from %r", child.name, self.name)
        return True

    def _detach(self, child: TaskNode) -> None:
        self._children = [existing for existing in self._children if existing is not child]
        child._set_parent(None)

    def clear(self) -> None:
        """Remove every child, clearing each parent reference."""
        children, self._children = self._children, []
        for child in children:
            child._set_parent(None)
        logger.debug("Cleared %d children from %r", len(children), self.name)

    def __lshift__(self, child: TaskNode) -> "CompositeTask":
        self.add(child)
        return self

    def __getitem__(self, index: int) -> TaskNode:
        return self._children[index]

    def __len__(self) -> int:
        return len(self._children)

    def __iter__(self) -> Iterator[TaskNode]:  # type: ignore[override]
        return iter(tuple(self._children))

    def __contains__(self, node: object) -> bool:
        return any(existing is node for existing in self._children)

    def __bool__(self) -> bool:
        return True

    def _iter_leaves(self) -> Iterator[TaskNode]:
        # Explicit stack, no recursion
        stack: List[TaskNode] = list(reversed(self._children))
        while stack:
            node = stack.pop()
            if isinstance(node, CompositeTask):
                stack.extend(reversed(node._children))
            else:
                yield node

    def cost(self) -> float:
        return sum(leaf.cost() for leaf in self._iter_leaves())

    def leaf_count(self) -> int:
        return sum(1 for _ in self._iter_leaves())


def new_leaf(name: str, cost: float) -> LeafTask:
    """Create a leaf task with a fixed cost.

    Raises:
        InvalidArgument: if ``cost`` is not a number, is negative or not
            finite, or ``name`` is empty.
    """
    try:
        return LeafTask(name=name, cost=cost)
    except ValidationError as e:
        raise InvalidArgument(f"Invalid leaf task '{name}': {e.errors()[0]['msg']}") from e


def new_composite(name: str) -> CompositeTask:
    """Create an empty composite task."""
    try:
        return CompositeTask(name=name)
    except ValidationError as e:
        raise InvalidArgument(f"Invalid composite task '{name}': {e.errors()[0]['msg']}") from e
