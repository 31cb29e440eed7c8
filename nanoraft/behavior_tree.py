"""Behaviour trees: composites, decorators, actions and a fluent builder."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional


class Status(Enum):
    """The outcome of ticking a behaviour."""

    FAILURE = 0
    SUCCESS = 1
    RUNNING = 2
    ABORTED = 3
    INVALID = 4


class MetaType(Enum):
    """The broad kind of a behaviour node."""

    COMPOSITE = 0b00
    DECORATOR = 0b01
    ACTION = 0b10


class Policy(Enum):
    """How many children of a parallel node decide its outcome."""

    REQUIRE_ONE = 0
    REQUIRE_ALL = 1


class Behavior(ABC):
    """A node of a behaviour tree.

    Ticking runs on_initialize when the node was not already running, then
    on_update, then on_terminate once the node is no longer running.
    """

    def __init__(self, uid: str, meta_type: MetaType) -> None:
        self.uid = uid
        self.meta_type = meta_type
        self.status = Status.INVALID

    def is_terminated(self) -> bool:
        return self.is_success() or self.is_failure()

    def is_success(self) -> bool:
        return self.status is Status.SUCCESS

    def is_failure(self) -> bool:
        return self.status is Status.FAILURE

    def is_running(self) -> bool:
        return self.status is Status.RUNNING

    def tick(self) -> Status:
        """Run the node once and return the resulting status."""
        if not self.is_running():
            self.on_initialize()
        self.status = self.on_update()
        if not self.is_running():
            self.on_terminate()
        return self.status

    def reset(self) -> None:
        self.status = Status.INVALID

    def abort(self) -> None:
        """Interrupt the node: terminate it and mark it aborted."""
        self.on_terminate()
        self.status = Status.ABORTED

    def add_child(self, child: "Behavior") -> None:
        """Attach a child; nodes that take no children ignore it."""

    def on_initialize(self) -> None:
        """Called once when the node starts running."""

    @abstractmethod
    def on_update(self) -> Status:
        """Do the node's work and return its status."""

    def on_terminate(self) -> None:
        """Called once when the node stops running."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(uid={self.uid!r}, status={self.status.name})"


class Composite(Behavior):
    """A node with an ordered list of children."""

    def __init__(self, uid: str) -> None:
        super().__init__(uid, MetaType.COMPOSITE)
        self.children: list[Behavior] = []

    def remove_child_by_uid(self, uid: str) -> None:
        """Remove the first child with the given uid."""
        for position, child in enumerate(self.children):
            if child.uid == uid:
                del self.children[position]
                return

    def remove_child(self, child: Behavior) -> None:
        """Remove every occurrence of the given child."""
        self.children[:] = [c for c in self.children if c is not child]

    def clear_children(self) -> None:
        self.children.clear()

    def add_child(self, child: Behavior) -> None:
        self.children.append(child)


class Sequence(Composite):
    """Runs children in order until one does not succeed."""

    def __init__(self, uid: str) -> None:
        super().__init__(uid)
        self._current: Optional[int] = None

    def on_initialize(self) -> None:
        self._current = 0 if self.children else None

    def on_update(self) -> Status:
        while self._current is not None:
            if self._current >= len(self.children):
                self._current = None
                break
            status = self.children[self._current].tick()
            if status is not Status.SUCCESS:
                return status
            self._current += 1
            if self._current >= len(self.children):
                self._current = None
        return Status.SUCCESS


class Selector(Sequence):
    """Runs children in order until one does not fail."""

    def on_update(self) -> Status:
        for child in self.children:
            status = child.tick()
            if status is not Status.FAILURE:
                return status
        return Status.FAILURE


class Parallel(Composite):
    """Ticks every unfinished child each time and decides by its policies."""

    def __init__(self, uid: str, success_policy: Policy, failure_policy: Policy) -> None:
        super().__init__(uid)
        self.success_policy = success_policy
        self.failure_policy = failure_policy

    def on_update(self) -> Status:
        successes = 0
        failures = 0
        for child in self.children:
            if not child.is_terminated():
                child.tick()
            if child.is_success():
                successes += 1
                if self.success_policy is Policy.REQUIRE_ONE:
                    return Status.SUCCESS
            if child.is_failure():
                failures += 1
                if self.failure_policy is Policy.REQUIRE_ONE:
                    return Status.FAILURE
        count = len(self.children)
        if self.failure_policy is Policy.REQUIRE_ALL and failures == count:
            return Status.FAILURE
        if self.success_policy is Policy.REQUIRE_ALL and successes == count:
            return Status.SUCCESS
        return Status.RUNNING

    def on_terminate(self) -> None:
        for child in self.children:
            if child.is_running():
                child.abort()


class Filter(Sequence):
    """A sequence whose conditions run before its actions."""

    def add_condition(self, condition: Behavior) -> None:
        self.children.insert(0, condition)

    def add_action(self, action: Behavior) -> None:
        self.children.append(action)


class ActiveSelector(Selector):
    """A selector that re-evaluates from its first child on every tick."""

    def on_update(self) -> Status:
        previous = self._current
        self.on_initialize()
        status = super().on_update()
        if previous is not None and self._current != previous and previous < len(self.children):
            self.children[previous].abort()
        return status


class Monitor(Parallel):
    """A parallel node whose conditions are kept ahead of its actions."""

    def add_condition(self, condition: Behavior) -> None:
        self.children.insert(0, condition)

    def add_action(self, action: Behavior) -> None:
        self.children.append(action)


class Decorator(Behavior):
    """A node that wraps a single child."""

    def __init__(self, uid: str) -> None:
        super().__init__(uid, MetaType.DECORATOR)
        self.child: Optional[Behavior] = None

    def add_child(self, child: Behavior) -> None:
        self.child = child

    def _require_child(self) -> Behavior:
        if self.child is None:
            raise RuntimeError(f"decorator {self.uid!r} has no child")
        return self.child


class Inverter(Decorator):
    """Turns the child's success into failure and the reverse."""

    def on_update(self) -> Status:
        child = self._require_child()
        child.tick()
        if child.is_failure():
            return Status.SUCCESS
        if child.is_success():
            return Status.FAILURE
        return Status.RUNNING


class Repeat(Decorator):
    """Runs the child until it has succeeded limit times; a negative limit repeats forever."""

    def __init__(self, uid: str, limit: int) -> None:
        super().__init__(uid)
        self.limit = limit
        self.counter = 0

    def on_initialize(self) -> None:
        self.counter = 0

    def on_update(self) -> Status:
        child = self._require_child()
        while self.limit < 0 or self.counter < self.limit:
            status = child.tick()
            if status is Status.RUNNING:
                return Status.RUNNING
            if status is Status.FAILURE:
                return Status.FAILURE
            self.counter += 1
        return Status.SUCCESS


class Action(Behavior):
    """A leaf that does work; subclasses supply on_update."""

    def __init__(self, uid: str) -> None:
        super().__init__(uid, MetaType.ACTION)

    def add_child(self, child: Behavior) -> None:
        """Leaves take no children."""


class BehaviorTree:
    """Holds the root node and ticks it."""

    def __init__(self, root: Optional[Behavior] = None) -> None:
        self.root = root

    def set_root(self, root: Behavior) -> None:
        self.root = root

    def tick(self) -> Status:
        if self.root is None:
            raise RuntimeError("behaviour tree has no root")
        return self.root.tick()

    def has_root(self) -> bool:
        return self.root is not None


class BehaviorTreeBuilder:
    """Builds a tree by chaining calls; back() climbs to the enclosing node."""

    def __init__(self) -> None:
        self.tree = BehaviorTree()
        self._stack: list[Behavior] = []

    def add_behavior(self, behavior: Behavior) -> None:
        """Attach behavior to the current node, or make it the root of an empty tree."""
        if self.tree.has_root():
            if not self._stack:
                raise RuntimeError("the tree's root cannot take children")
            self._stack[-1].add_child(behavior)
        else:
            self.tree.set_root(behavior)
        if behavior.meta_type in (MetaType.COMPOSITE, MetaType.DECORATOR):
            self._stack.append(behavior)

    def tree_tick(self) -> Status:
        return self.tree.tick()

    def back(self) -> "BehaviorTreeBuilder":
        if len(self._stack) > 1:
            self._stack.pop()
        return self

    def end(self) -> BehaviorTree:
        del self._stack[1:]
        return self.tree

    def sequence(self, uid: str) -> "BehaviorTreeBuilder":
        self.add_behavior(Sequence(uid))
        return self

    def selector(self, uid: str) -> "BehaviorTreeBuilder":
        self.add_behavior(Selector(uid))
        return self

    def parallel(self, uid: str, success_policy: Policy, failure_policy: Policy) -> "BehaviorTreeBuilder":
        self.add_behavior(Parallel(uid, success_policy, failure_policy))
        return self

    def filter(self, uid: str) -> "BehaviorTreeBuilder":
        self.add_behavior(Filter(uid))
        return self

    def active_selector(self, uid: str) -> "BehaviorTreeBuilder":
        self.add_behavior(ActiveSelector(uid))
        return self

    def monitor(self, uid: str, success_policy: Policy, failure_policy: Policy) -> "BehaviorTreeBuilder":
        self.add_behavior(Monitor(uid, success_policy, failure_policy))
        return self

    def inverter(self, uid: str) -> "BehaviorTreeBuilder":
        self.add_behavior(Inverter(uid))
        return self

    def repeat(self, uid: str, limit: int) -> "BehaviorTreeBuilder":
        self.add_behavior(Repeat(uid, limit))
        return self

    def action(self, action: Action) -> "BehaviorTreeBuilder":
        self.add_behavior(action)
        return self