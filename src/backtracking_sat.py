"""
Exhaustive backtracking SAT search that records its path as a decision tree.

There is no unit propagation, no clause learning and no branching heuristic:
variables are decided in index order, true before false, and a branch is only
cut once a clause has every literal falsified.
"""

import sys
import time
import logging
import numpy as np
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from cnf_encoding import Formula
from coloring_errors import AllocationError, SearchAbortedError

logger = logging.getLogger(__name__)

TRUE, FALSE, UNASSIGNED = 1, -1, 0


@contextmanager
def recursion_limit(depth: int):
    # one extra frame per decision on top of whatever the caller already uses
    previous = sys.getrecursionlimit()
    sys.setrecursionlimit(previous + depth)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


class Assignment:
    """Partial truth assignment with a LIFO trail of decided variables."""

    def __init__(self, num_variables: int):
        try:
            self.values = np.zeros(num_variables + 1, dtype=np.int8)  # slot 0 unused
        except MemoryError as e:
            raise AllocationError(f"Cannot allocate an assignment of {num_variables} variables") from e
        self.num_variables = num_variables
        self.trail: List[int] = []

    @property
    def depth(self) -> int:
        return len(self.trail)

    def assign(self, var: int, value: bool) -> None:
        if not 1 <= var <= self.num_variables:
            raise IndexError(f"Variable {var} outside 1..{self.num_variables}")
        if self.values[var] != UNASSIGNED:
            raise RuntimeError(f"Variable {var} is already assigned")
        self.values[var] = TRUE if value else FALSE
        self.trail.append(var)

    def retract(self, var: int) -> None:
        # only the most recent decision may be undone
        if not self.trail or self.trail[-1] != var:
            raise RuntimeError(f"Variable {var} is not the most recent assignment")
        self.trail.pop()
        self.values[var] = UNASSIGNED

    def backtrack_to(self, depth: int) -> None:
        while len(self.trail) > depth:
            self.retract(self.trail[-1])

    def value(self, var: int) -> Optional[bool]:
        v = self.values[var]
        if v == UNASSIGNED:
            return None
        return bool(v == TRUE)

    def is_true(self, var: int) -> bool:
        return bool(self.values[var] == TRUE)

    def first_unassigned(self) -> int:
        """Lowest unassigned variable, or 0 when every variable is set."""
        free = np.flatnonzero(self.values[1:] == UNASSIGNED)
        return int(free[0]) + 1 if len(free) else 0

    def true_variables(self) -> List[int]:
        return [int(v) for v in np.flatnonzero(self.values == TRUE)]

    def model(self) -> List[int]:
        # signed literals, unassigned variables left out
        return [var if self.values[var] == TRUE else -var
                for var in range(1, self.num_variables + 1)
                if self.values[var] != UNASSIGNED]


class DecisionNode:
    """
    One decision of the search.

    `variable` is 0 for a node where no decision was made (a satisfied leaf or
    a fresh node). `value` is the branch that led to success, None otherwise.
    Each node owns at most one subtree per branch; a failed subtree is dropped
    as soon as its branch is refuted.
    """

    __slots__ = ("variable", "value", "true_child", "false_child")

    def __init__(self):
        self.variable = 0
        self.value: Optional[bool] = None
        self.true_child: Optional["DecisionNode"] = None
        self.false_child: Optional["DecisionNode"] = None

    def children(self) -> List["DecisionNode"]:
        return [c for c in (self.true_child, self.false_child) if c is not None]

    def is_leaf(self) -> bool:
        return self.true_child is None and self.false_child is None

    def accepted_child(self) -> Optional["DecisionNode"]:
        if self.value is None:
            return None
        return self.true_child if self.value else self.false_child

    def path(self) -> Iterator[Tuple[int, bool]]:
        """Yield the accepted (variable, value) decisions from this node down."""
        node = self
        while node is not None and node.value is not None:
            yield node.variable, node.value
            node = node.accepted_child()

    # Tree walks use an explicit stack: a solved tree is as deep as the
    # number of decisions, far past the interpreter's recursion limit.

    def depth(self) -> int:
        deepest = 0
        stack = [(self, 0)]
        while stack:
            node, d = stack.pop()
            deepest = max(deepest, d)
            stack.extend((c, d + 1) for c in node.children())
        return deepest

    def size(self) -> int:
        count = 0
        stack = [self]
        while stack:
            node = stack.pop()
            count += 1
            stack.extend(node.children())
        return count

    def render(self, indent: int = 0) -> str:
        lines = []
        stack = [(self, indent)]
        while stack:
            item, level = stack.pop()
            pad = "  " * level
            if isinstance(item, str):
                lines.append(f"{pad}  [{item}]")
                continue
            if item.variable == 0:
                lines.append(f"{pad}(leaf)")
                continue
            lines.append(f"{pad}x{item.variable} -> {item.value}")
            # pushed in reverse so the true branch prints first
            for label, child in (("F", item.false_child), ("T", item.true_child)):
                if child is not None:
                    stack.append((child, level + 2))
                    stack.append((label, level))
        return "\n".join(lines)


class SearchBudget:
    # Wall-clock and decision-count limits for one solve call
    def __init__(self, timeout: Optional[float] = None, max_nodes: Optional[int] = None):
        self.timeout = timeout
        self.max_nodes = max_nodes
        self.started = None

    def start(self) -> None:
        self.started = time.time()

    def check(self, nodes: int) -> None:
        if self.max_nodes is not None and nodes >= self.max_nodes:
            raise SearchAbortedError(f"Node budget of {self.max_nodes} decisions exhausted")
        if self.timeout is not None and time.time() - self.started > self.timeout:
            raise SearchAbortedError(f"Timeout of {self.timeout}s exceeded")


@dataclass
class SolverStats:
    decisions: int = 0
    backtracks: int = 0
    max_depth: int = 0


class BacktrackingSolver:

    def __init__(self, formula: Formula, budget: Optional[SearchBudget] = None):
        self.formula = formula
        self.budget = budget
        self.stats = SolverStats()
        self._vars, self._signs, self._starts = formula.clause_arrays()

    def _clause_status(self, assignment: Assignment) -> np.ndarray:
        # per clause: 1 if some literal holds, -1 if all are falsified, 0 otherwise
        status = assignment.values[self._vars] * self._signs
        return np.maximum.reduceat(status, self._starts)

    def is_satisfied(self, assignment: Assignment) -> bool:
        if not self.formula.num_clauses:
            return True
        return bool(np.all(self._clause_status(assignment) == TRUE))

    def is_conflicted(self, assignment: Assignment) -> bool:
        if not self.formula.num_clauses:
            return False
        return bool(np.any(self._clause_status(assignment) == FALSE))

    def solve(self, assignment: Assignment, node: DecisionNode) -> bool:
        """
        Search for an extension of `assignment` that satisfies the formula.

        On success the assignment keeps the winning values and `node` holds
        the accepted decision chain. On failure the assignment is back to its
        state at call time and `node` has no children.
        """
        if assignment.num_variables != self.formula.num_variables:
            raise ValueError(
                f"Assignment covers {assignment.num_variables} variables, "
                f"formula has {self.formula.num_variables}"
            )
        if self.budget is not None:
            self.budget.start()
        depth = assignment.depth
        try:
            with recursion_limit(self.formula.num_variables - depth):
                return self._search(assignment, node, 0)
        except SearchAbortedError:
            self._reset(assignment, node, depth)
            logger.warning(f"Search aborted after {self.stats.decisions} decisions")
            raise
        except (MemoryError, RecursionError) as e:
            self._reset(assignment, node, depth)
            raise AllocationError(
                f"Search ran out of resources after {self.stats.decisions} decisions: {e}"
            ) from e

    @staticmethod
    def _reset(assignment: Assignment, node: DecisionNode, depth: int) -> None:
        assignment.backtrack_to(depth)
        node.variable, node.value = 0, None
        node.true_child = node.false_child = None

    def _search(self, assignment: Assignment, node: DecisionNode, depth: int) -> bool:
        self.stats.max_depth = max(self.stats.max_depth, depth)

        if not self.formula.num_clauses:
            return True
        status = self._clause_status(assignment)
        if np.all(status == TRUE):
            return True
        if np.any(status == FALSE):
            return False

        var = assignment.first_unassigned()
        if var == 0:
            return False
        node.variable = var

        for value in (True, False):
            if self.budget is not None:
                self.budget.check(self.stats.decisions)
            child = DecisionNode()
            if value:
                node.true_child = child
            else:
                node.false_child = child
            self.stats.decisions += 1
            assignment.assign(var, value)

            if self._search(assignment, child, depth + 1):
                node.value = value
                return True

            # refuted: drop the subtree and undo the decision
            if value:
                node.true_child = None
            else:
                node.false_child = None
            assignment.retract(var)

        self.stats.backtracks += 1
        node.variable = 0
        return False


def solve(formula: Formula, assignment: Assignment, node: DecisionNode) -> bool:
    return BacktrackingSolver(formula).solve(assignment, node)
