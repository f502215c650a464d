"""
CNF encoding of graph k-colorability.

A vertex v (1..n) holding color c (1..k) is the Boolean variable
(v - 1) * k + c. The same mapping is used to encode the graph and to decode
a satisfying assignment back into a coloring.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

import networkx as nx
import numpy as np

from coloring_errors import ColoringNotFoundError, FormulaFormatError


@dataclass
class Formula:
    """
    A CNF formula: the conjunction of its clauses.

    Attributes:
        num_variables: Variables are numbered 1..num_variables
        clauses: List of clauses, each a list of non-zero literals
                 (positive int = variable true, negative int = variable false)
        comments: Free text kept alongside the formula, written as `c` lines
    """
    num_variables: int
    clauses: List[List[int]]
    comments: List[str] = field(default_factory=list)
    _arrays: Optional[Tuple[np.ndarray, np.ndarray, np.ndarray]] = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        if self.num_variables < 0:
            raise FormulaFormatError(f"Negative variable count: {self.num_variables}")
        for i, clause in enumerate(self.clauses):
            if not clause:
                raise FormulaFormatError(f"Clause {i} is empty")
            for lit in clause:
                if lit == 0:
                    raise FormulaFormatError(f"Literal 0 inside clause {i}")
                if abs(lit) > self.num_variables:
                    raise FormulaFormatError(
                        f"Literal {lit} in clause {i} exceeds variable count {self.num_variables}"
                    )

    @property
    def num_clauses(self) -> int:
        return len(self.clauses)

    def clause_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Flatten the clauses for vectorised evaluation.

        Returns:
            (variables, signs, starts): the variable and +1/-1 polarity of every
            literal in clause order, and the offset where each clause begins.
        """
        if self._arrays is None:
            flat = np.fromiter(
                (lit for clause in self.clauses for lit in clause), dtype=np.int64
            )
            lengths = np.fromiter((len(c) for c in self.clauses), dtype=np.int64,
                                  count=len(self.clauses))
            starts = np.zeros(len(self.clauses), dtype=np.int64)
            if len(lengths) > 1:
                starts[1:] = np.cumsum(lengths)[:-1]
            self._arrays = (np.abs(flat), np.sign(flat).astype(np.int8), starts)
        return self._arrays


def var_index(v: int, c: int, k: int) -> int:
    # vertex v and color c are both 1-indexed
    return (v - 1) * k + c


def variable_meaning(index: int, k: int) -> Tuple[int, int]:
    """Inverse of var_index: the (vertex, color) a variable stands for."""
    v, c = divmod(index - 1, k)
    return v + 1, c + 1


def expected_clause_count(n: int, m: int, k: int) -> int:
    return n + n * k * (k - 1) // 2 + m * k


def _check_vertices(G: nx.Graph) -> int:
    n = G.number_of_nodes()
    if set(G.nodes()) != set(range(1, n + 1)):
        raise ValueError("Graph nodes must be exactly 1..n")
    return n


def encode(G: nx.Graph, k: int) -> Formula:
    """
    Encode "G is k-colorable" as a CNF formula over n*k variables.

    Clauses come in three families, in this order:
    coverage (every vertex gets some color), exclusivity (no vertex gets two
    colors) and adjacency (the endpoints of an edge never share a color).
    Nothing is simplified or pruned, so formulas that are plainly
    unsatisfiable are still produced in full.
    """
    if k < 1:
        raise ValueError(f"k must be at least 1, got {k}")
    n = _check_vertices(G)
    clauses: List[List[int]] = []

    for v in range(1, n + 1):
        clauses.append([var_index(v, c, k) for c in range(1, k + 1)])

    for v in range(1, n + 1):
        for c1 in range(1, k + 1):
            for c2 in range(c1 + 1, k + 1):
                clauses.append([-var_index(v, c1, k), -var_index(v, c2, k)])

    for u, v in G.edges():
        for c in range(1, k + 1):
            clauses.append([-var_index(u, c, k), -var_index(v, c, k)])

    comments = [
        f"{k}-coloring of a graph with {n} vertices and {G.number_of_edges()} edges",
        "variable (v - 1) * k + c means vertex v has color c",
    ]
    return Formula(num_variables=n * k, clauses=clauses, comments=comments)


def decode_coloring(true_variables: Iterable[int], n: int, k: int) -> Dict[int, int]:
    """
    Turn the variables set true by a satisfying assignment into a coloring.

    Each vertex takes the lowest color whose variable is true.

    Raises:
        ColoringNotFoundError: If some vertex has no true color variable
    """
    true_set = set(true_variables)
    coloring: Dict[int, int] = {}
    for v in range(1, n + 1):
        for c in range(1, k + 1):
            if var_index(v, c, k) in true_set:
                coloring[v] = c
                break
        else:
            raise ColoringNotFoundError(f"Vertex {v} has no color in the satisfying assignment")
    return coloring
