import os
import sys
import time
import logging
import argparse
import networkx as nx
from typing import Dict, List, Optional, Tuple

from backtracking_sat import Assignment, BacktrackingSolver, DecisionNode, SearchBudget
from cnf_encoding import decode_coloring, encode
from coloring_errors import ColoringError, ColoringNotFoundError
from coloring_utils import verify_coloring
from dimacs_cnf import parse_dimacs, write_dimacs
from graph_loader import load_graph

logger = logging.getLogger(__name__)


class SATColoring:
    def __init__(
        self,
        G: nx.Graph,
        k_max: Optional[int] = None,       # max k to try (default = n)
        timeout: Optional[float] = None,   # per-k wall clock budget
        max_nodes: Optional[int] = None,   # per-k decision budget
        cnf_dir: Optional[str] = None,     # write and re-read each formula here
    ):

        self.G = G
        self.n = G.number_of_nodes()
        self.k_max = self.n if k_max is None else min(k_max, self.n)
        self.timeout = timeout
        self.max_nodes = max_nodes
        self.cnf_dir = cnf_dir

        # (k, satisfiable, seconds, decisions) per attempt
        self.attempts: List[Tuple[int, bool, float, int]] = []
        self.tree: Optional[DecisionNode] = None
        self.decisions = 0

    def formula_for(self, k: int):
        formula = encode(self.G, k)
        if self.cnf_dir is None:
            return formula
        path = os.path.join(self.cnf_dir, f"k{k}.cnf")
        write_dimacs(formula, path)
        return parse_dimacs(path)

    def is_k_colorable(self, k: int) -> Optional[Dict[int, int]]:
        """Encode and solve for k colors; the decoded coloring, or None if UNSAT."""
        formula = self.formula_for(k)
        assignment = Assignment(formula.num_variables)
        root = DecisionNode()
        budget = None
        if self.timeout is not None or self.max_nodes is not None:
            budget = SearchBudget(self.timeout, self.max_nodes)
        solver = BacktrackingSolver(formula, budget)

        start = time.time()
        try:
            satisfiable = solver.solve(assignment, root)
        finally:
            self.decisions += solver.stats.decisions
        elapsed = time.time() - start

        self.attempts.append((k, satisfiable, elapsed, solver.stats.decisions))
        logger.info(f"k={k}: {'SAT' if satisfiable else 'UNSAT'} in {elapsed:.3f}s "
                    f"({solver.stats.decisions} decisions)")
        if not satisfiable:
            return None

        self.tree = root
        return decode_coloring(assignment.true_variables(), self.n, k)

    def run(self) -> Tuple[Optional[int], Optional[Dict[int, int]], float]:
        """
        Try k = 1, 2, ... k_max and stop at the first satisfiable k.

        Returns:
        - k: the chromatic number (None if k_max < n and every k was UNSAT)
        - coloring: vertex -> color in 1..k
        - elapsed time in seconds

        Raises ColoringNotFoundError when no k up to n works, which a simple
        graph never allows.
        """
        start = time.time()
        self.attempts = []
        self.decisions = 0
        if self.n == 0:
            return 0, {}, time.time() - start

        for k in range(1, self.k_max + 1):
            coloring = self.is_k_colorable(k)
            if coloring is None:
                continue
            if not verify_coloring(self.G, coloring):
                raise ColoringNotFoundError(f"Decoded {k}-coloring has a conflict: {coloring}")
            return k, coloring, time.time() - start

        if self.k_max < self.n:
            return None, None, time.time() - start
        raise ColoringNotFoundError(
            f"No coloring with at most {self.n} colors; the graph has "
            f"{nx.number_of_selfloops(self.G)} self-loops"
        )


def find_chromatic_coloring(G: nx.Graph, **options) -> Optional[Dict[int, int]]:
    _, coloring, _ = SATColoring(G, **options).run()
    return coloring


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='SAT-based exact graph coloring')
    parser.add_argument('--input', '-i', required=True, help='Path to graph file')
    parser.add_argument('--kmax', type=int, default=None, help='Max k to try (default = n)')
    parser.add_argument('--timeout', type=float, default=None, help='Timeout per k in seconds')
    parser.add_argument('--zero-indexed', action='store_true', help='Edge endpoints start at 0')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    try:
        G = load_graph(args.input, args.zero_indexed)
        solver = SATColoring(G, args.kmax, timeout=args.timeout)
        best_k, coloring, runtime = solver.run()
    except ColoringError as e:
        print(f"Error: {e}")
        sys.exit(1)
    if best_k is None:
        print(f"Not colorable with at most {solver.k_max} colors ({runtime:.3f}s)")
    else:
        print(f"Exact chromatic number: {best_k} (computed in {runtime:.3f}s)")
