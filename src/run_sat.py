# src/run_sat.py

import sys
import logging
import argparse
from typing import List, Optional

from backtracking_sat import Assignment, BacktrackingSolver, DecisionNode, SearchBudget
from cnf_encoding import encode
from coloring_errors import ColoringError
from coloring_utils import calculate_lower_bound, calculate_upper_bound, verify_coloring
from dimacs_cnf import dimacs_string, parse_dimacs, write_dimacs
from graph_loader import load_graph
from sat_coloring import SATColoring


def parse_args(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(description="Graph coloring through a backtracking SAT solver")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    enc = sub.add_parser("encode", help="Write the k-coloring CNF of a graph")
    enc.add_argument("graph", help="Path to graph file")
    enc.add_argument("k", type=int, help="Number of colors")
    enc.add_argument("--output", "-o", default=None, help="DIMACS output path (default stdout)")
    enc.add_argument("--zero-indexed", action="store_true", help="Edge endpoints start at 0")

    sol = sub.add_parser("solve", help="Decide a DIMACS CNF formula")
    sol.add_argument("cnf", help="Path to DIMACS .cnf")
    sol.add_argument("--tree", action="store_true", help="Print the decision tree")
    sol.add_argument("--timeout", type=float, default=None)
    sol.add_argument("--max-nodes", type=int, default=None)

    col = sub.add_parser("color", help="Find the chromatic number of a graph")
    col.add_argument("graph", help="Path to graph file")
    col.add_argument("--kmax", type=int, default=None, help="Upper bound on colors (default n)")
    col.add_argument("--timeout", type=float, default=None, help="Timeout per k in seconds")
    col.add_argument("--max-nodes", type=int, default=None, help="Decision budget per k")
    col.add_argument("--cnf-dir", default=None, help="Keep each k's DIMACS formula here")
    col.add_argument("--zero-indexed", action="store_true", help="Edge endpoints start at 0")
    col.add_argument("--output", "-o", default=None, help="Save 'node: color' lines here")
    return p.parse_args(argv)


def cmd_encode(args) -> None:
    G = load_graph(args.graph, args.zero_indexed)
    formula = encode(G, args.k)
    if args.output:
        write_dimacs(formula, args.output)
        print(f"Wrote {formula.num_clauses} clauses over {formula.num_variables} variables to {args.output}")
    else:
        sys.stdout.write(dimacs_string(formula))


def cmd_solve(args) -> None:
    formula = parse_dimacs(args.cnf)
    budget = None
    if args.timeout is not None or args.max_nodes is not None:
        budget = SearchBudget(args.timeout, args.max_nodes)
    solver = BacktrackingSolver(formula, budget)
    assignment = Assignment(formula.num_variables)
    root = DecisionNode()

    if solver.solve(assignment, root):
        print("SAT")
        print(" ".join(map(str, assignment.model())) + " 0")
        if args.tree:
            print(root.render())
    else:
        print("UNSAT")
    print(f"Decisions: {solver.stats.decisions}, backtracks: {solver.stats.backtracks}")


def cmd_color(args) -> None:
    G = load_graph(args.graph, args.zero_indexed)
    print(f"Lower bound (Clique size): {calculate_lower_bound(G)}")
    print(f"Upper bound (Greedy): {calculate_upper_bound(G)}")

    solver = SATColoring(G, args.kmax, timeout=args.timeout,
                         max_nodes=args.max_nodes, cnf_dir=args.cnf_dir)
    chi, coloring, elapsed = solver.run()
    if chi is None:
        print(f"Not colorable with at most {solver.k_max} colors ({elapsed:.2f}s)")
        return

    print(f"Chromatic number found: {chi}")
    print(f"Total time: {elapsed:.2f} seconds, {solver.decisions} decisions")
    print(f"Final coloring (sample): {dict(list(coloring.items())[:10])}")
    print(f"Coloring is {'valid' if verify_coloring(G, coloring) else 'invalid'}")

    if args.output:
        with open(args.output, "w") as f:
            for node in sorted(coloring):
                f.write(f"{node}: {coloring[node]}\n")
        print(f"Full solution saved to {args.output}")


COMMANDS = {"encode": cmd_encode, "solve": cmd_solve, "color": cmd_color}


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    try:
        COMMANDS[args.command](args)
    except (ColoringError, ValueError, OSError) as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
