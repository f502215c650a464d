import os
import csv
import glob
import time
import logging
import argparse
from typing import Dict, List, Optional

from coloring_errors import ColoringError, SearchAbortedError
from coloring_utils import calculate_lower_bound, calculate_upper_bound, verify_coloring
from graph_loader import load_graph
from sat_coloring import SATColoring

logger = logging.getLogger(__name__)

# --- Configuration ---
GRAPHS_DIR = 'data/benchmarks'
OUTPUT_CSV = 'results/sat_experiments.csv'
DEFAULT_TIMEOUT = 60.0  # seconds per k
GRAPH_PATTERNS = ('*.txt', '*.col')

FIELDS = [
    'graph', 'nodes', 'edges', 'lower_bound', 'upper_bound',
    'chromatic_number', 'valid', 'decisions', 'runtime', 'status',
]


def graph_files(graphs_dir: str) -> List[str]:
    found = []
    for pattern in GRAPH_PATTERNS:
        found.extend(glob.glob(os.path.join(graphs_dir, pattern)))
    return sorted(found)


def run_one(graph_path: str, timeout: Optional[float], max_nodes: Optional[int]) -> Dict:
    row = {field: '' for field in FIELDS}
    row['graph'] = os.path.basename(graph_path)
    start = time.time()
    try:
        G = load_graph(graph_path)
        row.update(nodes=G.number_of_nodes(), edges=G.number_of_edges(),
                   lower_bound=calculate_lower_bound(G),
                   upper_bound=calculate_upper_bound(G))
        solver = SATColoring(G, timeout=timeout, max_nodes=max_nodes)
        try:
            chi, coloring, _ = solver.run()
        finally:
            row['decisions'] = solver.decisions
        row.update(chromatic_number=chi, valid=verify_coloring(G, coloring), status='ok')
    except SearchAbortedError as e:
        logger.warning(f"{row['graph']}: {e}")
        row['status'] = 'aborted'
    except ColoringError as e:
        logger.error(f"{row['graph']}: {e}")
        row['status'] = 'error'
    row['runtime'] = f"{time.time() - start:.4f}"
    return row


def run_experiments(graphs_dir: str = GRAPHS_DIR, output_path: str = OUTPUT_CSV,
                    timeout: Optional[float] = DEFAULT_TIMEOUT,
                    max_nodes: Optional[int] = None) -> List[Dict]:

    files = graph_files(graphs_dir)
    logger.info(f"Running {len(files)} graphs from {graphs_dir}")

    # prepare CSV
    out_dir = os.path.dirname(output_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    rows = []
    with open(output_path, 'w', newline='') as csvfile:
        writer = csv.DictWriter(csvfile, fieldnames=FIELDS)
        writer.writeheader()
        for graph_path in files:
            print(f"Running: {os.path.basename(graph_path)}")
            row = run_one(graph_path, timeout, max_nodes)
            writer.writerow(row)
            csvfile.flush()
            print(f"Done: chi={row['chromatic_number']}, status={row['status']}, "
                  f"time={row['runtime']}s")
            rows.append(row)
    return rows


def main() -> None:
    parser = argparse.ArgumentParser(description='Run SAT coloring over a benchmark directory')
    parser.add_argument('--graphs', '-g', default=GRAPHS_DIR, help='Directory of graph files')
    parser.add_argument('--output', '-o', default=OUTPUT_CSV, help='Path to CSV results file')
    parser.add_argument('--timeout', type=float, default=DEFAULT_TIMEOUT, help='Timeout per k')
    parser.add_argument('--max-nodes', type=int, default=None, help='Decision budget per k')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    run_experiments(args.graphs, args.output, args.timeout, args.max_nodes)
    print(f"Experiments complete. Results saved to {args.output}")


if __name__ == '__main__':
    main()
