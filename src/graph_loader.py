import os
import logging
import networkx as nx
from typing import List, Tuple

from coloring_errors import GraphReadError

logger = logging.getLogger(__name__)


def _to_int(token: str, what: str, line_num: int) -> int:
    try:
        return int(token)
    except ValueError:
        raise GraphReadError(f"Invalid {what} at line {line_num}: {token!r}") from None


def _build_graph(n: int, edges: List[Tuple[int, int]]) -> nx.Graph:
    G = nx.Graph()
    G.add_nodes_from(range(1, n + 1))
    for u, v in edges:
        if not (1 <= u <= n and 1 <= v <= n):
            raise GraphReadError(f"Edge ({u}, {v}) references a vertex outside 1..{n}")
        G.add_edge(u, v)
    return G


def _parse_counts_format(lines: List[str], zero_indexed: bool) -> nx.Graph:
    # n and m (on one line or two), one separator line, then m edge lines
    counts = []
    pos = 0
    while pos < len(lines) and len(counts) < 2:
        tokens = lines[pos].split()
        pos += 1
        if len(counts) + len(tokens) > 2:
            raise GraphReadError(f"Unexpected token on count line {pos}: {lines[pos - 1].strip()!r}")
        counts.extend(_to_int(token, "count", pos) for token in tokens)
    if len(counts) < 2:
        raise GraphReadError("Graph file must start with a vertex count and an edge count")
    n, m = counts
    if n < 0 or m < 0:
        raise GraphReadError(f"Negative counts: n={n}, m={m}")

    # the separator is whatever line follows the counts, blank or not
    pos += 1
    body = [(i, line.strip()) for i, line in enumerate(lines[pos:], pos + 1) if line.strip()]
    if len(body) < m:
        raise GraphReadError(f"Expected {m} edge lines, found {len(body)}")

    shift = 1 if zero_indexed else 0
    edges = []
    for line_num, line in body[:m]:
        parts = line.split()
        if len(parts) != 2:
            raise GraphReadError(f"Edge line {line_num} must hold two vertices: {line!r}")
        u = _to_int(parts[0], "vertex", line_num) + shift
        v = _to_int(parts[1], "vertex", line_num) + shift
        edges.append((u, v))
    return _build_graph(n, edges)


def _parse_dimacs_format(lines: List[str]) -> nx.Graph:
    n = None
    m = None
    edges = []
    for line_num, line in enumerate(lines, 1):
        line = line.strip()
        if not line or line.startswith("c"):
            continue
        parts = line.split()
        if parts[0] == "p":
            if n is not None:
                raise GraphReadError(f"Duplicate problem line at line {line_num}")
            # "p edge n m" or "p n m"
            if len(parts) == 4:
                counts = parts[2:]
            elif len(parts) == 3:
                counts = parts[1:]
            else:
                raise GraphReadError(f"Invalid problem line at line {line_num}: {line}")
            n = _to_int(counts[0], "vertex count", line_num)
            m = _to_int(counts[1], "edge count", line_num)
            if n < 0 or m < 0:
                raise GraphReadError(f"Negative counts at line {line_num}")
        elif parts[0] == "e":
            if n is None:
                raise GraphReadError(f"Edge before problem line at line {line_num}")
            if len(parts) != 3:
                raise GraphReadError(f"Edge line {line_num} must hold two vertices: {line!r}")
            edges.append((_to_int(parts[1], "vertex", line_num),
                          _to_int(parts[2], "vertex", line_num)))
    if n is None:
        raise GraphReadError("Missing problem line (p edge ...)")
    if len(edges) != m:
        raise GraphReadError(f"Problem line declares {m} edges but {len(edges)} edge lines were found")
    return _build_graph(n, edges)


def load_graph_string(content: str, zero_indexed: bool = False) -> nx.Graph:
    """Parse a graph from text, detecting the count format or DIMACS edge format.

    Nodes of the returned graph are always 1..n.
    """
    lines = content.splitlines()
    first = next((line.split()[0] for line in lines if line.strip()), None)
    if first is None:
        raise GraphReadError("Graph description is empty")

    if first in ("c", "p"):
        G = _parse_dimacs_format(lines)
    else:
        G = _parse_counts_format(lines, zero_indexed)
    logger.info(f"Loaded graph with {G.number_of_nodes()} nodes and {G.number_of_edges()} edges")
    return G


# Load graph from a counts or DIMACS file
def load_graph(path: str, zero_indexed: bool = False) -> nx.Graph:
    if not os.path.exists(path):
        raise GraphReadError(f"Input file {path} does not exist")

    try:
        with open(path, "r") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise GraphReadError(f"Error reading file {path}: {e}") from e
    return load_graph_string(content, zero_indexed)
