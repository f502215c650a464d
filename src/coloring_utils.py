import networkx as nx
from typing import Dict


def verify_coloring(G: nx.Graph, coloring: Dict[int, int]) -> bool:
    """True when every vertex has a color and no edge joins two equal colors."""
    if any(v not in coloring for v in G.nodes()):
        return False
    return all(coloring[u] != coloring[v] for u, v in G.edges())


def calculate_upper_bound(G: nx.Graph) -> int:
    """Calculate an upper bound using a greedy coloring."""
    coloring = {}
    for v in sorted(G.nodes()):
        # lowest color not used by an already colored neighbor
        used_colors = {coloring.get(u) for u in G.neighbors(v) if u in coloring}
        color = 1
        while color in used_colors:
            color += 1
        coloring[v] = color

    return max(coloring.values()) if coloring else 0


def calculate_lower_bound(G: nx.Graph) -> int:
    """Largest clique found by growing one greedily from every vertex.

    Any clique needs as many colors as it has members.
    """
    best = 0
    for start in sorted(G.nodes(), key=lambda v: (-G.degree(v), v)):
        members = 1
        # vertices adjacent to every member so far
        common = set(G[start]) - {start}
        while common:
            pick = max(common, key=lambda u: (len(common & set(G[u])), -u))
            members += 1
            common &= set(G[pick])
            common.discard(pick)
        best = max(best, members)
    return best
