import argparse
import networkx as nx
import matplotlib.pyplot as plt
from collections import Counter
from typing import Dict, Optional

from graph_loader import load_graph
from sat_coloring import SATColoring


class GraphExplorer:
    def __init__(self, filepath, zero_indexed=False):

        self.filepath = filepath
        self.zero_indexed = zero_indexed
        self.G = nx.Graph()
        self.n = 0
        self.m = 0

    def parse(self):
        self.G = load_graph(self.filepath, self.zero_indexed)
        self.n, self.m = self.G.number_of_nodes(), self.G.number_of_edges()
        return self.G

    def compute_basic_stats(self):
        # basic graph statistics.
        stats = {}
        stats['num_nodes'] = self.n
        stats['num_edges'] = self.m
        if self.n == 0:
            stats.update(density=0.0, avg_degree=0.0, degree_histogram=Counter(),
                         num_components=0, component_sizes=[], avg_clustering=0.0)
            return stats
        stats['density']   = nx.density(self.G)
        degrees = [d for _, d in self.G.degree()]
        stats['avg_degree'] = sum(degrees) / len(degrees)
        stats['degree_histogram'] = Counter(degrees)
        stats['num_components']   = nx.number_connected_components(self.G)
        stats['component_sizes']  = sorted(
            (len(c) for c in nx.connected_components(self.G)),
            reverse=True
        )
        stats['avg_clustering'] = nx.average_clustering(self.G)
        return stats

    def draw_coloring(self, coloring: Dict[int, int], path: Optional[str] = None, seed=None):
        # node colors come from a colormap indexed by color number
        plt.figure(figsize=(10, 8))
        pos = nx.spring_layout(self.G, seed=seed)
        nodes = list(self.G.nodes())
        nx.draw(self.G, pos, nodelist=nodes, with_labels=True,
                node_color=[coloring.get(v, 0) for v in nodes],
                cmap=plt.cm.tab20, node_size=500, font_size=10)
        if path:
            plt.savefig(path)
            plt.close()
        else:
            plt.show()


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Graph statistics and a drawing of its optimal coloring')
    parser.add_argument('input', help='Path to graph file')
    parser.add_argument('--save', default=None, help='Save the drawing instead of showing it')
    args = parser.parse_args()

    explorer = GraphExplorer(args.input)
    explorer.parse()

    stats = explorer.compute_basic_stats()
    print(f"Basic stats for {args.input}:")
    for k, v in stats.items():
        print(f"  {k}: {v}")

    chi, coloring, _ = SATColoring(explorer.G).run()
    print(f"Chromatic number: {chi}")
    explorer.draw_coloring(coloring, args.save)
