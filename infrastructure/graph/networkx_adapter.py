from itertools import islice
from typing import Dict, List
import networkx as nx
from collections import defaultdict

from core.entities import Artifact
from core.interface import IGraphAnalyzer


class NetworkXGraphAnalyzer(IGraphAnalyzer):
    """Adapter: NetworkX graph analysis over the artifact edge list"""

    def build_graph(self, artifacts: List[Artifact]) -> nx.DiGraph:
        """Directed graph of resolvable edges; dangling ids are left out"""
        G = nx.DiGraph()

        for artifact in artifacts:
            G.add_node(
                artifact.id,
                name=artifact.name,
                tier=artifact.tier.value,
                type=artifact.type.value,
                system_id=artifact.system_id,
            )

        for artifact in artifacts:
            for target in artifact.dependencies:
                if target in G:
                    G.add_edge(artifact.id, target)

        return G

    def is_acyclic(self, artifacts: List[Artifact]) -> bool:
        return nx.is_directed_acyclic_graph(self.build_graph(artifacts))

    def find_cycles(self, artifacts: List[Artifact], limit: int = 100) -> List[List[str]]:
        """Elementary cycles, capped since dense graphs can have exponentially many"""
        G = self.build_graph(artifacts)
        return [list(cycle) for cycle in islice(nx.simple_cycles(G), limit)]

    def find_dangling_references(self, artifacts: List[Artifact]) -> Dict[str, List[str]]:
        known = {a.id for a in artifacts}
        dangling = defaultdict(list)

        for artifact in artifacts:
            for target in artifact.dependencies:
                if target not in known:
                    dangling[artifact.id].append(target)

        return dict(dangling)

    def calculate_max_depth(self, artifacts: List[Artifact]) -> int:
        """Longest dependency chain when acyclic, BFS depth from roots otherwise"""
        G = self.build_graph(artifacts)

        if len(G.nodes) == 0:
            return 0

        if nx.is_directed_acyclic_graph(G):
            return nx.dag_longest_path_length(G)

        roots = [n for n in G.nodes if G.in_degree(n) == 0] or list(G.nodes)
        max_depth = 0
        for root in roots:
            depths = nx.single_source_shortest_path_length(G, root)
            max_depth = max(max_depth, max(depths.values()) if depths else 0)

        return max_depth

    def calculate_in_degree(self, artifacts: List[Artifact]) -> Dict[str, int]:
        """How many artifacts depend on each artifact"""
        G = self.build_graph(artifacts)
        return {node: G.in_degree(node) for node in G.nodes}
