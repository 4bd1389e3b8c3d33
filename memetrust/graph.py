"""
Trust graph: an arena of people-nodes indexed by stable integer id.

Each node keeps its own ``trust_network`` map (neighbor id -> trust weight)
and the graph mirrors every trust relation as a directed edge of a
``networkx.DiGraph``. Both representations are only written through
``TrustGraph.add_edge`` so they cannot drift apart; ``check_consistency``
verifies it.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import fields
from typing import Optional

import networkx as nx
import numpy as np

from memetrust.errors import InvalidReferenceError, ParameterError
from memetrust.models import Edge, IdentityClass, Node, NodeState

_NODE_ATTRIBUTES = {
    f.name for f in fields(Node)
} - {"id", "trust_network", "current_beliefs", "exposure_history"}


class TrustGraph:
    """People-nodes plus weighted trust edges.

    Search and selection treat an instance as read-only.
    """

    def __init__(self):
        self.nodes: list[Node] = []
        self.graph = nx.DiGraph()
        self.labels: dict[int, object] = {}  # id -> label from an imported graph

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    def add_node(self, identity_class: Optional[IdentityClass] = None, **attributes) -> Node:
        if isinstance(identity_class, str):
            identity_class = IdentityClass(identity_class)
        if isinstance(attributes.get("state"), str):
            attributes["state"] = NodeState(attributes["state"])
        node = Node(id=len(self.nodes), identity_class=identity_class, **attributes)
        self.nodes.append(node)
        self.graph.add_node(node.id)
        return node

    def add_nodes(self, count: int, **attributes) -> list[Node]:
        return [self.add_node(**attributes) for _ in range(count)]

    def add_edge(self, u: int, v: int, trust: float, symmetric: bool = True) -> None:
        """Record that ``u`` trusts ``v`` (and ``v`` trusts ``u`` when symmetric)."""
        self._require(u)
        self._require(v)
        if u == v:
            raise ParameterError(f"Self-trust edge on node {u}")
        if not 0.0 < trust <= 1.0:
            raise ParameterError(f"Trust weight {trust} outside (0, 1]")
        pairs = [(u, v), (v, u)] if symmetric else [(u, v)]
        for a, b in pairs:
            self.nodes[a].trust_network[b] = float(trust)
            self.graph.add_edge(a, b, trust=float(trust))

    @classmethod
    def from_networkx(
        cls,
        G: nx.Graph,
        attributes: Optional[dict] = None,
        default_trust: float = 0.5,
    ) -> TrustGraph:
        """Import topology (and node attribute dicts) from a networkx graph.

        Edge trust is read from the ``trust`` attribute, then ``weight``,
        then ``default_trust``. ``attributes`` supplies default node
        attributes that per-node data overrides. Undirected graphs produce
        symmetric trust.
        """
        tg = cls()
        attributes = attributes or {}
        index = {}
        for label, data in G.nodes(data=True):
            node_attrs = dict(attributes)
            node_attrs.update({k: v for k, v in data.items() if k in _NODE_ATTRIBUTES})
            node = tg.add_node(**node_attrs)
            index[label] = node.id
            tg.labels[node.id] = label
        symmetric = not G.is_directed()
        for a, b, data in G.edges(data=True):
            trust = data.get("trust", data.get("weight", default_trust))
            tg.add_edge(index[a], index[b], trust, symmetric=symmetric)
        return tg

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id) -> bool:
        return self.has_node(node_id)

    def has_node(self, node_id) -> bool:
        if isinstance(node_id, bool) or not isinstance(node_id, (int, np.integer)):
            return False
        return 0 <= node_id < len(self.nodes)

    def _require(self, node_id) -> None:
        if not self.has_node(node_id):
            raise InvalidReferenceError(node_id)

    def node(self, node_id: int) -> Node:
        self._require(node_id)
        return self.nodes[node_id]

    def neighbors(self, node_id: int) -> list[int]:
        return list(self.node(node_id).trust_network)

    def trust(self, u: int, v: int) -> Optional[float]:
        return self.node(u).trust_network.get(v)

    def edges(self) -> list[Edge]:
        """Trust relations, one ``Edge`` per unordered pair for symmetric ties."""
        seen = set()
        result = []
        for u, v, data in self.graph.edges(data=True):
            key = (min(u, v), max(u, v))
            if key in seen and self.graph.has_edge(v, u):
                continue
            seen.add(key)
            result.append(Edge(u, v, data["trust"]))
        return result

    def susceptible_ids(self) -> list[int]:
        return [n.id for n in self.nodes if n.state == NodeState.SUSCEPTIBLE]

    def reachable_from(self, node_id: int) -> set[int]:
        self._require(node_id)
        return nx.descendants(self.graph, node_id) | {node_id}

    # ------------------------------------------------------------------
    # Invariants & diagnostics
    # ------------------------------------------------------------------
    def check_consistency(self) -> list[str]:
        """Return mismatches between node trust maps and the edge mirror."""
        problems = []
        for node in self.nodes:
            for nbr, trust in node.trust_network.items():
                data = self.graph.get_edge_data(node.id, nbr)
                if data is None:
                    problems.append(f"edge {node.id}->{nbr} missing from graph")
                elif data["trust"] != trust:
                    problems.append(
                        f"edge {node.id}->{nbr} trust {data['trust']} != {trust}"
                    )
        for u, v in self.graph.edges():
            if v not in self.nodes[u].trust_network:
                problems.append(f"edge {u}->{v} missing from trust map")
        return problems

    def state_snapshot(self) -> tuple:
        return tuple(n.state for n in self.nodes)

    def stats(self) -> dict:
        n = len(self.nodes)
        states = Counter(node.state.value for node in self.nodes)
        identities = Counter(
            node.identity_class.value if node.identity_class else "unclassified"
            for node in self.nodes
        )
        return {
            "total_nodes": n,
            "total_edges": len(self.edges()),
            "avg_degree": float(np.mean([node.degree for node in self.nodes])) if n else 0.0,
            "state_counts": dict(states),
            "identity_counts": dict(identities),
            "infection_rate": states.get(NodeState.INFECTED.value, 0) / n if n else 0.0,
        }


