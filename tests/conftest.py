"""Shared fixtures: small hand-built and seeded random trust graphs."""
import networkx as nx
import numpy as np
import pytest

from memetrust import ContentType, IdentityClass, TrustGraph, create_meme


def build_random_graph(n: int, p: float, seed: int) -> TrustGraph:
    """Erdos-Renyi topology with random attributes and trust in [0.2, 1]."""
    rng = np.random.default_rng(seed)
    G = nx.gnp_random_graph(n, p, seed=seed)
    classes = list(IdentityClass)
    for node in G.nodes:
        G.nodes[node].update(
            identity_class=classes[int(rng.integers(len(classes)))],
            political_leaning=float(rng.uniform(-1, 1)),
            critical_thinking=float(rng.uniform(0, 1)),
            emotional_susceptibility=float(rng.uniform(0, 1)),
            education_level=float(rng.uniform(0, 1)),
            social_activity=float(rng.uniform(0, 1)),
        )
    for a, b in G.edges:
        G.edges[a, b]["trust"] = float(rng.uniform(0.2, 1.0))
    return TrustGraph.from_networkx(G)


@pytest.fixture
def random_graph():
    return build_random_graph


@pytest.fixture
def ring_graph():
    """5-node ring, uniform trust 0.5, identical attributes, no identity classes."""
    return TrustGraph.from_networkx(nx.cycle_graph(5), {"social_activity": 0.5})


@pytest.fixture
def two_components():
    """Path 0-1-2 and a separate pair 3-4."""
    graph = TrustGraph()
    graph.add_nodes(5)
    graph.add_edge(0, 1, 0.8)
    graph.add_edge(1, 2, 0.6)
    graph.add_edge(3, 4, 0.9)
    return graph


@pytest.fixture
def star_graph():
    """Hub 0 that readily convinces 8 receptive leaves but resists them itself."""
    graph = TrustGraph()
    graph.add_node(political_leaning=-1.0, critical_thinking=1.0, social_activity=1.0)
    for _ in range(8):
        leaf = graph.add_node(political_leaning=0.8, critical_thinking=0.0,
                              emotional_susceptibility=1.0)
        graph.add_edge(0, leaf.id, 0.9)
    return graph


@pytest.fixture
def conspiracy():
    return create_meme(ContentType.POLITICAL_CONSPIRACY, meme_id="conspiracy")


@pytest.fixture
def factual():
    return create_meme(ContentType.FACTUAL_NEWS, meme_id="factual")
