"""
Sanity checks: ``python -m memetrust``.

Prints a short report for the ring scenario, a CELF vs CELF++ run and a
strategy comparison on a small-world trust graph.
"""

from __future__ import annotations

import time

import networkx as nx
import numpy as np

from memetrust import (
    ContentType,
    EngineConfig,
    IdentityClass,
    PathMode,
    TrustGraph,
    audit_heuristic,
    celf,
    celf_plus_plus,
    compare_strategies,
    create_meme,
    find_influence_path,
)


def _demo_graph(n: int, rng: np.random.Generator) -> TrustGraph:
    G = nx.watts_strogatz_graph(n, 4, 0.2, seed=int(rng.integers(0, 2**31)))
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


def sanity_check_ring(activity: float = 0.5):
    print("=" * 70)
    print("RING SCENARIO: 5 nodes, trust 0.5, identical attributes")
    print("=" * 70)
    graph = TrustGraph.from_networkx(nx.cycle_graph(5), {"social_activity": activity})
    result = find_influence_path(graph, 0, 2, mode=PathMode.SOCIAL_TRUST)
    expected = 2 * (1 - 0.5) * (1 - 0.2 * activity)
    print(f"  path: {result.path}  cost: {result.cost:.4f}  expected: {expected:.4f}")
    print(f"  finalized: {result.explored_count}")


def sanity_check_selection(config: EngineConfig, n: int = 60, budget: int = 4):
    print("\n" + "=" * 70)
    print(f"CELF vs CELF++: {n} nodes, budget {budget}, {config.interactive_simulations} worlds")
    print("=" * 70)
    graph = _demo_graph(n, config.rng())
    meme = create_meme(ContentType.HEALTH_MISINFORMATION, meme_id="demo")

    for selector in (celf, celf_plus_plus):
        start = time.perf_counter()
        result = selector(graph, meme, budget, config.interactive_simulations,
                          seed=config.master_seed)
        elapsed = time.perf_counter() - start
        print(f"  {result.algorithm:>7}: seeds={result.seeds} spread={result.spread:.2f} "
              f"calls={result.estimate_calls} passes={result.reach_passes} hits={result.cache_hits} ({elapsed:.2f}s)")

    audit = audit_heuristic(graph, n - 1, PathMode.MEME_TRUST, meme, heuristic="estimate")
    print(f"  hand-tuned estimate overestimates for {len(audit.violations)}/{audit.checked} nodes")

    print(f"\n--- Strategy comparison ---")
    for report in compare_strategies(graph, meme, budget, config.interactive_simulations,
                                     seed=config.master_seed):
        print(f"  {report.name:>20}: spread {report.spread:6.2f} | "
              f"{report.elapsed_seconds * 1000:7.1f}ms | seeds {report.seeds}")


def main():
    config = EngineConfig(master_seed=42, interactive_simulations=200)
    sanity_check_ring()
    sanity_check_selection(config)


if __name__ == "__main__":
    main()
