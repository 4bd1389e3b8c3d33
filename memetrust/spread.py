"""
Monte Carlo spread estimation under the independent-cascade reading of the
acceptance model.

Two estimators share the same cascade semantics:

- ``estimate_spread`` streams fresh draws through one cascade at a time,
  exactly like a single observed outbreak.
- ``SpreadOracle`` pre-samples live-edge worlds once (common random numbers),
  so every seed set is scored against the same randomness. Its estimate is a
  deterministic, monotone and submodular function of the seed set, which is
  what the lazy greedy selectors rely on.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Union

import numpy as np

from memetrust.acceptance import acceptance_probability
from memetrust.config import DEFAULT_SIMULATIONS
from memetrust.errors import InvalidReferenceError, ParameterError
from memetrust.graph import TrustGraph
from memetrust.models import Meme

logger = logging.getLogger(__name__)

RngLike = Union[None, int, np.random.Generator]


def _validate_seeds(graph: TrustGraph, seeds: Iterable[int]) -> list[int]:
    seeds = list(dict.fromkeys(seeds))
    for s in seeds:
        if not graph.has_node(s):
            raise InvalidReferenceError(s, "seed")
    return seeds


def _validate_simulations(num_simulations: int) -> None:
    if num_simulations < 1:
        raise ParameterError(f"num_simulations must be >= 1, got {num_simulations}")


# =============================================================================
# Streaming cascade
# =============================================================================

def simulate_cascade(graph: TrustGraph, seeds: Iterable[int], meme: Meme,
                     rng: np.random.Generator) -> set[int]:
    """Run one cascade and return every node it convinced (seeds included).

    Each newly infected node gets one attempt per not-yet-infected neighbor.
    Works on a private infected set; ``node.state`` is never touched.
    """
    seeds = _validate_seeds(graph, seeds)
    infected = set(seeds)
    queue = deque(seeds)
    while queue:
        current_id = queue.popleft()
        current = graph.nodes[current_id]
        for nbr_id, trust in current.trust_network.items():
            if nbr_id in infected:
                continue
            p = acceptance_probability(graph.nodes[nbr_id], meme, current, trust)
            if rng.random() < p:
                infected.add(nbr_id)
                queue.append(nbr_id)
    return infected


def estimate_spread(graph: TrustGraph, seeds: Iterable[int], meme: Meme,
                    num_simulations: int = DEFAULT_SIMULATIONS,
                    rng: RngLike = None) -> float:
    """Mean final cascade size over ``num_simulations`` independent runs.

    Args:
        rng: Generator, integer seed, or None for fresh entropy.
    """
    _validate_simulations(num_simulations)
    seeds = _validate_seeds(graph, seeds)
    rng = np.random.default_rng(rng)
    total = 0
    for _ in range(num_simulations):
        total += len(simulate_cascade(graph, seeds, meme, rng))
    return total / num_simulations


@dataclass
class SpreadSummary:
    """Distribution of final cascade sizes over a batch of runs."""
    n_runs: int = 0
    sizes: np.ndarray = field(default_factory=lambda: np.array([]))
    mean: float = 0.0
    std: float = 0.0
    ci_95_lower: float = 0.0
    ci_95_upper: float = 0.0
    minimum: int = 0
    maximum: int = 0


def spread_distribution(graph: TrustGraph, seeds: Iterable[int], meme: Meme,
                        num_simulations: int = DEFAULT_SIMULATIONS,
                        rng: RngLike = None) -> SpreadSummary:
    _validate_simulations(num_simulations)
    seeds = _validate_seeds(graph, seeds)
    rng = np.random.default_rng(rng)
    sizes = np.array([len(simulate_cascade(graph, seeds, meme, rng))
                      for _ in range(num_simulations)])
    mean = float(np.mean(sizes))
    std = float(np.std(sizes))
    half_width = 1.96 * std / np.sqrt(num_simulations)
    return SpreadSummary(
        n_runs=num_simulations,
        sizes=sizes,
        mean=mean,
        std=std,
        ci_95_lower=mean - half_width,
        ci_95_upper=mean + half_width,
        minimum=int(sizes.min()),
        maximum=int(sizes.max()),
    )


def content_aware_simulations(meme: Meme, base: int = DEFAULT_SIMULATIONS) -> int:
    """More viral content gets more runs: ``base * (0.5 + virality)``."""
    return max(1, math.floor(base * (0.5 + meme.virality)))


# =============================================================================
# Common-random-number oracle
# =============================================================================

class SpreadOracle:
    """Spread estimator over a fixed sample of live-edge worlds.

    A directed trust edge u->v is live in a world when that world's uniform
    draw falls below the probability that v accepts the meme from u. The
    cascade from a seed set in one world is everything reachable over live
    edges, which has the same distribution as ``simulate_cascade``.

    ``calls`` counts estimation requests; a pair request answers two seed
    sets at once. ``reach_passes`` counts reachability sweeps per world, so a
    pair request adds two.
    """

    def __init__(self, graph: TrustGraph, meme: Meme,
                 num_simulations: int = DEFAULT_SIMULATIONS,
                 seed: RngLike = None):
        _validate_simulations(num_simulations)
        self.graph = graph
        self.meme = meme
        self.num_simulations = num_simulations
        self.calls = 0
        self.reach_passes = 0

        sources, targets, probs = [], [], []
        for node in graph.nodes:
            for nbr_id, trust in node.trust_network.items():
                sources.append(node.id)
                targets.append(nbr_id)
                probs.append(acceptance_probability(graph.nodes[nbr_id], meme, node, trust))
        edge_src = np.array(sources, dtype=np.int64)
        edge_dst = np.array(targets, dtype=np.int64)
        self.edge_probabilities = np.array(probs, dtype=float)

        rng = np.random.default_rng(seed)
        live = rng.random((num_simulations, len(probs))) < self.edge_probabilities
        self._worlds = [self._live_adjacency(row, edge_src, edge_dst) for row in live]
        logger.debug("Sampled %d worlds over %d directed edges (mean live %.1f)",
                     num_simulations, len(probs), float(live.sum(axis=1).mean()) if len(probs) else 0.0)

    @staticmethod
    def _live_adjacency(row: np.ndarray, edge_src: np.ndarray, edge_dst: np.ndarray) -> dict:
        idx = np.flatnonzero(row)
        adjacency: dict[int, list[int]] = {}
        for u, v in zip(edge_src[idx].tolist(), edge_dst[idx].tolist()):
            adjacency.setdefault(u, []).append(v)
        return adjacency

    @staticmethod
    def _reach(adjacency: dict, starts: Iterable[int], visited: set) -> None:
        stack = [s for s in starts if s not in visited]
        visited.update(stack)
        while stack:
            u = stack.pop()
            for v in adjacency.get(u, ()):
                if v not in visited:
                    visited.add(v)
                    stack.append(v)

    def spread_total(self, seeds: Iterable[int]) -> int:
        """Convinced-node count summed over all worlds."""
        seeds = _validate_seeds(self.graph, seeds)
        self.calls += 1
        self.reach_passes += 1
        total = 0
        for adjacency in self._worlds:
            visited: set = set()
            self._reach(adjacency, seeds, visited)
            total += len(visited)
        return total

    def spread_totals_pair(self, seeds: Iterable[int], extra: int) -> tuple[int, int]:
        """Totals for ``seeds`` and ``seeds + {extra}`` from a single pass."""
        seeds = _validate_seeds(self.graph, seeds)
        _validate_seeds(self.graph, [extra])
        self.calls += 1
        self.reach_passes += 2
        base_total = 0
        extended_total = 0
        for adjacency in self._worlds:
            visited: set = set()
            self._reach(adjacency, seeds, visited)
            base_total += len(visited)
            self._reach(adjacency, (extra,), visited)
            extended_total += len(visited)
        return base_total, extended_total

    def estimate(self, seeds: Iterable[int]) -> float:
        """Expected number of convinced nodes when ``seeds`` start the cascade."""
        return self.spread_total(seeds) / self.num_simulations

    def estimate_pair(self, seeds: Iterable[int], extra: int) -> tuple[float, float]:
        """``(sigma(seeds), sigma(seeds + {extra}))`` from a single pass."""
        base_total, extended_total = self.spread_totals_pair(seeds, extra)
        return base_total / self.num_simulations, extended_total / self.num_simulations

    def reset_calls(self) -> None:
        self.calls = 0
        self.reach_passes = 0
