"""
Influence maximization: lazy greedy seed selection (CELF and CELF++).

Both selectors maximize the spread estimated by a ``SpreadOracle``. Marginal
gains are tracked as integer totals over the oracle's worlds, so two gains
compare exactly and the two algorithms break ties identically (higher gain
first, then candidate order). CELF++ only changes how many oracle passes are
spent, never which seeds come out.
"""

from __future__ import annotations

import heapq
import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from memetrust.acceptance import acceptance_probability
from memetrust.config import DEFAULT_CONFIG, EngineConfig
from memetrust.errors import FailureReason, ParameterError
from memetrust.graph import TrustGraph
from memetrust.models import Meme
from memetrust.spread import RngLike, SpreadOracle, content_aware_simulations

logger = logging.getLogger(__name__)

ALGORITHMS = ("celf", "celf++")


@dataclass
class CandidateEntry:
    """Lazy-evaluation bookkeeping for one candidate seed."""
    node_id: int
    order: int
    gain: int = 0            # mg1 as a world total
    total: int = 0           # spread total of S + {node} when gain was computed
    flag: int = 0            # seed count when gain was computed

    # CELF++ look-ahead
    prev_best: Optional[int] = None
    gain_after_best: int = 0     # mg2: gain w.r.t. S + {prev_best}
    total_after_best: int = 0    # spread total of S + {prev_best, node}
    look_ahead_flag: int = -1    # seed count when mg2 was computed

    def key(self) -> tuple:
        return (-self.gain, self.order, self.node_id)


@dataclass
class SelectionResult:
    """Seeds in selection order with the spread they reach."""
    seeds: list = field(default_factory=list)
    spread: float = 0.0
    marginal_gains: list = field(default_factory=list)
    algorithm: str = "celf"
    num_simulations: int = 0
    estimate_calls: int = 0
    reach_passes: int = 0
    recomputations: int = 0
    cache_hits: int = 0
    failure: Optional[FailureReason] = None


def _candidates(graph: TrustGraph, budget: int, num_simulations: int) -> list:
    """Validate parameters, then list susceptible candidates in id order."""
    if num_simulations < 1:
        raise ParameterError(f"num_simulations must be >= 1, got {num_simulations}")
    if budget < 0:
        raise ParameterError(f"budget must be >= 0, got {budget}")
    candidates = graph.susceptible_ids()
    if candidates and budget > len(candidates):
        raise ParameterError(
            f"budget {budget} exceeds the {len(candidates)} susceptible nodes"
        )
    return candidates


def _prepare(graph, meme, budget, num_simulations, seed, oracle, algorithm):
    if oracle is not None:
        num_simulations = oracle.num_simulations
    candidates = _candidates(graph, budget, num_simulations)
    if not candidates:
        logger.info("%s: no susceptible candidates", algorithm)
        empty = SelectionResult(algorithm=algorithm, num_simulations=num_simulations,
                                failure=FailureReason.NO_CANDIDATES)
        return candidates, None, empty
    if oracle is None:
        oracle = SpreadOracle(graph, meme, num_simulations, seed)
    return candidates, oracle, None


def _finish(result: SelectionResult, oracle: SpreadOracle, current_total: int,
            calls_before: int, passes_before: int) -> SelectionResult:
    result.spread = current_total / oracle.num_simulations
    result.estimate_calls = oracle.calls - calls_before
    result.reach_passes = oracle.reach_passes - passes_before
    logger.info("%s: %d seeds, spread %.2f, %d estimate calls, %d reach passes "
                "(%d recomputations, %d cache hits)",
                result.algorithm, len(result.seeds), result.spread, result.estimate_calls,
                result.reach_passes,
                result.recomputations, result.cache_hits)
    return result


def _accept(result: SelectionResult, entry: CandidateEntry, oracle: SpreadOracle) -> None:
    result.seeds.append(entry.node_id)
    result.marginal_gains.append(entry.gain / oracle.num_simulations)
    logger.debug("%s: selected seed %d: %d (mg: %.2f)", result.algorithm,
                 len(result.seeds), entry.node_id, result.marginal_gains[-1])


# =============================================================================
# CELF
# =============================================================================

def celf(
    graph: TrustGraph,
    meme: Meme,
    budget: int,
    num_simulations: int = DEFAULT_CONFIG.num_simulations,
    seed: RngLike = None,
    oracle: Optional[SpreadOracle] = None,
) -> SelectionResult:
    """Lazy forward selection.

    A candidate whose cached gain was computed against the current seed set
    and still tops the heap is accepted; otherwise its gain is recomputed and
    it is pushed back. Submodularity makes stale gains upper bounds, so the
    first up-to-date top is the true greedy choice.

    Args:
        graph: Trust graph; not modified.
        meme: Content being seeded.
        budget: Maximum number of seeds (at most the susceptible population).
        num_simulations: Live-edge worlds sampled when no ``oracle`` is given.
        seed: Seed for the oracle's world sampling.
        oracle: Pre-built oracle to share across selectors.
    """
    candidates, oracle, empty = _prepare(graph, meme, budget, num_simulations, seed, oracle, "celf")
    if empty is not None:
        return empty
    calls_before, passes_before = oracle.calls, oracle.reach_passes
    result = SelectionResult(algorithm="celf", num_simulations=oracle.num_simulations)

    entries = {}
    for order, u in enumerate(candidates):
        total = oracle.spread_total([u])
        entries[u] = CandidateEntry(node_id=u, order=order, gain=total, total=total)
    heap = [e.key() for e in entries.values()]
    heapq.heapify(heap)

    current_total = 0
    while len(result.seeds) < budget and heap:
        entry = entries[heap[0][2]]
        if entry.flag == len(result.seeds):
            heapq.heappop(heap)
            _accept(result, entry, oracle)
            current_total = entry.total
            continue

        entry.total = oracle.spread_total(result.seeds + [entry.node_id])
        entry.gain = entry.total - current_total
        entry.flag = len(result.seeds)
        result.recomputations += 1
        heapq.heapreplace(heap, entry.key())

    return _finish(result, oracle, current_total, calls_before, passes_before)


# =============================================================================
# CELF++
# =============================================================================

def celf_plus_plus(
    graph: TrustGraph,
    meme: Meme,
    budget: int,
    num_simulations: int = DEFAULT_CONFIG.num_simulations,
    seed: RngLike = None,
    oracle: Optional[SpreadOracle] = None,
) -> SelectionResult:
    """CELF with a one-step look-ahead.

    Whenever a candidate's gain is computed, its gain against the seed set
    extended by the round's best candidate so far (``prev_best``) is computed
    in the same oracle pass. If ``prev_best`` becomes the next seed, that
    look-ahead gain is exact for the following round and is reused without
    another pass.

    Arguments match ``celf``.
    """
    candidates, oracle, empty = _prepare(graph, meme, budget, num_simulations, seed, oracle, "celf++")
    if empty is not None:
        return empty
    calls_before, passes_before = oracle.calls, oracle.reach_passes
    result = SelectionResult(algorithm="celf++", num_simulations=oracle.num_simulations)
    seeds = result.seeds

    def evaluate(entry: CandidateEntry, cur_best: Optional[CandidateEntry]) -> None:
        with_node = seeds + [entry.node_id]
        if cur_best is not None and cur_best.node_id != entry.node_id:
            total, total_after_best = oracle.spread_totals_pair(with_node, cur_best.node_id)
            entry.prev_best = cur_best.node_id
            entry.total_after_best = total_after_best
            entry.gain_after_best = total_after_best - cur_best.total
            entry.look_ahead_flag = len(seeds)
        else:
            total = oracle.spread_total(with_node)
            entry.prev_best = None
        entry.total = total

    entries = {}
    cur_best = None
    for order, u in enumerate(candidates):
        entry = CandidateEntry(node_id=u, order=order)
        evaluate(entry, cur_best)
        entry.gain = entry.total
        entries[u] = entry
        if cur_best is None or entry.gain > cur_best.gain:
            cur_best = entry
    heap = [e.key() for e in entries.values()]
    heapq.heapify(heap)

    current_total = 0
    last_seed = None
    cur_best = None  # gains of S + {cur_best} below are relative to the current S
    while len(seeds) < budget and heap:
        entry = entries[heap[0][2]]
        if entry.flag == len(seeds):
            heapq.heappop(heap)
            _accept(result, entry, oracle)
            current_total = entry.total
            last_seed = entry.node_id
            cur_best = None
            continue

        if (entry.prev_best is not None and entry.prev_best == last_seed
                and entry.look_ahead_flag == len(seeds) - 1):
            entry.gain = entry.gain_after_best
            entry.total = entry.total_after_best
            result.cache_hits += 1
            logger.debug("celf++: reused look-ahead gain for %d", entry.node_id)
        else:
            evaluate(entry, cur_best)
            entry.gain = entry.total - current_total
            result.recomputations += 1
        entry.flag = len(seeds)
        heapq.heapreplace(heap, entry.key())

        if cur_best is None or entry.gain > cur_best.gain:
            cur_best = entry

    return _finish(result, oracle, current_total, calls_before, passes_before)


def select_seeds(
    graph: TrustGraph,
    meme: Meme,
    budget: int,
    algorithm: str = "celf++",
    num_simulations: Optional[int] = None,
    seed: RngLike = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> SelectionResult:
    """Pick up to ``budget`` seeds maximizing expected spread.

    ``num_simulations=None`` scales the configured simulation count with the
    meme's virality.
    """
    if algorithm not in ALGORITHMS:
        raise ParameterError(f"Unknown algorithm {algorithm!r}; expected one of {ALGORITHMS}")
    if num_simulations is None:
        num_simulations = content_aware_simulations(meme, config.num_simulations)
    if seed is None:
        seed = config.master_seed
    selector = celf if algorithm == "celf" else celf_plus_plus
    return selector(graph, meme, budget, num_simulations=num_simulations, seed=seed)


# =============================================================================
# Baseline strategies
# =============================================================================

def greedy_degree(graph: TrustGraph, budget: int) -> list:
    """Best-connected susceptible nodes first."""
    candidates = _candidates(graph, budget, 1)
    ranked = sorted(candidates, key=lambda n: (-graph.nodes[n].degree, n))
    return ranked[:budget]


def high_susceptibility(graph: TrustGraph, meme: Meme, budget: int) -> list:
    """Nodes most likely to accept the meme from their most trusted neighbor."""
    candidates = _candidates(graph, budget, 1)

    def score(node_id: int) -> float:
        node = graph.nodes[node_id]
        if not node.trust_network:
            return acceptance_probability(node, meme, node, 0.5)
        return max(acceptance_probability(node, meme, graph.nodes[nbr], trust)
                   for nbr, trust in node.trust_network.items())

    ranked = sorted(candidates, key=lambda n: (-score(n), n))
    return ranked[:budget]


def bridge_targeting(graph: TrustGraph, budget: int) -> list:
    """Nodes whose neighbors span the most identity classes."""
    candidates = _candidates(graph, budget, 1)

    def diversity(node_id: int) -> int:
        return len({graph.nodes[nbr].identity_class
                    for nbr in graph.nodes[node_id].trust_network
                    if graph.nodes[nbr].identity_class is not None})

    ranked = sorted(candidates, key=lambda n: (-diversity(n), -graph.nodes[n].degree, n))
    return ranked[:budget]


@dataclass
class StrategyReport:
    name: str
    seeds: list
    spread: float
    elapsed_seconds: float
    estimate_calls: int = 0
    reach_passes: int = 0


def compare_strategies(
    graph: TrustGraph,
    meme: Meme,
    budget: int,
    num_simulations: int = DEFAULT_CONFIG.interactive_simulations,
    seed: RngLike = None,
) -> list:
    """Score every strategy's seed set on one shared oracle, best spread first."""
    _candidates(graph, budget, num_simulations)
    oracle = SpreadOracle(graph, meme, num_simulations, seed)
    baselines = {
        "greedy_degree": lambda: greedy_degree(graph, budget),
        "high_susceptibility": lambda: high_susceptibility(graph, meme, budget),
        "bridge_targeting": lambda: bridge_targeting(graph, budget),
    }

    reports = []
    for name, pick in baselines.items():
        start = time.perf_counter()
        seeds = pick()
        elapsed = time.perf_counter() - start
        reports.append(StrategyReport(name, seeds, oracle.estimate(seeds), elapsed))

    for name, selector in (("celf", celf), ("celf++", celf_plus_plus)):
        start = time.perf_counter()
        selection = selector(graph, meme, budget, oracle=oracle)
        elapsed = time.perf_counter() - start
        reports.append(StrategyReport(name, selection.seeds, selection.spread, elapsed,
                                      selection.estimate_calls, selection.reach_passes))

    reports.sort(key=lambda r: -r.spread)
    return reports
