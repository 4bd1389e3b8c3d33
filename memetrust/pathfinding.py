"""
Dual-mode A* influence pathfinding.

Finds the cheapest chain of people through which a source can reach (and
convince) a target. Two cost regimes:

- SOCIAL_TRUST: pure social distance, driven by trust, homophily, political
  distance and the receiver's activity. Content is ignored.
- MEME_TRUST: one minus the probability that the receiver accepts the given
  meme from the sender (acceptance model with the complexity penalty).

The frontier is a binary heap keyed on ``(f, insertion_counter)`` so equal-f
entries pop in insertion order. Finalized nodes are never re-expanded.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

import networkx as nx
import numpy as np

from memetrust.acceptance import acceptance_factors, acceptance_probability
from memetrust.config import (
    ACTIVITY_COST_WEIGHT,
    DEFAULT_CONFIG,
    MEME_HEURISTIC_WEIGHTS,
    POLITICAL_COST_WEIGHT,
    SAME_IDENTITY_DISCOUNT,
    SOCIAL_COST_MAX,
    SOCIAL_COST_MIN,
    SOCIAL_HEURISTIC_WEIGHTS,
    EngineConfig,
)
from memetrust.errors import FailureReason, ParameterError
from memetrust.graph import TrustGraph
from memetrust.models import Meme, Node

logger = logging.getLogger(__name__)


class PathMode(Enum):
    SOCIAL_TRUST = "social_trust"
    MEME_TRUST = "meme_trust"


HEURISTIC_KINDS = ("guarded", "estimate")


# =============================================================================
# Edge costs
# =============================================================================

def social_trust_cost(source: Node, target: Node, trust_weight: float) -> float:
    """Mode A cost of moving influence from ``source`` to ``target``."""
    base = 1.0 - trust_weight
    identity = SAME_IDENTITY_DISCOUNT if source.shares_identity(target) else 1.0
    political = 1.0 + abs(source.political_leaning - target.political_leaning) * POLITICAL_COST_WEIGHT
    activity = 1.0 - target.social_activity * ACTIVITY_COST_WEIGHT
    return float(np.clip(base * identity * political * activity, SOCIAL_COST_MIN, SOCIAL_COST_MAX))


def meme_trust_cost(node: Node, meme: Meme, source: Node, trust_weight: float) -> float:
    """Mode B cost: chance that ``node`` rejects ``meme`` coming from ``source``."""
    return 1.0 - acceptance_probability(node, meme, source, trust_weight, include_complexity=True)


def edge_cost(graph: TrustGraph, u: int, v: int, mode: PathMode, meme: Optional[Meme] = None) -> float:
    src, dst = graph.nodes[u], graph.nodes[v]
    trust = src.trust_network[v]
    if mode is PathMode.SOCIAL_TRUST:
        return social_trust_cost(src, dst, trust)
    return meme_trust_cost(dst, meme, src, trust)


# =============================================================================
# Heuristics
# =============================================================================

def social_trust_estimate(current: Node, target: Node) -> float:
    """Hand-tuned estimate of the remaining mode A cost to ``target``."""
    w = SOCIAL_HEURISTIC_WEIGHTS
    identity = 0.0 if current.shares_identity(target) else w["identity_mismatch"]
    political = abs(current.political_leaning - target.political_leaning) * w["political"]
    direct = current.trust_network.get(target.id)
    connection = (1.0 - direct) * w["direct_connection"] if direct is not None else w["no_connection"]
    inactivity = (1.0 - target.social_activity) * w["inactivity"]
    return identity + political + connection + inactivity


def meme_trust_estimate(current: Node, target: Node, meme: Meme) -> float:
    """Hand-tuned estimate of the remaining mode B cost to ``target``."""
    w = MEME_HEURISTIC_WEIGHTS
    alignment = abs(target.political_leaning - meme.political_bias) * w["alignment"]
    critical = target.critical_thinking * w["critical_barrier"] if meme.is_low_accuracy else 0.0
    complexity = abs(meme.complexity - target.education_level) * w["complexity"]
    emotional = ((1.0 - target.emotional_susceptibility) * (1.0 - meme.virality)
                 * w["emotional_resistance"])
    direct = current.trust_network.get(target.id)
    social = (1.0 - direct) * w["direct_connection"] if direct is not None else w["no_connection"]
    return alignment + critical + complexity + emotional + social


def estimate(graph: TrustGraph, u: int, target: int, mode: PathMode,
             meme: Optional[Meme] = None) -> float:
    if u == target:
        return 0.0
    current, goal = graph.nodes[u], graph.nodes[target]
    if mode is PathMode.SOCIAL_TRUST:
        return social_trust_estimate(current, goal)
    return meme_trust_estimate(current, goal, meme)


def guarded_floor(graph: TrustGraph, target: int, mode: PathMode,
                  meme: Optional[Meme] = None) -> float:
    """Heuristic value shared by every non-target node.

    The hand-tuned estimate minimised over all possible positions, capped by
    the cheapest edge into the target. Any path into the target pays at least
    that inbound edge, so the value never overestimates, and being constant
    away from the target it is consistent.
    """
    inbound = [edge_cost(graph, w, target, mode, meme) for w in graph.graph.predecessors(target)]
    if not inbound:
        return 0.0
    estimates = [estimate(graph, u, target, mode, meme) for u in range(len(graph)) if u != target]
    return min(min(inbound), min(estimates))


def build_heuristic(graph: TrustGraph, target: int, mode: PathMode,
                    meme: Optional[Meme] = None,
                    kind: str = "guarded") -> Callable[[int], float]:
    """Return h(u) for ``target``.

    ``"guarded"`` is 0 at the target and ``guarded_floor`` everywhere else.
    Being constant, it prunes almost nothing: search order is essentially
    Dijkstra's, traded for a guarantee that the returned path is cheapest.
    ``"estimate"`` uses the hand-tuned formulas, which steer the search more
    directly but can overestimate (see ``audit_heuristic``).
    """
    if kind not in HEURISTIC_KINDS:
        raise ParameterError(f"Unknown heuristic {kind!r}; expected one of {HEURISTIC_KINDS}")
    if kind == "estimate":
        return lambda u: estimate(graph, u, target, mode, meme)
    floor = guarded_floor(graph, target, mode, meme)
    return lambda u: 0.0 if u == target else floor


# =============================================================================
# Results
# =============================================================================

@dataclass
class SearchFrame:
    """Snapshot of the search at one expansion (diagnostics / replay)."""
    step: int
    current: int
    open_set: list
    closed_set: list
    path: list
    g_scores: dict
    f_scores: dict
    message: str = ""


@dataclass
class PathResult:
    success: bool
    path: list = field(default_factory=list)
    cost: float = math.inf
    explored_count: int = 0
    mode: PathMode = PathMode.MEME_TRUST
    failure: Optional[FailureReason] = None
    frames: list = field(default_factory=list)        # [SearchFrame]
    explanations: list = field(default_factory=list)  # per-edge breakdown of the path


def _reconstruct(came_from: dict, node: int) -> list:
    path = [node]
    while node in came_from:
        node = came_from[node]
        path.append(node)
    path.reverse()
    return path


# =============================================================================
# A*
# =============================================================================

def find_influence_path(
    graph: TrustGraph,
    source: int,
    target: int,
    meme: Optional[Meme] = None,
    mode: PathMode = PathMode.MEME_TRUST,
    record_frames: Optional[bool] = None,
    heuristic: Optional[str] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> PathResult:
    """Lowest-cost influence path from ``source`` to ``target``.

    Args:
        graph: Trust graph; not modified.
        source: Node id where influence starts.
        target: Node id to convince.
        meme: Content item; required for ``PathMode.MEME_TRUST``.
        mode: Cost regime.
        record_frames: Keep a ``SearchFrame`` per expansion.
        heuristic: ``"guarded"`` (admissible and consistent, optimal) or
            ``"estimate"`` (hand-tuned estimate only, may return a costlier path).
        config: Supplies ``record_frames`` and ``heuristic`` when not given.

    Returns:
        PathResult. Unknown ids fail with ``INVALID_REFERENCE`` before any
        search; an exhausted frontier fails with ``NO_PATH`` and reports how
        many nodes were finalized.
    """
    mode = PathMode(mode)
    if record_frames is None:
        record_frames = config.record_frames
    if heuristic is None:
        heuristic = config.heuristic
    if mode is PathMode.MEME_TRUST and meme is None:
        raise ParameterError("meme_trust mode needs a meme")
    if not (graph.has_node(source) and graph.has_node(target)):
        logger.debug("Path %r -> %r: unknown endpoint", source, target)
        return PathResult(success=False, mode=mode, failure=FailureReason.INVALID_REFERENCE)

    h = build_heuristic(graph, target, mode, meme, heuristic)
    counter = itertools.count()
    g_scores = {source: 0.0}
    f_scores = {source: h(source)}
    came_from: dict[int, int] = {}
    closed: set[int] = set()
    frontier = [(f_scores[source], next(counter), source)]
    frames = []

    while frontier:
        _, _, current = heapq.heappop(frontier)
        if current in closed:
            continue  # stale entry superseded by a cheaper push

        if record_frames:
            frames.append(SearchFrame(
                step=len(frames),
                current=current,
                open_set=sorted({n for _, _, n in frontier} - closed),
                closed_set=sorted(closed),
                path=_reconstruct(came_from, current),
                g_scores=dict(g_scores),
                f_scores=dict(f_scores),
                message=f"Exploring node {current}",
            ))

        if current == target:
            path = _reconstruct(came_from, current)
            logger.debug("Path %s -> %s found: %s (cost %.3f, %d finalized)",
                         source, target, path, g_scores[current], len(closed))
            return PathResult(
                success=True,
                path=path,
                cost=g_scores[current],
                explored_count=len(closed),
                mode=mode,
                frames=frames,
                explanations=explain_path(graph, path, mode, meme),
            )

        closed.add(current)
        for nbr in graph.nodes[current].trust_network:
            if nbr in closed:
                continue
            tentative = g_scores[current] + edge_cost(graph, current, nbr, mode, meme)
            if tentative < g_scores.get(nbr, math.inf):
                g_scores[nbr] = tentative
                f_scores[nbr] = tentative + h(nbr)
                came_from[nbr] = current
                heapq.heappush(frontier, (f_scores[nbr], next(counter), nbr))

    logger.debug("No path %s -> %s after finalizing %d nodes", source, target, len(closed))
    return PathResult(
        success=False,
        explored_count=len(closed),
        mode=mode,
        failure=FailureReason.NO_PATH,
        frames=frames,
    )


# =============================================================================
# Diagnostics
# =============================================================================

def explain_path_cost(source: Node, target: Node, meme: Optional[Meme],
                      trust_weight: float, mode: PathMode) -> str:
    """Human-readable breakdown of one edge cost."""
    if PathMode(mode) is PathMode.SOCIAL_TRUST:
        cost = social_trust_cost(source, target, trust_weight)
        return "\n".join([
            "Social Trust Path:",
            f"- Base Trust: {trust_weight:.2f}",
            f"- Identity Match: {'Yes' if source.shares_identity(target) else 'No'}",
            f"- Political Distance: {abs(source.political_leaning - target.political_leaning):.2f}",
            f"- Target Activity: {target.social_activity:.2f}",
            f"-> Cost: {cost:.3f}",
        ])
    factors = acceptance_factors(target, meme, trust_weight, include_complexity=True)
    cost = meme_trust_cost(target, meme, source, trust_weight)
    return "\n".join([
        "Meme Trust Path:",
        f"- Trust Weight: {trust_weight:.2f}",
        f"- Political Alignment: {factors['political_alignment']:.2f}",
        f"- Critical Thinking: {target.critical_thinking:.2f}",
        f"- Factual Accuracy: {meme.factual_accuracy:.2f}",
        f"- Complexity Penalty: {factors['complexity_penalty']:.2f}",
        f"- Emotional Appeal: {meme.virality * target.emotional_susceptibility:.2f}",
        f"-> Acceptance Probability: {1.0 - cost:.3f}",
        f"-> Cost: {cost:.3f}",
    ])


def explain_path(graph: TrustGraph, path: list, mode: PathMode,
                 meme: Optional[Meme] = None) -> list:
    lines = []
    for u, v in zip(path, path[1:]):
        src, dst = graph.nodes[u], graph.nodes[v]
        text = explain_path_cost(src, dst, meme, src.trust_network[v], mode)
        lines.append(f"{u} -> {v}:\n{text}")
    return lines


def path_cost(graph: TrustGraph, path: list, mode: PathMode,
              meme: Optional[Meme] = None) -> float:
    """Sum of edge costs along an explicit node sequence."""
    return sum(edge_cost(graph, u, v, mode, meme) for u, v in zip(path, path[1:]))


@dataclass
class HeuristicAudit:
    target: int
    mode: PathMode
    heuristic: str
    checked: int = 0
    violations: list = field(default_factory=list)  # [(node_id, h, true_cost)]

    @property
    def admissible(self) -> bool:
        return not self.violations


def remaining_costs(graph: TrustGraph, target: int, mode: PathMode,
                    meme: Optional[Meme] = None) -> dict:
    """Exact cheapest cost from every node that can reach ``target``."""
    reverse = graph.graph.reverse(copy=False)
    # reversed edge a->b is the original trust edge b->a
    return nx.single_source_dijkstra_path_length(
        reverse, target, weight=lambda a, b, _: edge_cost(graph, b, a, mode, meme)
    )


def audit_heuristic(graph: TrustGraph, target: int, mode: PathMode,
                    meme: Optional[Meme] = None, heuristic: str = "guarded",
                    tolerance: float = 1e-12) -> HeuristicAudit:
    """Check a heuristic against true remaining costs for one target.

    Nodes that cannot reach the target have infinite remaining cost and are
    skipped.
    """
    mode = PathMode(mode)
    if mode is PathMode.MEME_TRUST and meme is None:
        raise ParameterError("meme_trust mode needs a meme")
    graph.node(target)
    h = build_heuristic(graph, target, mode, meme, heuristic)
    audit = HeuristicAudit(target=target, mode=mode, heuristic=heuristic)
    for node_id, true_cost in remaining_costs(graph, target, mode, meme).items():
        audit.checked += 1
        value = h(node_id)
        if value > true_cost + tolerance:
            audit.violations.append((node_id, value, true_cost))
    if audit.violations:
        logger.info("Heuristic %s overestimates for %d/%d nodes (target %d, %s)",
                    heuristic, len(audit.violations), audit.checked, target, mode.value)
    return audit
