"""Tests for CELF / CELF++ seed selection and the baseline strategies."""
import networkx as nx
import pytest

from memetrust import (
    EngineConfig,
    FailureReason,
    NodeState,
    ParameterError,
    SpreadOracle,
    TrustGraph,
    celf,
    celf_plus_plus,
    compare_strategies,
    select_seeds,
)
from memetrust.seeding import bridge_targeting, greedy_degree, high_susceptibility

SELECTORS = [celf, celf_plus_plus]


def plain_greedy(oracle, candidates, budget):
    """Recompute every candidate's gain every round."""
    seeds, current = [], 0
    for _ in range(budget):
        best = None
        for u in candidates:
            if u in seeds:
                continue
            total = oracle.spread_total(seeds + [u])
            if best is None or total - current > best[0]:
                best = (total - current, u, total)
        seeds.append(best[1])
        current = best[2]
    return seeds


# ──────────────────────────────────────────────────────────────────────────
# Parameter handling
# ──────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("selector", SELECTORS)
def test_no_susceptible_candidates_returns_empty(ring_graph, conspiracy, selector):
    for node in ring_graph.nodes:
        node.state = NodeState.RESISTANT
    result = selector(ring_graph, conspiracy, 2, num_simulations=10, seed=0)
    assert result.seeds == []
    assert result.spread == 0.0
    assert result.failure is FailureReason.NO_CANDIDATES
    assert result.estimate_calls == 0


@pytest.mark.parametrize("selector", SELECTORS)
def test_imported_string_states_are_candidates(conspiracy, selector):
    G = nx.path_graph(4)
    nx.set_node_attributes(G, "susceptible", "state")
    graph = TrustGraph.from_networkx(G)
    result = selector(graph, conspiracy, 2, num_simulations=10, seed=0)
    assert result.failure is None
    assert len(result.seeds) == 2


@pytest.mark.parametrize("selector", SELECTORS)
def test_parameter_misuse_rejected(ring_graph, conspiracy, selector):
    with pytest.raises(ParameterError):
        selector(ring_graph, conspiracy, 6, num_simulations=10)
    with pytest.raises(ParameterError):
        selector(ring_graph, conspiracy, -1, num_simulations=10)
    with pytest.raises(ParameterError):
        selector(ring_graph, conspiracy, 2, num_simulations=0)


@pytest.mark.parametrize("selector", SELECTORS)
def test_zero_budget(ring_graph, conspiracy, selector):
    result = selector(ring_graph, conspiracy, 0, num_simulations=10, seed=0)
    assert result.seeds == []
    assert result.failure is None


# ──────────────────────────────────────────────────────────────────────────
# Greedy correctness
# ──────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("seed", range(3))
@pytest.mark.parametrize("selector", SELECTORS)
def test_lazy_selection_matches_plain_greedy(random_graph, conspiracy, selector, seed):
    graph = random_graph(25, 0.15, seed)
    oracle = SpreadOracle(graph, conspiracy, 60, seed=seed)
    expected = plain_greedy(oracle, graph.susceptible_ids(), 4)
    result = selector(graph, conspiracy, 4, oracle=oracle)
    assert result.seeds == expected
    assert result.spread == pytest.approx(oracle.estimate(result.seeds))


@pytest.mark.parametrize("seed", range(5))
def test_celf_and_celf_plus_plus_pick_same_seeds(random_graph, factual, seed):
    graph = random_graph(30, 0.12, 100 + seed)
    a = celf(graph, factual, 5, num_simulations=80, seed=seed)
    b = celf_plus_plus(graph, factual, 5, num_simulations=80, seed=seed)
    assert a.seeds == b.seeds
    assert a.marginal_gains == b.marginal_gains
    assert a.spread == b.spread


def test_celf_plus_plus_saves_estimate_calls(star_graph, conspiracy):
    a = celf(star_graph, conspiracy, 2, num_simulations=300, seed=5)
    b = celf_plus_plus(star_graph, conspiracy, 2, num_simulations=300, seed=5)
    assert a.seeds[0] == b.seeds[0] == 0
    assert a.seeds == b.seeds
    assert b.cache_hits >= 1
    assert b.estimate_calls < a.estimate_calls
    assert a.estimate_calls == len(star_graph) + a.recomputations
    # pair requests sweep each world twice
    assert a.reach_passes == a.estimate_calls
    assert b.reach_passes > b.estimate_calls


@pytest.mark.parametrize("selector", SELECTORS)
def test_marginal_gains_non_increasing(random_graph, conspiracy, selector):
    graph = random_graph(30, 0.15, 8)
    result = selector(graph, conspiracy, 6, num_simulations=50, seed=2)
    assert len(result.seeds) == len(set(result.seeds)) == 6
    gains = result.marginal_gains
    assert all(later <= earlier for earlier, later in zip(gains, gains[1:]))
    assert result.spread == pytest.approx(sum(gains))


@pytest.mark.parametrize("selector", SELECTORS)
def test_only_susceptible_nodes_are_seeded(random_graph, conspiracy, selector):
    graph = random_graph(20, 0.2, 6)
    for i in (0, 3, 5, 7):
        graph.nodes[i].state = NodeState.INFECTED
    result = selector(graph, conspiracy, 5, num_simulations=40, seed=1)
    assert not set(result.seeds) & {0, 3, 5, 7}

    with pytest.raises(ParameterError):
        selector(graph, conspiracy, 17, num_simulations=40)


@pytest.mark.parametrize("selector", SELECTORS)
def test_selection_leaves_graph_untouched(random_graph, conspiracy, selector):
    graph = random_graph(20, 0.2, 9)
    graph.nodes[4].state = NodeState.EXPOSED
    before = graph.state_snapshot()
    selector(graph, conspiracy, 3, num_simulations=30, seed=0)
    assert graph.state_snapshot() == before


# ──────────────────────────────────────────────────────────────────────────
# Dispatcher & baselines
# ──────────────────────────────────────────────────────────────────────────

def test_select_seeds_dispatch(random_graph, conspiracy):
    graph = random_graph(20, 0.2, 12)
    direct = celf(graph, conspiracy, 3, num_simulations=40, seed=4)
    dispatched = select_seeds(graph, conspiracy, 3, algorithm="celf", num_simulations=40, seed=4)
    assert dispatched.seeds == direct.seeds
    assert dispatched.algorithm == "celf"

    with pytest.raises(ParameterError):
        select_seeds(graph, conspiracy, 3, algorithm="greedy")


def test_select_seeds_scales_simulations_with_virality(ring_graph, conspiracy):
    result = select_seeds(ring_graph, conspiracy, 1, config=EngineConfig(num_simulations=10, master_seed=0))
    assert result.num_simulations == 13
    assert result.algorithm == "celf++"


def test_baselines(star_graph, conspiracy):
    assert greedy_degree(star_graph, 1) == [0]
    assert len(high_susceptibility(star_graph, conspiracy, 3)) == 3
    assert 0 not in high_susceptibility(star_graph, conspiracy, 3)
    assert bridge_targeting(star_graph, 2) == [0, 1]


def test_compare_strategies(star_graph, conspiracy):
    reports = compare_strategies(star_graph, conspiracy, 1, num_simulations=100, seed=0)
    names = {r.name for r in reports}
    assert names == {"greedy_degree", "high_susceptibility", "bridge_targeting", "celf", "celf++"}
    spreads = [r.spread for r in reports]
    assert spreads == sorted(spreads, reverse=True)
    best = {r.name: r.spread for r in reports}
    assert best["celf"] == best["celf++"] == max(spreads)
