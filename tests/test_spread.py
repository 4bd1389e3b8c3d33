"""Tests for Monte Carlo spread estimation."""
import numpy as np
import pytest

from memetrust import (
    InvalidReferenceError,
    NodeState,
    ParameterError,
    SpreadOracle,
    TrustGraph,
    estimate_spread,
    simulate_cascade,
    spread_distribution,
)
from memetrust.acceptance import acceptance_probability
from memetrust.spread import content_aware_simulations


def exact_line_spread(graph, meme):
    """Expected cascade size from node 0 on the path 0-1-2."""
    n0, n1, n2 = graph.nodes[:3]
    p01 = acceptance_probability(n1, meme, n0, graph.trust(0, 1))
    p12 = acceptance_probability(n2, meme, n1, graph.trust(1, 2))
    return 1 + p01 + p01 * p12


# ──────────────────────────────────────────────────────────────────────────
# Streaming cascades
# ──────────────────────────────────────────────────────────────────────────

def test_cascade_stays_inside_reachable_component(two_components, conspiracy):
    rng = np.random.default_rng(0)
    for _ in range(50):
        infected = simulate_cascade(two_components, [0], conspiracy, rng)
        assert 0 in infected
        assert infected <= {0, 1, 2}


def test_isolated_seed_spreads_to_itself_only(conspiracy):
    graph = TrustGraph()
    graph.add_nodes(3)
    assert estimate_spread(graph, [1], conspiracy, 20, rng=1) == 1.0


def test_empty_seed_set_spreads_nowhere(ring_graph, conspiracy):
    assert estimate_spread(ring_graph, [], conspiracy, 10, rng=0) == 0.0


def test_duplicate_seeds_counted_once(two_components, conspiracy):
    rng = np.random.default_rng(4)
    assert 0 in simulate_cascade(two_components, [0, 0], conspiracy, rng)
    assert estimate_spread(two_components, [3, 3, 4], conspiracy, 5, rng=0) == 2.0


def test_estimate_reproducible_with_seed(random_graph, conspiracy):
    graph = random_graph(20, 0.2, 1)
    a = estimate_spread(graph, [0, 5], conspiracy, 200, rng=123)
    b = estimate_spread(graph, [0, 5], conspiracy, 200, rng=np.random.default_rng(123))
    assert a == b


def test_estimate_converges_to_exact_value(two_components, factual):
    expected = exact_line_spread(two_components, factual)
    estimate = estimate_spread(two_components, [0], factual, 20000, rng=7)
    assert estimate == pytest.approx(expected, abs=0.05)


def test_estimate_parameter_misuse(ring_graph, conspiracy):
    with pytest.raises(ParameterError):
        estimate_spread(ring_graph, [0], conspiracy, 0)
    with pytest.raises(InvalidReferenceError):
        estimate_spread(ring_graph, [0, 42], conspiracy, 10)


def test_spread_distribution_summary(random_graph, conspiracy):
    graph = random_graph(20, 0.2, 2)
    summary = spread_distribution(graph, [0], conspiracy, 300, rng=5)
    assert summary.n_runs == 300
    assert len(summary.sizes) == 300
    assert summary.minimum >= 1
    assert summary.minimum <= summary.mean <= summary.maximum
    assert summary.ci_95_lower <= summary.mean <= summary.ci_95_upper


def test_simulation_does_not_touch_node_state(random_graph, conspiracy):
    graph = random_graph(20, 0.3, 3)
    graph.nodes[2].state = NodeState.RESISTANT
    before = graph.state_snapshot()
    estimate_spread(graph, [0, 1], conspiracy, 50, rng=0)
    SpreadOracle(graph, conspiracy, 50, seed=0).estimate([0, 1])
    assert graph.state_snapshot() == before
    assert all(not n.exposure_history and not n.current_beliefs for n in graph.nodes)


def test_content_aware_simulations(conspiracy, factual):
    assert content_aware_simulations(conspiracy, 1000) == 1300
    slow = factual.with_attributes(virality=0.25)
    assert content_aware_simulations(slow, 1000) == 750
    assert content_aware_simulations(slow, 1) == 1


# ──────────────────────────────────────────────────────────────────────────
# Common-random-number oracle
# ──────────────────────────────────────────────────────────────────────────

def test_oracle_converges_to_exact_value(two_components, factual):
    oracle = SpreadOracle(two_components, factual, 20000, seed=3)
    assert oracle.estimate([0]) == pytest.approx(exact_line_spread(two_components, factual), abs=0.05)


def test_oracle_is_deterministic_per_seed_set(random_graph, conspiracy):
    graph = random_graph(25, 0.2, 4)
    oracle = SpreadOracle(graph, conspiracy, 100, seed=9)
    assert oracle.estimate([1, 2, 3]) == oracle.estimate([3, 2, 1])
    again = SpreadOracle(graph, conspiracy, 100, seed=9)
    assert again.estimate([1, 2, 3]) == oracle.estimate([1, 2, 3])


def test_oracle_pair_matches_separate_estimates(random_graph, conspiracy):
    graph = random_graph(25, 0.2, 5)
    oracle = SpreadOracle(graph, conspiracy, 80, seed=1)
    base, extended = oracle.estimate_pair([0, 4], 7)
    assert base == oracle.estimate([0, 4])
    assert extended == oracle.estimate([0, 4, 7])
    assert oracle.calls == 3
    assert oracle.reach_passes == 4
    oracle.reset_calls()
    assert oracle.calls == oracle.reach_passes == 0


def test_oracle_parameter_misuse(ring_graph, conspiracy):
    with pytest.raises(ParameterError):
        SpreadOracle(ring_graph, conspiracy, 0)
    oracle = SpreadOracle(ring_graph, conspiracy, 5, seed=0)
    with pytest.raises(InvalidReferenceError):
        oracle.estimate([9])


@pytest.mark.parametrize("seed", range(3))
def test_oracle_is_monotone_and_submodular(random_graph, conspiracy, seed):
    graph = random_graph(30, 0.15, seed)
    oracle = SpreadOracle(graph, conspiracy, 60, seed=seed)
    rng = np.random.default_rng(seed)
    for _ in range(20):
        nodes = rng.permutation(len(graph)).tolist()
        small, extra, u = nodes[:2], nodes[2:5], nodes[5]
        large = small + extra
        gain_small = oracle.estimate(small + [u]) - oracle.estimate(small)
        gain_large = oracle.estimate(large + [u]) - oracle.estimate(large)
        assert oracle.estimate(large) >= oracle.estimate(small)
        assert gain_large <= gain_small + 1e-9


def test_streaming_estimates_diminishing_returns(star_graph, conspiracy):
    # Adding a leaf is worth less once the hub is already seeded
    sims = 4000
    gain_alone = (estimate_spread(star_graph, [1, 2], conspiracy, sims, rng=1)
                  - estimate_spread(star_graph, [2], conspiracy, sims, rng=2))
    gain_with_hub = (estimate_spread(star_graph, [0, 1, 2], conspiracy, sims, rng=3)
                     - estimate_spread(star_graph, [0, 2], conspiracy, sims, rng=4))
    assert gain_with_hub <= gain_alone + 0.1
