"""
memetrust: influence pathfinding and influence maximization over trust graphs.
"""

from memetrust.acceptance import acceptance_probability, transmission_probability
from memetrust.config import DEFAULT_CONFIG, EngineConfig
from memetrust.errors import (
    FailureReason,
    InvalidReferenceError,
    MemetrustError,
    ParameterError,
)
from memetrust.graph import TrustGraph
from memetrust.models import (
    MEME_PRESETS,
    ContentType,
    Edge,
    IdentityClass,
    Meme,
    Node,
    NodeState,
    create_meme,
)
from memetrust.pathfinding import (
    PathMode,
    PathResult,
    SearchFrame,
    audit_heuristic,
    explain_path_cost,
    find_influence_path,
)
from memetrust.seeding import (
    SelectionResult,
    celf,
    celf_plus_plus,
    compare_strategies,
    select_seeds,
)
from memetrust.spread import (
    SpreadOracle,
    estimate_spread,
    simulate_cascade,
    spread_distribution,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_CONFIG",
    "MEME_PRESETS",
    "ContentType",
    "Edge",
    "EngineConfig",
    "FailureReason",
    "IdentityClass",
    "InvalidReferenceError",
    "Meme",
    "MemetrustError",
    "Node",
    "NodeState",
    "ParameterError",
    "PathMode",
    "PathResult",
    "SearchFrame",
    "SelectionResult",
    "SpreadOracle",
    "TrustGraph",
    "acceptance_probability",
    "audit_heuristic",
    "celf",
    "celf_plus_plus",
    "compare_strategies",
    "create_meme",
    "estimate_spread",
    "explain_path_cost",
    "find_influence_path",
    "select_seeds",
    "simulate_cascade",
    "spread_distribution",
    "transmission_probability",
]
