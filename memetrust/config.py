"""
Model constants and engine-level configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np


# =============================================================================
# Acceptance model
# =============================================================================

BASE_RECEPTIVITY = 0.3
ACCEPTANCE_MIN = 0.05   # no belief state is ever impossible...
ACCEPTANCE_MAX = 0.95   # ...or certain
COMPLEXITY_WEIGHT = 0.3
CREDIBILITY_BASE = 0.7
CREDIBILITY_WEIGHT = 0.3
LOW_ACCURACY_THRESHOLD = 0.5

NOVELTY_WINDOW_DAYS = 7.0
NOVELTY_FLOOR = 0.3
EMOTIONAL_SHARE_WEIGHT = 0.5

# =============================================================================
# Social-trust cost regime (mode A)
# =============================================================================

SOCIAL_COST_MIN = 0.05
SOCIAL_COST_MAX = 2.0
SAME_IDENTITY_DISCOUNT = 0.8
POLITICAL_COST_WEIGHT = 0.3
ACTIVITY_COST_WEIGHT = 0.2

SOCIAL_HEURISTIC_WEIGHTS = {
    "identity_mismatch": 0.5,
    "political": 0.5,
    "direct_connection": 0.5,
    "no_connection": 1.0,
    "inactivity": 0.3,
}

# =============================================================================
# Meme-trust heuristic (mode B)
# =============================================================================

MEME_HEURISTIC_WEIGHTS = {
    "alignment": 1.5,
    "critical_barrier": 0.8,
    "complexity": 0.4,
    "emotional_resistance": 0.3,
    "direct_connection": 0.3,
    "no_connection": 0.8,
}

# =============================================================================
# Monte Carlo
# =============================================================================

DEFAULT_SIMULATIONS = 1000
INTERACTIVE_SIMULATIONS = 500


@dataclass
class EngineConfig:
    """Defaults shared by the search and selection entry points."""
    num_simulations: int = DEFAULT_SIMULATIONS
    interactive_simulations: int = INTERACTIVE_SIMULATIONS

    # Reproducibility: None draws fresh OS entropy
    master_seed: Optional[int] = None

    # Pathfinder
    record_frames: bool = False
    heuristic: str = "guarded"  # 'guarded' | 'estimate'

    def rng(self, offset: int = 0) -> np.random.Generator:
        if self.master_seed is None:
            return np.random.default_rng()
        return np.random.default_rng(self.master_seed + offset)


DEFAULT_CONFIG = EngineConfig()
