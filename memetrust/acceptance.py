"""
Acceptance model: how likely a person is to believe, and to re-share, a meme.

Both functions are pure. All randomness lives in the callers that draw
against these probabilities.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from memetrust.config import (
    ACCEPTANCE_MAX,
    ACCEPTANCE_MIN,
    BASE_RECEPTIVITY,
    COMPLEXITY_WEIGHT,
    CREDIBILITY_BASE,
    CREDIBILITY_WEIGHT,
    EMOTIONAL_SHARE_WEIGHT,
    LOW_ACCURACY_THRESHOLD,
    NOVELTY_FLOOR,
    NOVELTY_WINDOW_DAYS,
)
from memetrust.models import Meme, Node


def acceptance_factors(
    node: Node,
    meme: Meme,
    trust_weight: float,
    include_complexity: bool = False,
) -> dict:
    """Named intermediate terms of the acceptance formula.

    The unclamped product is returned under ``raw``.
    """
    political_alignment = 1.0 - abs(node.political_leaning - meme.political_bias)

    critical_penalty = 0.0
    if meme.factual_accuracy < LOW_ACCURACY_THRESHOLD:
        critical_penalty = node.critical_thinking * (1.0 - meme.factual_accuracy)

    complexity_penalty = abs(meme.complexity - node.education_level) * COMPLEXITY_WEIGHT

    alignment_score = political_alignment * (1.0 - critical_penalty)
    if include_complexity:
        alignment_score *= 1.0 - complexity_penalty

    virality_boost = 1.0 + meme.virality * node.emotional_susceptibility
    credibility_factor = CREDIBILITY_BASE + meme.source_credibility * CREDIBILITY_WEIGHT

    raw = (BASE_RECEPTIVITY * trust_weight * alignment_score
           * virality_boost * credibility_factor)
    return {
        "trust_factor": trust_weight,
        "political_alignment": political_alignment,
        "critical_penalty": critical_penalty,
        "complexity_penalty": complexity_penalty if include_complexity else 0.0,
        "alignment_score": alignment_score,
        "virality_boost": virality_boost,
        "credibility_factor": credibility_factor,
        "raw": raw,
    }


def acceptance_probability(
    node: Node,
    meme: Meme,
    source: Optional[Node],
    trust_weight: float,
    include_complexity: bool = False,
) -> float:
    """Probability that ``node`` accepts ``meme`` when ``source`` passes it on.

    ``source`` is part of the signature so richer sender models can plug in;
    the current model depends on the sender only through ``trust_weight``.
    ``include_complexity`` applies the education/complexity mismatch penalty
    used by the content-aware path cost.

    Returns:
        Probability clamped to [0.05, 0.95].
    """
    raw = acceptance_factors(node, meme, trust_weight, include_complexity)["raw"]
    return float(np.clip(raw, ACCEPTANCE_MIN, ACCEPTANCE_MAX))


def transmission_probability(node: Node, meme: Meme, days_since_infected: float = 0.0) -> float:
    """Probability that an already convinced ``node`` re-shares ``meme``."""
    novelty = max(NOVELTY_FLOOR, 1.0 - days_since_infected / NOVELTY_WINDOW_DAYS)
    p = (node.social_activity * meme.virality
         * (1.0 + meme.emotional_intensity * EMOTIONAL_SHARE_WEIGHT) * novelty)
    return float(np.clip(p, 0.0, 1.0))
