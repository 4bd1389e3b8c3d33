"""
Data model: people-nodes, memes (content items) and trust edges.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from memetrust.errors import ParameterError


# =============================================================================
# Enums
# =============================================================================

class NodeState(Enum):
    SUSCEPTIBLE = "susceptible"
    EXPOSED = "exposed"
    INFECTED = "infected"
    RESISTANT = "resistant"


class IdentityClass(Enum):
    URBAN_PROFESSIONAL = "urban_professional"
    UNIVERSITY_STUDENT = "university_student"
    RURAL_TRADITIONAL = "rural_traditional"
    SUBURBAN_FAMILY = "suburban_family"
    TECH_WORKER = "tech_worker"


class ContentType(Enum):
    POLITICAL_CONSPIRACY = "political_conspiracy"
    HEALTH_MISINFORMATION = "health_misinformation"
    FACTUAL_NEWS = "factual_news"
    NEUTRAL = "neutral"


# =============================================================================
# Presets
# =============================================================================

MEME_PRESETS = {
    ContentType.POLITICAL_CONSPIRACY: {
        "political_bias": 0.8,
        "emotional_intensity": 0.9,
        "factual_accuracy": 0.2,
        "complexity": 0.3,
        "virality": 0.8,
        "source_credibility": 0.3,
    },
    ContentType.HEALTH_MISINFORMATION: {
        "political_bias": 0.0,
        "emotional_intensity": 0.7,
        "factual_accuracy": 0.3,
        "complexity": 0.4,
        "virality": 0.6,
        "source_credibility": 0.4,
    },
    ContentType.FACTUAL_NEWS: {
        "political_bias": 0.0,
        "emotional_intensity": 0.3,
        "factual_accuracy": 0.9,
        "complexity": 0.6,
        "virality": 0.3,
        "source_credibility": 0.9,
    },
    ContentType.NEUTRAL: {
        "political_bias": 0.0,
        "emotional_intensity": 0.5,
        "factual_accuracy": 0.5,
        "complexity": 0.5,
        "virality": 0.5,
        "source_credibility": 0.5,
    },
}

# (low, high) per attribute; political axes are signed
NODE_ATTRIBUTE_RANGES = {
    "political_leaning": (-1.0, 1.0),
    "critical_thinking": (0.0, 1.0),
    "emotional_susceptibility": (0.0, 1.0),
    "education_level": (0.0, 1.0),
    "social_activity": (0.0, 1.0),
}

MEME_ATTRIBUTE_RANGES = {
    "political_bias": (-1.0, 1.0),
    "emotional_intensity": (0.0, 1.0),
    "factual_accuracy": (0.0, 1.0),
    "complexity": (0.0, 1.0),
    "virality": (0.0, 1.0),
    "source_credibility": (0.0, 1.0),
}


def _check_ranges(obj, ranges: dict, kind: str):
    for name, (low, high) in ranges.items():
        value = getattr(obj, name)
        if not low <= value <= high:
            raise ParameterError(
                f"{kind}.{name}={value} outside [{low}, {high}]"
            )


# =============================================================================
# Dataclasses
# =============================================================================

@dataclass
class Node:
    """A person in the trust network."""
    id: int  # stable arena index inside its TrustGraph
    identity_class: Optional[IdentityClass] = None

    # Attributes
    political_leaning: float = 0.0         # -1 (left) .. +1 (right)
    critical_thinking: float = 0.5
    emotional_susceptibility: float = 0.5
    education_level: float = 0.5
    social_activity: float = 0.5

    # {neighbor_id: trust_weight in (0, 1]}; written only through TrustGraph
    trust_network: dict = field(default_factory=dict)

    # State (mutated by caller-side simulations, never by search or selection)
    state: NodeState = NodeState.SUSCEPTIBLE
    current_beliefs: list = field(default_factory=list)   # meme ids
    exposure_history: list = field(default_factory=list)  # meme ids

    def __post_init__(self):
        _check_ranges(self, NODE_ATTRIBUTE_RANGES, "node")

    def shares_identity(self, other: Node) -> bool:
        return (self.identity_class is not None
                and self.identity_class == other.identity_class)

    @property
    def degree(self) -> int:
        return len(self.trust_network)


@dataclass(frozen=True)
class Meme:
    """An immutable content item spreading through the network."""
    id: str
    content_type: ContentType = ContentType.NEUTRAL
    title: str = ""

    political_bias: float = 0.0
    emotional_intensity: float = 0.5
    factual_accuracy: float = 0.5
    complexity: float = 0.5
    virality: float = 0.5
    source_credibility: float = 0.5

    # Lineage
    generation: int = 0
    parent_id: Optional[str] = None

    def __post_init__(self):
        _check_ranges(self, MEME_ATTRIBUTE_RANGES, "meme")

    @property
    def is_low_accuracy(self) -> bool:
        return self.factual_accuracy < 0.5

    def with_attributes(self, **changes) -> Meme:
        return replace(self, **changes)


@dataclass(frozen=True)
class Edge:
    """Undirected trust relation between two nodes."""
    source: int
    target: int
    trust_weight: float


def create_meme(
    content_type: ContentType = ContentType.NEUTRAL,
    title: str = "",
    meme_id: Optional[str] = None,
    **overrides,
) -> Meme:
    """Build a meme from its content-type preset.

    Args:
        content_type: Preset to start from.
        title: Display title.
        meme_id: Explicit id; a random ``meme_<hex>`` id is generated when omitted.
        **overrides: Attribute values replacing the preset ones
            (e.g. ``virality=0.9``).
    """
    unknown = set(overrides) - set(MEME_ATTRIBUTE_RANGES)
    if unknown:
        raise ParameterError(f"Unknown meme attributes: {sorted(unknown)}")
    attributes = dict(MEME_PRESETS[content_type])
    attributes.update(overrides)
    return Meme(
        id=meme_id or f"meme_{uuid.uuid4().hex[:12]}",
        content_type=content_type,
        title=title or content_type.value.replace("_", " "),
        **attributes,
    )
