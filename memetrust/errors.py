"""Exception taxonomy and structured failure reasons."""

from __future__ import annotations

from enum import Enum


class FailureReason(Enum):
    INVALID_REFERENCE = "invalid_reference"  # id not present in the graph
    NO_PATH = "no_path"                      # frontier exhausted before target
    NO_CANDIDATES = "no_candidates"          # nothing susceptible left to seed


class MemetrustError(Exception):
    """Base class for errors raised by the engine."""


class InvalidReferenceError(MemetrustError, KeyError):
    """A node id that does not exist in the trust graph."""

    def __init__(self, node_id, what: str = "node"):
        self.node_id = node_id
        super().__init__(f"Unknown {what} id: {node_id!r}")

    def __str__(self) -> str:
        return self.args[0]


class ParameterError(MemetrustError, ValueError):
    """Invalid call parameters, rejected before any simulation work."""
