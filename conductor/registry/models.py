"""
Registry Models — Worker records and the tier ordinals shared by every
component that compares speed or reliability.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from conductor.shared.errors import InvalidWorkerError


class SpeedTier(str, Enum):
    """Relative response speed of a worker."""

    VERY_FAST = "very-fast"
    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"


class ReliabilityTier(str, Enum):
    """Relative reliability of a worker."""

    VERY_HIGH = "very-high"
    HIGH = "high"
    MEDIUM_HIGH = "medium-high"
    MEDIUM = "medium"
    LOW = "low"


# ============================================================================
# Tier Ordinals (single source of truth)
# ============================================================================

SPEED_SCORES: dict[SpeedTier, int] = {
    SpeedTier.VERY_FAST: 5,
    SpeedTier.FAST: 4,
    SpeedTier.MEDIUM: 3,
    SpeedTier.SLOW: 2,
}

RELIABILITY_SCORES: dict[ReliabilityTier, int] = {
    ReliabilityTier.VERY_HIGH: 5,
    ReliabilityTier.HIGH: 4,
    ReliabilityTier.MEDIUM_HIGH: 3,
    ReliabilityTier.MEDIUM: 2,
    ReliabilityTier.LOW: 1,
}


def speed_score(tier: SpeedTier | str) -> int:
    """Ordinal speed score (very-fast=5 ... slow=2)."""
    return SPEED_SCORES[SpeedTier(tier)]


def reliability_score(tier: ReliabilityTier | str) -> int:
    """Ordinal reliability score (very-high=5 ... low=1)."""
    return RELIABILITY_SCORES[ReliabilityTier(tier)]


@dataclass(frozen=True)
class Worker:
    """
    One invocable backend.

    Workers are immutable once registered; learned scores live in the
    feedback store and are joined at read time.

    Attributes:
        id: Unique worker identifier
        provider_family: Grouping tag (anthropic, openai, ollama, ...)
        capabilities: Capability tags this worker can serve (non-empty)
        max_payload_tokens: Largest request the worker accepts
        cost_per_k_tokens: Price per 1K tokens (0 for free/local workers)
        speed_tier: Relative speed
        reliability_tier: Relative reliability
        is_local: Runs on local infrastructure
    """

    id: str
    provider_family: str
    capabilities: frozenset[str]
    max_payload_tokens: int = 4096
    cost_per_k_tokens: float = 0.0
    speed_tier: SpeedTier = SpeedTier.MEDIUM
    reliability_tier: ReliabilityTier = ReliabilityTier.MEDIUM
    is_local: bool = False
    name: str = ""
    description: str = ""
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self) -> None:
        # Normalize inputs so callers can pass lists and plain strings
        object.__setattr__(self, "capabilities", frozenset(self.capabilities))
        object.__setattr__(self, "speed_tier", SpeedTier(self.speed_tier))
        object.__setattr__(self, "reliability_tier", ReliabilityTier(self.reliability_tier))

        if not self.id:
            raise InvalidWorkerError("<empty>", "id must be non-empty")
        if not self.capabilities:
            raise InvalidWorkerError(self.id, "capabilities must be non-empty")
        if self.cost_per_k_tokens < 0:
            raise InvalidWorkerError(self.id, "cost_per_k_tokens must be >= 0")
        if self.max_payload_tokens < 0:
            raise InvalidWorkerError(self.id, "max_payload_tokens must be >= 0")

    @property
    def speed_score(self) -> int:
        return speed_score(self.speed_tier)

    @property
    def reliability_score(self) -> int:
        return reliability_score(self.reliability_tier)

    def supports(self, capability: str) -> bool:
        return capability in self.capabilities

    def supports_any(self, capabilities: frozenset[str] | set[str] | list[str]) -> bool:
        return not self.capabilities.isdisjoint(capabilities)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "provider_family": self.provider_family,
            "capabilities": sorted(self.capabilities),
            "max_payload_tokens": self.max_payload_tokens,
            "cost_per_k_tokens": self.cost_per_k_tokens,
            "speed_tier": self.speed_tier.value,
            "reliability_tier": self.reliability_tier.value,
            "is_local": self.is_local,
            "name": self.name,
            "description": self.description,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Worker:
        """Create a Worker from dictionary."""
        return cls(
            id=data["id"],
            provider_family=data["provider_family"],
            capabilities=frozenset(data.get("capabilities", [])),
            max_payload_tokens=data.get("max_payload_tokens", 4096),
            cost_per_k_tokens=data.get("cost_per_k_tokens", 0.0),
            speed_tier=SpeedTier(data.get("speed_tier", SpeedTier.MEDIUM.value)),
            reliability_tier=ReliabilityTier(
                data.get("reliability_tier", ReliabilityTier.MEDIUM.value)
            ),
            is_local=data.get("is_local", False),
            name=data.get("name", ""),
            description=data.get("description", ""),
            metadata=data.get("metadata", {}),
        )
