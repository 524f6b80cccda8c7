"""Pydantic schemas describing requests accepted by, and status reported from, the engine."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NeuralRequest(BaseModel):
    """Shape of an incoming request before it is encoded."""

    model_config = ConfigDict(extra="allow")

    type: Optional[str] = Field(default=None, description="Request category, e.g. 'analysis'")
    content: Optional[str] = Field(default=None, description="Free text to encode")
    priority: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    keywords: List[str] = Field(default_factory=list)

    @field_validator("type", "content")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None

    @field_validator("keywords")
    @classmethod
    def _drop_empty_keywords(cls, value: List[str]) -> List[str]:
        return [keyword.strip() for keyword in value if keyword and keyword.strip()]

    def snapshot(self) -> Dict[str, Any]:
        """Return a plain dict suitable for storing in a memory record."""

        return self.model_dump(exclude_none=True)


class CapabilitySnapshot(BaseModel):
    """Current capability scores, each in ``[0, 1]``."""

    pattern_recognition: float = Field(..., ge=0.0, le=1.0)
    associative_memory: float = Field(..., ge=0.0, le=1.0)
    adaptive_learning: float = Field(..., ge=0.0, le=1.0)
    emergent_intelligence: float = Field(..., ge=0.0, le=1.0)
    neural_plasticity: float = Field(..., ge=0.0, le=1.0)


class ArchitectureSummary(BaseModel):
    """Size of the built network."""

    layer_count: int = 0
    neuron_count: int = 0
    connection_count: int = 0
    layers: List[str] = Field(default_factory=list)


class MemorySummary(BaseModel):
    """Occupancy of the associative memory stores."""

    short_term: int = 0
    long_term: int = 0
    patterns: int = 0


class StatusSnapshot(BaseModel):
    """Point-in-time view of the engine returned by ``get_status``."""

    initialized: bool
    state: str
    neural_activity: float = Field(..., ge=0.0, le=1.0)
    capabilities: CapabilitySnapshot
    architecture: ArchitectureSummary
    memory: MemorySummary
    processed_requests: int = 0
    failed_requests: int = 0


__all__ = [
    "ArchitectureSummary",
    "CapabilitySnapshot",
    "MemorySummary",
    "NeuralRequest",
    "StatusSnapshot",
]
