"""Response payloads built from association results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict

from .memory import AssociationResult, MemoryTrace


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class NeuralOutput:
    content: str
    summary: Dict[str, Any]
    memory_trace: MemoryTrace
    timestamp: datetime = field(default_factory=_utcnow)


def synthesize(association: AssociationResult, *, clock: Callable[[], datetime] = _utcnow) -> NeuralOutput:
    """Summarise ``association`` as text plus a structured payload."""

    timestamp = clock()
    pattern_count = len(association.patterns)
    memory_count = len(association.memories)
    top = association.top_pattern
    content = (
        f"Neural analysis recognised {pattern_count} activation patterns and "
        f"{memory_count} associated memories (strength {association.strength:.3f}) "
        f"at {timestamp.isoformat()}."
    )
    summary: Dict[str, Any] = {
        "pattern_count": pattern_count,
        "memory_count": memory_count,
        "strength": association.strength,
        "novelty": association.novelty,
        "dominant_layer": top.layer if top is not None else None,
        "timestamp": timestamp.isoformat(),
    }
    trace = MemoryTrace(
        association_id=association.id,
        strength=association.strength,
        novelty=association.novelty,
        pattern_count=pattern_count,
        memory_count=memory_count,
    )
    return NeuralOutput(content=content, summary=summary, memory_trace=trace, timestamp=timestamp)


__all__ = ["NeuralOutput", "synthesize"]
