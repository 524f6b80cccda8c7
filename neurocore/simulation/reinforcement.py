"""Capability reinforcement and the smoothed neural activity gauge."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from typing import Dict, Optional

from .memory import LONG_TERM_NOVELTY_THRESHOLD, AssociationResult
from .metrics import MetricsProvider, StaticMetricsProvider
from .propagation import PropagationResult

LOGGER = logging.getLogger(__name__)

PLASTICITY_DELTA = 0.005
PATTERN_RECOGNITION_DELTA = 0.003
ASSOCIATIVE_MEMORY_DELTA = 0.002
EMERGENT_INTELLIGENCE_DELTA = 0.001
ADAPTIVE_LEARNING_DELTA = 0.002
MAX_DELTA = 0.005

GAUGE_DECAY = 0.8
ACTIVITY_PER_LAYER = 50.0


@dataclass(frozen=True, slots=True)
class CapabilityVector:
    """Slowly adapting heuristic competence scores, each in ``[0, 1]``."""

    pattern_recognition: float = 0.5
    associative_memory: float = 0.5
    adaptive_learning: float = 0.5
    emergent_intelligence: float = 0.5
    neural_plasticity: float = 0.5

    def nudge(self, name: str, delta: float) -> "CapabilityVector":
        """Return a copy with ``name`` raised by ``delta`` (capped at 1.0)."""

        delta = float(max(0.0, min(MAX_DELTA, delta)))
        current = getattr(self, name)
        return replace(self, **{name: float(min(1.0, current + delta))})

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


class ActivityGauge:
    """Exponential moving average of network activity."""

    def __init__(self, value: float = 0.5) -> None:
        self._value = float(max(0.0, min(1.0, value)))

    @property
    def value(self) -> float:
        return self._value

    @staticmethod
    def sample(total_activity: float, layer_count: int) -> float:
        return float(total_activity / (max(layer_count, 1) * ACTIVITY_PER_LAYER))

    def update(self, total_activity: float, layer_count: int) -> float:
        blended = GAUGE_DECAY * self._value + (1.0 - GAUGE_DECAY) * self.sample(total_activity, layer_count)
        self._value = float(max(0.0, min(1.0, blended)))
        return self._value


class CapabilityAdapter:
    """Apply per-cycle reinforcement to a :class:`CapabilityVector`."""

    def __init__(self, metrics: Optional[MetricsProvider] = None) -> None:
        self.metrics = metrics or StaticMetricsProvider()

    def reinforce(self, association: AssociationResult, capabilities: CapabilityVector) -> CapabilityVector:
        updated = capabilities
        if association.strength > 0.6:
            updated = updated.nudge("neural_plasticity", PLASTICITY_DELTA)
        top = association.top_pattern
        if top is not None and top.firing_rate > 0.5:
            updated = updated.nudge("pattern_recognition", PATTERN_RECOGNITION_DELTA)
        if association.memories:
            updated = updated.nudge("associative_memory", ASSOCIATIVE_MEMORY_DELTA)
        if association.novelty > LONG_TERM_NOVELTY_THRESHOLD:
            updated = updated.nudge("emergent_intelligence", EMERGENT_INTELLIGENCE_DELTA)
        headroom = self.metrics.snapshot().headroom
        if headroom > 0.0:
            updated = updated.nudge("adaptive_learning", ADAPTIVE_LEARNING_DELTA * headroom)
        return updated

    def apply(
        self,
        association: AssociationResult,
        propagation: PropagationResult,
        capabilities: CapabilityVector,
        gauge: ActivityGauge,
    ) -> CapabilityVector:
        """Reinforce ``capabilities`` and fold ``propagation`` into ``gauge``."""

        updated = self.reinforce(association, capabilities)
        activity = gauge.update(propagation.total_activity, propagation.layer_count)
        LOGGER.debug("Reinforced capabilities (activity gauge=%.4f)", activity)
        return updated


__all__ = ["ActivityGauge", "CapabilityAdapter", "CapabilityVector"]
