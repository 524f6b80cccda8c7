"""Per-request simulation pipeline.

The :mod:`neurocore.simulation` package holds the steps a request goes through
once the network exists: encoding, forward propagation, association against
the memory store, capability reinforcement and output synthesis.  Every step
takes its random generator (and, where relevant, its clock) as an argument so
that runs seeded with the same value are reproducible.
"""

from .encoder import InputEncoder, NeuralInput
from .memory import AssociationResult, AssociativeMemoryStore, MemoryMatch, MemoryRecord, MemoryTrace, PatternSummary
from .metrics import MetricsProvider, MetricsSnapshot, StaticMetricsProvider, SystemMetricsProvider
from .output import NeuralOutput, synthesize
from .propagation import LayerOutput, PropagationResult, propagate
from .reinforcement import ActivityGauge, CapabilityAdapter, CapabilityVector

__all__ = [
    "ActivityGauge",
    "AssociationResult",
    "AssociativeMemoryStore",
    "CapabilityAdapter",
    "CapabilityVector",
    "InputEncoder",
    "LayerOutput",
    "MemoryMatch",
    "MemoryRecord",
    "MemoryTrace",
    "MetricsProvider",
    "MetricsSnapshot",
    "NeuralInput",
    "NeuralOutput",
    "PatternSummary",
    "PropagationResult",
    "StaticMetricsProvider",
    "SystemMetricsProvider",
    "propagate",
    "synthesize",
]
