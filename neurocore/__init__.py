"""
neurocore
=========

A layered neural *simulation* core.  The engine builds a multi-layer network
of artificial neurons, propagates an encoded request through the layers,
retrieves and stores associative memories from the resulting activation
pattern, and slowly adapts a small vector of capability scores.

There is no training here: no gradients, no loss and no weight updates.
Activations are produced by a fixed formula with seeded noise so that the
resulting heuristic scores are reproducible.

Typical use::

    from neurocore import NeuralProcessingEngine, NeuralEngineConfig

    engine = NeuralProcessingEngine(NeuralEngineConfig(seed=7))
    engine.initialize()
    result = engine.process_request({"type": "analysis", "content": "hello"})
    print(result.output.content)
    engine.shutdown()
"""

from .config import LayerSpec, NeuralEngineConfig, REFERENCE_LAYERS, TelemetryConfig
from .errors import (
    ConfigurationError,
    EmptyArchitectureError,
    EngineStateError,
    InvalidInputError,
    NeuralEngineError,
    ProcessingError,
)
from .processor import EngineState, InitSummary, NeuralProcessingEngine, ProcessingResult
from .schemas import NeuralRequest, StatusSnapshot

__all__ = [
    "ConfigurationError",
    "EmptyArchitectureError",
    "EngineState",
    "EngineStateError",
    "InitSummary",
    "InvalidInputError",
    "LayerSpec",
    "NeuralEngineConfig",
    "NeuralEngineError",
    "NeuralProcessingEngine",
    "NeuralRequest",
    "ProcessingError",
    "ProcessingResult",
    "REFERENCE_LAYERS",
    "StatusSnapshot",
    "TelemetryConfig",
]
