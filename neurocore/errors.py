"""Exception hierarchy shared by the neural processing engine."""

from __future__ import annotations


class NeuralEngineError(Exception):
    """Base class for every error raised by :mod:`neurocore`."""


class ConfigurationError(NeuralEngineError):
    """Raised when a layer specification cannot be turned into a network."""


class EmptyArchitectureError(ConfigurationError):
    """Raised when an architecture (or layer list) contains no layers."""


class InvalidInputError(NeuralEngineError):
    """Raised when a request cannot be encoded into a neural input."""


class ProcessingError(NeuralEngineError):
    """Wraps any failure raised while propagating, associating or synthesising."""


class EngineStateError(NeuralEngineError):
    """Raised when an operation is not allowed in the engine's current state."""


__all__ = [
    "ConfigurationError",
    "EmptyArchitectureError",
    "EngineStateError",
    "InvalidInputError",
    "NeuralEngineError",
    "ProcessingError",
]
