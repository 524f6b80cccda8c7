"""
neurocore.network
=================

Structural primitives of the simulated network: the activation function
registry, the layer/neuron builder and the connection initialiser.  The
topology produced here is created once by the engine and never changes
afterwards; only per-neuron state (activation, last firing time) is updated
by the propagation step in :mod:`neurocore.simulation`.

Connections carry uniformly sampled weights and are tracked for every pair of
neurons across adjacent layers, but the propagation step does not read them.
See :func:`neurocore.simulation.propagation.propagate` for the activation
formula actually used.
"""

from .activation import ACTIVATION_FUNCTIONS, apply_activation, canonical_activation_name  # noqa: F401
from .architecture import Layer, Neuron, build_architecture, total_neurons  # noqa: F401
from .connections import Connection, ConnectionSet, connect, expected_connection_count  # noqa: F401

__all__ = [
    "ACTIVATION_FUNCTIONS",
    "Connection",
    "ConnectionSet",
    "Layer",
    "Neuron",
    "apply_activation",
    "build_architecture",
    "canonical_activation_name",
    "connect",
    "expected_connection_count",
    "total_neurons",
]
