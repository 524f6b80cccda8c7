"""Layer and neuron construction for the simulated network."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

import numpy as np

from ..config import LayerSpec
from ..errors import ConfigurationError, EmptyArchitectureError
from .activation import canonical_activation_name

LOGGER = logging.getLogger(__name__)

THRESHOLD_RANGE = (0.3, 0.8)
LEARNING_RATE_RANGE = (0.005, 0.015)


@dataclass(slots=True)
class Neuron:
    """A single unit holding an activation value and a firing threshold."""

    id: str
    threshold: float
    learning_rate: float
    activation: float = 0.0
    last_fired_at: Optional[datetime] = None
    outgoing_connection_ids: List[int] = field(default_factory=list)


@dataclass(slots=True)
class Layer:
    """An ordered group of neurons sharing one activation function."""

    id: str
    order_index: int
    activation_function: str
    neurons: List[Neuron] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.neurons)

    def thresholds(self) -> np.ndarray:
        return np.fromiter((neuron.threshold for neuron in self.neurons), dtype=float, count=len(self.neurons))


def build_architecture(layer_specs: Sequence[LayerSpec], rng: np.random.Generator) -> List[Layer]:
    """Create the ordered layer list described by ``layer_specs``.

    Thresholds are drawn uniformly from ``[0.3, 0.8)`` and learning rates from
    ``[0.005, 0.015)`` using ``rng``.  Neuron identifiers are prefixed with the
    layer name so they never collide across layers.
    """

    if not layer_specs:
        raise EmptyArchitectureError("An architecture requires at least one layer")

    seen: set[str] = set()
    layers: List[Layer] = []
    for index, spec in enumerate(layer_specs):
        name = (spec.name or "").strip()
        if not name:
            raise ConfigurationError(f"Layer #{index} has no name")
        if name in seen:
            raise ConfigurationError(f"Duplicate layer name '{name}'")
        if spec.neuron_count <= 0:
            raise ConfigurationError(f"Layer '{name}' must contain at least one neuron (got {spec.neuron_count})")
        seen.add(name)

        activation = canonical_activation_name(spec.activation)
        count = int(spec.neuron_count)
        thresholds = rng.uniform(*THRESHOLD_RANGE, size=count)
        learning_rates = rng.uniform(*LEARNING_RATE_RANGE, size=count)
        neurons = [
            Neuron(
                id=f"{name}:{position}",
                threshold=float(thresholds[position]),
                learning_rate=float(learning_rates[position]),
            )
            for position in range(count)
        ]
        layers.append(Layer(id=name, order_index=index, activation_function=activation, neurons=neurons))

    LOGGER.debug(
        "Built architecture %s",
        " -> ".join(f"{layer.id}({layer.size}, {layer.activation_function})" for layer in layers),
    )
    return layers


def total_neurons(layers: Sequence[Layer]) -> int:
    return sum(layer.size for layer in layers)


__all__ = ["Layer", "Neuron", "build_architecture", "total_neurons"]
