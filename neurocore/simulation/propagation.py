"""Forward propagation of a neural input through the layer stack.

Every neuron receives the same three additive terms::

    raw = 0.1                                   # resting bias
        + distribution[layer] * intensity * 0.4 # share of the input signal
        + connection term                       # U[0, 0.3) if the neuron has
                                                # outgoing connections, else 0.1

The raw value is passed through the layer's activation function and clamped
to ``[0, 1]``.  A neuron fires when its activation exceeds its threshold.

Layers are visited in construction order but a layer does not read the
activations its predecessor just produced; the connection term is random
rather than a weighted sum over upstream neurons.  This keeps the simulation
cheap and is intentional.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Sequence

import numpy as np

from ..errors import EmptyArchitectureError
from ..network.activation import apply_activation
from ..network.architecture import Layer
from ._identifiers import random_uuid
from .encoder import NeuralInput

LOGGER = logging.getLogger(__name__)

BASE_ACTIVATION = 0.1
INPUT_GAIN = 0.4
CONNECTION_NOISE = 0.3
UNCONNECTED_CONTRIBUTION = 0.1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class NeuronActivation:
    neuron_id: str
    activation: float
    fired: bool


@dataclass(frozen=True)
class LayerOutput:
    """Per-layer activations and aggregates from one propagation."""

    activations: List[NeuronActivation]
    total_activation: float
    max_activation: float
    fire_count: int

    @property
    def neuron_count(self) -> int:
        return len(self.activations)

    def vector(self) -> np.ndarray:
        return np.fromiter((item.activation for item in self.activations), dtype=float, count=len(self.activations))

    def fired_mask(self) -> np.ndarray:
        return np.fromiter((item.fired for item in self.activations), dtype=bool, count=len(self.activations))


@dataclass(frozen=True)
class PropagationResult:
    """Outcome of a forward pass; ``layer_outputs`` preserves layer order."""

    id: str
    input_id: str
    layer_outputs: "OrderedDict[str, LayerOutput]"
    total_activity: float
    max_activation: float

    @property
    def layer_count(self) -> int:
        return len(self.layer_outputs)


def _propagate_layer(
    layer: Layer,
    neural_input: NeuralInput,
    rng: np.random.Generator,
    fired_at: datetime,
) -> LayerOutput:
    size = layer.size
    input_contribution = neural_input.distribution.get(layer.id, 0.0) * neural_input.intensity * INPUT_GAIN
    connected = np.fromiter((bool(n.outgoing_connection_ids) for n in layer.neurons), dtype=bool, count=size)
    connection_term = np.full(size, UNCONNECTED_CONTRIBUTION, dtype=float)
    if connected.any():
        noise = rng.random(size) * CONNECTION_NOISE
        connection_term = np.where(connected, noise, connection_term)

    raw = BASE_ACTIVATION + input_contribution + connection_term
    activations = np.clip(np.asarray(apply_activation(raw, layer.activation_function), dtype=float), 0.0, 1.0)
    fired = activations > layer.thresholds()

    records: List[NeuronActivation] = []
    for neuron, value, did_fire in zip(layer.neurons, activations, fired):
        neuron.activation = float(value)
        if did_fire:
            neuron.last_fired_at = fired_at
        records.append(NeuronActivation(neuron_id=neuron.id, activation=float(value), fired=bool(did_fire)))

    return LayerOutput(
        activations=records,
        total_activation=float(activations.sum()),
        max_activation=float(activations.max()) if size else 0.0,
        fire_count=int(fired.sum()),
    )


def propagate(
    neural_input: NeuralInput,
    layers: Sequence[Layer],
    rng: np.random.Generator,
    *,
    clock: Callable[[], datetime] = _utcnow,
) -> PropagationResult:
    """Drive ``neural_input`` through ``layers`` in order.

    Raises
    ------
    EmptyArchitectureError
        If ``layers`` is empty.
    """

    if not layers:
        raise EmptyArchitectureError("Cannot propagate through an empty architecture")

    fired_at = clock()
    outputs: "OrderedDict[str, LayerOutput]" = OrderedDict()
    for layer in layers:
        outputs[layer.id] = _propagate_layer(layer, neural_input, rng, fired_at)

    total_activity = float(sum(output.total_activation for output in outputs.values()))
    max_activation = float(max(output.max_activation for output in outputs.values()))
    result = PropagationResult(
        id=random_uuid(rng),
        input_id=neural_input.id,
        layer_outputs=outputs,
        total_activity=total_activity,
        max_activation=max_activation,
    )
    LOGGER.debug(
        "Propagated input %s through %d layers (total=%.3f, max=%.3f)",
        neural_input.id,
        len(outputs),
        total_activity,
        max_activation,
    )
    return result


__all__ = ["LayerOutput", "NeuronActivation", "PropagationResult", "propagate"]
