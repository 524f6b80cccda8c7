"""Complete bipartite wiring between adjacent layers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Iterator, List, Optional, Sequence

import numpy as np
import numpy.typing as npt

from .architecture import Layer

LOGGER = logging.getLogger(__name__)

WEIGHT_RANGE = (-0.1, 0.1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class Connection:
    """Directed, weighted edge between two neurons in adjacent layers."""

    id: int
    from_neuron_id: str
    to_neuron_id: str
    weight: float
    last_active_at: Optional[datetime] = None

    @property
    def strength(self) -> float:
        return abs(self.weight)


@dataclass(slots=True)
class ConnectionSet:
    """All connections of a network, with one weight matrix per layer boundary.

    ``matrices[i]`` has shape ``(len(layers[i]), len(layers[i + 1]))`` and holds
    the same values as the corresponding :class:`Connection` records.
    """

    connections: List[Connection] = field(default_factory=list)
    matrices: List[npt.NDArray[np.float64]] = field(default_factory=list)
    _index: Dict[int, Connection] = field(default_factory=dict, repr=False)

    def __len__(self) -> int:
        return len(self.connections)

    def __iter__(self) -> Iterator[Connection]:
        return iter(self.connections)

    def get(self, connection_id: int) -> Connection:
        return self._index[connection_id]


def expected_connection_count(layer_sizes: Sequence[int]) -> int:
    """Return ``Σ n_i * n_{i+1}`` for the given layer sizes."""

    return int(sum(a * b for a, b in zip(layer_sizes, layer_sizes[1:])))


def connect(
    layers: Sequence[Layer],
    rng: np.random.Generator,
    *,
    clock: Callable[[], datetime] = _utcnow,
) -> ConnectionSet:
    """Wire every neuron of ``layers[i]`` to every neuron of ``layers[i + 1]``.

    Weights are sampled uniformly from ``[-0.1, 0.1)``.  Connection ids are
    appended to the source neuron's ``outgoing_connection_ids``.  The
    connections are bookkeeping only: propagation does not read them.
    """

    created_at = clock()
    result = ConnectionSet()
    next_id = 0
    for source, target in zip(layers, layers[1:]):
        matrix = rng.uniform(*WEIGHT_RANGE, size=(source.size, target.size))
        result.matrices.append(matrix)
        for row, from_neuron in enumerate(source.neurons):
            for col, to_neuron in enumerate(target.neurons):
                connection = Connection(
                    id=next_id,
                    from_neuron_id=from_neuron.id,
                    to_neuron_id=to_neuron.id,
                    weight=float(matrix[row, col]),
                    last_active_at=created_at,
                )
                result.connections.append(connection)
                result._index[next_id] = connection
                from_neuron.outgoing_connection_ids.append(next_id)
                next_id += 1

    LOGGER.debug("Initialised %d connections across %d boundaries", len(result), len(result.matrices))
    return result


__all__ = ["Connection", "ConnectionSet", "connect", "expected_connection_count"]
