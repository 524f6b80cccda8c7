"""Associative memory: short-term records, long-term records and activation patterns.

The store keeps three bounded collections:

* **short-term** records, one per completed (or failed) request;
* **long-term** records, copies of short-term records whose cycle was novel;
* **patterns**, per-layer activation summaries seeded at start-up and
  consolidated from novel propagations.

All three are insertion ordered and evict their oldest entry once full.
Records are frozen dataclasses and never change after they are written.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Literal, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..network.architecture import Layer
from ._identifiers import random_uuid
from .propagation import LayerOutput, PropagationResult

LOGGER = logging.getLogger(__name__)

RECORD_SIMILARITY_THRESHOLD = 0.3
PATTERN_SIMILARITY_THRESHOLD = 0.4
LONG_TERM_NOVELTY_THRESHOLD = 0.7
SIMILARITY_NOISE = 0.2

RecordKind = Literal["analysis", "error"]
MatchSource = Literal["short_term", "pattern"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clamp(value: float) -> float:
    return float(max(0.0, min(1.0, value)))


@dataclass(frozen=True, slots=True)
class PatternSummary:
    """Compact description of one layer's activation event."""

    layer: str
    firing_rate: float
    avg_activation: float
    max_activation: float
    signature: str


@dataclass(frozen=True, slots=True)
class StoredPattern:
    id: str
    summary: PatternSummary
    origin: str
    created_at: datetime


@dataclass(frozen=True, slots=True)
class NeuralData:
    total_activity: float
    max_activation: float
    pattern_count: int


@dataclass(frozen=True, slots=True)
class MemoryTrace:
    """The association facts persisted alongside a memory record."""

    association_id: str
    strength: float
    novelty: float
    pattern_count: int
    memory_count: int


@dataclass(frozen=True)
class MemoryRecord:
    id: str
    request_snapshot: Mapping[str, Any]
    neural_data: NeuralData
    created_at: datetime
    kind: RecordKind = "analysis"
    memory_trace: Optional[MemoryTrace] = None
    error: Optional[str] = None


@dataclass(frozen=True, slots=True)
class MemoryMatch:
    source: MatchSource
    reference_id: str
    similarity: float
    layer: Optional[str] = None


@dataclass(frozen=True)
class AssociationResult:
    id: str
    propagation_id: str
    patterns: List[PatternSummary]
    memories: List[MemoryMatch]
    novelty: float
    strength: float

    @property
    def top_pattern(self) -> Optional[PatternSummary]:
        """Pattern with the highest firing rate (first layer wins ties)."""

        if not self.patterns:
            return None
        return max(self.patterns, key=lambda pattern: pattern.firing_rate)


def activation_signature(activations: np.ndarray, fired: np.ndarray) -> str:
    """Hash an activation vector into a short hex string.

    Activations are quantised to a byte each and combined into a
    position-weighted sum (32 bits); the firing mask is bit-packed and
    xor-folded into 16 bits.  Identical vectors always produce identical
    signatures.
    """

    quantised = np.round(np.clip(activations, 0.0, 1.0) * 255.0).astype(np.int64)
    positions = np.arange(1, quantised.size + 1, dtype=np.int64)
    weighted = int(np.dot(quantised, positions)) & 0xFFFFFFFF
    packed = np.packbits(fired.astype(bool)).tobytes()
    folded = 0
    for offset in range(0, len(packed), 2):
        folded ^= int.from_bytes(packed[offset : offset + 2].ljust(2, b"\0"), "big")
    return f"{weighted:08x}{folded:04x}"


def summarise_layer(layer_id: str, output: LayerOutput) -> PatternSummary:
    vector = output.vector()
    count = max(output.neuron_count, 1)
    return PatternSummary(
        layer=layer_id,
        firing_rate=output.fire_count / count,
        avg_activation=output.total_activation / count,
        max_activation=output.max_activation,
        signature=activation_signature(vector, output.fired_mask()),
    )


def compute_novelty(propagation: PropagationResult, activity_gauge: float) -> float:
    novelty = 0.5
    if propagation.total_activity > activity_gauge * 1.5:
        novelty += 0.3
    if propagation.max_activation > 0.8:
        novelty += 0.2
    return _clamp(novelty)


def compute_strength(propagation: PropagationResult) -> float:
    return _clamp(0.3 + propagation.total_activity * 0.3 + (propagation.layer_count / 5.0) * 0.2)


def _proximity(a: float, b: float) -> float:
    scale = max(abs(a), abs(b), 1e-9)
    return _clamp(1.0 - abs(a - b) / scale)


class AssociativeMemoryStore:
    """Bounded associative memory shared by every request of an engine."""

    def __init__(
        self,
        *,
        short_term_capacity: int = 256,
        long_term_capacity: int = 1024,
        pattern_capacity: int = 512,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.short_term_capacity = short_term_capacity
        self.long_term_capacity = long_term_capacity
        self.pattern_capacity = pattern_capacity
        self._clock = clock
        self._short_term: "OrderedDict[str, MemoryRecord]" = OrderedDict()
        self._long_term: "OrderedDict[str, MemoryRecord]" = OrderedDict()
        self._patterns: "OrderedDict[str, StoredPattern]" = OrderedDict()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def short_term(self) -> Tuple[MemoryRecord, ...]:
        return tuple(self._short_term.values())

    @property
    def long_term(self) -> Tuple[MemoryRecord, ...]:
        return tuple(self._long_term.values())

    @property
    def patterns(self) -> Tuple[StoredPattern, ...]:
        return tuple(self._patterns.values())

    def sizes(self) -> Dict[str, int]:
        return {
            "short_term": len(self._short_term),
            "long_term": len(self._long_term),
            "patterns": len(self._patterns),
        }

    def get_short_term(self, record_id: str) -> Optional[MemoryRecord]:
        return self._short_term.get(record_id)

    def get_long_term(self, record_id: str) -> Optional[MemoryRecord]:
        return self._long_term.get(record_id)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @staticmethod
    def _bounded_put(store: "OrderedDict[str, Any]", key: str, value: Any, capacity: int) -> None:
        store[key] = value
        store.move_to_end(key)
        while len(store) > capacity:
            evicted, _ = store.popitem(last=False)
            LOGGER.debug("Evicted memory entry %s", evicted)

    def retain(self, record: MemoryRecord, novelty: float) -> bool:
        """Write ``record`` to short-term memory and promote it when novel.

        Returns ``True`` when the record was also copied into long-term
        memory, which happens iff ``novelty > 0.7``.
        """

        self._bounded_put(self._short_term, record.id, record, self.short_term_capacity)
        if novelty > LONG_TERM_NOVELTY_THRESHOLD:
            self._bounded_put(self._long_term, record.id, record, self.long_term_capacity)
            return True
        return False

    def record_error(
        self,
        request_snapshot: Mapping[str, Any],
        error: BaseException,
        rng: np.random.Generator,
    ) -> MemoryRecord:
        """Store an error trace in short-term memory."""

        record = MemoryRecord(
            id=random_uuid(rng),
            request_snapshot=dict(request_snapshot),
            neural_data=NeuralData(total_activity=0.0, max_activation=0.0, pattern_count=0),
            created_at=self._clock(),
            kind="error",
            error=f"{type(error).__name__}: {error}",
        )
        self._bounded_put(self._short_term, record.id, record, self.short_term_capacity)
        return record

    def consolidate(self, patterns: Sequence[PatternSummary], rng: np.random.Generator, origin: str = "consolidated") -> int:
        """Add ``patterns`` to the pattern store, skipping known signatures."""

        added = 0
        for summary in patterns:
            if summary.signature in self._patterns:
                continue
            stored = StoredPattern(id=random_uuid(rng), summary=summary, origin=origin, created_at=self._clock())
            self._bounded_put(self._patterns, summary.signature, stored, self.pattern_capacity)
            added += 1
        return added

    def seed_patterns(
        self,
        layers: Sequence[Layer],
        rng: np.random.Generator,
        count_range: Tuple[int, int] = (5, 13),
    ) -> int:
        """Seed random activation patterns so the store is never empty at start-up."""

        if not layers:
            return 0
        low, high = count_range
        count = int(rng.integers(low, high + 1))
        summaries: List[PatternSummary] = []
        for _ in range(count):
            layer = layers[int(rng.integers(len(layers)))]
            vector = rng.random(layer.size)
            fired = vector > layer.thresholds()
            summaries.append(
                PatternSummary(
                    layer=layer.id,
                    firing_rate=float(fired.mean()),
                    avg_activation=float(vector.mean()),
                    max_activation=float(vector.max()),
                    signature=activation_signature(vector, fired),
                )
            )
        added = self.consolidate(summaries, rng, origin="bootstrap")
        LOGGER.debug("Seeded %d bootstrap patterns", added)
        return added

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _record_matches(self, propagation: PropagationResult, rng: np.random.Generator) -> List[MemoryMatch]:
        matches: List[MemoryMatch] = []
        for record in self._short_term.values():
            if record.kind != "analysis":
                continue
            data = record.neural_data
            similarity = _clamp(
                0.45 * _proximity(propagation.total_activity, data.total_activity)
                + 0.35 * (1.0 - abs(propagation.max_activation - data.max_activation))
                + SIMILARITY_NOISE * rng.random()
            )
            if similarity > RECORD_SIMILARITY_THRESHOLD:
                matches.append(MemoryMatch(source="short_term", reference_id=record.id, similarity=similarity))
        return matches

    def _pattern_matches(self, current: Mapping[str, PatternSummary], rng: np.random.Generator) -> List[MemoryMatch]:
        matches: List[MemoryMatch] = []
        for stored in self._patterns.values():
            candidate = current.get(stored.summary.layer)
            if candidate is None:
                continue
            if candidate.signature == stored.summary.signature:
                similarity = 1.0
            else:
                similarity = _clamp(
                    0.4 * (1.0 - abs(candidate.firing_rate - stored.summary.firing_rate))
                    + 0.4 * (1.0 - abs(candidate.avg_activation - stored.summary.avg_activation))
                    + SIMILARITY_NOISE * rng.random()
                )
            if similarity > PATTERN_SIMILARITY_THRESHOLD:
                matches.append(
                    MemoryMatch(
                        source="pattern",
                        reference_id=stored.id,
                        similarity=similarity,
                        layer=stored.summary.layer,
                    )
                )
        return matches

    def associate(
        self,
        propagation: PropagationResult,
        activity_gauge: float,
        rng: np.random.Generator,
    ) -> AssociationResult:
        """Summarise ``propagation`` and retrieve similar memories.

        An empty store yields ``memories == []``.  Matches are sorted by
        similarity, highest first, with no cap on their number.
        """

        patterns = [summarise_layer(layer_id, output) for layer_id, output in propagation.layer_outputs.items()]
        by_layer = {pattern.layer: pattern for pattern in patterns}

        memories = self._record_matches(propagation, rng) + self._pattern_matches(by_layer, rng)
        memories.sort(key=lambda match: match.similarity, reverse=True)

        association = AssociationResult(
            id=random_uuid(rng),
            propagation_id=propagation.id,
            patterns=patterns,
            memories=memories,
            novelty=compute_novelty(propagation, activity_gauge),
            strength=compute_strength(propagation),
        )
        LOGGER.debug(
            "Association %s: %d patterns, %d memories, novelty=%.2f, strength=%.2f",
            association.id,
            len(patterns),
            len(memories),
            association.novelty,
            association.strength,
        )
        return association


def analysis_record(
    request_snapshot: Mapping[str, Any],
    propagation: PropagationResult,
    association: AssociationResult,
    memory_trace: MemoryTrace,
    rng: np.random.Generator,
    created_at: datetime,
) -> MemoryRecord:
    """Build the record written after a successful cycle."""

    return MemoryRecord(
        id=random_uuid(rng),
        request_snapshot=dict(request_snapshot),
        neural_data=NeuralData(
            total_activity=propagation.total_activity,
            max_activation=propagation.max_activation,
            pattern_count=len(association.patterns),
        ),
        created_at=created_at,
        memory_trace=memory_trace,
    )


__all__ = [
    "AssociationResult",
    "AssociativeMemoryStore",
    "MemoryMatch",
    "MemoryRecord",
    "MemoryTrace",
    "NeuralData",
    "PatternSummary",
    "StoredPattern",
    "activation_signature",
    "analysis_record",
    "compute_novelty",
    "compute_strength",
    "summarise_layer",
]
