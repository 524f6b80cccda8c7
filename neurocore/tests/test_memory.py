from types import SimpleNamespace

import numpy as np
import pytest

from neurocore.simulation.encoder import InputEncoder
from neurocore.simulation.memory import (
    AssociativeMemoryStore,
    MemoryRecord,
    MemoryTrace,
    NeuralData,
    activation_signature,
    analysis_record,
    compute_novelty,
    compute_strength,
)
from neurocore.simulation.propagation import propagate


def _record(record_id, fixed_clock, total=1.0, peak=0.5):
    return MemoryRecord(
        id=record_id,
        request_snapshot={"type": "analysis"},
        neural_data=NeuralData(total_activity=total, max_activation=peak, pattern_count=2),
        created_at=fixed_clock(),
    )


def _propagation(layers, seed, fixed_clock):
    neural_input = InputEncoder().encode(
        {"type": "analysis", "content": "remember this"}, layers, np.random.default_rng(seed)
    )
    return propagate(neural_input, layers, np.random.default_rng(seed), clock=fixed_clock)


def test_signature_is_deterministic():
    vector = np.array([0.1, 0.5, 0.9, 0.3])
    fired = vector > 0.4

    assert activation_signature(vector, fired) == activation_signature(vector.copy(), fired.copy())
    assert len(activation_signature(vector, fired)) == 12
    assert activation_signature(vector, fired) != activation_signature(vector[::-1], fired[::-1])


def test_retain_promotes_only_novel_records(fixed_clock):
    store = AssociativeMemoryStore(clock=fixed_clock)

    assert store.retain(_record("plain", fixed_clock), novelty=0.7) is False
    assert store.retain(_record("novel", fixed_clock), novelty=0.8) is True

    assert store.get_short_term("plain") is not None
    assert store.get_short_term("novel") is not None
    assert store.get_long_term("plain") is None
    assert store.get_long_term("novel") is not None
    assert store.sizes() == {"short_term": 2, "long_term": 1, "patterns": 0}


def test_stores_evict_oldest_entry(fixed_clock):
    store = AssociativeMemoryStore(short_term_capacity=2, long_term_capacity=1, clock=fixed_clock)
    for index in range(3):
        store.retain(_record(f"r{index}", fixed_clock), novelty=1.0)

    assert [record.id for record in store.short_term] == ["r1", "r2"]
    assert [record.id for record in store.long_term] == ["r2"]


def test_empty_store_yields_no_memories(small_network, fixed_clock):
    layers, _ = small_network
    store = AssociativeMemoryStore(clock=fixed_clock)

    association = store.associate(_propagation(layers, 1, fixed_clock), 0.5, np.random.default_rng(0))

    assert association.memories == []
    assert [pattern.layer for pattern in association.patterns] == [layer.id for layer in layers]


def test_error_records_are_never_matched(small_network, fixed_clock):
    layers, _ = small_network
    store = AssociativeMemoryStore(clock=fixed_clock)
    error = store.record_error({"content": None}, ValueError("bad payload"), np.random.default_rng(3))

    assert error.kind == "error"
    assert error.error == "ValueError: bad payload"
    assert store.short_term == (error,)

    association = store.associate(_propagation(layers, 2, fixed_clock), 0.5, np.random.default_rng(0))
    assert association.memories == []


def test_matching_record_is_retrieved(small_network, fixed_clock):
    layers, _ = small_network
    store = AssociativeMemoryStore(clock=fixed_clock)
    first = _propagation(layers, 4, fixed_clock)
    association = store.associate(first, 0.5, np.random.default_rng(1))
    trace = MemoryTrace(association.id, association.strength, association.novelty, len(association.patterns), 0)
    record = analysis_record({"content": "remember this"}, first, association, trace, np.random.default_rng(2), fixed_clock())
    store.retain(record, association.novelty)

    again = store.associate(_propagation(layers, 4, fixed_clock), 0.5, np.random.default_rng(5))

    assert [match.reference_id for match in again.memories] == [record.id]
    assert again.memories[0].source == "short_term"
    assert again.memories[0].similarity > 0.3


def test_consolidated_patterns_match_exactly(small_network, fixed_clock):
    layers, _ = small_network
    store = AssociativeMemoryStore(clock=fixed_clock)
    propagation = _propagation(layers, 6, fixed_clock)
    association = store.associate(propagation, 0.5, np.random.default_rng(0))

    assert store.consolidate(association.patterns, np.random.default_rng(1)) == len(layers)
    assert store.consolidate(association.patterns, np.random.default_rng(1)) == 0

    again = store.associate(propagation, 0.5, np.random.default_rng(2))
    exact = [match for match in again.memories if match.similarity == 1.0]
    assert {match.layer for match in exact} == {layer.id for layer in layers}
    similarities = [match.similarity for match in again.memories]
    assert similarities == sorted(similarities, reverse=True)


def test_seed_patterns_respects_range(small_network, fixed_clock):
    layers, _ = small_network
    for seed in range(5):
        store = AssociativeMemoryStore(clock=fixed_clock)
        added = store.seed_patterns(layers, np.random.default_rng(seed), (5, 13))
        assert 5 <= added <= 13
        assert len(store.patterns) == added
        assert all(pattern.origin == "bootstrap" for pattern in store.patterns)


def test_pattern_store_is_bounded(small_network, fixed_clock):
    layers, _ = small_network
    store = AssociativeMemoryStore(pattern_capacity=3, clock=fixed_clock)
    store.seed_patterns(layers, np.random.default_rng(8), (10, 10))
    assert len(store.patterns) == 3


@pytest.mark.parametrize(
    "total, peak, gauge, expected",
    [
        (0.5, 0.5, 1.0, 0.5),
        (2.0, 0.5, 1.0, 0.8),
        (0.5, 0.9, 1.0, 0.7),
        (2.0, 0.9, 1.0, 1.0),
    ],
)
def test_novelty_rules(total, peak, gauge, expected):
    propagation = SimpleNamespace(total_activity=total, max_activation=peak, layer_count=2)
    assert compute_novelty(propagation, gauge) == pytest.approx(expected)


def test_strength_formula():
    propagation = SimpleNamespace(total_activity=1.0, max_activation=0.5, layer_count=5)
    assert compute_strength(propagation) == pytest.approx(0.3 + 0.3 + 0.2)

    saturated = SimpleNamespace(total_activity=10.0, max_activation=0.5, layer_count=5)
    assert compute_strength(saturated) == 1.0
