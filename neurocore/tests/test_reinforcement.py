from types import SimpleNamespace

import pytest

from neurocore.simulation.memory import AssociationResult, MemoryMatch, PatternSummary
from neurocore.simulation.metrics import StaticMetricsProvider
from neurocore.simulation.reinforcement import ActivityGauge, CapabilityAdapter, CapabilityVector


def _association(*, strength=0.5, novelty=0.5, firing_rate=0.2, memories=()):
    pattern = PatternSummary("hidden", firing_rate, 0.4, 0.6, "0" * 12)
    return AssociationResult(
        id="assoc",
        propagation_id="prop",
        patterns=[pattern],
        memories=list(memories),
        novelty=novelty,
        strength=strength,
    )


def test_quiet_cycle_only_adjusts_adaptive_learning():
    adapter = CapabilityAdapter(StaticMetricsProvider(load_average=0.0, cpu_count=4))
    updated = adapter.reinforce(_association(), CapabilityVector())

    assert updated.adaptive_learning == pytest.approx(0.502)
    assert updated.neural_plasticity == 0.5
    assert updated.pattern_recognition == 0.5
    assert updated.associative_memory == 0.5
    assert updated.emergent_intelligence == 0.5


def test_active_cycle_nudges_every_capability():
    adapter = CapabilityAdapter(StaticMetricsProvider(load_average=2.0, cpu_count=4))
    association = _association(
        strength=0.9,
        novelty=0.8,
        firing_rate=0.75,
        memories=[MemoryMatch(source="pattern", reference_id="p1", similarity=0.9, layer="hidden")],
    )

    updated = adapter.reinforce(association, CapabilityVector())

    assert updated.neural_plasticity == pytest.approx(0.505)
    assert updated.pattern_recognition == pytest.approx(0.503)
    assert updated.associative_memory == pytest.approx(0.502)
    assert updated.emergent_intelligence == pytest.approx(0.501)
    assert updated.adaptive_learning == pytest.approx(0.501)  # half the cores are busy


def test_saturated_host_skips_adaptive_learning():
    adapter = CapabilityAdapter(StaticMetricsProvider(load_average=8.0, cpu_count=2))
    updated = adapter.reinforce(_association(), CapabilityVector())
    assert updated.adaptive_learning == 0.5


def test_capabilities_never_exceed_one():
    adapter = CapabilityAdapter(StaticMetricsProvider())
    association = _association(
        strength=1.0,
        novelty=1.0,
        firing_rate=1.0,
        memories=[MemoryMatch(source="short_term", reference_id="r", similarity=0.5)],
    )
    capabilities = CapabilityVector()
    for _ in range(500):
        capabilities = adapter.reinforce(association, capabilities)

    assert all(0.0 <= value <= 1.0 for value in capabilities.as_dict().values())
    assert capabilities.neural_plasticity == 1.0


def test_nudge_caps_single_step():
    vector = CapabilityVector().nudge("pattern_recognition", 0.5)
    assert vector.pattern_recognition == pytest.approx(0.505)
    assert CapabilityVector().nudge("pattern_recognition", -1.0).pattern_recognition == 0.5


def test_activity_gauge_moving_average():
    gauge = ActivityGauge(0.5)

    assert gauge.update(total_activity=40.0, layer_count=2) == pytest.approx(0.8 * 0.5 + 0.2 * 0.4)
    assert gauge.update(total_activity=0.0, layer_count=2) == pytest.approx(0.8 * 0.48)
    assert ActivityGauge(3.0).value == 1.0


def test_apply_updates_gauge_after_reinforcement():
    adapter = CapabilityAdapter(StaticMetricsProvider())
    gauge = ActivityGauge(0.5)
    propagation = SimpleNamespace(total_activity=10.0, layer_count=2)

    updated = adapter.apply(_association(), propagation, CapabilityVector(), gauge)

    assert gauge.value == pytest.approx(0.8 * 0.5 + 0.2 * 0.1)
    assert updated.adaptive_learning > 0.5
