from neurocore.simulation.memory import AssociationResult, MemoryMatch, PatternSummary
from neurocore.simulation.output import synthesize


def test_synthesize_summarises_association(fixed_clock):
    association = AssociationResult(
        id="assoc-1",
        propagation_id="prop-1",
        patterns=[
            PatternSummary("input", 0.25, 0.3, 0.5, "a" * 12),
            PatternSummary("hidden", 0.75, 0.6, 0.9, "b" * 12),
        ],
        memories=[MemoryMatch(source="short_term", reference_id="rec-1", similarity=0.6)],
        novelty=0.8,
        strength=0.7,
    )

    output = synthesize(association, clock=fixed_clock)

    assert output.timestamp == fixed_clock()
    assert "2 activation patterns" in output.content
    assert "1 associated memories" in output.content
    assert fixed_clock().isoformat() in output.content
    assert output.summary["dominant_layer"] == "hidden"
    assert output.summary["pattern_count"] == 2
    assert output.summary["memory_count"] == 1
    assert output.memory_trace.association_id == "assoc-1"
    assert output.memory_trace.novelty == 0.8
    assert output.memory_trace.strength == 0.7


def test_synthesize_without_patterns(fixed_clock):
    association = AssociationResult("a", "p", patterns=[], memories=[], novelty=0.5, strength=0.3)
    output = synthesize(association, clock=fixed_clock)

    assert output.summary["dominant_layer"] is None
    assert output.memory_trace.pattern_count == 0
