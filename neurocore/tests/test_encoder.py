import numpy as np
import pytest

from neurocore.errors import InvalidInputError
from neurocore.network.architecture import build_architecture
from neurocore.schemas import NeuralRequest
from neurocore.simulation.encoder import (
    InputEncoder,
    coerce_request,
    emotional_signal,
    semantic_signal,
    tokenize,
)
from neurocore.simulation.metrics import StaticMetricsProvider


@pytest.fixture()
def layers(small_specs, rng):
    return build_architecture(small_specs, rng)


def test_encode_produces_bounded_signal(layers):
    encoder = InputEncoder(StaticMetricsProvider(load_average=0.5, cpu_count=2))
    request = {
        "type": "analysis",
        "content": "A great result with an excellent outcome, but one problem remains.",
        "priority": 0.9,
        "keywords": ["result", "outcome"],
    }

    neural_input = encoder.encode(request, layers, np.random.default_rng(3))

    assert neural_input.encoded.type == "analysis"
    assert 0.0 <= neural_input.encoded.complexity <= 1.0
    assert 0.0 <= neural_input.intensity <= 1.0
    assert list(neural_input.distribution) == [layer.id for layer in layers]
    assert all(0.25 <= weight < 0.75 for weight in neural_input.distribution.values())
    assert neural_input.request["priority"] == 0.9
    assert neural_input.system["load_ratio"] == pytest.approx(0.25)


def test_complexity_respects_formula_bounds(layers):
    encoder = InputEncoder()
    long_text = "word " * 400  # 2000 characters, length term saturates at 0.5
    keywords = [f"k{i}" for i in range(20)]  # keyword term saturates at 0.3

    neural_input = encoder.encode({"content": long_text, "keywords": keywords}, layers, np.random.default_rng(0))

    assert 0.8 <= neural_input.encoded.complexity <= 1.0
    assert neural_input.encoded.type == "generic"


def test_intensity_formula_with_default_priority(layers):
    encoder = InputEncoder()
    neural_input = encoder.encode({"type": "ping"}, layers, np.random.default_rng(11))

    complexity = neural_input.encoded.complexity
    base = 0.2 + 0.4 * complexity + 0.3 * 0.5
    assert complexity < 0.2  # only jitter contributes without content
    assert base <= neural_input.intensity < base + 0.1


def test_emotional_signal_scoring():
    words = tokenize("Great, great, excellent! Amazing wonderful fantastic perfect. One bad problem.")
    signal = emotional_signal(words)

    assert signal.positive == pytest.approx(1.0)  # seven hits capped at 1.0
    assert signal.negative == pytest.approx(0.4)
    assert signal.neutral == pytest.approx(0.0)

    neutral = emotional_signal(tokenize("the cat sat on the mat"))
    assert neutral.positive == neutral.negative == 0.0
    assert neutral.neutral == 1.0


def test_semantic_signal():
    signal = semantic_signal(tokenize("the cat and the hat"))
    assert signal.word_count == 5
    assert signal.unique_words == 4
    assert signal.lexical_density == pytest.approx(0.8)
    assert signal.average_word_length == pytest.approx(3.0)

    empty = semantic_signal([])
    assert empty.word_count == 0 and empty.lexical_density == 0.0


@pytest.mark.parametrize(
    "payload",
    [
        None,
        {},
        {"content": "   "},
        {"priority": 0.4},
        {"type": "x", "priority": 1.5},
        "plain string",
    ],
)
def test_invalid_requests(payload):
    with pytest.raises(InvalidInputError):
        coerce_request(payload)


def test_coerce_accepts_models():
    model = NeuralRequest(type="query", keywords=["a", " ", "b "])
    assert coerce_request(model) is model
    assert model.keywords == ["a", "b"]
