import math

import numpy as np
import pytest

from neurocore.errors import ConfigurationError
from neurocore.network.activation import (
    ACTIVATION_FUNCTIONS,
    apply_activation,
    canonical_activation_name,
)


def test_reference_formulas():
    assert apply_activation(0.4, "linear") == pytest.approx(0.4)
    assert apply_activation(-0.3, "relu") == 0.0
    assert apply_activation(0.3, "relu") == pytest.approx(0.3)
    assert apply_activation(0.5, "sigmoid") == pytest.approx(0.5)
    assert apply_activation(0.2, "sigmoid") == pytest.approx(1.0 / (1.0 + math.exp(-(6 * 0.2 - 3))))
    assert apply_activation(0.5, "tanh") == pytest.approx(0.0)
    assert apply_activation(0.8, "tanh") == pytest.approx(math.tanh(0.6))
    assert apply_activation(0.7, "softmax") == pytest.approx(math.exp(0.7) / (math.exp(0.7) + 1.0))


def test_softmax_is_per_neuron_not_normalised():
    values = np.array([0.2, 0.4, 0.6, 0.8])
    result = apply_activation(values, "softmax")

    expected = np.exp(values) / (np.exp(values) + 1.0)
    assert np.allclose(result, expected)
    assert not math.isclose(float(np.sum(result)), 1.0)


def test_vector_inputs_keep_shape():
    values = np.linspace(0.0, 1.0, 7)
    for name in ACTIVATION_FUNCTIONS:
        assert np.shape(apply_activation(values, name)) == values.shape


def test_aliases_and_unknown_names():
    assert canonical_activation_name("Identity") == "linear"
    assert canonical_activation_name("softmax-like") == "softmax"
    with pytest.raises(ConfigurationError):
        canonical_activation_name("swish")
