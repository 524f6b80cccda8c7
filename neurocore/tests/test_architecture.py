import numpy as np
import pytest

from neurocore.config import REFERENCE_LAYERS, LayerSpec
from neurocore.errors import ConfigurationError, EmptyArchitectureError
from neurocore.network.architecture import build_architecture, total_neurons
from neurocore.network.connections import connect, expected_connection_count


def test_layers_preserve_order_and_ranges(small_specs, rng):
    layers = build_architecture(small_specs, rng)

    assert [layer.id for layer in layers] == ["input", "hidden", "output"]
    assert [layer.order_index for layer in layers] == [0, 1, 2]
    assert [layer.activation_function for layer in layers] == ["linear", "relu", "softmax"]
    for layer in layers:
        for neuron in layer.neurons:
            assert 0.3 <= neuron.threshold < 0.8
            assert 0.005 <= neuron.learning_rate < 0.015
            assert neuron.last_fired_at is None


def test_neuron_ids_are_unique_across_layers(small_specs, rng):
    layers = build_architecture(small_specs, rng)
    ids = [neuron.id for layer in layers for neuron in layer.neurons]
    assert len(ids) == len(set(ids)) == total_neurons(layers)


def test_empty_layer_list_is_rejected(rng):
    with pytest.raises(EmptyArchitectureError):
        build_architecture([], rng)
    # EmptyArchitectureError is also a configuration problem
    with pytest.raises(ConfigurationError):
        build_architecture([], rng)


@pytest.mark.parametrize(
    "specs",
    [
        (LayerSpec("a", 0, "linear"),),
        (LayerSpec("a", 3, "linear"), LayerSpec("b", -2, "relu")),
        (LayerSpec("a", 3, "linear"), LayerSpec("a", 3, "relu")),
        (LayerSpec("a", 3, "mystery"),),
    ],
)
def test_invalid_specs_raise_configuration_error(specs, rng):
    with pytest.raises(ConfigurationError):
        build_architecture(specs, rng)


def test_connection_completeness(small_network):
    layers, connections = small_network
    sizes = [layer.size for layer in layers]

    assert len(connections) == expected_connection_count(sizes) == 4 * 6 + 6 * 3
    assert [matrix.shape for matrix in connections.matrices] == [(4, 6), (6, 3)]

    for source, target in zip(layers, layers[1:]):
        target_ids = {neuron.id for neuron in target.neurons}
        for neuron in source.neurons:
            reached = {connections.get(cid).to_neuron_id for cid in neuron.outgoing_connection_ids}
            assert reached == target_ids
    assert all(not neuron.outgoing_connection_ids for neuron in layers[-1].neurons)


def test_connection_weights_in_range(small_network):
    _, connections = small_network
    weights = np.array([connection.weight for connection in connections])
    assert np.all(weights >= -0.1) and np.all(weights < 0.1)
    assert all(connection.strength == abs(connection.weight) for connection in connections)


def test_reference_architecture_connection_count(rng):
    layers = build_architecture(REFERENCE_LAYERS, rng)
    connections = connect(layers, rng)
    assert len(connections) == 64 * 128 + 128 * 96 + 96 * 48 + 48 * 32
    assert total_neurons(layers) == 368
