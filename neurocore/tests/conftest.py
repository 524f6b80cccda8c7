import sys
from datetime import datetime, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import numpy as np
import pytest

from neurocore.config import LayerSpec, NeuralEngineConfig
from neurocore.network.architecture import build_architecture
from neurocore.network.connections import connect
from neurocore.processor import NeuralProcessingEngine
from neurocore.simulation.metrics import StaticMetricsProvider


FIXED_TIME = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture()
def fixed_clock():
    return lambda: FIXED_TIME


@pytest.fixture()
def small_specs() -> tuple[LayerSpec, ...]:
    return (
        LayerSpec("input", 4, "linear"),
        LayerSpec("hidden", 6, "relu"),
        LayerSpec("output", 3, "softmax"),
    )


@pytest.fixture()
def small_network(small_specs, rng):
    """Build and wire the three-layer test network."""

    layers = build_architecture(small_specs, rng)
    connections = connect(layers, rng)
    return layers, connections


@pytest.fixture()
def engine(fixed_clock) -> NeuralProcessingEngine:
    config = NeuralEngineConfig(
        layers=(LayerSpec("input", 4, "linear"), LayerSpec("hidden", 4, "relu")),
        seed=42,
        short_term_capacity=16,
        long_term_capacity=16,
        pattern_capacity=32,
    )
    return NeuralProcessingEngine(config, metrics=StaticMetricsProvider(), clock=fixed_clock)
