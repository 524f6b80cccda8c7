"""Configuration helpers for the neural processing engine."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from typing import Mapping, Optional, Tuple

from .errors import ConfigurationError

LOGGER = logging.getLogger(__name__)

_FALSE_VALUES = {"0", "false", "no", "off"}
OTLP_PROTOCOLS = ("http/protobuf", "grpc")


def _env_int(raw: str | None, default: int) -> int:
    """Parse a positive integer, keeping ``default`` for missing or bad values."""

    if raw is None:
        return default
    try:
        parsed = int(raw)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def _env_fraction(raw: str | None, default: float) -> float:
    if raw is None:
        return default
    try:
        parsed = float(raw)
    except (TypeError, ValueError):
        return default
    return float(max(0.0, min(1.0, parsed)))


def _env_flag(raw: str | None) -> Optional[bool]:
    if raw is None or not raw.strip():
        return None
    return raw.strip().lower() not in _FALSE_VALUES


@dataclass(frozen=True, slots=True)
class LayerSpec:
    """Declarative description of a single network layer."""

    name: str
    neuron_count: int
    activation: str = "linear"

    @classmethod
    def parse(cls, raw: str) -> "LayerSpec":
        """Parse ``name:count[:activation]`` into a layer specification.

        Raises
        ------
        ConfigurationError
            If ``raw`` does not follow the format or the count is not an integer.
        """

        parts = [part.strip() for part in raw.split(":")]
        if len(parts) not in (2, 3) or not parts[0]:
            raise ConfigurationError(f"Layer spec '{raw}' must use the format NAME:COUNT[:ACTIVATION]")
        try:
            count = int(parts[1])
        except ValueError as exc:
            raise ConfigurationError(f"Layer spec '{raw}' has a non-integer neuron count") from exc
        activation = parts[2] if len(parts) == 3 and parts[2] else "linear"
        return cls(name=parts[0], neuron_count=count, activation=activation.lower())

    @classmethod
    def parse_many(cls, raw: str) -> Tuple["LayerSpec", ...]:
        """Parse a comma separated list such as ``input:16:linear,hidden:32:relu``."""

        return tuple(cls.parse(item) for item in raw.split(",") if item.strip())


REFERENCE_LAYERS: Tuple[LayerSpec, ...] = (
    LayerSpec("input_layer", 64, "linear"),
    LayerSpec("hidden_layer_1", 128, "relu"),
    LayerSpec("hidden_layer_2", 96, "tanh"),
    LayerSpec("associative_layer", 48, "sigmoid"),
    LayerSpec("output_layer", 32, "softmax"),
)


@dataclass(slots=True)
class NeuralEngineConfig:
    """Runtime configuration for :class:`~neurocore.processor.NeuralProcessingEngine`.

    ``seed``
        Seed for the engine's random generator.  ``None`` draws fresh entropy
        from the operating system, which makes runs non-reproducible.

    ``short_term_capacity`` / ``long_term_capacity`` / ``pattern_capacity``
        Upper bounds for the associative memory stores.  The oldest entry is
        evicted once a store is full.

    ``bootstrap_patterns``
        Inclusive range for the number of random activation patterns seeded
        into the pattern store during initialisation.
    """

    layers: Tuple[LayerSpec, ...] = REFERENCE_LAYERS
    seed: Optional[int] = None
    short_term_capacity: int = 256
    long_term_capacity: int = 1024
    pattern_capacity: int = 512
    bootstrap_patterns: Tuple[int, int] = (5, 13)
    activity_baseline: float = 0.5

    def __post_init__(self) -> None:
        for name in ("short_term_capacity", "long_term_capacity", "pattern_capacity"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be a positive integer")
        low, high = self.bootstrap_patterns
        if low > high:
            self.bootstrap_patterns = (high, low)
        self.activity_baseline = float(max(0.0, min(1.0, self.activity_baseline)))

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        prefix: str = "NEURAL_",
    ) -> "NeuralEngineConfig":
        """Create a configuration object from environment variables.

        ``NEURAL_LAYERS`` accepts a comma separated list of
        ``name:count:activation`` entries, e.g. ``input:16:linear,hidden:32:relu``.
        Malformed layer lists raise :class:`~neurocore.errors.ConfigurationError`;
        malformed numbers fall back to their defaults.
        """

        if env is None:
            env = os.environ

        raw_layers = env.get(f"{prefix}LAYERS")
        layers = LayerSpec.parse_many(raw_layers) if raw_layers and raw_layers.strip() else REFERENCE_LAYERS

        seed: Optional[int] = None
        seed_raw = (env.get(f"{prefix}SEED") or "").strip()
        if seed_raw:
            try:
                seed = int(seed_raw)
            except ValueError:
                LOGGER.warning("Ignoring non-integer %sSEED=%r", prefix, seed_raw)

        return cls(
            layers=layers,
            seed=seed,
            short_term_capacity=_env_int(env.get(f"{prefix}SHORT_TERM_CAPACITY"), 256),
            long_term_capacity=_env_int(env.get(f"{prefix}LONG_TERM_CAPACITY"), 1024),
            pattern_capacity=_env_int(env.get(f"{prefix}PATTERN_CAPACITY"), 512),
            bootstrap_patterns=(
                _env_int(env.get(f"{prefix}BOOTSTRAP_MIN"), 5),
                _env_int(env.get(f"{prefix}BOOTSTRAP_MAX"), 13),
            ),
            activity_baseline=_env_fraction(env.get(f"{prefix}ACTIVITY_BASELINE"), 0.5),
        )


def load_engine_config(env: Mapping[str, str] | None = None) -> NeuralEngineConfig:
    """Read :class:`NeuralEngineConfig` from the environment without raising.

    A malformed ``NEURAL_LAYERS`` value is logged and replaced by the reference
    architecture so that importing the package never fails on bad settings.
    """

    try:
        return NeuralEngineConfig.from_env(env)
    except ConfigurationError as exc:
        LOGGER.warning("Invalid engine configuration in environment (%s); using the reference architecture", exc)
        return NeuralEngineConfig()


@dataclass(slots=True)
class TelemetryConfig:
    """Tracing settings for the engine.

    Tracing is on when ``OTEL_ENABLED`` is truthy or an OTLP endpoint is set,
    unless ``OTEL_ENABLED`` explicitly disables it.
    """

    enabled: bool = False
    service_name: str = "neurocore"
    environment: str = "development"
    exporter_endpoint: Optional[str] = None
    exporter_protocol: str = "http/protobuf"
    sampling_ratio: float = 0.1

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        prefix: str = "OTEL_",
    ) -> "TelemetryConfig":
        if env is None:
            env = os.environ

        endpoint = env.get(f"{prefix}EXPORTER_OTLP_ENDPOINT") or None
        flag = _env_flag(env.get(f"{prefix}ENABLED"))
        protocol = (env.get(f"{prefix}EXPORTER_OTLP_PROTOCOL") or "http/protobuf").strip().lower()
        if protocol not in OTLP_PROTOCOLS:
            LOGGER.warning("Unsupported OTLP protocol %r; using http/protobuf", protocol)
            protocol = "http/protobuf"

        return cls(
            enabled=bool(endpoint) if flag is None else flag,
            service_name=env.get(f"{prefix}SERVICE_NAME") or "neurocore",
            environment=env.get("DEPLOYMENT_ENV") or "development",
            exporter_endpoint=endpoint,
            exporter_protocol=protocol,
            sampling_ratio=_env_fraction(env.get(f"{prefix}TRACES_SAMPLER_ARG"), 0.1),
        )


DEFAULT_ENGINE_CONFIG = load_engine_config()
DEFAULT_TELEMETRY_CONFIG = TelemetryConfig.from_env()
