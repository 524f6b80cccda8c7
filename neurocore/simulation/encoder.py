"""Turn incoming requests into normalised neural input signals."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Optional, Sequence

import numpy as np
from pydantic import ValidationError

from ..errors import InvalidInputError
from ..network.architecture import Layer
from ..schemas import NeuralRequest
from ._identifiers import random_uuid
from .metrics import MetricsProvider, MetricsSnapshot, StaticMetricsProvider

LOGGER = logging.getLogger(__name__)

POSITIVE_WORDS: FrozenSet[str] = frozenset(
    {
        "good",
        "great",
        "excellent",
        "amazing",
        "happy",
        "love",
        "wonderful",
        "fantastic",
        "success",
        "thanks",
        "perfect",
        "brilliant",
    }
)
NEGATIVE_WORDS: FrozenSet[str] = frozenset(
    {
        "bad",
        "terrible",
        "awful",
        "sad",
        "hate",
        "horrible",
        "problem",
        "error",
        "fail",
        "failure",
        "wrong",
        "angry",
    }
)

_WORD_PATTERN = re.compile(r"[\w']+", re.UNICODE)
DEFAULT_PRIORITY = 0.5
DEFAULT_TYPE = "generic"


@dataclass(frozen=True, slots=True)
class EmotionalSignal:
    positive: float
    negative: float
    neutral: float


@dataclass(frozen=True, slots=True)
class SemanticSignal:
    word_count: int
    average_word_length: float
    unique_words: int
    lexical_density: float


@dataclass(frozen=True, slots=True)
class EncodedSignal:
    """Sub-signals extracted from the request text."""

    type: str
    complexity: float
    emotional: EmotionalSignal
    semantic: SemanticSignal


@dataclass(frozen=True)
class NeuralInput:
    """Normalised input owned by a single propagation cycle."""

    id: str
    encoded: EncodedSignal
    intensity: float
    distribution: Dict[str, float]
    request: Dict[str, Any] = field(default_factory=dict)
    system: Dict[str, float] = field(default_factory=dict)


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return float(max(low, min(high, value)))


def tokenize(text: str) -> list[str]:
    return _WORD_PATTERN.findall(text.lower())


def emotional_signal(words: Sequence[str]) -> EmotionalSignal:
    """Score ``words`` against the fixed positive/negative vocabularies."""

    positive_hits = sum(1 for word in words if word in POSITIVE_WORDS)
    negative_hits = sum(1 for word in words if word in NEGATIVE_WORDS)
    positive = min(1.0, 0.2 * positive_hits)
    negative = min(1.0, 0.2 * negative_hits)
    return EmotionalSignal(positive=positive, negative=negative, neutral=1.0 - max(positive, negative))


def semantic_signal(words: Sequence[str]) -> SemanticSignal:
    total = len(words)
    if total == 0:
        return SemanticSignal(word_count=0, average_word_length=0.0, unique_words=0, lexical_density=0.0)
    unique = len(set(words))
    return SemanticSignal(
        word_count=total,
        average_word_length=float(sum(len(word) for word in words) / total),
        unique_words=unique,
        lexical_density=float(unique / total),
    )


def coerce_request(request: Any) -> NeuralRequest:
    """Validate ``request`` into a :class:`NeuralRequest`.

    Raises
    ------
    InvalidInputError
        If the payload is missing, malformed or carries neither content nor an
        explicit type.
    """

    if request is None:
        raise InvalidInputError("Request payload is required")
    if isinstance(request, NeuralRequest):
        parsed = request
    elif isinstance(request, Mapping):
        try:
            parsed = NeuralRequest.model_validate(dict(request))
        except ValidationError as exc:
            raise InvalidInputError(f"Request payload is invalid: {exc.errors()[0]['msg']}") from exc
    else:
        raise InvalidInputError(f"Unsupported request payload of type {type(request).__name__}")
    if parsed.type is None and parsed.content is None:
        raise InvalidInputError("Request must provide either content or an explicit type")
    return parsed


class InputEncoder:
    """Encode requests into :class:`NeuralInput` signals.

    The encoder is stateless apart from the injected metrics provider; all
    jitter is drawn from the generator passed to :meth:`encode`.
    """

    def __init__(self, metrics: Optional[MetricsProvider] = None) -> None:
        self.metrics = metrics or StaticMetricsProvider()

    def encode(self, request: Any, layers: Sequence[Layer], rng: np.random.Generator) -> NeuralInput:
        parsed = coerce_request(request)
        text = parsed.content or ""
        words = tokenize(text)

        complexity = _clamp(
            min(0.5, len(text) / 500.0)
            + min(0.3, len(parsed.keywords) * 0.03)
            + rng.random() * 0.2
        )
        priority = DEFAULT_PRIORITY if parsed.priority is None else parsed.priority
        intensity = _clamp(0.2 + 0.4 * complexity + 0.3 * priority + rng.random() * 0.1)

        weights = rng.uniform(0.25, 0.75, size=len(layers))
        distribution = {layer.id: float(weight) for layer, weight in zip(layers, weights)}

        snapshot: MetricsSnapshot = self.metrics.snapshot()
        encoded = EncodedSignal(
            type=parsed.type or DEFAULT_TYPE,
            complexity=complexity,
            emotional=emotional_signal(words),
            semantic=semantic_signal(words),
        )
        neural_input = NeuralInput(
            id=random_uuid(rng),
            encoded=encoded,
            intensity=intensity,
            distribution=distribution,
            request=parsed.snapshot(),
            system=snapshot.as_dict(),
        )
        LOGGER.debug(
            "Encoded %s request (complexity=%.3f, intensity=%.3f)",
            encoded.type,
            complexity,
            intensity,
        )
        return neural_input


__all__ = [
    "EmotionalSignal",
    "EncodedSignal",
    "InputEncoder",
    "NEGATIVE_WORDS",
    "NeuralInput",
    "POSITIVE_WORDS",
    "SemanticSignal",
    "coerce_request",
    "emotional_signal",
    "semantic_signal",
    "tokenize",
]
