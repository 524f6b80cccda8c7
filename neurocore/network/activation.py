"""
activation
==========

Activation functions applied to a neuron's raw input during forward
propagation.  Every function accepts either a Python float or a NumPy array
and returns the same shape.  Results are *not* clamped here; the propagation
engine clamps the final activation into ``[0, 1]``.

``linear``
    Identity, used by the input layer.

``relu``
    ``max(0, x)``.

``sigmoid``
    A logistic curve re-centred on ``0.5``: ``1 / (1 + exp(-(6x - 3)))``.  Raw
    inputs live roughly in ``[0, 1]`` so the steep centre of the curve falls
    inside that window.

``tanh``
    ``tanh(2x - 1)``, again centred on ``0.5``.  Negative outputs are clamped
    to zero by the caller.

``softmax``
    ``exp(x) / (exp(x) + 1)`` evaluated *per neuron*.  This is not a
    normalised softmax across the layer: every neuron is squashed
    independently and layer totals do not sum to one.
"""

from __future__ import annotations

from typing import Callable, Dict, Union

import numpy as np
import numpy.typing as npt

from ..errors import ConfigurationError

Numeric = Union[float, npt.NDArray[np.float64]]
ActivationFn = Callable[[Numeric], Numeric]


def linear(x: Numeric) -> Numeric:
    return x


def relu(x: Numeric) -> Numeric:
    return np.maximum(0.0, x)


def sigmoid(x: Numeric) -> Numeric:
    return 1.0 / (1.0 + np.exp(-(6.0 * np.asarray(x, dtype=float) - 3.0)))


def tanh(x: Numeric) -> Numeric:
    return np.tanh(2.0 * np.asarray(x, dtype=float) - 1.0)


def softmax_like(x: Numeric) -> Numeric:
    # numerically stable form of e^x / (e^x + 1)
    return 1.0 / (1.0 + np.exp(-np.asarray(x, dtype=float)))


ACTIVATION_FUNCTIONS: Dict[str, ActivationFn] = {
    "linear": linear,
    "relu": relu,
    "sigmoid": sigmoid,
    "tanh": tanh,
    "softmax": softmax_like,
}

_ALIASES: Dict[str, str] = {
    "identity": "linear",
    "none": "linear",
    "softmax_like": "softmax",
    "softmax-like": "softmax",
    "logistic": "sigmoid",
}


def canonical_activation_name(name: str) -> str:
    """Return the registry key for ``name``.

    Raises
    ------
    ConfigurationError
        If ``name`` does not match a known activation or alias.
    """

    raw = (name or "").strip().lower()
    raw = _ALIASES.get(raw, raw)
    if raw not in ACTIVATION_FUNCTIONS:
        raise ConfigurationError(
            f"Unsupported activation function '{name}' (expected one of {sorted(ACTIVATION_FUNCTIONS)})"
        )
    return raw


def get_activation_function(name: str) -> ActivationFn:
    """Look up the callable registered under ``name`` (aliases allowed)."""

    return ACTIVATION_FUNCTIONS[canonical_activation_name(name)]


def apply_activation(value: Numeric, name: str) -> Numeric:
    """Evaluate the activation ``name`` on ``value``."""

    result = get_activation_function(name)(value)
    if np.ndim(result) == 0:
        return float(result)
    return result


__all__ = [
    "ACTIVATION_FUNCTIONS",
    "apply_activation",
    "canonical_activation_name",
    "get_activation_function",
    "linear",
    "relu",
    "sigmoid",
    "softmax_like",
    "tanh",
]
