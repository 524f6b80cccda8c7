"""Identifier helpers that draw from the injected random generator."""

from __future__ import annotations

import uuid

import numpy as np


def random_uuid(rng: np.random.Generator) -> str:
    """Return a version-4 UUID string built from ``rng`` so seeded runs repeat."""

    return str(uuid.UUID(bytes=rng.bytes(16), version=4))


__all__ = ["random_uuid"]
