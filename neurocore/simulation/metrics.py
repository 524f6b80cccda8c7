"""Host metrics sources injected into the encoder and the capability adapter."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MetricsSnapshot:
    """Coarse view of host load used to modulate adaptation."""

    load_average: float
    cpu_count: int
    process_time: float

    @property
    def load_ratio(self) -> float:
        """Load average normalised by core count and clamped to ``[0, 1]``."""

        cores = max(self.cpu_count, 1)
        return float(max(0.0, min(1.0, self.load_average / cores)))

    @property
    def headroom(self) -> float:
        return 1.0 - self.load_ratio

    def as_dict(self) -> dict[str, float]:
        return {
            "load_average": self.load_average,
            "cpu_count": float(self.cpu_count),
            "process_time": self.process_time,
            "load_ratio": self.load_ratio,
        }


@runtime_checkable
class MetricsProvider(Protocol):
    """Anything able to produce a :class:`MetricsSnapshot` on demand."""

    def snapshot(self) -> MetricsSnapshot:  # pragma: no cover - protocol
        ...


class SystemMetricsProvider:
    """Read load information from the running host."""

    def snapshot(self) -> MetricsSnapshot:
        try:
            load = float(os.getloadavg()[0])
        except (AttributeError, OSError):
            # os.getloadavg is unavailable on Windows
            LOGGER.debug("Load average unavailable on this platform; assuming idle host")
            load = 0.0
        return MetricsSnapshot(
            load_average=load,
            cpu_count=os.cpu_count() or 1,
            process_time=time.process_time(),
        )


@dataclass(frozen=True, slots=True)
class StaticMetricsProvider:
    """Return a fixed snapshot; handy for tests and reproducible runs."""

    load_average: float = 0.0
    cpu_count: int = 1
    process_time: float = 0.0

    def snapshot(self) -> MetricsSnapshot:
        return MetricsSnapshot(
            load_average=self.load_average,
            cpu_count=self.cpu_count,
            process_time=self.process_time,
        )


__all__ = ["MetricsProvider", "MetricsSnapshot", "StaticMetricsProvider", "SystemMetricsProvider"]
