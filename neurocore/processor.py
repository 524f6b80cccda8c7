"""Neural processing engine: lifecycle, request cycle and status reporting."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .config import DEFAULT_ENGINE_CONFIG, DEFAULT_TELEMETRY_CONFIG, LayerSpec, NeuralEngineConfig
from .errors import EngineStateError, InvalidInputError, ProcessingError
from .network.architecture import Layer, build_architecture, total_neurons
from .network.connections import ConnectionSet, connect
from .schemas import ArchitectureSummary, CapabilitySnapshot, MemorySummary, NeuralRequest, StatusSnapshot
from .simulation.encoder import InputEncoder, NeuralInput
from .simulation.memory import AssociationResult, AssociativeMemoryStore, analysis_record
from .simulation.metrics import MetricsProvider, SystemMetricsProvider
from .simulation.output import NeuralOutput, synthesize
from .simulation.propagation import PropagationResult, propagate
from .simulation.reinforcement import ActivityGauge, CapabilityAdapter, CapabilityVector
from .telemetry import TelemetryManager, configure_telemetry

LOGGER = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EngineState(str, Enum):
    """Lifecycle states of :class:`NeuralProcessingEngine`."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    ACTIVE = "active"
    PROCESSING = "processing"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


MODULE_READY = "module-ready"
REQUEST_PROCESSED = "request-processed"
MODULE_SHUTDOWN = "module-shutdown"
EVENTS: Tuple[str, ...] = (MODULE_READY, REQUEST_PROCESSED, MODULE_SHUTDOWN)


@dataclass(frozen=True, slots=True)
class InitSummary:
    layer_count: int
    neuron_count: int
    connection_count: int
    bootstrap_patterns: int


@dataclass(frozen=True)
class ProcessingResult:
    """Everything produced by one request cycle."""

    neural_input: NeuralInput
    propagation: PropagationResult
    association: AssociationResult
    output: NeuralOutput
    neural_activity: float
    timestamp: datetime
    record_id: str


def _request_snapshot(request: Any) -> Dict[str, Any]:
    if request is None:
        return {}
    if isinstance(request, NeuralRequest):
        return request.snapshot()
    if isinstance(request, Mapping):
        return {str(key): value for key, value in request.items()}
    return {"payload": repr(request)}


class NeuralProcessingEngine:
    """Layered neural simulation with associative memory.

    The engine owns the network topology, the memory store, the capability
    vector and the activity gauge.  All public operations take one re-entrant
    lock, so concurrent callers on different threads are serialised and see
    the same results as sequential calls.

    Randomness comes from a single ``numpy.random.Generator``; pass ``rng`` (or
    set ``config.seed``) for reproducible runs.
    """

    def __init__(
        self,
        config: NeuralEngineConfig | None = None,
        *,
        rng: np.random.Generator | None = None,
        metrics: MetricsProvider | None = None,
        clock: Callable[[], datetime] | None = None,
        telemetry: TelemetryManager | None = None,
    ) -> None:
        self.config = config or DEFAULT_ENGINE_CONFIG
        self._rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self._clock = clock or _utcnow
        metrics = metrics or SystemMetricsProvider()
        self._encoder = InputEncoder(metrics)
        self._adapter = CapabilityAdapter(metrics)
        self._telemetry = telemetry if telemetry is not None else configure_telemetry(DEFAULT_TELEMETRY_CONFIG)
        self._lock = threading.RLock()
        self._observers: Dict[str, List[Callable[[Any], None]]] = {event: [] for event in EVENTS}

        self._state = EngineState.UNINITIALIZED
        self._layers: List[Layer] = []
        self._connections = ConnectionSet()
        self._memory = self._new_memory_store()
        self._capabilities = CapabilityVector()
        self._gauge = ActivityGauge(self.config.activity_baseline)
        self._summary: Optional[InitSummary] = None
        self._processed = 0
        self._failed = 0

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def initialized(self) -> bool:
        return self._state in (EngineState.ACTIVE, EngineState.PROCESSING)

    @property
    def layers(self) -> Tuple[Layer, ...]:
        return tuple(self._layers)

    @property
    def connections(self) -> ConnectionSet:
        return self._connections

    @property
    def memory(self) -> AssociativeMemoryStore:
        return self._memory

    @property
    def capabilities(self) -> CapabilityVector:
        return self._capabilities

    @property
    def neural_activity(self) -> float:
        return self._gauge.value

    @property
    def telemetry(self) -> TelemetryManager:
        return self._telemetry

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, event: str, callback: Callable[[Any], None]) -> None:
        """Register ``callback`` for one of :data:`EVENTS`."""

        if event not in self._observers:
            raise ValueError(f"Unknown event '{event}' (expected one of {list(EVENTS)})")
        with self._lock:
            self._observers[event].append(callback)

    def unsubscribe(self, event: str, callback: Callable[[Any], None]) -> None:
        with self._lock:
            try:
                self._observers[event].remove(callback)
            except (KeyError, ValueError):
                return

    def _emit(self, event: str, payload: Any) -> None:
        """Deliver ``payload`` to observers; callers must not hold the engine lock."""

        with self._lock:
            callbacks = list(self._observers.get(event, ()))
        for callback in callbacks:
            try:
                callback(payload)
            except Exception as exc:
                LOGGER.warning("Observer for '%s' failed: %s", event, exc)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _new_memory_store(self) -> AssociativeMemoryStore:
        return AssociativeMemoryStore(
            short_term_capacity=self.config.short_term_capacity,
            long_term_capacity=self.config.long_term_capacity,
            pattern_capacity=self.config.pattern_capacity,
            clock=self._clock,
        )

    def initialize(self, layers: Sequence[LayerSpec] | None = None) -> InitSummary:
        """Build the network, wire it and seed the pattern store.

        ``layers`` overrides ``config.layers``.  On failure the engine stays
        ``UNINITIALIZED`` with no partially built state and the error is
        re-raised.  Calling this on an active engine returns the existing
        summary without rebuilding anything.
        """

        with self._lock:
            if self._state in (EngineState.SHUTTING_DOWN, EngineState.STOPPED):
                raise EngineStateError("Engine has been shut down and cannot be re-initialised")
            if self._state in (EngineState.ACTIVE, EngineState.PROCESSING) and self._summary is not None:
                LOGGER.info("Neural engine already initialised; keeping existing network")
                return self._summary

            specs = tuple(self.config.layers if layers is None else layers)
            self._state = EngineState.INITIALIZING
            LOGGER.info("Initialising neural engine with %d layers", len(specs))
            try:
                with self._telemetry.span("neurocore.initialize", layers=len(specs)) as span:
                    built = build_architecture(specs, self._rng)
                    connections = connect(built, self._rng, clock=self._clock)
                    memory = self._new_memory_store()
                    seeded = memory.seed_patterns(built, self._rng, self.config.bootstrap_patterns)
                    span.set_attribute("neurocore.bootstrap_patterns", seeded)
            except Exception as exc:
                self._state = EngineState.UNINITIALIZED
                LOGGER.error("Neural engine initialisation failed: %s", exc)
                raise

            self._layers = built
            self._connections = connections
            self._memory = memory
            self._capabilities = CapabilityVector()
            self._gauge = ActivityGauge(self.config.activity_baseline)
            self._summary = InitSummary(
                layer_count=len(built),
                neuron_count=total_neurons(built),
                connection_count=len(connections),
                bootstrap_patterns=seeded,
            )
            self._state = EngineState.ACTIVE
            LOGGER.info(
                "Neural engine ready: %d layers, %d neurons, %d connections, %d bootstrap patterns",
                self._summary.layer_count,
                self._summary.neuron_count,
                self._summary.connection_count,
                seeded,
            )
            summary = self._summary
        self._emit(MODULE_READY, summary)
        return summary

    def shutdown(self) -> None:
        """Stop accepting requests and publish the final status."""

        with self._lock:
            if self._state is EngineState.STOPPED:
                return
            self._state = EngineState.SHUTTING_DOWN
            final = self.get_status()
            self._telemetry.shutdown()
            self._state = EngineState.STOPPED
            LOGGER.info(
                "Neural engine stopped after %d requests (%d failed); activity=%.4f",
                self._processed,
                self._failed,
                final.neural_activity,
            )
        self._emit(MODULE_SHUTDOWN, final)

    # ------------------------------------------------------------------
    # Request cycle
    # ------------------------------------------------------------------

    def _run_cycle(self, request: Any) -> ProcessingResult:
        neural_input = self._encoder.encode(request, self._layers, self._rng)
        propagation = propagate(neural_input, self._layers, self._rng, clock=self._clock)
        association = self._memory.associate(propagation, self._gauge.value, self._rng)
        output = synthesize(association, clock=self._clock)

        record = analysis_record(
            neural_input.request,
            propagation,
            association,
            output.memory_trace,
            self._rng,
            output.timestamp,
        )
        if self._memory.retain(record, association.novelty):
            self._memory.consolidate(association.patterns, self._rng)
        self._capabilities = self._adapter.apply(association, propagation, self._capabilities, self._gauge)

        return ProcessingResult(
            neural_input=neural_input,
            propagation=propagation,
            association=association,
            output=output,
            neural_activity=self._gauge.value,
            timestamp=output.timestamp,
            record_id=record.id,
        )

    def process_request(self, request: Any) -> ProcessingResult:
        """Run one encode → propagate → associate → synthesise cycle.

        Raises
        ------
        EngineStateError
            If the engine is not active.
        InvalidInputError
            If ``request`` cannot be encoded.
        ProcessingError
            For any other failure during the cycle.

        Failed cycles leave an error trace in short-term memory and return the
        engine to ``ACTIVE``.
        """

        with self._lock:
            if self._state is not EngineState.ACTIVE:
                raise EngineStateError(f"Engine is not accepting requests (state={self._state.value})")
            self._state = EngineState.PROCESSING
            try:
                with self._telemetry.span("neurocore.process_request") as span:
                    result = self._run_cycle(request)
                    span.set_attribute("neurocore.total_activity", result.propagation.total_activity)
                    span.set_attribute("neurocore.novelty", result.association.novelty)
                    span.set_attribute("neurocore.memory_matches", len(result.association.memories))
            except InvalidInputError as exc:
                self._failed += 1
                LOGGER.warning("Rejected neural request: %s", exc)
                self._memory.record_error(_request_snapshot(request), exc, self._rng)
                raise
            except Exception as exc:
                self._failed += 1
                LOGGER.exception("Neural processing failed")
                self._memory.record_error(_request_snapshot(request), exc, self._rng)
                if isinstance(exc, ProcessingError):
                    raise
                raise ProcessingError(f"Neural processing failed: {exc}") from exc
            finally:
                self._state = EngineState.ACTIVE

            self._processed += 1
        self._emit(REQUEST_PROCESSED, result)
        return result

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_status(self) -> StatusSnapshot:
        with self._lock:
            sizes = self._memory.sizes()
            return StatusSnapshot(
                initialized=self.initialized,
                state=self._state.value,
                neural_activity=self._gauge.value,
                capabilities=CapabilitySnapshot(**self._capabilities.as_dict()),
                architecture=ArchitectureSummary(
                    layer_count=len(self._layers),
                    neuron_count=total_neurons(self._layers),
                    connection_count=len(self._connections),
                    layers=[layer.id for layer in self._layers],
                ),
                memory=MemorySummary(**sizes),
                processed_requests=self._processed,
                failed_requests=self._failed,
            )


__all__ = [
    "EVENTS",
    "EngineState",
    "InitSummary",
    "MODULE_READY",
    "MODULE_SHUTDOWN",
    "NeuralProcessingEngine",
    "ProcessingResult",
    "REQUEST_PROCESSED",
]
