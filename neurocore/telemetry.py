"""Optional OpenTelemetry tracing for engine lifecycle and request cycles.

Tracing is only switched on when :class:`~neurocore.config.TelemetryConfig`
enables it and the ``telemetry`` extra is installed.  In every other case the
manager hands out no-op spans, so the engine code never branches on whether
tracing is active.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
import importlib
import logging
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from .config import TelemetryConfig

LOGGER = logging.getLogger(__name__)

TRACER_NAME = "neurocore.engine"

SPAN_EXPORTER_MODULES: Dict[str, str] = {
    "http/protobuf": "opentelemetry.exporter.otlp.proto.http.trace_exporter",
    "grpc": "opentelemetry.exporter.otlp.proto.grpc.trace_exporter",
}


class _NoopSpan:
    """Stand-in span used when no tracer is configured."""

    def set_attribute(self, key: str, value: Any) -> None:
        return None

    def record_exception(self, exception: BaseException) -> None:
        return None


NOOP_SPAN = _NoopSpan()


def _attribute_value(value: Any) -> Any:
    # OTLP attributes accept str, bool, int, float and homogeneous sequences of them
    if isinstance(value, (str, bool, int, float)):
        return value
    return str(value)


def span_attributes(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Prefix and coerce ``values`` into span attributes, dropping ``None``."""

    return {f"neurocore.{key}": _attribute_value(value) for key, value in values.items() if value is not None}


def load_span_exporter(protocol: str) -> Any:
    """Import the ``OTLPSpanExporter`` class matching ``protocol``."""

    module_name = SPAN_EXPORTER_MODULES.get(protocol, SPAN_EXPORTER_MODULES["http/protobuf"])
    return importlib.import_module(module_name).OTLPSpanExporter


@dataclass
class TelemetryManager:
    """Own the tracer provider for one engine and its shutdown hooks."""

    config: TelemetryConfig
    _shutdown_hooks: List[Callable[[], None]] = field(default_factory=list)
    _tracer: Optional[Any] = None

    @property
    def enabled(self) -> bool:
        return self._tracer is not None

    def configure(self) -> None:
        if not self.config.enabled:
            LOGGER.debug("Engine tracing disabled by configuration")
            return
        try:
            from opentelemetry.sdk.resources import Resource
            from opentelemetry.sdk.trace import TracerProvider
            from opentelemetry.sdk.trace.export import BatchSpanProcessor
            from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
        except ImportError:
            LOGGER.warning("OpenTelemetry SDK not installed; engine tracing disabled")
            return

        try:
            exporter_cls = load_span_exporter(self.config.exporter_protocol)
        except ImportError:
            LOGGER.warning("OTLP exporter for %s not installed; engine tracing disabled", self.config.exporter_protocol)
            return

        provider = TracerProvider(
            resource=Resource.create(
                {
                    "service.name": self.config.service_name,
                    "deployment.environment": self.config.environment,
                }
            ),
            sampler=ParentBased(TraceIdRatioBased(self.config.sampling_ratio)),
        )
        try:
            exporter = exporter_cls(endpoint=self.config.exporter_endpoint)
        except Exception as exc:  # pragma: no cover - exporter wiring
            LOGGER.warning("Could not create OTLP span exporter: %s", exc)
            return
        provider.add_span_processor(BatchSpanProcessor(exporter))
        self._shutdown_hooks.append(provider.shutdown)
        # spans stay on this provider; the global tracer provider is left untouched
        self._tracer = provider.get_tracer(TRACER_NAME)
        LOGGER.info(
            "Engine tracing exporting over %s to %s (sampling %.2f)",
            self.config.exporter_protocol,
            self.config.exporter_endpoint or "default endpoint",
            self.config.sampling_ratio,
        )

    @contextmanager
    def span(self, name: str, **attributes: Any) -> Iterator[Any]:
        """Open a span named ``name``; yields a no-op span when tracing is off."""

        if self._tracer is None:
            yield NOOP_SPAN
            return
        with self._tracer.start_as_current_span(name, attributes=span_attributes(attributes)) as current:
            yield current

    def shutdown(self) -> None:
        hooks, self._shutdown_hooks = self._shutdown_hooks, []
        for hook in reversed(hooks):
            try:
                hook()
            except Exception as exc:  # pragma: no cover - best effort flush
                LOGGER.debug("Tracer shutdown hook failed: %s", exc)
        self._tracer = None


def configure_telemetry(config: TelemetryConfig) -> TelemetryManager:
    manager = TelemetryManager(config=config)
    manager.configure()
    return manager


__all__ = [
    "NOOP_SPAN",
    "SPAN_EXPORTER_MODULES",
    "TelemetryManager",
    "configure_telemetry",
    "load_span_exporter",
    "span_attributes",
]
