"""Command-line helper for exploring the neural processing engine locally."""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Dict, List, Mapping, Sequence

from .config import REFERENCE_LAYERS, LayerSpec, NeuralEngineConfig
from .errors import ConfigurationError, NeuralEngineError
from .processor import NeuralProcessingEngine
from .simulation.metrics import StaticMetricsProvider


class QuickstartError(Exception):
    """Raised when the quickstart helper receives invalid input."""


def _parse_layers(values: Sequence[str]) -> tuple[LayerSpec, ...]:
    specs: List[LayerSpec] = []
    for value in values:
        try:
            specs.append(LayerSpec.parse(value))
        except ConfigurationError as exc:
            raise QuickstartError(str(exc)) from exc
    return tuple(specs)


def run_quickstart(
    contents: Sequence[str],
    *,
    request_type: str = "analysis",
    priority: float = 0.5,
    keywords: Sequence[str] = (),
    layers: Sequence[LayerSpec] | None = None,
    seed: int = 7,
) -> Dict[str, Any]:
    """Run every entry of ``contents`` through a fresh seeded engine."""

    if not contents:
        raise QuickstartError("At least one request content must be supplied")
    if not 0.0 <= float(priority) <= 1.0:
        raise QuickstartError("Priority must fall between 0 and 1")

    config = NeuralEngineConfig(layers=tuple(layers or REFERENCE_LAYERS), seed=seed)
    engine = NeuralProcessingEngine(config, metrics=StaticMetricsProvider())
    try:
        engine.initialize()
        cycles: List[Dict[str, Any]] = []
        for content in contents:
            result = engine.process_request(
                {"type": request_type, "content": content, "priority": priority, "keywords": list(keywords)}
            )
            cycles.append(
                {
                    "content": content,
                    "summary": dict(result.output.summary),
                    "message": result.output.content,
                    "total_activity": result.propagation.total_activity,
                    "max_activation": result.propagation.max_activation,
                    "layers": {
                        layer_id: {
                            "fire_count": output.fire_count,
                            "total_activation": output.total_activation,
                            "max_activation": output.max_activation,
                        }
                        for layer_id, output in result.propagation.layer_outputs.items()
                    },
                    "neural_activity": result.neural_activity,
                }
            )
    except NeuralEngineError as exc:
        raise QuickstartError(str(exc)) from exc
    finally:
        engine.shutdown()

    return {"cycles": cycles, "status": engine.get_status().model_dump()}


def summarise_quickstart(payload: Mapping[str, Any]) -> str:
    """Create a human-readable summary of a quickstart run."""

    lines = ["Processed requests:"]
    for index, cycle in enumerate(payload.get("cycles", []), start=1):
        summary = cycle.get("summary", {})
        lines.append(
            f"  {index}. {cycle.get('content', '')!r}: {summary.get('pattern_count', 0)} patterns, "
            f"{summary.get('memory_count', 0)} memories, strength {summary.get('strength', 0.0):.2f}, "
            f"novelty {summary.get('novelty', 0.0):.2f}"
        )

    status = payload.get("status", {})
    if isinstance(status, Mapping):
        memory = status.get("memory", {})
        architecture = status.get("architecture", {})
        lines.append(
            f"\nNetwork: {architecture.get('layer_count', 0)} layers, "
            f"{architecture.get('neuron_count', 0)} neurons, "
            f"{architecture.get('connection_count', 0)} connections"
        )
        lines.append(
            f"Memory: {memory.get('short_term', 0)} short-term, "
            f"{memory.get('long_term', 0)} long-term, {memory.get('patterns', 0)} patterns"
        )
        lines.append(f"Neural activity: {status.get('neural_activity', 0.0):.4f}")
        capabilities = status.get("capabilities", {})
        if capabilities:
            formatted = ", ".join(f"{name} {value:.3f}" for name, value in capabilities.items())
            lines.append(f"Capabilities: {formatted}")
    return "\n".join(lines)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run requests through the neural processing engine.")
    parser.add_argument("content", nargs="*", help="Request content (one request per argument)")
    parser.add_argument("--type", dest="request_type", default="analysis", help="Request type label")
    parser.add_argument("--priority", type=float, default=0.5, help="Request priority (0-1)")
    parser.add_argument("--keyword", action="append", default=[], help="Keyword attached to every request (repeatable)")
    parser.add_argument(
        "--layer",
        action="append",
        default=[],
        metavar="NAME:COUNT:ACTIVATION",
        help="Custom layer specification (repeatable, replaces the reference architecture)",
    )
    parser.add_argument("--seed", type=int, default=7, help="Random seed for a reproducible run")
    parser.add_argument("--json", action="store_true", help="Print the raw JSON payload instead of a summary")
    parser.add_argument("--list-layers", action="store_true", help="List the reference architecture and exit")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.list_layers:
        lines = ["Reference architecture:"]
        for spec in REFERENCE_LAYERS:
            lines.append(f"  • {spec.name}: {spec.neuron_count} neurons ({spec.activation})")
        print("\n".join(lines))
        return 0

    try:
        layers = _parse_layers(args.layer) if args.layer else None
        payload = run_quickstart(
            args.content or ["hello neural world"],
            request_type=args.request_type,
            priority=args.priority,
            keywords=args.keyword,
            layers=layers,
            seed=args.seed,
        )
    except QuickstartError as exc:
        parser.error(str(exc))
        return 2

    if args.json:
        print(json.dumps(payload, indent=2, sort_keys=True, default=str))
    else:
        print(summarise_quickstart(payload))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
