"""
Observability - OpenTelemetry spans around ingestion and search.

Tracing is off unless TRACING_ENABLED=true. The CLI calls init_tracing()
at startup and shutdown_tracing() on exit; library users can do the same
or install their own SDK TracerProvider, which get_tracer() picks up.

Spans:
    semantic_store.store_one    one document embedded and stored
    semantic_store.store_batch  batch totals (stored, skipped, failed)
    semantic_store.search_text  limit, scope, result count, top score

Embedding requests appear as child spans through the OpenAI
auto-instrumentor. Span attribute keys live in
semantic_store.observability.attributes.
"""

from __future__ import annotations

import logging
from typing import Any

from semantic_store.observability.config import (
    TracingConfig,
    get_tracing_config,
    reset_tracing_config,
)
from semantic_store.observability.tracer import (
    NoOpTracer,
    OTelTracer,
    TracerProtocol,
    get_tracer,
    reset_tracer,
)

logger = logging.getLogger(__name__)

_provider: Any = None


def _build_exporter(config: TracingConfig) -> Any:
    """OTLP/HTTP exporter for the configured collector, or a local Phoenix."""
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

    if config.collector_endpoint:
        logger.info(f"Exporting spans to {config.collector_endpoint}")
        return OTLPSpanExporter(endpoint=config.collector_endpoint)

    import phoenix as px

    session = px.launch_app()
    logger.info(f"Phoenix UI available at: {session.url}")
    return OTLPSpanExporter(endpoint=f"{session.url.rstrip('/')}/v1/traces")


def init_tracing(config: TracingConfig | None = None) -> bool:
    """
    Install an OpenTelemetry provider for this process.

    Returns:
        True if spans will be exported, False if tracing is disabled or
        could not be set up (the services then run with NoOpTracer)
    """
    global _provider
    if _provider is not None:
        return True

    config = config or get_tracing_config()
    if not config.enabled:
        logger.debug("Tracing disabled")
        return False

    try:
        from opentelemetry import trace
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor

        provider = TracerProvider(
            resource=Resource.create({"service.name": config.service_name})
        )
        provider.add_span_processor(BatchSpanProcessor(_build_exporter(config)))
        trace.set_tracer_provider(provider)
    except ImportError as e:
        logger.warning(f"Tracing requested but not installed (pip install '.[tracing]'): {e}")
        return False
    except Exception as e:
        logger.error(f"Failed to initialize tracing: {e}")
        return False

    from semantic_store.observability.instrumentation import register_instrumentors

    register_instrumentors()
    _provider = provider
    reset_tracer()
    return True


def shutdown_tracing() -> None:
    """Flush pending spans and return to the untraced state."""
    global _provider
    if _provider is None:
        return

    try:
        _provider.shutdown()
    except Exception as e:
        logger.warning(f"Error shutting down tracing: {e}")

    _provider = None
    reset_tracer()
    reset_tracing_config()


__all__ = [
    "init_tracing",
    "shutdown_tracing",
    "TracingConfig",
    "get_tracing_config",
    "reset_tracing_config",
    "TracerProtocol",
    "NoOpTracer",
    "OTelTracer",
    "get_tracer",
    "reset_tracer",
]
