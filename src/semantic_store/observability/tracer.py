"""
Span lifecycle for ingestion and search.

start_span() owns everything the services would otherwise repeat:

- attributes with a None value are dropped (OTel rejects them)
- a clean exit marks the span ok
- an exception is recorded and marks the span error; a SemanticStoreError
  also tags the span with its kind (InvalidInput, EmbeddingUnavailable,
  PersistenceError) so failed calls can be grouped by cause
- the exception is always re-raised

The services only add what they learn along the way (document id, result
count, top score).

get_tracer() returns an OTel-backed tracer once init_tracing() has
installed an SDK provider, and a NoOpTracer otherwise.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Protocol

from semantic_store.core.errors import SemanticStoreError
from semantic_store.observability.attributes import STORE_ERROR_KIND, STORE_ERROR_MESSAGE

# Instrumentation scope reported on every span
TRACER_NAME = "semantic_store"


def clean_attributes(attributes: Mapping[str, Any] | None) -> dict[str, Any]:
    """Drop None values; OTel attribute values must be primitives."""
    return {key: value for key, value in (attributes or {}).items() if value is not None}


def failure_attributes(error: BaseException) -> dict[str, Any]:
    """Attributes describing why an operation failed."""
    if isinstance(error, SemanticStoreError):
        return {STORE_ERROR_KIND: type(error).__name__, STORE_ERROR_MESSAGE: error.message}
    return {STORE_ERROR_KIND: type(error).__name__, STORE_ERROR_MESSAGE: str(error)}


class SpanProtocol(Protocol):
    def set_attribute(self, key: str, value: Any) -> None:
        ...

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        ...


class TracerProtocol(Protocol):
    def start_span(
        self, name: str, attributes: Mapping[str, Any] | None = None
    ) -> Any:
        """Context manager yielding a SpanProtocol; see module docstring."""
        ...


# ---------------------------------------------------------------------------
# NOOP (tracing disabled or OpenTelemetry missing)
# ---------------------------------------------------------------------------


class NoOpSpan:
    def set_attribute(self, key: str, value: Any) -> None:
        pass

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        pass


class NoOpTracer:
    @contextmanager
    def start_span(
        self, name: str, attributes: Mapping[str, Any] | None = None
    ) -> Iterator[NoOpSpan]:
        yield NoOpSpan()


# ---------------------------------------------------------------------------
# OPENTELEMETRY
# ---------------------------------------------------------------------------


class OTelSpan:
    def __init__(self, span: Any):
        self._span = span

    def set_attribute(self, key: str, value: Any) -> None:
        if value is not None:
            self._span.set_attribute(key, value)

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        self._span.set_attributes(clean_attributes(attributes))


class OTelTracer:
    def __init__(self, tracer: Any):
        self._tracer = tracer

    @contextmanager
    def start_span(
        self, name: str, attributes: Mapping[str, Any] | None = None
    ) -> Iterator[OTelSpan]:
        from opentelemetry.trace import Status, StatusCode

        # Status and exception events are set below, not by the SDK
        with self._tracer.start_as_current_span(
            name,
            attributes=clean_attributes(attributes),
            record_exception=False,
            set_status_on_exception=False,
        ) as span:
            try:
                yield OTelSpan(span)
            except Exception as e:
                failure = failure_attributes(e)
                span.set_attributes(failure)
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, failure[STORE_ERROR_MESSAGE]))
                raise
            span.set_status(Status(StatusCode.OK))


# ---------------------------------------------------------------------------
# FACTORY
# ---------------------------------------------------------------------------


_tracer: TracerProtocol | None = None


def get_tracer() -> TracerProtocol:
    """
    Get the global tracer instance.

    Returns NoOpTracer when TRACING_ENABLED is off, OpenTelemetry is not
    installed, or init_tracing() has not installed an SDK provider yet.
    """
    global _tracer
    if _tracer is not None:
        return _tracer

    from semantic_store.observability.config import get_tracing_config

    if not get_tracing_config().enabled:
        _tracer = NoOpTracer()
        return _tracer

    try:
        from opentelemetry import trace
        from opentelemetry.sdk.trace import TracerProvider
    except ImportError:
        _tracer = NoOpTracer()
        return _tracer

    provider = trace.get_tracer_provider()
    if not isinstance(provider, TracerProvider):
        # Not cached: init_tracing() may still install a provider
        return NoOpTracer()

    _tracer = OTelTracer(provider.get_tracer(TRACER_NAME))
    return _tracer


def reset_tracer() -> None:
    """Reset tracer (useful for testing)."""
    global _tracer
    _tracer = None
