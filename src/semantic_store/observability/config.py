"""
Tracing configuration.

Loads observability settings from environment variables.
Supports graceful degradation when OpenTelemetry is not installed.
"""

import os
from dataclasses import dataclass

_TRUE_VALUES = ("true", "1", "yes")


@dataclass
class TracingConfig:
    """Configuration for OpenTelemetry tracing.

    Environment Variables:
        TRACING_ENABLED: Enable tracing (default: false)
        TRACING_SERVICE_NAME: Service/project name (default: semantic-store)
        OTEL_EXPORTER_OTLP_ENDPOINT: Remote collector (optional, local Phoenix if empty)
        TRACING_CAPTURE_CONTENT: Attach document text and queries to spans (default: false)

    PRIVACY WARNING:
        Setting TRACING_CAPTURE_CONTENT=true exports raw document content and
        search queries. Workspace documents hold financial insights; only
        enable in controlled environments.
    """

    enabled: bool = False
    service_name: str = "semantic-store"
    collector_endpoint: str | None = None
    capture_content: bool = False

    @classmethod
    def from_env(cls) -> "TracingConfig":
        """Load config from environment variables."""
        return cls(
            enabled=os.environ.get("TRACING_ENABLED", "false").lower() in _TRUE_VALUES,
            service_name=os.environ.get("TRACING_SERVICE_NAME", "semantic-store"),
            collector_endpoint=os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT") or None,
            capture_content=os.environ.get("TRACING_CAPTURE_CONTENT", "false").lower()
            in _TRUE_VALUES,
        )


_config: TracingConfig | None = None


def get_tracing_config() -> TracingConfig:
    """Get the global tracing config (lazy-loaded from env)."""
    global _config
    if _config is None:
        _config = TracingConfig.from_env()
    return _config


def reset_tracing_config() -> None:
    """Reset config (useful for testing)."""
    global _config
    _config = None
