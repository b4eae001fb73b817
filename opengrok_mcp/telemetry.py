"""Tracing for tool calls, exported to Langfuse over OTLP when enabled."""

import base64
import json
import logging
import os
from typing import Any, Dict

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor

from opengrok_mcp.config import ServerConfig

logger = logging.getLogger(__name__)

SPAN_TAGS = ["opengrok-mcp"]


class TelemetryManager:
    """Telemetry manager for Langfuse integration."""

    def __init__(self, cfg: ServerConfig) -> None:
        """Initialize telemetry manager."""
        self.cfg = cfg
        self.enabled = cfg.langfuse_enabled
        if self.enabled:
            self._setup()

    def _setup(self) -> None:
        """Setup telemetry."""
        langfuse_auth = base64.b64encode(
            f"{self.cfg.langfuse_public_key}:{self.cfg.langfuse_secret_key}".encode()
        ).decode()

        os.environ["OTEL_EXPORTER_OTLP_HEADERS"] = f"Authorization=Basic {langfuse_auth}"
        os.environ["OTEL_EXPORTER_OTLP_ENDPOINT"] = (
            f"{self.cfg.langfuse_host}/api/public/otel"
        )

        provider = TracerProvider()
        provider.add_span_processor(SimpleSpanProcessor(OTLPSpanExporter()))
        trace.set_tracer_provider(provider)
        logger.info(f"Exporting traces to {self.cfg.langfuse_host}")

    def get_tracer(self, name: str) -> trace.Tracer:
        """Get tracer instance."""
        if self.enabled:
            return trace.get_tracer(name)
        # Spans still run, nothing is exported
        return trace.get_tracer(name, tracer_provider=TracerProvider())

    def set_span_attributes(
        self,
        span: trace.Span,
        input_data: Dict[str, Any],
        output_data: Dict[str, Any],
        session_id: str,
    ) -> None:
        """Attach common Langfuse attributes to a span."""
        if not self.enabled:
            return
        try:
            span.set_attribute("langfuse.session.id", session_id)
            span.set_attribute("langfuse.tags", SPAN_TAGS)
            span.set_attribute("input", json.dumps(input_data, default=str))
            span.set_attribute("output", json.dumps(output_data, default=str))
        except (TypeError, ValueError) as exc:
            logger.error(f"Error setting span attributes: {exc}")
