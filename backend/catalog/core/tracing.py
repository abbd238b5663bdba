"""OpenTelemetry setup and span helpers."""

from contextlib import contextmanager
from typing import Any, Generator

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

from catalog.config import settings
from catalog.core.errors import CatalogError, InfrastructureError

SERVICE_NAME = "movie-catalog-api"

_tracer: trace.Tracer | None = None


def setup_telemetry() -> None:
    """Install the tracer provider. A no-op unless tracing is enabled."""
    global _tracer

    if not settings.enable_tracing:
        return

    provider = TracerProvider(
        resource=Resource.create({
            "service.name": SERVICE_NAME,
            "service.version": settings.app_version,
            "deployment.environment": settings.environment,
        })
    )
    if settings.trace_to_console:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer("catalog")


def get_tracer() -> trace.Tracer:
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer("catalog")
    return _tracer


@contextmanager
def create_span(
    name: str,
    attributes: dict[str, Any] | None = None,
    kind: trace.SpanKind = trace.SpanKind.INTERNAL,
) -> Generator[trace.Span, None, None]:
    """Open a span around a unit of work.

    Expected outcomes such as a missing row or an edit conflict are tagged
    with their error code but leave the span status alone; only
    infrastructure failures and unexpected exceptions mark it as an error.
    """
    with get_tracer().start_as_current_span(
        name,
        kind=kind,
        attributes=attributes or {},
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except CatalogError as e:
            span.set_attribute("catalog.error_code", e.code)
            if isinstance(e, InfrastructureError):
                span.set_status(trace.Status(trace.StatusCode.ERROR, e.detail))
                span.record_exception(e)
            raise
        except Exception as e:
            span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise


def get_current_trace_id() -> str | None:
    """Hex trace id of the active span, for correlating log lines."""
    context = trace.get_current_span().get_span_context()
    if context.is_valid:
        return format(context.trace_id, "032x")
    return None
