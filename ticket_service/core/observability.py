"""Observability setup for OpenTelemetry tracing, metrics, and structured logging."""

import logging

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest

from .config import Settings, settings as default_settings

# Prometheus metrics
REGISTRY = CollectorRegistry()

HOLDS_CREATED = Counter(
    'seat_holds_created_total',
    'Total seat holds created',
    ['event'],
    registry=REGISTRY
)

HOLDS_EXPIRED = Counter(
    'seat_holds_expired_total',
    'Total seat holds released by their expiration timer',
    ['event'],
    registry=REGISTRY
)

HOLDS_CANCELLED = Counter(
    'seat_holds_cancelled_total',
    'Total seat holds released by explicit cancellation',
    ['event'],
    registry=REGISTRY
)

RESERVATIONS_CONFIRMED = Counter(
    'reservations_confirmed_total',
    'Total reservations confirmed',
    ['event'],
    registry=REGISTRY
)

ACTIVE_HOLDS = Gauge(
    'seat_holds_active',
    'Number of active seat holds',
    ['event'],
    registry=REGISTRY
)

SEATS_AVAILABLE = Gauge(
    'seats_available',
    'Number of seats neither held nor reserved',
    ['event'],
    registry=REGISTRY
)


def setup_structured_logging(config: Settings = default_settings):
    """Configure structured logging with structlog."""

    def add_trace_context(logger, method_name, event_dict):
        """Add trace context to log events."""
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict['trace_id'] = format(ctx.trace_id, '032x')
            event_dict['span_id'] = format(ctx.span_id, '016x')
        return event_dict

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer() if config.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, config.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_tracing(app_name: str = "ticket-hold-service", config: Settings = default_settings):
    """Setup OpenTelemetry tracing."""

    resource = Resource.create({
        "service.name": app_name,
        "service.version": "1.0.0",
        "environment": config.environment,
    })

    provider = TracerProvider(resource=resource)

    # Setup OTLP exporter (if OTLP endpoint is configured)
    if config.otlp_endpoint:
        otlp_exporter = OTLPSpanExporter(endpoint=config.otlp_endpoint)
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

    trace.set_tracer_provider(provider)

    return trace.get_tracer(__name__)


class MetricsCollector:
    """Collector for business metrics."""

    @staticmethod
    def record_hold_created(event: str):
        """Record a hold creation."""
        HOLDS_CREATED.labels(event=event).inc()

    @staticmethod
    def record_hold_expired(event: str):
        """Record a hold expiration."""
        HOLDS_EXPIRED.labels(event=event).inc()

    @staticmethod
    def record_hold_cancelled(event: str):
        """Record an explicit hold cancellation."""
        HOLDS_CANCELLED.labels(event=event).inc()

    @staticmethod
    def record_reservation_confirmed(event: str):
        """Record a reservation confirmation."""
        RESERVATIONS_CONFIRMED.labels(event=event).inc()

    @staticmethod
    def set_inventory(event: str, active_holds: int, available_seats: int):
        """Set the active hold and available seat gauges for an event."""
        ACTIVE_HOLDS.labels(event=event).set(active_holds)
        SEATS_AVAILABLE.labels(event=event).set(available_seats)


def get_prometheus_metrics() -> bytes:
    """Get Prometheus metrics in the text exposition format."""
    return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()


def get_logger(name: str):
    """Get a structlog logger bound to a component name."""
    return structlog.get_logger(name).bind(component=name)
