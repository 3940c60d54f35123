"""
OpenTelemetry Configuration

Sets up tracing and logging for the DIDECO aid ledger API.
"""

import os
import logging
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

from .. import __version__

SERVICE_NAME = 'dideco-aid-ledger'

_configured = False


def setup_observability(environment: str = None, otel_enabled: bool = None):
    """Initialize OpenTelemetry instrumentation based on environment configuration."""
    global _configured

    environment = environment or os.getenv('ENVIRONMENT', 'development')
    if otel_enabled is None:
        otel_enabled = os.getenv('OTEL_ENABLED', 'true').lower() == 'true'

    setup_structured_logging(environment)

    # The global tracer provider can only be set once per process
    if not otel_enabled or _configured:
        return

    # Environment-specific sampling
    if environment == 'production':
        sampler = TraceIdRatioBased(0.1)
    elif environment == 'staging':
        sampler = TraceIdRatioBased(0.5)
    else:
        sampler = TraceIdRatioBased(1.0)

    resource = Resource.create({
        "service.name": SERVICE_NAME,
        "service.version": __version__,
        "deployment.environment": environment
    })

    tracer_provider = TracerProvider(sampler=sampler, resource=resource)

    otlp_endpoint = os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT')
    if otlp_endpoint:
        tracer_provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint), max_export_batch_size=512)
        )
    elif environment == 'development':
        tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(tracer_provider)
    _configured = True


def setup_structured_logging(environment: str):
    """Configure root logging with environment-dependent levels."""
    log_level = {
        'production': logging.WARNING,
        'staging': logging.INFO,
        'development': logging.INFO,
        'test': logging.WARNING
    }.get(environment, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s %(levelname)s %(name)s %(message)s',
        handlers=[logging.StreamHandler()]
    )

    if environment == 'production':
        logging.getLogger('urllib3').setLevel(logging.WARNING)
        logging.getLogger('werkzeug').setLevel(logging.WARNING)

    elif environment == 'development':
        logging.getLogger('dideco.domain').setLevel(logging.DEBUG)
        logging.getLogger('dideco.services').setLevel(logging.DEBUG)
