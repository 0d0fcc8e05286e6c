import logging

from fastapi import FastAPI
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from prometheus_client import REGISTRY, CollectorRegistry, make_asgi_app

from demo_service.config import Settings, settings as default_settings
from demo_service.routers import items
from demo_service.utils.logging import setup_logging
from http_request_durations import (
    HttpRequestDurationsOptions,
    StarletteRouteMetadata,
    add_request_durations,
)
from shared.tracing import setup_tracing

logger = logging.getLogger(__name__)


def build_options(settings: Settings, registry: CollectorRegistry = REGISTRY) -> HttpRequestDurationsOptions:
    service_name = settings.service_name
    return HttpRequestDurationsOptions(
        metric_name=settings.durations_metric_name,
        include_method=settings.durations_include_method,
        include_path=settings.durations_include_path,
        include_controller=settings.durations_include_controller,
        include_action=settings.durations_include_action,
        use_route_name=settings.durations_use_route_name,
        route_metadata=StarletteRouteMetadata(),
        ignore_routes_start_with=settings.durations_ignore_prefixes or None,
        buckets=settings.durations_buckets,
        custom_labels={"service": lambda: service_name},
        registry=registry,
    )


def create_app(settings: Settings | None = None, registry: CollectorRegistry = REGISTRY) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(title="Request Durations Demo", version="1.0.0")

    if settings.otlp_endpoint:
        setup_tracing(settings.service_name, settings.otlp_endpoint)
        FastAPIInstrumentor.instrument_app(app)

    add_request_durations(app, build_options(settings, registry))
    app.include_router(items.router, prefix="/items", tags=["items"])

    # Expose Prometheus metrics
    app.mount(settings.metrics_path, make_asgi_app(registry=registry))

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "ok"}

    logger.info(
        "Application configured",
        extra={"service_name": settings.service_name, "metrics_path": settings.metrics_path},
    )
    return app


app = create_app()
