from starlette.applications import Starlette

from http_request_durations.metrics import DurationHistogram, create_histogram
from http_request_durations.middleware.durations import HttpRequestDurationsMiddleware
from http_request_durations.options import HttpRequestDurationsOptions
from http_request_durations.routing import RouteInfo, RouteMetadata, StarletteRouteMetadata


def add_request_durations(
    app: Starlette, options: HttpRequestDurationsOptions | None = None, **overrides
) -> None:
    """Install HttpRequestDurationsMiddleware on ``app``.

    Pass either a ready-made options object or option fields as keyword
    arguments, not both.
    """
    if options is not None and overrides:
        raise TypeError("pass either options or option overrides, not both")
    if options is None:
        options = HttpRequestDurationsOptions(**overrides)
    app.add_middleware(HttpRequestDurationsMiddleware, options=options)


__all__ = [
    "DurationHistogram",
    "HttpRequestDurationsMiddleware",
    "HttpRequestDurationsOptions",
    "RouteInfo",
    "RouteMetadata",
    "StarletteRouteMetadata",
    "add_request_durations",
    "create_histogram",
]
