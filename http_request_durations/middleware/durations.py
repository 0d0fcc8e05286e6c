import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from http_request_durations.metrics import create_histogram
from http_request_durations.options import HttpRequestDurationsOptions
from http_request_durations.routing import RouteInfo, RouteMetadata

logger = logging.getLogger(__name__)

HELP_TEXT = "duration histogram of http responses labeled with: "


def normalise_path(path: str, options: HttpRequestDurationsOptions) -> str:
    if not options.include_custom_normalize_path:
        return path
    for pattern, replacement in options.custom_normalize_path.items():
        path = pattern.sub(replacement, path)
    return path


class HttpRequestDurationsMiddleware(BaseHTTPMiddleware):
    """Records the duration of every measured request in one histogram.

    The label schema is fixed when the middleware is built. Requests whose
    (normalised) path matches an ignore rule, or that should_measure_request
    rejects, are passed through untouched.
    """

    def __init__(self, app: ASGIApp, options: HttpRequestDurationsOptions | None = None) -> None:
        super().__init__(app)
        self.options = options if options is not None else HttpRequestDurationsOptions()

        route_metadata = self.options.route_metadata
        self._route_metadata = route_metadata if isinstance(route_metadata, RouteMetadata) else None
        self._include_controller = self._route_metadata is not None and self.options.include_controller
        self._include_action = self._route_metadata is not None and self.options.include_action
        self._resolve_route = self._route_metadata is not None and (
            self.options.use_route_name or self._include_controller or self._include_action
        )

        self.label_names = tuple(self._build_label_names())
        self.histogram = create_histogram(
            self.options.metric_name,
            HELP_TEXT + ", ".join(self.label_names),
            self.options.include_timestamp,
            self.options.buckets,
            self.label_names,
            self.options.registry,
        )

    def _build_label_names(self) -> list[str]:
        # Order matters: _label_values emits values in the same sequence
        labels = []
        if self.options.include_status_code:
            labels.append("status_code")
        if self.options.include_method:
            labels.append("method")
        if self._include_controller:
            labels.append("controller")
        if self._include_action:
            labels.append("action")
        if self.options.include_path:
            labels.append("path")
        if self.options.include_custom_labels:
            labels.extend(self.options.custom_labels)
        return labels

    def _resolve_path(self, request: Request, route: RouteInfo) -> str:
        path = route.name if self.options.use_route_name else ""
        if not path:
            path = request.url.path
        return normalise_path(path, self.options)

    def _is_ignored(self, path: str, request: Request) -> bool:
        options = self.options
        if options.ignore_routes_start_with is not None and any(
            path.startswith(prefix) for prefix in options.ignore_routes_start_with
        ):
            return True
        if options.ignore_routes_contains is not None and any(
            part in path for part in options.ignore_routes_contains
        ):
            return True
        if options.ignore_routes_concrete is not None and any(
            path == route for route in options.ignore_routes_concrete
        ):
            return True
        if options.should_measure_request is not None and not options.should_measure_request(request):
            return True
        return False

    def _label_values(
        self, status_code: str, method: str, controller: str, action: str, path: str
    ) -> list[str]:
        values = []
        if self.options.include_status_code:
            values.append(status_code)
        if self.options.include_method:
            values.append(method)
        if self._include_controller:
            values.append(controller)
        if self._include_action:
            values.append(action)
        if self.options.include_path:
            values.append(path)
        if self.options.include_custom_labels:
            # Evaluated at observation time so values reflect end-of-request state
            values.extend(label() for label in self.options.custom_labels.values())
        return values

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        route = self._route_metadata.resolve(request) if self._resolve_route else RouteInfo()
        path = self._resolve_path(request, route)

        if self._is_ignored(path, request):
            logger.debug("Skipping duration measurement for %s %s", request.method, path)
            return await call_next(request)

        method = request.method
        controller = route.controller if self._include_controller else ""
        action = route.action if self._include_action else ""

        status_code = None
        response = None
        start = time.perf_counter()
        try:
            response = await call_next(request)
            return response
        except BaseException:
            status_code = "500"
            raise
        finally:
            if status_code is None:
                status_code = str(response.status_code)
            elapsed = time.perf_counter() - start
            self.histogram.observe(
                self._label_values(status_code, method, controller, action, path), elapsed
            )
