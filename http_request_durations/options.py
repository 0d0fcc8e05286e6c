import re
from collections.abc import Callable

from prometheus_client import REGISTRY, CollectorRegistry
from pydantic import BaseModel, Field
from starlette.requests import Request

from http_request_durations.routing import RouteMetadata


class HttpRequestDurationsOptions(BaseModel):
    """Configuration for HttpRequestDurationsMiddleware.

    Built once at startup and frozen afterwards. Nothing here is validated
    beyond types: bad patterns, conflicting ignore rules or unusable buckets
    surface when the middleware registers its histogram or handles a request.
    """

    metric_name: str = "http_request_duration_seconds"

    # Expose the time of the last observation with every sample
    include_timestamp: bool = False

    # Labels, in the order they appear on the metric
    include_status_code: bool = True
    include_method: bool = False
    include_controller: bool = False
    include_action: bool = False
    include_path: bool = False

    # Controller/action labels and use_route_name need route_metadata
    use_route_name: bool = False
    route_metadata: RouteMetadata | None = None

    # None disables a rule
    ignore_routes_concrete: tuple[str, ...] | None = None
    ignore_routes_contains: tuple[str, ...] | None = None
    ignore_routes_start_with: tuple[str, ...] | None = None

    buckets: tuple[float, ...] | None = None

    # Use only if relabel_configs in Prometheus is not an option
    custom_labels: dict[str, Callable[[], str]] | None = None

    # Applied in order, before ignore rules are checked
    custom_normalize_path: dict[re.Pattern, str] | None = None

    should_measure_request: Callable[[Request], bool] | None = None

    registry: CollectorRegistry = Field(default_factory=lambda: REGISTRY)

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @property
    def include_custom_labels(self) -> bool:
        return self.custom_labels is not None

    @property
    def include_custom_normalize_path(self) -> bool:
        return self.custom_normalize_path is not None
