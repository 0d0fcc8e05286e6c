from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    service_name: str = "demo-service"
    log_level: str = "INFO"
    log_format: str = "json"

    # Request duration metrics
    metrics_path: str = "/metrics"
    durations_metric_name: str = "http_request_duration_seconds"
    durations_include_method: bool = True
    durations_include_path: bool = True
    durations_include_controller: bool = False
    durations_include_action: bool = False
    durations_use_route_name: bool = True
    durations_ignore_prefixes: list[str] = ["/metrics", "/health"]
    durations_buckets: list[float] | None = None

    # Observability; tracing is disabled when unset
    otlp_endpoint: str | None = None

    model_config = {"env_file": ".env"}


settings = Settings()
