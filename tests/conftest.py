import pytest
from prometheus_client import CollectorRegistry
from starlette.requests import Request


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def make_request():
    def _make_request(path: str, method: str = "GET", app=None) -> Request:
        scope = {
            "type": "http",
            "method": method,
            "path": path,
            "root_path": "",
            "query_string": b"",
            "headers": [],
        }
        if app is not None:
            scope["app"] = app
        return Request(scope)

    return _make_request
