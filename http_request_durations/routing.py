from collections.abc import Iterable
from typing import NamedTuple, Protocol, runtime_checkable

from starlette.requests import Request
from starlette.routing import BaseRoute, Match
from starlette.types import Scope


class RouteInfo(NamedTuple):
    name: str = ""
    controller: str = ""
    action: str = ""


@runtime_checkable
class RouteMetadata(Protocol):
    """Route information a host pipeline may expose for a request.

    Controller and action labels, and labelling by route template, are only
    available when one of these is configured on the options.
    """

    def resolve(self, request: Request) -> RouteInfo: ...


def _root_path_delta(scope: Scope, child_scope: Scope) -> str:
    root_path = scope.get("root_path", "")
    child_root_path = child_scope.get("root_path", root_path)
    if child_root_path.startswith(root_path):
        return child_root_path[len(root_path):]
    return ""


class StarletteRouteMetadata:
    """Resolves route metadata by matching the request against the app's routes.

    Matching happens before the request is dispatched, so the result is
    available to exclusion rules. Routes are tried in declaration order; a
    full match wins over a partial one (path matched, method did not).
    Mounts and included routers are descended into until a leaf route
    matches; the route name is the full template including their prefixes.
    """

    def _find(
        self, routes: Iterable[BaseRoute], scope: Scope, prefix: str = ""
    ) -> tuple[BaseRoute | None, str, Match]:
        partial = (None, "", Match.NONE)
        for route in routes:
            match, child_scope = route.matches(scope)
            if match == Match.NONE:
                continue

            found = (route, prefix, match)
            children = getattr(route, "routes", None)
            if children is not None:
                nested_scope = {**scope, **child_scope}
                nested_prefix = prefix + (
                    getattr(route, "path", "") or _root_path_delta(scope, nested_scope)
                )
                nested = self._find(children, nested_scope, nested_prefix)
                # Keep the container when nothing inside matched, e.g. a mounted ASGI app
                if nested[0] is not None:
                    found = nested

            if found[2] == Match.FULL:
                return found
            if partial[0] is None:
                partial = found
        return partial

    def resolve(self, request: Request) -> RouteInfo:
        app = request.scope.get("app")
        route, prefix, _ = self._find(getattr(app, "routes", ()), request.scope)
        if route is None:
            return RouteInfo()

        path = getattr(route, "path", "") or ""
        endpoint = getattr(route, "endpoint", None)
        module = getattr(endpoint, "__module__", None) or ""
        return RouteInfo(
            name=prefix + path if path else "",
            controller=module.rsplit(".", 1)[-1],
            action=getattr(route, "name", "") or "",
        )
