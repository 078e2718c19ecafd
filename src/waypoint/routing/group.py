"""Route groups: deferred batches of routes sharing a path prefix.

A group is recorded when configured and run once, when the router
resolves its groups before the first request::

    def blog(group: RouteGroup) -> None:
        group.get("/", (BlogController, "indexAction"))
        group.get("/{slug}", (BlogController, "showAction"), name="blog_post")

    router.add_group("/blog", blog)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from waypoint.routing.route import HandlerRef, Route
from waypoint.routing.template import join_paths

if TYPE_CHECKING:
    from waypoint.routing.router import Router

Handler = HandlerRef | tuple[type | str, str]


class MethodShortcuts:
    """``get``/``post``/... helpers over an ``add_route`` implementation."""

    __slots__ = ()

    def add_route(
        self,
        method: str,
        path: str,
        handler: Handler,
        *,
        name: str | None = None,
    ) -> Route:
        raise NotImplementedError

    def get(self, path: str, handler: Handler, *, name: str | None = None) -> Route:
        return self.add_route("GET", path, handler, name=name)

    def post(self, path: str, handler: Handler, *, name: str | None = None) -> Route:
        return self.add_route("POST", path, handler, name=name)

    def put(self, path: str, handler: Handler, *, name: str | None = None) -> Route:
        return self.add_route("PUT", path, handler, name=name)

    def patch(self, path: str, handler: Handler, *, name: str | None = None) -> Route:
        return self.add_route("PATCH", path, handler, name=name)

    def delete(self, path: str, handler: Handler, *, name: str | None = None) -> Route:
        return self.add_route("DELETE", path, handler, name=name)


class RouteGroup(MethodShortcuts):
    """Routes registered through a group get the group prefix prepended.

    Groups nest: ``group.group("/admin", ...)`` composes both prefixes.
    """

    __slots__ = ("_register", "_router", "prefix")

    def __init__(
        self,
        prefix: str,
        register: Callable[[RouteGroup], Any],
        router: Router,
    ) -> None:
        self.prefix = join_paths(prefix, "")
        self._register = register
        self._router = router

    def add(self, route: Route) -> Route:
        """Prefix *route* and add it to the router."""
        return self._router.add(route.with_prefix(self.prefix))

    def add_route(
        self,
        method: str,
        path: str,
        handler: Handler,
        *,
        name: str | None = None,
    ) -> Route:
        """Create a route under the group prefix and add it."""
        return self.add(Route(method, path, handler, name=name))

    def add_view(
        self,
        path: str,
        template: str,
        *,
        name: str | None = None,
        method: str = "GET",
        **context: Any,
    ) -> Route:
        """Add a template-only route under the group prefix."""
        return self.add(Route(method, path, name=name, template=template, context=context))

    def group(self, prefix: str, register: Callable[[RouteGroup], Any]) -> None:
        """Run a nested group immediately, under the composed prefix."""
        RouteGroup(join_paths(self.prefix, prefix), register, self._router)()

    def __call__(self) -> None:
        self._register(self)

    def __repr__(self) -> str:
        return f"RouteGroup({self.prefix!r})"
