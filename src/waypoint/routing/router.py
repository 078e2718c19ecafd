"""Ordered router with first-match-wins path matching.

Routes are kept per method in registration order. Matching walks that
list and stops at the first pattern that matches, so registration order
is the only tie-break: register ``/users/new`` before ``/users/{id}``.
"""

import logging
import re
import threading
from collections.abc import Callable
from typing import Any

from waypoint.config import RouterConfig
from waypoint.errors import (
    ConfigurationError,
    DuplicateRouteNameError,
    NamingConventionError,
    RouteNotFoundError,
    UnsupportedMethodError,
    URLGenerationError,
)
from waypoint.routing.group import Handler, MethodShortcuts, RouteGroup
from waypoint.routing.params import MATCHES_KEY, convert_param
from waypoint.routing.route import HandlerRef, Route, RouteMatch
from waypoint.routing.template import build_path, normalize_path

logger = logging.getLogger("waypoint.routing")


class Router(MethodShortcuts):
    """Route registry and matcher.

    Usage::

        router = Router(RouterConfig(base_path="/app"))
        router.get("/users/new", (UserController, "newAction"))
        router.get("/users/{id}", (UserController, "showAction"), name="user")
        router.add_group("/api/v1", api_routes)
        router.compile()

        match = router.match("GET", "/app/users/42")
        match.path_params  # {"id": "42"}

    Thread safety:
        Registration is single-threaded setup work. ``compile()`` runs the
        deferred groups exactly once under a lock and freezes the router;
        afterwards ``match`` only reads and is safe for concurrent callers.
    """

    __slots__ = (
        "_compiled",
        "_config",
        "_groups",
        "_groups_error",
        "_groups_lock",
        "_groups_resolved",
        "_names",
        "_order",
        "_routes",
    )

    def __init__(self, config: RouterConfig | None = None) -> None:
        self._config = config or RouterConfig()
        self._routes: dict[str, list[Route]] = {}
        self._order: list[Route] = []
        self._names: dict[str, Route] = {}
        self._groups: list[RouteGroup] = []
        self._groups_resolved = False
        self._groups_error: Exception | None = None
        self._groups_lock = threading.RLock()
        self._compiled = False

    @property
    def config(self) -> RouterConfig:
        return self._config

    # -- Registration --

    def add(self, route: Route) -> Route:
        """Validate *route*, prepend the base path and append it.

        Returns the stored route (with the base path applied).

        Raises:
            UnsupportedMethodError: the method is not supported.
            NamingConventionError: the handler container or action lacks
                the configured suffix.
            DuplicateRouteNameError: the route name is taken.
            ConfigurationError: the router is already compiled.
        """
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise ConfigurationError(msg)

        if not self._config.supports(route.method):
            detail = (
                f"HTTP method {route.method} isn't allowed in route definition "
                f"for {{name: {route.name!r}, path: {route.path!r}}}."
            )
            raise UnsupportedMethodError(route.method, self._config.supported_methods, detail)

        if isinstance(route.handler, HandlerRef) and self._config.enforce_naming:
            self._check_naming(route.handler)

        if route.name is not None and route.name in self._names:
            msg = f"A route named {route.name!r} already exists."
            raise DuplicateRouteNameError(msg)

        route = route.with_prefix(self._config.base_path)
        if route.name is not None:
            self._names[route.name] = route
        self._routes.setdefault(route.method, []).append(route)
        self._order.append(route)

        logger.debug(
            "Registered %s %s -> %s",
            route.method,
            route.path,
            route.handler if route.handler is not None else route.template,
        )
        return route

    def add_route(
        self,
        method: str,
        path: str,
        handler: Handler,
        *,
        name: str | None = None,
    ) -> Route:
        """Create and add a route for ``handler = (container, action)``."""
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
        """Add a route that renders *template* without a handler.

        The template receives *context* merged with the path parameters.
        """
        return self.add(Route(method, path, name=name, template=template, context=context))

    def add_group(self, prefix: str, register: Callable[[RouteGroup], Any]) -> None:
        """Record a group; *register* runs once, in ``resolve_groups()``."""
        if self._groups_resolved or self._groups_error is not None:
            msg = "Cannot add route groups after they have been resolved."
            raise ConfigurationError(msg)
        self._groups.append(RouteGroup(prefix, register, self))

    def resolve_groups(self) -> None:
        """Run every recorded group once, in the order they were added.

        Later calls are no-ops. If a group raises, the error is kept and
        re-raised by every later call: a router whose groups failed to
        register never becomes usable.
        """
        with self._groups_lock:
            if self._groups_error is not None:
                raise self._groups_error
            if self._groups_resolved:
                return
            groups, self._groups = self._groups, []
            try:
                for group in groups:
                    group()
            except Exception as exc:
                self._groups_error = exc
                raise
            self._groups_resolved = True
            logger.debug("Resolved %d route group(s)", len(groups))

    def compile(self) -> None:
        """Resolve groups and freeze the router. No more routes can be added."""
        self.resolve_groups()
        self._compiled = True

    def _check_naming(self, handler: HandlerRef) -> None:
        controller_suffix = self._config.controller_suffix
        action_suffix = self._config.action_suffix
        if controller_suffix and not handler.container_name.endswith(controller_suffix):
            msg = (
                f"Handler container names must end with {controller_suffix!r}. "
                f"Error in {handler.container_name!r}."
            )
            raise NamingConventionError(msg)
        if action_suffix and not handler.action.endswith(action_suffix):
            msg = f"Action names must end with {action_suffix!r}. Error in {str(handler)!r}."
            raise NamingConventionError(msg)

    # -- Introspection --

    @property
    def routes(self) -> list[Route]:
        """All registered routes, in registration order."""
        return list(self._order)

    def routes_for(self, method: str) -> list[Route]:
        """Routes registered for *method*, in matching order."""
        return list(self._routes.get(method.upper(), ()))

    @property
    def names(self) -> dict[str, str]:
        """Route name -> path template."""
        return {name: route.path for name, route in self._names.items()}

    # -- Matching --

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a method and raw request path against the routes.

        Returns a ``RouteMatch`` for the first route, in registration
        order, whose pattern matches the normalized path.

        Raises ``UnsupportedMethodError`` if *method* is not supported.
        Raises ``RouteNotFoundError`` if no route for *method* matches.
        """
        method = method.upper()
        if not self._config.supports(method):
            raise UnsupportedMethodError(method, self._config.supported_methods)

        normalized = normalize_path(path)
        for route in self._routes.get(method, ()):
            found = route.pattern.match(normalized)
            if found is not None:
                logger.debug("%s %s matched %s", method, normalized, route.path)
                return RouteMatch(route=route, path_params=_extract_params(route, found))

        raise RouteNotFoundError(method, normalized)

    # -- Reverse routing --

    def url_for(self, name: str, /, **params: Any) -> str:
        """Build the path of the route named *name*.

        Raises ``URLGenerationError`` for unknown names or missing params.
        """
        route = self._names.get(name)
        if route is None:
            msg = f"No route named {name!r} exists."
            raise URLGenerationError(msg)
        return build_path(route.path, params)


def _extract_params(route: Route, found: re.Match[str]) -> dict[str, Any]:
    """Split captures into named params and positional ``_matches``.

    Typed placeholders (``{id:int}``) are converted; plain ones stay strings.
    """
    params: dict[str, Any] = {}
    for name, value in found.groupdict().items():
        params[name] = convert_param(value, route.param_types.get(name, "str"))

    named_groups = set(found.re.groupindex.values())
    positional = [
        found.group(index)
        for index in range(1, found.re.groups + 1)
        if index not in named_groups
    ]
    if positional:
        params[MATCHES_KEY] = positional
    return params
