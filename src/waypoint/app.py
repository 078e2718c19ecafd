"""Waypoint application class.

Mutable during setup (routes, groups, dependencies, error handlers).
Frozen on the first request, when route groups are resolved and the
router is compiled.
"""

import logging
import threading
from collections.abc import Callable, Iterable
from typing import Any

from kida import Environment

from waypoint.config import RouterConfig
from waypoint.di.dependency import Dependency, Target
from waypoint.di.injector import Injector
from waypoint.di.services import Services
from waypoint.engines.application import ResponseEngine
from waypoint.engines.protocol import Engine
from waypoint.engines.template import Template, TemplateEngine, create_environment, render_template
from waypoint.errors import ConfigurationError, HTTPError
from waypoint.firewall import Firewall
from waypoint.http.request import Request
from waypoint.http.response import Response
from waypoint.routing.group import Handler, MethodShortcuts, RouteGroup
from waypoint.routing.route import Route
from waypoint.routing.router import Router
from waypoint.server.errors import ErrorHandlers, handle_http_error, handle_internal_error

logger = logging.getLogger("waypoint.server")

# WSGI environ key a session collaborator stores the session mapping under
SESSION_ENVIRON_KEY = "waypoint.session"


class App(MethodShortcuts):
    """The waypoint application.

    Wires the router, the injector, the response engine, optional
    services and an optional firewall::

        app = App(RouterConfig(base_path="/blog"))
        app.register("db", lambda: connect("sqlite:///blog.db"))
        app.register(PostController, PostController, "db")
        app.get("/posts/{slug}", (PostController, "showAction"), name="post")

        response = app.handle_request(Request("GET", "/blog/posts/hello"))

    Thread safety:
        The setup phase is single-threaded. The freeze transition uses a
        RLock + double-check so exactly one thread resolves the route
        groups and compiles the router, even when several worker threads
        receive their first request at once.
    """

    __slots__ = (
        "_custom_kida_env",
        "_engine",
        "_error_handlers",
        "_firewall",
        "_freeze_lock",
        "_freezing",
        "_frozen",
        "_injector",
        "_kida_env",
        "_router",
        "_services",
        "config",
    )

    def __init__(
        self,
        config: RouterConfig | None = None,
        *,
        injector: Injector | None = None,
        kida_env: Environment | None = None,
    ) -> None:
        self.config: RouterConfig = config or RouterConfig()
        self._router = Router(self.config)
        self._injector = injector if injector is not None else Injector()
        self._services: Services | None = None
        self._engine: Engine = ResponseEngine()
        self._firewall: Firewall | None = None
        self._error_handlers: ErrorHandlers = {}
        self._frozen: bool = False
        self._freezing: bool = False
        self._freeze_lock = threading.RLock()
        self._custom_kida_env: Environment | None = kida_env

        # Compiled state, set during _freeze()
        self._kida_env: Environment | None = None

    @property
    def router(self) -> Router:
        return self._router

    @property
    def injector(self) -> Injector:
        return self._injector

    @property
    def engine(self) -> Engine:
        return self._engine

    # -- Route registration --

    def add_route(
        self,
        method: str,
        path: str,
        handler: Handler,
        *,
        name: str | None = None,
    ) -> Route:
        """Register ``handler = (container, action)`` for *method* and *path*."""
        self._check_not_frozen()
        return self._router.add_route(method, path, handler, name=name)

    def add_view(
        self,
        path: str,
        template: str,
        *,
        name: str | None = None,
        method: str = "GET",
        **context: Any,
    ) -> Route:
        """Register a route that renders *template* with no handler."""
        self._check_not_frozen()
        return self._router.add_view(path, template, name=name, method=method, **context)

    def add_group(self, prefix: str, register: Callable[[RouteGroup], Any]) -> None:
        """Register a group of routes under *prefix*.

        *register* runs once, when the app freezes.
        """
        self._check_not_frozen()
        self._router.add_group(prefix, register)

    # -- Dependencies --

    def register(self, name: type | str, target: Target | None = None, *parameters: Any) -> Dependency:
        """Register a dependency with the app's injector."""
        self._check_not_frozen()
        return self._injector.register(name, target, *parameters)

    def set_services(self, services: Services) -> None:
        """Pass *services* to every handler action as its last argument."""
        self._check_not_frozen()
        self._services = services

    # -- Engine, firewall, errors --

    def set_engine(self, engine: Engine) -> None:
        """Replace the default ``ResponseEngine``."""
        self._check_not_frozen()
        self._engine = engine

    def set_firewall(self, firewall: Firewall) -> None:
        """Check every request against *firewall* before routing."""
        self._check_not_frozen()
        self._firewall = firewall

    def protect(self, prefix: str, *, form: str, roles: Iterable[str] = ()) -> None:
        """Protect *prefix*, creating the firewall on first use."""
        self._check_not_frozen()
        if self._firewall is None:
            self._firewall = Firewall()
        self._firewall.protect(prefix, form=form, roles=roles)

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register an error handler via decorator."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Reverse routing --

    def url_for(self, name: str, /, **params: Any) -> str:
        """Build the path of the route named *name*.

        Freezes the app, so routes registered in groups are known. Called
        from a group callback while the app freezes, it sees the routes
        registered so far.
        """
        self._ensure_frozen()
        return self._router.url_for(name, **params)

    # -- Dispatch --

    def handle(self, method: str, raw_path: str, request: Request | None = None) -> Response:
        """Route one request and return the handler's response.

        Raises ``UnsupportedMethodError`` or ``RouteNotFoundError`` when
        nothing matches; handler and dependency errors propagate.
        """
        self._ensure_frozen()
        if request is None:
            request = Request(method=method.upper(), path=raw_path)

        if self._firewall is not None:
            redirect = self._firewall.check_access(raw_path, request.session)
            if redirect is not None:
                return redirect.to_response()

        match = self._router.match(method, raw_path)
        request = request.with_path_params(match.path_params)
        route = match.route

        if route.is_view:
            return self._render_view(route, request)
        return self._engine.resolve(route, request, self._injector, self._services)

    def handle_request(self, request: Request) -> Response:
        """Route *request*; errors become responses instead of exceptions.

        Setup errors raised while the app freezes (a bad route in a group,
        a missing template directory) are not request errors and propagate.
        """
        self._ensure_frozen()
        try:
            return self.handle(request.method, request.path, request)
        except HTTPError as exc:
            return handle_http_error(
                exc, request, self._error_handlers, self._kida_env, self.config.debug
            )
        except Exception as exc:
            return handle_internal_error(
                exc, request, self._error_handlers, self._kida_env, self.config.debug
            )

    def __call__(
        self,
        environ: dict[str, Any],
        start_response: Callable[..., Any],
    ) -> list[bytes]:
        """WSGI entry point."""
        self._ensure_frozen()
        session = environ.get(SESSION_ENVIRON_KEY)
        try:
            request = Request.from_environ(environ, session=session)
        except HTTPError as exc:
            # Unreadable body: answer with the bare method and path
            request = Request(
                method=environ.get("REQUEST_METHOD", "GET").upper(),
                path=environ.get("PATH_INFO") or "/",
                session=session if session is not None else {},
            )
            response = handle_http_error(
                exc, request, self._error_handlers, self._kida_env, self.config.debug
            )
        else:
            response = self.handle_request(request)
        start_response(response.status_line, response.wsgi_headers())
        return [response.body_bytes]

    def _render_view(self, route: Route, request: Request) -> Response:
        if self._kida_env is None or route.template is None:
            msg = f"View route {route.path!r} needs a kida Environment."
            raise ConfigurationError(msg)
        context = {**route.context, **request.path_params, "request": request}
        return Response(render_template(self._kida_env, Template(route.template, **context)))

    # -- Freeze --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking.

        Re-entrant calls from group callbacks return without freezing.
        """
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen or self._freezing:
                return
            self._freezing = True
            try:
                self._freeze()
            finally:
                self._freezing = False

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        # 1. Resolve groups once and compile the route table
        self._router.compile()

        # 2. Kida environment, only when something renders templates
        needs_templates = isinstance(self._engine, TemplateEngine) or any(
            route.is_view for route in self._router.routes
        )
        if self._custom_kida_env is not None:
            self._kida_env = self._custom_kida_env
        elif self.config.template_dir is not None or needs_templates:
            self._kida_env = create_environment(self.config)

        if isinstance(self._engine, TemplateEngine) and self._engine.env is None:
            self._engine = self._engine.with_environment(self._kida_env)

        self._frozen = True
        logger.debug(
            "App frozen: %d route(s), %d dependency(ies), engine %s",
            len(self._router.routes),
            len(self._injector),
            type(self._engine).__name__,
        )

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started handling requests. "
                "Register routes, groups and dependencies first."
            )
            raise RuntimeError(msg)
