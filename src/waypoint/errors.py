"""Waypoint exception hierarchy.

Shared across Router, Injector, engines, and App so every module
raises and catches the same types.

Registration-time errors derive from ``ConfigurationError`` and are fatal
to startup. Routing failures derive from ``HTTPError`` and carry the status
the top-level handler responds with. Resolution failures derive from
``DependencyError`` and handler failures from ``HandlerError``; both are
programming errors and surface as 500s.
"""

from collections.abc import Iterable
from dataclasses import dataclass


class WaypointError(Exception):
    """Base for all waypoint-specific errors."""


class ConfigurationError(WaypointError):
    """Raised when router, injector, or app configuration is invalid.

    Typically raised while routes and dependencies are registered, or
    during ``App._freeze()`` at startup.
    """


class InvalidTemplateError(ConfigurationError):
    """A route template is blank."""


class NamingConventionError(ConfigurationError):
    """A handler container or action name lacks the configured suffix."""


class DuplicateRouteNameError(ConfigurationError):
    """Two routes were registered under the same name."""


class DuplicateDependencyError(ConfigurationError):
    """A dependency name was registered twice."""


@dataclass(frozen=True, slots=True)
class HTTPError(WaypointError):
    """An error that maps directly to an HTTP status code.

    Raised by the router or by handlers. ``App.handle_request`` catches
    these and dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class RouteNotFoundError(HTTPError):
    """404: no route pattern matched the normalized path.

    A path that is registered only under another method is still a
    no-match for the requested method.
    """

    def __init__(self, method: str, path: str, detail: str = "") -> None:
        super().__init__(
            status=404,
            detail=detail or f"The {method} request {path!r} did not match any route.",
        )
        object.__setattr__(self, "method", method)
        object.__setattr__(self, "path", path)


class UnsupportedMethodError(HTTPError):
    """405: the method is outside the configured supported set.

    Raised both for incoming requests and for route registration.
    Includes an ``Allow`` header listing the supported methods.
    """

    def __init__(
        self,
        method: str,
        supported: Iterable[str] = (),
        detail: str = "",
    ) -> None:
        allow_value = ", ".join(sorted(supported))
        default_detail = f"HTTP method {method} is not supported."
        if allow_value:
            default_detail += f" Supported methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),) if allow_value else (),
        )
        object.__setattr__(self, "method", method)


class URLGenerationError(WaypointError):
    """A URL could not be built from a route name and parameters."""


class DependencyError(WaypointError):
    """Base for errors raised while resolving a dependency."""


class DependencyNotFoundError(DependencyError):
    """No dependency is registered under the requested name."""


class ClassNotFoundError(DependencyError):
    """A dependency target names a class that does not exist."""


class CyclicDependencyError(DependencyError):
    """A dependency names itself, directly or through its parameters."""

    def __init__(self, chain: tuple[str, ...]) -> None:
        self.chain = chain
        super().__init__(f"Circular dependency detected: {' -> '.join(chain)}")


class HandlerError(WaypointError):
    """Base for errors raised while invoking a route handler."""


class HandlerNotFoundError(HandlerError):
    """The route's handler container could not be resolved or constructed."""


class InvalidHandlerResultError(HandlerError):
    """A handler action returned a value of the wrong shape for the engine."""

    def __init__(self, handler: str, expected: str, actual: object) -> None:
        self.handler = handler
        self.expected = expected
        self.actual = type(actual).__name__
        super().__init__(f"{handler}() must return {expected}, got {self.actual}.")
