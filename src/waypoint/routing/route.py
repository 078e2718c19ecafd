"""HandlerRef, Route and RouteMatch frozen dataclasses."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any

from waypoint.di.dependency import dependency_name
from waypoint.errors import ConfigurationError
from waypoint.routing.params import MATCHES_KEY
from waypoint.routing.template import (
    compile_template,
    join_paths,
    normalize_template,
    template_params,
)


@dataclass(frozen=True, slots=True)
class HandlerRef:
    """Points a route at an action on a handler container.

    *container* is a class, the name of a registered dependency, or a
    ``"module:Class"`` import string. When it is a class the action is
    looked up once, here, and kept in ``func``; requests never look the
    action up by name for class containers.
    """

    container: type | str
    action: str
    func: Callable[..., Any] | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.container, type) and self.func is None:
            func = getattr(self.container, self.action, None)
            if not callable(func):
                msg = f"{self.container.__qualname__} has no action {self.action!r}."
                raise ConfigurationError(msg)
            object.__setattr__(self, "func", func)

    @property
    def container_name(self) -> str:
        """Short container name used for the naming-convention check."""
        if isinstance(self.container, type):
            return self.container.__name__
        return re.split(r"[.:]", self.container)[-1]

    @property
    def dependency_name(self) -> str:
        """The injector key this container is looked up under."""
        return dependency_name(self.container)

    def __str__(self) -> str:
        return f"{self.container_name}.{self.action}"


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    ``path`` is normalized on construction and ``pattern`` is derived
    from it. A route either points at a handler (``HandlerRef`` or a
    ``(container, action)`` pair) or, for view routes, at a ``template``
    rendered with ``context`` plus the path parameters.
    """

    method: str
    path: str
    handler: HandlerRef | tuple[type | str, str] | None = None
    name: str | None = None
    template: str | None = None
    context: dict[str, Any] = field(default_factory=dict, compare=False)
    pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)
    param_types: dict[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.strip().upper())
        object.__setattr__(self, "path", normalize_template(self.path))
        if self.handler is not None and not isinstance(self.handler, HandlerRef):
            container, action = self.handler
            object.__setattr__(self, "handler", HandlerRef(container, action))
        if self.handler is None and self.template is None:
            msg = f"Route {self.method} {self.path!r} needs a handler or a template."
            raise ConfigurationError(msg)
        object.__setattr__(self, "pattern", compile_template(self.path))
        object.__setattr__(self, "param_types", template_params(self.path))

    @property
    def is_view(self) -> bool:
        """True for routes that render a template without a handler."""
        return self.handler is None

    def with_prefix(self, prefix: str) -> Route:
        """Return a copy with *prefix* prepended to the path."""
        if not prefix.strip().strip("/"):
            return self
        return replace(self, path=join_paths(prefix, self.path))


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, Any]

    @property
    def positional(self) -> list[str]:
        """Unnamed captures, in capture order."""
        return list(self.path_params.get(MATCHES_KEY, ()))
