"""Template engine and kida environment setup.

Handlers return a ``Template``; the engine renders it with the kida
environment the app creates once, at freeze time.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from kida import Environment, FileSystemLoader

from waypoint.config import RouterConfig
from waypoint.di.services import Services
from waypoint.engines.base import HandlerEngine
from waypoint.errors import ConfigurationError, InvalidHandlerResultError
from waypoint.http.request import Request
from waypoint.http.response import Response


@dataclass(frozen=True, slots=True)
class Template:
    """Render a kida template.

    Usage::

        return Template("post.html", title="Hello", post=post)
    """

    name: str
    context: dict[str, Any] = field(default_factory=dict)

    def __init__(self, name: str, /, **context: Any) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "context", context)


def create_environment(config: RouterConfig) -> Environment:
    """Create a kida Environment rooted at ``config.template_dir``.

    Raises ``ConfigurationError`` if no template directory is configured.
    """
    if config.template_dir is None:
        msg = "Rendering templates requires RouterConfig.template_dir (set.views.path)."
        raise ConfigurationError(msg)
    return Environment(
        loader=FileSystemLoader(str(config.template_dir)),
        autoescape=config.autoescape,
        auto_reload=config.debug,
    )


def render_template(env: Environment, tpl: Template) -> str:
    """Render a full template to string."""
    template = env.get_template(tpl.name.lstrip("/"))
    return template.render(tpl.context)


class TemplateEngine(HandlerEngine):
    """Calls ``action(request[, services])`` and renders the ``Template``.

    *env* may be omitted; the app then supplies its own environment
    with ``with_environment`` when it freezes.
    """

    __slots__ = ("env",)

    def __init__(self, env: Environment | None = None) -> None:
        self.env = env

    def with_environment(self, env: Environment) -> TemplateEngine:
        """Return an engine rendering with *env*."""
        return type(self)(env)

    def call(
        self,
        action: Callable[..., Any],
        request: Request,
        services: Services | None,
    ) -> Any:
        if services is None:
            return action(request)
        return action(request, services)

    def shape(self, handler: str, result: Any) -> Response:
        if not isinstance(result, Template):
            raise InvalidHandlerResultError(handler, "a Template", result)
        if self.env is None:
            msg = "TemplateEngine has no kida Environment."
            raise ConfigurationError(msg)
        return Response(render_template(self.env, result))
