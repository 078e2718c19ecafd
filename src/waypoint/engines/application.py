"""Default engine: handlers build the ``Response`` themselves."""

from collections.abc import Callable
from typing import Any

from waypoint.di.services import Services
from waypoint.engines.base import HandlerEngine
from waypoint.errors import InvalidHandlerResultError
from waypoint.http.request import Request
from waypoint.http.response import Redirect, Response


class ResponseEngine(HandlerEngine):
    """Calls ``action(request, Response()[, services])``.

    The action must return a ``Response`` (a ``Redirect`` is accepted and
    materialized)::

        class BlogController:
            def showAction(self, request, response):
                return response.with_content(f"Post {request.path_params['slug']}")
    """

    __slots__ = ()

    def call(
        self,
        action: Callable[..., Any],
        request: Request,
        services: Services | None,
    ) -> Any:
        if services is None:
            return action(request, Response())
        return action(request, Response(), services)

    def shape(self, handler: str, result: Any) -> Response:
        if isinstance(result, Response):
            return result
        if isinstance(result, Redirect):
            return result.to_response()
        raise InvalidHandlerResultError(handler, "a Response", result)
