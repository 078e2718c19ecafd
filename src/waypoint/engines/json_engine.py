"""JSON engine: handlers return data, the engine serializes it."""

from collections.abc import Callable
from typing import Any

from waypoint.di.services import Services
from waypoint.engines.base import HandlerEngine
from waypoint.errors import InvalidHandlerResultError
from waypoint.http.request import Request
from waypoint.http.response import Response, json_response


class JSONEngine(HandlerEngine):
    """Calls ``action(request[, services])`` and serializes the result.

    The action must return a ``dict`` or a ``list``. Values ``json`` cannot
    encode natively are converted with ``str``.
    """

    __slots__ = ("indent",)

    def __init__(self, indent: int | None = 4) -> None:
        self.indent = indent

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
        if not isinstance(result, (dict, list)):
            raise InvalidHandlerResultError(handler, "a dict or list", result)
        return json_response(result, indent=self.indent)
