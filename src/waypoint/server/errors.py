"""Error handling pipeline for waypoint requests.

Maps HTTPError exceptions and unexpected failures to appropriate
Response objects, using registered error handlers or sensible defaults.
"""

import inspect
import logging
import traceback
from collections.abc import Callable
from typing import Any

from kida import Environment

from waypoint.engines.template import Template, render_template
from waypoint.errors import HTTPError
from waypoint.http.request import Request
from waypoint.http.response import Redirect, Response, json_response

logger = logging.getLogger("waypoint.server")

type ErrorHandlers = dict[int | type[BaseException], Callable[..., Any]]


def _to_response(result: Any, kida_env: Environment | None) -> Response:
    if isinstance(result, Response):
        return result
    if isinstance(result, Redirect):
        return result.to_response()
    if isinstance(result, Template) and kida_env is not None:
        return Response(render_template(kida_env, result))
    if isinstance(result, (dict, list)):
        return json_response(result)
    return Response(body=str(result))


def find_error_handler(handlers: ErrorHandlers, exc: BaseException) -> Callable[..., Any] | None:
    """Exact exception type first, then the nearest registered base class."""
    for cls in type(exc).__mro__:
        handler = handlers.get(cls)
        if handler is not None:
            return handler
    return None


def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    kida_env: Environment | None,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    return _to_response(result, kida_env)


def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    kida_env: Environment | None,
    debug: bool,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    handler = (
        error_handlers.get(type(exc))
        or error_handlers.get(exc.status)
        or find_error_handler(error_handlers, exc)
    )
    if handler is not None:
        response = call_error_handler(handler, request, exc, kida_env)
        # Keep the exception's status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    resp = Response(body=detail, content_type="text/plain; charset=utf-8").with_status(exc.status)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    kida_env: Environment | None,
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors.

    The full traceback is logged. The body is generic unless *debug* is on.
    """
    logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(500) or find_error_handler(error_handlers, exc)
    if handler is not None:
        response = call_error_handler(handler, request, exc, kida_env)
        if response.status == 200:
            response = response.with_status(500)
        return response

    if debug:
        body = "".join(traceback.format_exception(exc))
        return Response(body=body, status=500, content_type="text/plain; charset=utf-8")

    return Response(body="Internal Server Error", status=500, content_type="text/plain; charset=utf-8")
