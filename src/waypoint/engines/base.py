"""Handler resolution shared by the built-in engines.

A route's ``HandlerRef`` names a container and an action. The container
instance comes from the injector when it is registered there, otherwise
the class is constructed with no arguments. The action is then called
with engine-specific arguments and its result validated.
"""

import inspect
import logging
from collections.abc import Callable
from functools import partial
from typing import Any

from waypoint.di.dependency import import_class
from waypoint.di.injector import Injector
from waypoint.di.services import Services
from waypoint.errors import ClassNotFoundError, DependencyError, HandlerNotFoundError
from waypoint.http.request import Request
from waypoint.http.response import Response
from waypoint.routing.route import HandlerRef, Route

logger = logging.getLogger("waypoint.engines")


def handler_instance(ref: HandlerRef, injector: Injector) -> Any:
    """Return an instance of the container *ref* points at.

    Raises ``HandlerNotFoundError`` (with the underlying error chained)
    if the container is neither registered nor constructible.
    """
    name = ref.dependency_name
    if injector.has(name):
        try:
            return injector.resolve(name)
        except DependencyError as exc:
            msg = f"Handler container {name!r} could not be resolved: {exc}"
            raise HandlerNotFoundError(msg) from exc

    container = ref.container
    if isinstance(container, str):
        try:
            container = import_class(container)
        except ClassNotFoundError as exc:
            msg = f"Handler container {name!r} is not registered and does not exist."
            raise HandlerNotFoundError(msg) from exc

    try:
        signature = inspect.signature(container)
    except ValueError:
        # No introspectable signature (some builtins): just try it
        return container()
    try:
        signature.bind()
    except TypeError as exc:
        msg = (
            f"Handler container {container.__qualname__} is not registered "
            f"and cannot be constructed without arguments."
        )
        raise HandlerNotFoundError(msg) from exc
    return container()


def handler_action(ref: HandlerRef, injector: Injector) -> Callable[..., Any]:
    """Return the bound action for *ref*.

    Class containers reuse the function looked up when the route was
    registered; other containers look the action up on the instance.
    """
    instance = handler_instance(ref, injector)
    if ref.func is not None and isinstance(ref.container, type) and isinstance(instance, ref.container):
        return partial(ref.func, instance)

    action = getattr(instance, ref.action, None)
    if not callable(action):
        msg = f"{type(instance).__qualname__} has no action {ref.action!r}."
        raise HandlerNotFoundError(msg)
    return action


class HandlerEngine:
    """Base for engines that call a ``HandlerRef`` action.

    Subclasses supply ``call`` (how the action is invoked) and ``shape``
    (how its result becomes a ``Response``).
    """

    __slots__ = ()

    def resolve(
        self,
        route: Route,
        request: Request,
        injector: Injector,
        services: Services | None = None,
    ) -> Response:
        ref = route.handler
        if not isinstance(ref, HandlerRef):
            msg = f"Route {route.method} {route.path!r} has no handler."
            raise HandlerNotFoundError(msg)

        action = handler_action(ref, injector)
        logger.debug("%s %s -> %s", request.method, route.path, ref)
        result = self.call(action, request, services)
        return self.shape(str(ref), result)

    def call(
        self,
        action: Callable[..., Any],
        request: Request,
        services: Services | None,
    ) -> Any:
        raise NotImplementedError

    def shape(self, handler: str, result: Any) -> Response:
        raise NotImplementedError
