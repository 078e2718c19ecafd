"""Response engine protocol.

An engine is any object matching::

    def resolve(route, request, injector, services=None) -> Response: ...

No base class required. The app checks the shape, not the lineage.
The built-in engines share handler resolution through ``HandlerEngine``.
"""

from typing import Protocol

from waypoint.di.injector import Injector
from waypoint.di.services import Services
from waypoint.http.request import Request
from waypoint.http.response import Response
from waypoint.routing.route import Route


class Engine(Protocol):
    """Protocol for response engines.

    Invokes the matched route's handler action and shapes its return
    value into a ``Response``::

        class TextEngine:
            def resolve(self, route, request, injector, services=None) -> Response:
                instance = injector.resolve(route.handler.dependency_name)
                text = getattr(instance, route.handler.action)(request)
                return Response(text, content_type="text/plain; charset=utf-8")
    """

    def resolve(
        self,
        route: Route,
        request: Request,
        injector: Injector,
        services: Services | None = None,
    ) -> Response: ...
