"""Waypoint: request routing and dependency resolution for small web apps.

Ordered first-match routing, route groups, a dependency injector and
pluggable response engines.

Basic usage::

    from waypoint import App, Request

    class HelloController:
        def indexAction(self, request, response):
            return response.with_content("Hello, World!")

    app = App()
    app.get("/", (HelloController, "indexAction"))

    app.handle_request(Request("GET", "/")).text  # "Hello, World!"
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "ConfigurationError",
    "Dependency",
    "Firewall",
    "HTTPError",
    "Injector",
    "JSONEngine",
    "Literal",
    "Redirect",
    "Request",
    "Response",
    "ResponseEngine",
    "Route",
    "RouteGroup",
    "RouteNotFoundError",
    "Router",
    "RouterConfig",
    "Services",
    "Template",
    "TemplateEngine",
    "UnsupportedMethodError",
    "WaypointError",
]

# Public name -> defining module
_LAZY_IMPORTS: dict[str, str] = {
    "App": "waypoint.app",
    "ConfigurationError": "waypoint.errors",
    "Dependency": "waypoint.di.dependency",
    "Firewall": "waypoint.firewall",
    "HTTPError": "waypoint.errors",
    "Injector": "waypoint.di.injector",
    "JSONEngine": "waypoint.engines.json_engine",
    "Literal": "waypoint.di.dependency",
    "Redirect": "waypoint.http.response",
    "Request": "waypoint.http.request",
    "Response": "waypoint.http.response",
    "ResponseEngine": "waypoint.engines.application",
    "Route": "waypoint.routing.route",
    "RouteGroup": "waypoint.routing.group",
    "RouteNotFoundError": "waypoint.errors",
    "Router": "waypoint.routing.router",
    "RouterConfig": "waypoint.config",
    "Services": "waypoint.di.services",
    "Template": "waypoint.engines.template",
    "TemplateEngine": "waypoint.engines.template",
    "UnsupportedMethodError": "waypoint.errors",
    "WaypointError": "waypoint.errors",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import waypoint`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
