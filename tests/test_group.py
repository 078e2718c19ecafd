"""Tests for waypoint.routing.group: prefixed, deferred route batches."""

from waypoint.routing.group import RouteGroup
from waypoint.routing.router import Router


class ApiController:
    def pingAction(self, request, response):
        return response

    def usersAction(self, request, response):
        return response


class TestRouteGroup:
    def test_prefix_normalized(self) -> None:
        group = RouteGroup("api/v1/", lambda g: None, Router())
        assert group.prefix == "/api/v1"
        assert repr(group) == "RouteGroup('/api/v1')"

    def test_call_runs_register(self) -> None:
        router = Router()
        group = RouteGroup("/api/v1", lambda g: g.get("/ping", (ApiController, "pingAction")), router)
        group()
        assert [r.path for r in router.routes] == ["/api/v1/ping"]

    def test_root_path_under_prefix(self) -> None:
        router = Router()
        RouteGroup("/api", lambda g: g.get("/", (ApiController, "pingAction")), router)()
        assert router.routes[0].path == "/api"

    def test_method_shortcuts(self) -> None:
        router = Router()

        def register(group: RouteGroup) -> None:
            group.get("/users", (ApiController, "usersAction"))
            group.post("/users", (ApiController, "usersAction"))

        RouteGroup("/api", register, router)()
        assert [(r.method, r.path) for r in router.routes] == [
            ("GET", "/api/users"),
            ("POST", "/api/users"),
        ]

    def test_nested_groups_compose(self) -> None:
        router = Router()

        def admin(group: RouteGroup) -> None:
            group.get("/users", (ApiController, "usersAction"), name="admin_users")

        def api(group: RouteGroup) -> None:
            group.get("/ping", (ApiController, "pingAction"))
            group.group("/admin", admin)

        RouteGroup("/api/v1", api, router)()
        assert [r.path for r in router.routes] == ["/api/v1/ping", "/api/v1/admin/users"]
        assert router.url_for("admin_users") == "/api/v1/admin/users"

    def test_view_in_group(self) -> None:
        router = Router()
        RouteGroup("/docs", lambda g: g.add_view("/intro", "intro.html"), router)()
        route = router.routes[0]
        assert route.path == "/docs/intro"
        assert route.template == "intro.html"
