"""Tests for waypoint.routing.router: ordered first-match routing."""

import pytest

from waypoint.config import RouterConfig
from waypoint.errors import (
    ConfigurationError,
    DuplicateRouteNameError,
    NamingConventionError,
    RouteNotFoundError,
    UnsupportedMethodError,
    URLGenerationError,
)
from waypoint.routing.route import HandlerRef, Route
from waypoint.routing.router import Router


class UserController:
    def showAction(self, request, response):
        return response

    def newAction(self, request, response):
        return response

    def createAction(self, request, response):
        return response


class Users:
    def show(self, request, response):
        return response


class TestRegistration:
    def test_add_applies_base_path(self) -> None:
        router = Router(RouterConfig(base_path="/app/"))
        route = router.get("/users", (UserController, "showAction"))
        assert route.path == "/app/users"
        assert router.routes == [route]

    def test_unsupported_method_rejected(self) -> None:
        router = Router()
        with pytest.raises(UnsupportedMethodError) as exc_info:
            router.put("/users", (UserController, "showAction"))
        assert exc_info.value.status == 405
        assert "PUT" in exc_info.value.detail

    def test_configured_methods_accepted(self) -> None:
        router = Router(RouterConfig(supported_methods=("GET", "POST", "PUT")))
        route = router.put("/users", (UserController, "showAction"))
        assert route.method == "PUT"

    def test_duplicate_name_rejected(self) -> None:
        router = Router()
        router.get("/a", (UserController, "showAction"), name="user")
        with pytest.raises(DuplicateRouteNameError, match="user"):
            router.get("/b", (UserController, "newAction"), name="user")

    def test_unnamed_routes_do_not_collide(self) -> None:
        router = Router()
        router.get("/a", (UserController, "showAction"))
        router.get("/b", (UserController, "showAction"))
        assert len(router.routes) == 2

    def test_container_suffix_enforced(self) -> None:
        router = Router()
        with pytest.raises(NamingConventionError, match="Controller"):
            router.get("/users", (Users, "show"))

    def test_action_suffix_enforced(self) -> None:
        class PostController:
            def show(self, request, response):
                return response

        router = Router()
        with pytest.raises(NamingConventionError, match="Action"):
            router.get("/posts", (PostController, "show"))

    def test_string_container_suffix_checked(self) -> None:
        router = Router()
        with pytest.raises(NamingConventionError):
            router.get("/users", ("app.handlers:Users", "showAction"))

    def test_naming_can_be_disabled(self) -> None:
        router = Router(RouterConfig(enforce_naming=False))
        route = router.get("/users", (Users, "show"))
        assert isinstance(route.handler, HandlerRef)

    def test_custom_suffixes(self) -> None:
        router = Router(RouterConfig(controller_suffix="s", action_suffix=""))
        router.get("/users", (Users, "show"))

    def test_view_routes_skip_naming(self) -> None:
        router = Router()
        route = router.add_view("/about", "about.html", name="about", title="About")
        assert route.is_view
        assert route.context == {"title": "About"}

    def test_add_after_compile_rejected(self) -> None:
        router = Router()
        router.compile()
        with pytest.raises(ConfigurationError):
            router.get("/late", (UserController, "showAction"))

    def test_routes_for_method(self) -> None:
        router = Router()
        get_route = router.get("/users", (UserController, "showAction"))
        router.post("/users", (UserController, "createAction"))
        assert router.routes_for("get") == [get_route]

    def test_names(self) -> None:
        router = Router(RouterConfig(base_path="/app"))
        router.get("/users/{id}", (UserController, "showAction"), name="user")
        assert router.names == {"user": "/app/users/{id}"}


class TestMatching:
    def test_order_precedence(self) -> None:
        """The first registered route wins, even if a later one is more specific."""
        router = Router()
        router.get("/users/{id}", (UserController, "showAction"))
        router.get("/users/new", (UserController, "newAction"))
        router.compile()

        match = router.match("GET", "/users/new")
        assert match.route.handler.action == "showAction"
        assert match.path_params == {"id": "new"}

    def test_specific_first_wins(self) -> None:
        router = Router()
        router.get("/users/new", (UserController, "newAction"))
        router.get("/users/{id}", (UserController, "showAction"))
        router.compile()

        assert router.match("GET", "/users/new").route.handler.action == "newAction"
        assert router.match("GET", "/users/9").route.handler.action == "showAction"

    def test_method_isolation(self) -> None:
        """A POST-only route is not found for GET."""
        router = Router()
        router.post("/articles", (UserController, "createAction"))
        router.compile()

        with pytest.raises(RouteNotFoundError) as exc_info:
            router.match("GET", "/articles")
        assert exc_info.value.method == "GET"
        assert exc_info.value.path == "/articles"

    def test_unsupported_request_method(self) -> None:
        router = Router()
        router.compile()
        with pytest.raises(UnsupportedMethodError) as exc_info:
            router.match("DELETE", "/users")
        assert ("Allow", "GET, POST") in exc_info.value.headers

    def test_method_is_case_insensitive(self) -> None:
        router = Router()
        router.get("/users", (UserController, "showAction"))
        router.compile()
        assert router.match("get", "/users").route.path == "/users"

    def test_raw_path_normalized(self) -> None:
        router = Router()
        router.get("/users", (UserController, "showAction"))
        router.compile()
        assert router.match("GET", "/users/?page=2").route.path == "/users"

    def test_path_case_insensitive(self) -> None:
        router = Router()
        router.get("/users", (UserController, "showAction"))
        router.compile()
        assert router.match("GET", "/USERS").route.path == "/users"

    def test_typed_params_converted(self) -> None:
        router = Router()
        router.get("/users/{id:int}", (UserController, "showAction"))
        router.compile()
        assert router.match("GET", "/users/42").path_params == {"id": 42}

    def test_anonymous_captures(self) -> None:
        router = Router()
        router.get("/archive/{}/{}", (UserController, "showAction"))
        router.compile()
        match = router.match("GET", "/archive/2024/05")
        assert match.path_params == {"_matches": ["2024", "05"]}
        assert match.positional == ["2024", "05"]

    def test_mixed_captures(self) -> None:
        router = Router()
        router.get("/blog/{slug}/{}", (UserController, "showAction"))
        router.compile()
        params = router.match("GET", "/blog/hello/2").path_params
        assert params == {"slug": "hello", "_matches": ["2"]}

    def test_base_path_matching(self) -> None:
        router = Router(RouterConfig(base_path="/app"))
        router.get("/", (UserController, "showAction"))
        router.compile()
        assert router.match("GET", "/app").route.path == "/app"
        with pytest.raises(RouteNotFoundError):
            router.match("GET", "/")

    def test_no_match(self) -> None:
        router = Router()
        router.get("/users", (UserController, "showAction"))
        router.compile()
        with pytest.raises(RouteNotFoundError):
            router.match("GET", "/posts")

    def test_deterministic(self) -> None:
        router = Router()
        router.get("/users/{id}", (UserController, "showAction"))
        router.get("/users/new", (UserController, "newAction"))
        router.compile()
        results = {router.match("GET", "/users/new").route for _ in range(20)}
        assert len(results) == 1


class TestGroups:
    def test_group_prefix_composed(self) -> None:
        router = Router()
        router.add_group("/api/v1", lambda group: group.get("/ping", (UserController, "showAction")))
        router.compile()

        match = router.match("GET", "/api/v1/ping")
        assert match.route.path == "/api/v1/ping"

    def test_group_deferred_until_resolved(self) -> None:
        router = Router()
        router.add_group("/api", lambda group: group.get("/ping", (UserController, "showAction")))
        assert router.routes == []
        router.resolve_groups()
        assert [r.path for r in router.routes] == ["/api/ping"]

    def test_groups_resolved_once(self) -> None:
        calls: list[str] = []

        def register(group) -> None:
            calls.append(group.prefix)
            group.get("/ping", (UserController, "showAction"))

        router = Router()
        router.add_group("/api", register)
        router.resolve_groups()
        router.resolve_groups()
        router.compile()
        assert calls == ["/api"]
        assert len(router.routes) == 1

    def test_group_failure_is_sticky(self) -> None:
        """A group that fails to register keeps failing; later groups are not lost quietly."""
        router = Router()
        router.add_group("/bad", lambda group: group.put("/x", (UserController, "showAction")))
        router.add_group("/api", lambda group: group.get("/ping", (UserController, "showAction")))

        with pytest.raises(UnsupportedMethodError):
            router.compile()
        with pytest.raises(UnsupportedMethodError):
            router.compile()
        with pytest.raises(ConfigurationError):
            router.add_group("/late", lambda group: None)

    def test_add_group_after_resolution_rejected(self) -> None:
        router = Router()
        router.resolve_groups()
        with pytest.raises(ConfigurationError):
            router.add_group("/late", lambda group: None)

    def test_group_routes_get_base_path(self) -> None:
        router = Router(RouterConfig(base_path="/app"))
        router.add_group("/api", lambda group: group.get("/ping", (UserController, "showAction")))
        router.compile()
        assert router.match("GET", "/app/api/ping").route.path == "/app/api/ping"

    def test_groups_keep_registration_order(self) -> None:
        router = Router()
        router.get("/first", (UserController, "showAction"))
        router.add_group("/g", lambda group: group.get("/x", (UserController, "showAction")))
        router.get("/last", (UserController, "showAction"))
        router.compile()
        assert [r.path for r in router.routes] == ["/first", "/last", "/g/x"]


class TestUrlFor:
    def test_builds_path(self) -> None:
        router = Router(RouterConfig(base_path="/app"))
        router.get("/users/{id:int}", (UserController, "showAction"), name="user")
        assert router.url_for("user", id=7) == "/app/users/7"

    def test_round_trip(self) -> None:
        router = Router()
        router.get("/posts/{slug}/{page:int}", (UserController, "showAction"), name="post")
        router.compile()
        path = router.url_for("post", slug="hello", page=3)
        assert router.match("GET", path).path_params == {"slug": "hello", "page": 3}

    def test_unknown_name(self) -> None:
        with pytest.raises(URLGenerationError, match="nope"):
            Router().url_for("nope")

    def test_missing_param(self) -> None:
        router = Router()
        router.get("/users/{id}", (UserController, "showAction"), name="user")
        with pytest.raises(URLGenerationError):
            router.url_for("user")


class TestAddPrebuiltRoute:
    def test_add_route_object(self) -> None:
        router = Router()
        stored = router.add(Route("POST", "/users", (UserController, "createAction"), name="create"))
        router.compile()
        assert router.match("POST", "/users").route == stored
