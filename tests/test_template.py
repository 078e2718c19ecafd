"""Tests for waypoint.routing.template: compilation and normalization."""

import pytest

from waypoint.errors import InvalidTemplateError, URLGenerationError
from waypoint.routing.template import (
    build_path,
    compile_template,
    join_paths,
    normalize_path,
    normalize_template,
    template_params,
)


class TestNormalizeTemplate:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("users", "/users"),
            ("/users/", "/users"),
            ("//users//", "/users"),
            ("/", "/"),
            ("//", "/"),
            ("  /a/b  ", "/a/b"),
        ],
    )
    def test_normalizes(self, raw: str, expected: str) -> None:
        assert normalize_template(raw) == expected

    def test_idempotent(self) -> None:
        once = normalize_template("/users/{id}/")
        assert normalize_template(once) == once

    @pytest.mark.parametrize("raw", ["", "   "])
    def test_blank_rejected(self, raw: str) -> None:
        with pytest.raises(InvalidTemplateError):
            normalize_template(raw)


class TestNormalizePath:
    def test_strips_query_and_fragment(self) -> None:
        assert normalize_path("/users?page=2#top") == "/users"

    def test_strips_one_trailing_slash(self) -> None:
        assert normalize_path("/users/") == "/users"

    def test_strips_exactly_one_trailing_slash(self) -> None:
        assert normalize_path("/users//") == "/users/"

    @pytest.mark.parametrize("path", ["/", "/users", "/users/42/posts"])
    def test_idempotent(self, path: str) -> None:
        assert normalize_path(path) == path
        assert normalize_path(normalize_path(path)) == path

    def test_root_kept(self) -> None:
        assert normalize_path("/") == "/"
        assert normalize_path("") == "/"

    def test_adds_leading_slash(self) -> None:
        assert normalize_path("users") == "/users"

    def test_decodes_percent_encoding(self) -> None:
        assert normalize_path("/hello%20world") == "/hello world"


class TestJoinPaths:
    @pytest.mark.parametrize(
        ("prefix", "path", "expected"),
        [
            ("/api/v1", "/ping", "/api/v1/ping"),
            ("/api/v1/", "ping", "/api/v1/ping"),
            ("/api", "/", "/api"),
            ("", "/users", "/users"),
            ("/", "/users", "/users"),
        ],
    )
    def test_join(self, prefix: str, path: str, expected: str) -> None:
        assert join_paths(prefix, path) == expected


class TestCompileTemplate:
    def test_static_exact(self) -> None:
        pattern = compile_template("/users")
        assert pattern.match("/users")
        assert not pattern.match("/users/1")
        assert not pattern.match("/user")

    def test_case_insensitive(self) -> None:
        assert compile_template("/Users").match("/users")

    def test_named_group(self) -> None:
        found = compile_template("/users/{id}").match("/users/42")
        assert found is not None
        assert found.group("id") == "42"

    def test_param_does_not_cross_separator(self) -> None:
        assert not compile_template("/users/{id}").match("/users/42/edit")

    def test_typed_int(self) -> None:
        pattern = compile_template("/users/{id:int}")
        assert pattern.match("/users/42")
        assert not pattern.match("/users/abc")

    def test_path_converter_spans_segments(self) -> None:
        found = compile_template("/files/{rest:path}").match("/files/a/b/c.txt")
        assert found is not None
        assert found.group("rest") == "a/b/c.txt"

    def test_literal_text_escaped(self) -> None:
        pattern = compile_template("/report.json")
        assert pattern.match("/report.json")
        assert not pattern.match("/reportXjson")

    def test_unknown_type_kept_literal(self) -> None:
        pattern = compile_template("/items/{id:uuid}")
        assert pattern.match("/items/{id:uuid}")
        assert not pattern.match("/items/123")

    def test_repeated_name_is_backreference(self) -> None:
        pattern = compile_template("/{a}/{a}")
        assert pattern.match("/x/x")
        assert not pattern.match("/x/y")

    def test_anonymous_capture(self) -> None:
        found = compile_template("/archive/{}/{}").match("/archive/2024/05")
        assert found is not None
        assert found.groups() == ("2024", "05")

    def test_root(self) -> None:
        pattern = compile_template("/")
        assert pattern.match("/")
        assert not pattern.match("/x")


class TestPrefixPattern:
    def test_matches_at_segment_boundary(self) -> None:
        pattern = compile_template("/admin", prefix=True)
        assert pattern.match("/admin")
        assert pattern.match("/admin/users")
        assert not pattern.match("/administrator")

    def test_placeholder_prefix(self) -> None:
        pattern = compile_template("/users/{id}/settings", prefix=True)
        assert pattern.match("/users/7/settings/email")
        assert not pattern.match("/users/7/profile")

    def test_root_prefix_matches_everything(self) -> None:
        pattern = compile_template("/", prefix=True)
        assert pattern.match("/anything/at/all")


class TestTemplateParams:
    def test_types_in_order(self) -> None:
        assert template_params("/u/{id:int}/{slug}") == {"id": "int", "slug": "str"}

    def test_skips_anonymous_and_unknown(self) -> None:
        assert template_params("/{}/{x:uuid}/{y}") == {"y": "str"}


class TestBuildPath:
    def test_substitutes(self) -> None:
        assert build_path("/users/{id}", {"id": 42}) == "/users/42"

    def test_quotes_values(self) -> None:
        assert build_path("/tags/{tag}", {"tag": "a b/c"}) == "/tags/a%20b%2Fc"

    def test_path_keeps_separators(self) -> None:
        assert build_path("/files/{rest:path}", {"rest": "a/b.txt"}) == "/files/a/b.txt"

    def test_anonymous_from_matches(self) -> None:
        assert build_path("/archive/{}/{}", {"_matches": ["2024", "05"]}) == "/archive/2024/05"

    def test_missing_param(self) -> None:
        with pytest.raises(URLGenerationError, match="slug"):
            build_path("/posts/{slug}", {})

    def test_missing_positional(self) -> None:
        with pytest.raises(URLGenerationError):
            build_path("/archive/{}", {})

    def test_round_trip(self) -> None:
        template = "/users/{id:int}/posts/{slug}"
        path = build_path(template, {"id": 7, "slug": "hello-world"})
        found = compile_template(template).match(path)
        assert found is not None
        assert found.groupdict() == {"id": "7", "slug": "hello-world"}
