"""Route template compilation, path normalization and reverse generation.

A route template is a path with ``{name}`` placeholders::

    "/users"               static
    "/users/{id}"          one segment, captured as ``id``
    "/users/{id:int}"      typed (see ``CONVERTERS``)
    "/files/{rest:path}"   everything up to the end, separators included
    "/archive/{}/{}"       anonymous, captured under ``_matches``

Compilation is total: literal text is escaped, unknown converter types are
kept as literal text, and a repeated name becomes a backreference. Only a
blank template is rejected.
"""

import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote, unquote

from waypoint.errors import InvalidTemplateError, URLGenerationError
from waypoint.routing.params import CONVERTERS, MATCHES_KEY, PLACEHOLDER_RE


def normalize_template(path: str) -> str:
    """Return *path* with exactly one leading separator and no trailing one.

    ``"users/"`` -> ``"/users"``, ``"//"`` -> ``"/"``.
    Raises ``InvalidTemplateError`` for a blank template.
    """
    stripped = path.strip()
    if not stripped:
        msg = "Route template must not be empty."
        raise InvalidTemplateError(msg)
    return "/" + stripped.strip("/")


def join_paths(prefix: str, path: str) -> str:
    """Compose a prefix and a path without doubling or trailing separators.

    An empty or root prefix leaves *path* unchanged::

        join_paths("/api/v1", "/ping")  -> "/api/v1/ping"
        join_paths("/api/", "/")        -> "/api"
        join_paths("", "users")         -> "/users"
    """
    parts = [part for part in (prefix.strip().strip("/"), path.strip().strip("/")) if part]
    return "/" + "/".join(parts)


def normalize_path(raw_path: str) -> str:
    """Normalize a raw request path for matching.

    Strips the query string and fragment, decodes percent-encoding, ensures
    a leading separator and strips exactly one trailing separator unless
    the path is the root.
    """
    path = raw_path.split("?", 1)[0].split("#", 1)[0]
    path = unquote(path)
    if not path.startswith("/"):
        path = "/" + path
    if path != "/" and path.endswith("/"):
        path = path[:-1]
    return path


def compile_template(template: str, *, prefix: bool = False) -> re.Pattern[str]:
    """Compile a route template into a case-insensitive pattern.

    The pattern matches the entire normalized path. With ``prefix=True``
    it matches any path that starts with the template at a segment
    boundary (``/admin`` matches ``/admin/users`` but not ``/administrator``).
    """
    normalized = normalize_template(template)
    body = _template_regex(normalized)
    if not prefix:
        return re.compile(rf"\A{body}\Z", re.IGNORECASE)
    if normalized == "/":
        return re.compile(r"\A/", re.IGNORECASE)
    return re.compile(rf"\A{body}(?=/|\Z)", re.IGNORECASE)


def template_params(template: str) -> dict[str, str]:
    """Return ``{name: converter type}`` for the placeholders of *template*.

    Names appear in template order; anonymous placeholders and unknown
    converter types are skipped.
    """
    params: dict[str, str] = {}
    for placeholder in PLACEHOLDER_RE.finditer(template):
        name = placeholder.group("name")
        param_type = placeholder.group("type") or "str"
        if name and param_type in CONVERTERS:
            params.setdefault(name, param_type)
    return params


def build_path(template: str, params: Mapping[str, Any]) -> str:
    """Substitute *params* into *template* (reverse routing).

    Uses the same placeholder grammar as ``compile_template``. Values are
    percent-encoded; ``path`` placeholders keep their separators. Anonymous
    placeholders consume ``params["_matches"]`` in order.

    Raises ``URLGenerationError`` if a placeholder has no value.
    """
    positional = list(params.get(MATCHES_KEY, ()))

    def substitute(placeholder: re.Match[str]) -> str:
        name = placeholder.group("name")
        param_type = placeholder.group("type") or "str"
        if param_type not in CONVERTERS:
            return placeholder.group(0)
        if name is None:
            if not positional:
                msg = f"Missing positional parameter for {template!r}."
                raise URLGenerationError(msg)
            value = positional.pop(0)
        elif name in params:
            value = params[name]
        else:
            msg = f"Missing parameter {name!r} for {template!r}."
            raise URLGenerationError(msg)
        safe = "/" if param_type == "path" else ""
        return quote(str(value), safe=safe)

    return normalize_template(PLACEHOLDER_RE.sub(substitute, template))


def _template_regex(template: str) -> str:
    """Translate a normalized template into a regex body (no anchors)."""
    parts: list[str] = []
    seen: set[str] = set()
    position = 0
    for placeholder in PLACEHOLDER_RE.finditer(template):
        parts.append(re.escape(template[position : placeholder.start()]))
        position = placeholder.end()

        name = placeholder.group("name")
        param_type = placeholder.group("type") or "str"
        if param_type not in CONVERTERS:
            parts.append(re.escape(placeholder.group(0)))
            continue

        pattern, _ = CONVERTERS[param_type]
        if name is None:
            parts.append(f"({pattern})")
        elif name in seen:
            parts.append(f"(?P={name})")
        else:
            seen.add(name)
            parts.append(f"(?P<{name}>{pattern})")

    parts.append(re.escape(template[position:]))
    return "".join(parts)
