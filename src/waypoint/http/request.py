"""Immutable HTTP request.

Frozen metadata plus the query, body and server parameter bags. The
router never builds requests; a request arrives from the hosting server
(``from_environ`` for WSGI) or is constructed directly in tests.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from waypoint.errors import HTTPError
from waypoint.http.params import Params


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``path`` is the raw request target; the router normalizes it before
    matching. ``path_params`` is empty until a route has matched and the
    app attaches the captured parameters with ``with_path_params``.
    """

    method: str
    path: str
    query: Params = field(default_factory=Params)
    body: Mapping[str, Any] = field(default_factory=dict)
    server: Mapping[str, Any] = field(default_factory=dict)
    path_params: dict[str, Any] = field(default_factory=dict)
    session: Mapping[str, Any] = field(default_factory=dict)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type reported by the server, if any."""
        return self.server.get("CONTENT_TYPE") or None

    @property
    def url(self) -> str:
        """Request path with the query string, as received."""
        qs = self.server.get("QUERY_STRING", "")
        if qs and "?" not in self.path:
            return f"{self.path}?{qs}"
        return self.path

    def param(self, name: str, default: Any = None) -> Any:
        """Look *name* up in path, body, then query parameters."""
        for source in (self.path_params, self.body, self.query):
            if name in source:
                return source[name]
        return default

    # -- Transformations --

    def with_path_params(self, path_params: Mapping[str, Any]) -> Request:
        """Return a copy carrying the matched route's parameters."""
        return replace(self, path_params=dict(path_params))

    def with_session(self, session: Mapping[str, Any]) -> Request:
        """Return a copy carrying *session*."""
        return replace(self, session=session)

    # -- Factory --

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, Any],
        session: Mapping[str, Any] | None = None,
    ) -> Request:
        """Create a Request from a WSGI environ.

        Url-encoded and JSON bodies are read from ``wsgi.input`` once, here.
        Any other body is left unread and ``body`` is empty.

        Raises a 400 ``HTTPError`` if a JSON body cannot be decoded.
        """
        path = environ.get("PATH_INFO") or "/"
        query_string = environ.get("QUERY_STRING", "")
        server = {key: value for key, value in environ.items() if isinstance(value, str)}
        return cls(
            method=environ.get("REQUEST_METHOD", "GET").upper(),
            path=path,
            query=Params.from_query_string(query_string),
            body=_read_body(environ),
            server=server,
            session=session if session is not None else {},
        )


def _read_body(environ: Mapping[str, Any]) -> Mapping[str, Any]:
    stream = environ.get("wsgi.input")
    content_type = (environ.get("CONTENT_TYPE") or "").split(";", 1)[0].strip().lower()
    try:
        length = int(environ.get("CONTENT_LENGTH") or 0)
    except ValueError:
        length = 0
    if stream is None or length <= 0:
        return {}

    if content_type == "application/x-www-form-urlencoded":
        return Params.from_query_string(stream.read(length))
    if content_type == "application/json":
        try:
            decoded = json_module.loads(stream.read(length))
        except ValueError as exc:
            raise HTTPError(status=400, detail="Request body is not valid JSON.") from exc
        return decoded if isinstance(decoded, dict) else {}
    return {}
