"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response. Engines hand a fresh
``Response()`` to the handler, which returns the transformed copy.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, replace
from http import HTTPStatus
from typing import Any


def _check_status(status: int) -> int:
    try:
        return HTTPStatus(status).value
    except ValueError:
        msg = f"Invalid HTTP status code: {status!r}"
        raise ValueError(msg) from None


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    Construct with a body, then chain ``.with_*()`` calls to set
    status and headers. Each call returns a new ``Response``.
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        _check_status(self.status)

    # -- Chainable transformations --

    def with_status(self, status: int) -> Response:
        """Return a new Response with a different status code.

        Raises ``ValueError`` for codes outside the known HTTP statuses.
        """
        return replace(self, status=_check_status(status))

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Return a new Response with additional headers."""
        new = tuple(headers.items())
        return replace(self, headers=(*self.headers, *new))

    def with_content_type(self, content_type: str) -> Response:
        """Return a new Response with a different content type."""
        return replace(self, content_type=content_type)

    def with_body(self, body: str | bytes) -> Response:
        """Return a new Response with *body* replacing the current one."""
        return replace(self, body=body)

    def with_content(self, content: str) -> Response:
        """Return a new Response with *content* appended to the body."""
        return replace(self, body=self.text + content)

    # -- Accessors --

    def header(self, name: str, default: str | None = None) -> str | None:
        """First value of header *name* (case-insensitive)."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return default

    @property
    def reason(self) -> str:
        """Reason phrase for the status code."""
        return HTTPStatus(self.status).phrase

    @property
    def status_line(self) -> str:
        """``"200 OK"``, as WSGI ``start_response`` expects."""
        return f"{self.status} {self.reason}"

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body

    def wsgi_headers(self) -> list[tuple[str, str]]:
        """Content-Type plus the extra headers, for ``start_response``."""
        return [("Content-Type", self.content_type), *self.headers]


@dataclass(frozen=True, slots=True)
class Redirect:
    """A redirect response."""

    url: str
    status: int = 302
    headers: tuple[tuple[str, str], ...] = ()

    def to_response(self) -> Response:
        """Materialize as a ``Response`` with a ``Location`` header."""
        return Response(
            body="",
            status=self.status,
            headers=(("Location", self.url), *self.headers),
        )


def json_response(data: Any, *, status: int = 200, indent: int | None = 4) -> Response:
    """Serialize *data* as a JSON ``Response``."""
    return Response(
        body=json_module.dumps(data, indent=indent, default=str),
        status=status,
        content_type="application/json; charset=utf-8",
    )
