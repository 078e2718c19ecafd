"""Firewall: redirect unauthenticated requests away from protected areas.

Runs before route matching. Each area protects a path prefix, names the
login form to redirect to, and lists the roles allowed in. Prefixes use
the route template grammar, so ``/users/{id}/settings`` protects every
user's settings pages::

    firewall = Firewall()
    firewall.protect("/admin", form="/login", roles=("admin",))

    firewall.check_access("/admin/users", session)  # Redirect("/login", 303) or None

The session is any mapping; a logged-in session carries ``logged``,
``username`` and ``role`` keys.
"""

import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from waypoint.http.response import Redirect
from waypoint.routing.template import compile_template, normalize_path, normalize_template

logger = logging.getLogger("waypoint.server")


@dataclass(frozen=True, slots=True)
class Area:
    """A protected path prefix."""

    protect: str
    form: str
    roles: tuple[str, ...] = ()
    pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "protect", normalize_template(self.protect))
        object.__setattr__(self, "roles", tuple(self.roles))
        object.__setattr__(self, "pattern", compile_template(self.protect, prefix=True))

    def covers(self, path: str) -> bool:
        """True if *path* lies inside this area (the form itself excluded)."""
        if path == normalize_path(self.form):
            return False
        return self.pattern.match(path) is not None

    def admits(self, session: Mapping[str, Any]) -> bool:
        """True if *session* is logged in with an allowed role.

        An area without roles admits any logged-in session.
        """
        if not session.get("logged") or not session.get("username"):
            return False
        return not self.roles or session.get("role") in self.roles


class Firewall:
    """Ordered protected areas checked before a request is routed."""

    __slots__ = ("_areas",)

    def __init__(self, areas: Iterable[Area] = ()) -> None:
        self._areas: list[Area] = list(areas)

    def protect(self, prefix: str, *, form: str, roles: Iterable[str] = ()) -> Area:
        """Protect *prefix*; unauthorized requests are sent to *form*."""
        area = Area(prefix, form, tuple(roles))
        self._areas.append(area)
        return area

    def check_access(self, path: str, session: Mapping[str, Any]) -> Redirect | None:
        """Return a 303 redirect to the login form, or ``None`` to allow.

        Areas are checked in the order they were added; the first one that
        covers *path* and rejects *session* decides.
        """
        normalized = normalize_path(path)
        for area in self._areas:
            if area.covers(normalized) and not area.admits(session):
                logger.debug("Firewall: %s denied by %s", normalized, area.protect)
                return Redirect(area.form, status=303)
        return None

    def __iter__(self) -> Iterator[Area]:
        return iter(self._areas)

    def __len__(self) -> int:
        return len(self._areas)
