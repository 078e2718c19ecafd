"""Named service factories.

``Services`` is a lighter sibling of the ``Injector``: a name -> callable
map handed to handler actions as their last argument when configured on
the App. Services are called on access, with whatever arguments the
handler passes::

    services = Services()
    services.register("pi", lambda: 3.141592654)
    services.register("greet", lambda name: f"Hello, {name}")

    services.pi()             # 3.141592654
    services.greet("Ada")     # "Hello, Ada"
    services.get("greet", "Ada")
"""

from collections.abc import Callable, Iterator
from typing import Any

from waypoint.errors import ConfigurationError, DependencyNotFoundError, DuplicateDependencyError


class Services:
    """A registry of named service factories with attribute access."""

    __slots__ = ("_services",)

    def __init__(self) -> None:
        self._services: dict[str, Callable[..., Any]] = {}

    def register(self, name: str, factory: Callable[..., Any]) -> None:
        """Register *factory* under *name*.

        Raises ``ConfigurationError`` for names with whitespace or names
        that shadow a ``Services`` attribute, and
        ``DuplicateDependencyError`` if *name* is taken.
        """
        if not name or any(ch.isspace() for ch in name):
            msg = f"Service names must be non-empty and contain no whitespace: {name!r}"
            raise ConfigurationError(msg)
        if hasattr(type(self), name):
            msg = f"{name!r} is reserved by {type(self).__name__}."
            raise ConfigurationError(msg)
        if name in self._services:
            msg = f"A service named {name!r} is already registered."
            raise DuplicateDependencyError(msg)
        self._services[name] = factory

    def unregister(self, *names: str) -> None:
        """Remove services by name. Unknown names are ignored."""
        for name in names:
            self._services.pop(name, None)

    def has(self, name: str) -> bool:
        """True if a service is registered under *name*."""
        return name in self._services

    def keys(self) -> list[str]:
        """Registered service names, in registration order."""
        return list(self._services)

    def get(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Call the service registered under *name* and return its result."""
        try:
            factory = self._services[name]
        except KeyError:
            msg = f"The requested service {name!r} was not found."
            raise DependencyNotFoundError(msg) from None
        return factory(*args, **kwargs)

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("__"):
            raise AttributeError(name)
        try:
            return self._services[name]
        except KeyError:
            msg = f"'Services' has no service {name!r}"
            raise AttributeError(msg) from None

    def __contains__(self, name: object) -> bool:
        return name in self._services

    def __iter__(self) -> Iterator[str]:
        return iter(self._services)

    def __len__(self) -> int:
        return len(self._services)

    def __repr__(self) -> str:
        return f"<Services {self.keys()!r}>"
