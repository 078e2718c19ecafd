"""Dependency descriptors.

A ``Dependency`` is the registered recipe for producing a named object:
a class, a ``(class, method_name)`` pair, an import string, or a factory
callable, together with the ordered parameters passed to it.
"""

from __future__ import annotations

import importlib
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from waypoint.errors import ClassNotFoundError

# What a dependency can be registered as.
Target: TypeAlias = type | str | tuple[type | str, str] | Callable[..., Any]


def dependency_name(key: type | str) -> str:
    """Normalize a dependency key to its registry name.

    Strings are used as-is; classes are keyed by their dotted path
    (``"myapp.controllers.BlogController"``).
    """
    if isinstance(key, str):
        return key
    return f"{key.__module__}.{key.__qualname__}"


def import_class(import_string: str) -> type:
    """Resolve an import string to a class.

    Accepts ``"module:Class"`` and dotted ``"module.Class"`` forms; nested
    classes use dots after the colon (``"module:Outer.Inner"``).

    Raises ``ClassNotFoundError`` if the module or attribute is missing or
    the resolved object is not a class.
    """
    if ":" in import_string:
        module_path, _, attr_path = import_string.partition(":")
    else:
        module_path, _, attr_path = import_string.rpartition(".")
    if not module_path or not attr_path:
        msg = f"Class {import_string!r} does not exist."
        raise ClassNotFoundError(msg)

    try:
        obj: Any = importlib.import_module(module_path)
        for attr in attr_path.split("."):
            obj = getattr(obj, attr)
    except (ImportError, AttributeError) as exc:
        msg = f"Class {import_string!r} does not exist."
        raise ClassNotFoundError(msg) from exc

    if not isinstance(obj, type):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a class."
        raise ClassNotFoundError(msg)
    return obj


@dataclass(frozen=True, slots=True)
class Literal:
    """Marks a parameter to pass as-is, even if it names a dependency.

    Usage::

        injector.register("greeter", Greeter, Literal("db"))
    """

    value: Any


@dataclass(slots=True)
class Dependency:
    """A registered dependency recipe.

    Parameters are positional and ordered. A string parameter naming
    another registered dependency is resolved recursively; anything else
    (or a ``Literal``) is passed through untouched. Chainable::

        injector.register("repo", UserRepository).add_parameter("db").add_parameter(30)
    """

    target: Target
    parameters: list[Any] = field(default_factory=list)

    def add_parameter(self, parameter: Any) -> Dependency:
        """Append a parameter."""
        self.parameters.append(parameter)
        return self

    def add_parameters(self, parameters: Iterable[Any]) -> Dependency:
        """Append several parameters, in order."""
        self.parameters.extend(parameters)
        return self

    @property
    def is_method(self) -> bool:
        """True for ``(class, method_name)`` targets."""
        return isinstance(self.target, tuple)

    @property
    def is_factory(self) -> bool:
        """True for plain callables that are not classes."""
        return callable(self.target) and not isinstance(self.target, type)
