"""Dependency registry.

Maps names to ``Dependency`` recipes and builds objects from them,
recursively resolving parameters that name other registered dependencies.

Thread safety:
    Register everything during setup, single-threaded. ``resolve`` only
    reads the registry afterwards. Nothing is cached and nothing is
    locked: every call builds fresh objects, so factories that hand out
    shared state must synchronize it themselves.
"""

import inspect
import logging
from collections.abc import Iterator
from typing import Any

from waypoint.di.dependency import Dependency, Literal, Target, dependency_name, import_class
from waypoint.errors import (
    ClassNotFoundError,
    CyclicDependencyError,
    DependencyError,
    DependencyNotFoundError,
    DuplicateDependencyError,
)

logger = logging.getLogger("waypoint.di")


class Injector:
    """Name -> dependency registry with recursive resolution.

    Usage::

        injector = Injector()
        injector.register("db", lambda: connect("sqlite:///app.db"))
        injector.register("repo", UserRepository, "db")
        injector.register(BlogController, BlogController, "repo")

        repo = injector.resolve("repo")  # UserRepository(<connection>)

    A name can be a string or a class; classes are keyed by their dotted
    path. When *target* is omitted the name itself is the target, so
    ``register(BlogController)`` and ``register("pkg.mod:BlogController")``
    both work.
    """

    __slots__ = ("_dependencies",)

    def __init__(self) -> None:
        self._dependencies: dict[str, Dependency] = {}

    # -- Registration --

    def register(
        self,
        name: type | str,
        target: Target | None = None,
        *parameters: Any,
    ) -> Dependency:
        """Register a dependency and return its descriptor for chaining.

        Raises ``DuplicateDependencyError`` if *name* is already registered,
        even when the descriptors are identical.
        """
        key = dependency_name(name)
        if key in self._dependencies:
            msg = f"A dependency named {key!r} is already registered."
            raise DuplicateDependencyError(msg)

        dependency = Dependency(name if target is None else target, list(parameters))
        self._dependencies[key] = dependency
        logger.debug("Registered dependency %r", key)
        return dependency

    def has(self, name: type | str) -> bool:
        """True if a dependency is registered under *name*."""
        return dependency_name(name) in self._dependencies

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, (str, type)):
            return False
        return self.has(name)

    def __len__(self) -> int:
        return len(self._dependencies)

    def __iter__(self) -> Iterator[str]:
        return iter(self._dependencies)

    def names(self) -> list[str]:
        """Registered names, in registration order."""
        return list(self._dependencies)

    # -- Resolution --

    def resolve(self, name: type | str, *extra_args: Any) -> Any:
        """Build the dependency registered under *name*.

        Declared parameters come first, then *extra_args*.

        Raises:
            DependencyNotFoundError: *name* (or a name it depends on) is
                not registered.
            ClassNotFoundError: a class target cannot be found.
            CyclicDependencyError: *name* depends on itself.
        """
        return self._resolve(dependency_name(name), extra_args, ())

    def _resolve(self, name: str, extra_args: tuple[Any, ...], stack: tuple[str, ...]) -> Any:
        if name in stack:
            raise CyclicDependencyError((*stack, name))

        dependency = self._dependencies.get(name)
        if dependency is None:
            msg = f"No dependency named {name!r} is registered."
            raise DependencyNotFoundError(msg)

        stack = (*stack, name)
        target = dependency.target

        if dependency.is_method:
            class_ref, method_name = target  # type: ignore[misc]
            cls = _load_class(class_ref)
            args = [*self._resolve_parameters(dependency, stack), *extra_args]
            return _call_method(cls, method_name, args)

        if dependency.is_factory:
            args = [*self._resolve_parameters(dependency, stack), *extra_args]
            return target(*args)  # type: ignore[operator]

        cls = _load_class(target)
        args = [*self._resolve_parameters(dependency, stack), *extra_args]
        return cls(*args)

    def _resolve_parameters(self, dependency: Dependency, stack: tuple[str, ...]) -> list[Any]:
        """Resolve parameters that name registered dependencies; keep literals."""
        resolved: list[Any] = []
        for parameter in dependency.parameters:
            if isinstance(parameter, Literal):
                resolved.append(parameter.value)
            elif isinstance(parameter, (str, type)) and self.has(parameter):
                resolved.append(self._resolve(dependency_name(parameter), (), stack))
            else:
                resolved.append(parameter)
        return resolved


def _load_class(ref: Any) -> type:
    if isinstance(ref, type):
        return ref
    if isinstance(ref, str):
        return import_class(ref)
    msg = f"Dependency target {ref!r} is not a class, import string, or factory."
    raise ClassNotFoundError(msg)


def _call_method(cls: type, method_name: str, args: list[Any]) -> Any:
    """Call a static/class method directly, or an instance method on ``cls()``."""
    try:
        raw = inspect.getattr_static(cls, method_name)
    except AttributeError:
        msg = f"{cls.__qualname__} has no method {method_name!r}."
        raise DependencyError(msg) from None

    if isinstance(raw, (staticmethod, classmethod)):
        return getattr(cls, method_name)(*args)
    return getattr(cls(), method_name)(*args)
