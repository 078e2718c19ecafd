"""Router configuration.

RouterConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups. It is passed explicitly to the Router, the
engines and the App; there is no module-level configuration state.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from waypoint.errors import ConfigurationError


def _normalize_methods(methods: Iterable[str]) -> tuple[str, ...]:
    """Upper-case, strip and de-duplicate methods, keeping first-seen order."""
    seen: dict[str, None] = {}
    for method in methods:
        seen.setdefault(method.strip().upper(), None)
    return tuple(seen)


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(base_path="/blog", supported_methods=("GET", "POST", "PUT"))
    """

    # Routing
    base_path: str = ""
    supported_methods: tuple[str, ...] = ("GET", "POST")

    # Handler naming convention
    controller_suffix: str = "Controller"
    action_suffix: str = "Action"
    enforce_naming: bool = True

    # Templates (view routes and TemplateEngine)
    template_dir: str | Path | None = None
    autoescape: bool = True

    # JSON engine
    json_indent: int | None = 4

    # Errors
    debug: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "supported_methods", _normalize_methods(self.supported_methods))

    def supports(self, method: str) -> bool:
        """True if *method* is one of the supported HTTP methods."""
        return method.upper() in self.supported_methods

    @classmethod
    def from_options(cls, options: Mapping[str, Any], **overrides: Any) -> RouterConfig:
        """Build a config from dotted option keys.

        Recognized keys (case-insensitive)::

            set.basepath                    -> base_path
            set.views.path                  -> template_dir
            set.supported.request.methods   -> replaces supported_methods
            add.supported.request.methods   -> extends supported_methods

        Method options accept a single string or an iterable of strings.
        Raises ``ConfigurationError`` listing any unknown keys.
        """
        lowered = {key.lower(): value for key, value in options.items()}
        unknown = sorted(set(lowered) - _OPTION_KEYS)
        if unknown:
            msg = f"Invalid router configuration options: {', '.join(unknown)}"
            raise ConfigurationError(msg)

        config = cls(**overrides)
        if "set.basepath" in lowered:
            config = replace(config, base_path=str(lowered["set.basepath"]))
        if "set.views.path" in lowered:
            config = replace(config, template_dir=lowered["set.views.path"])
        if "set.supported.request.methods" in lowered:
            methods = _as_methods(lowered["set.supported.request.methods"])
            config = replace(config, supported_methods=methods)
        if "add.supported.request.methods" in lowered:
            methods = _as_methods(lowered["add.supported.request.methods"])
            config = replace(config, supported_methods=(*config.supported_methods, *methods))
        return config


_OPTION_KEYS = frozenset(
    {
        "set.basepath",
        "set.views.path",
        "set.supported.request.methods",
        "add.supported.request.methods",
    }
)


def _as_methods(value: str | Iterable[str]) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    return tuple(value)
