"""Path parameter grammar and type conversion.

Built-in converters for route placeholders like ``{id}`` and ``{id:int}``.
The same table drives matching, reverse URL generation and the firewall's
protected-prefix patterns, so the placeholder grammar is defined once.
"""

import re

# (regex_pattern, python_type) for each supported converter
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
    "path": (r".+", str),
}

# Placeholder identifiers: ``{name}`` or ``{name:type}``; ``{}`` is anonymous.
PLACEHOLDER_RE = re.compile(r"\{\s*(?:(?P<name>[A-Za-z_][A-Za-z0-9_]*)\s*(?::\s*(?P<type>\w+)\s*)?)?\}")

# Reserved ``path_params`` key holding unnamed captures in capture order.
MATCHES_KEY = "_matches"


def convert_param(value: str, param_type: str) -> str | int | float:
    """Convert a captured path parameter string to the target type.

    Raises ``ValueError`` if the string cannot be converted.
    Raises ``KeyError`` if *param_type* is not a registered converter.
    """
    _, target_type = CONVERTERS[param_type]
    return target_type(value)
