"""Response engines: turn a matched route into a ``Response``.

``ResponseEngine`` is the default. ``JSONEngine`` serializes returned
data and ``TemplateEngine`` renders returned ``Template`` objects.
"""

from waypoint.engines.application import ResponseEngine
from waypoint.engines.base import HandlerEngine, handler_action, handler_instance
from waypoint.engines.json_engine import JSONEngine
from waypoint.engines.protocol import Engine
from waypoint.engines.template import Template, TemplateEngine, create_environment, render_template

__all__ = [
    "Engine",
    "HandlerEngine",
    "JSONEngine",
    "ResponseEngine",
    "Template",
    "TemplateEngine",
    "create_environment",
    "handler_action",
    "handler_instance",
    "render_template",
]
