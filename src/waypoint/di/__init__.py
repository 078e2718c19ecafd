"""Dependency injection: named recipes resolved into handler instances.

Dependencies are registered during setup and resolved per request by
the response engines.
"""

from waypoint.di.dependency import Dependency, Literal, dependency_name
from waypoint.di.injector import Injector
from waypoint.di.services import Services

__all__ = ["Dependency", "Injector", "Literal", "Services", "dependency_name"]
