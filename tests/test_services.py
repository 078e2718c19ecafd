"""Tests for waypoint.di.services: named service factories."""

import pytest

from waypoint.di.services import Services
from waypoint.errors import ConfigurationError, DependencyNotFoundError, DuplicateDependencyError


@pytest.fixture
def services() -> Services:
    s = Services()
    s.register("pi", lambda: 3.141592654)
    s.register("greet", lambda name, punctuation="!": f"Hello, {name}{punctuation}")
    return s


class TestServices:
    def test_attribute_access_returns_callable(self, services: Services) -> None:
        assert services.pi() == 3.141592654
        assert services.greet("Ada") == "Hello, Ada!"

    def test_get_calls_with_arguments(self, services: Services) -> None:
        assert services.get("greet", "Ada", punctuation="?") == "Hello, Ada?"

    def test_unknown_get(self, services: Services) -> None:
        with pytest.raises(DependencyNotFoundError, match="nope"):
            services.get("nope")

    def test_unknown_attribute(self, services: Services) -> None:
        with pytest.raises(AttributeError):
            services.nope  # noqa: B018

    def test_duplicate_rejected(self, services: Services) -> None:
        with pytest.raises(DuplicateDependencyError):
            services.register("pi", lambda: 3)

    @pytest.mark.parametrize("name", ["", "two words", "tab\tname"])
    def test_whitespace_names_rejected(self, name: str) -> None:
        with pytest.raises(ConfigurationError):
            Services().register(name, lambda: None)

    @pytest.mark.parametrize("name", ["get", "register", "keys"])
    def test_reserved_names_rejected(self, name: str) -> None:
        with pytest.raises(ConfigurationError, match="reserved"):
            Services().register(name, lambda: None)

    def test_unregister(self, services: Services) -> None:
        services.unregister("pi", "unknown")
        assert not services.has("pi")
        assert services.keys() == ["greet"]

    def test_container_protocol(self, services: Services) -> None:
        assert "pi" in services
        assert list(services) == ["pi", "greet"]
        assert len(services) == 2
        assert "pi" in repr(services)
