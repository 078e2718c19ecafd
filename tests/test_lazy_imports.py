"""Tests for waypoint.__init__: lazy import registry covers all public names."""

import pytest

import waypoint


@pytest.mark.parametrize("name", waypoint.__all__)
def test_all_names_resolve(name: str) -> None:
    """Every name in __all__ must resolve via __getattr__ without error."""
    obj = getattr(waypoint, name)
    assert obj is not None, f"waypoint.{name} resolved to None"


def test_registry_matches_all() -> None:
    assert set(waypoint._LAZY_IMPORTS) == set(waypoint.__all__)


def test_unknown_name_raises_attribute_error() -> None:
    with pytest.raises(AttributeError, match="no attribute"):
        waypoint.__getattr__("ThisDoesNotExist")
