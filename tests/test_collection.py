import dataclasses
import uuid

from autoscreen.collection import RegionCollection, ScreenCollection
from autoscreen.models import Region, Screen


def _screen(name, component=1, **kwargs):
    return Screen(name=name, component=component, **kwargs)


def test_iteration_follows_insertion_order_and_restarts():
    screens = ScreenCollection()
    first, second, third = _screen("a"), _screen("b", 2), _screen("c", 3)
    for screen in (first, second, third):
        screens.add(screen)

    assert [s.name for s in screens] == ["a", "b", "c"]
    assert [s.name for s in screens] == ["a", "b", "c"]
    assert len(screens) == 3
    assert screens.count == 3


def test_get_matches_by_view_id():
    screens = ScreenCollection()
    stored = _screen("Screen 1")
    screens.add(stored)

    edited = dataclasses.replace(stored, name="Renamed")
    assert screens.get(edited) is stored


def test_get_returns_none_when_absent_or_empty():
    screens = ScreenCollection()
    assert screens.get(_screen("ghost")) is None
    assert screens.get(None) is None

    screens.add(_screen("Screen 1"))
    assert screens.get(_screen("ghost")) is None


def test_add_does_not_enforce_uniqueness():
    screens = ScreenCollection()
    screen = _screen("dup")
    screens.add(screen)
    screens.add(screen)
    assert len(screens) == 2


def test_remove_drops_first_identity_match_only():
    regions = RegionCollection()
    region = Region(name="r")
    regions.add(region)
    regions.add(region)

    assert regions.remove(region) is True
    assert len(regions) == 1
    assert regions.remove(Region(name="other")) is False
    assert regions.remove(None) is False
    assert len(regions) == 1


def test_replace_swaps_entity_in_place():
    screens = ScreenCollection()
    a, b = _screen("a"), _screen("b", 2)
    screens.add(a)
    screens.add(b)

    assert screens.replace(dataclasses.replace(a, name="a2")) is True
    assert [s.name for s in screens] == ["a2", "b"]
    assert screens.replace(_screen("unknown")) is False


def test_get_by_component_returns_first_match():
    screens = ScreenCollection()
    first = _screen("first", component=2)
    screens.add(_screen("active window", component=0))
    screens.add(first)
    screens.add(_screen("second", component=2))

    assert screens.get_by_component(2) is first
    assert screens.get_by_component(0).name == "active window"
    assert screens.get_by_component(9) is None


def test_iteration_is_safe_while_removing():
    screens = ScreenCollection()
    items = [Screen(view_id=uuid.uuid4(), name=str(i), component=i) for i in range(4)]
    for item in items:
        screens.add(item)

    for screen in screens:
        screens.remove(screen)

    assert len(screens) == 0
