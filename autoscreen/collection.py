from __future__ import annotations

from typing import Generic, Iterator, List, Optional, Protocol, TypeVar
from uuid import UUID

from .models import Region, Screen


class Identified(Protocol):
    @property
    def view_id(self) -> UUID: ...


T = TypeVar("T", bound=Identified)


class TargetCollection(Generic[T]):
    """Insertion-ordered targets looked up by ``view_id``.

    No uniqueness check happens on add and nothing here is locked; callers
    keep all access on one thread.
    """

    def __init__(self) -> None:
        self._items: List[T] = []

    def add(self, item: T) -> None:
        self._items.append(item)

    def remove(self, item: T | None) -> bool:
        if item is None:
            return False
        for index, existing in enumerate(self._items):
            if existing.view_id == item.view_id:
                del self._items[index]
                return True
        return False

    def get(self, item: T | None) -> Optional[T]:
        if item is None:
            return None
        for existing in self._items:
            if existing.view_id == item.view_id:
                return existing
        return None

    def replace(self, item: T) -> bool:
        for index, existing in enumerate(self._items):
            if existing.view_id == item.view_id:
                self._items[index] = item
                return True
        return False

    def clear(self) -> None:
        self._items.clear()

    @property
    def count(self) -> int:
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"


class ScreenCollection(TargetCollection[Screen]):
    def get_by_component(self, component: int) -> Optional[Screen]:
        # First match wins; duplicate components are the caller's problem.
        for screen in self._items:
            if screen.component == component:
                return screen
        return None


class RegionCollection(TargetCollection[Region]):
    pass
