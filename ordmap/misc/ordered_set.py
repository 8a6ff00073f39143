from collections.abc import Callable, Iterable, Iterator, MutableSet
from typing import Any

from ordmap.utils import InconsistencyError


class IndexedOrderedSet(MutableSet):
    """Ordered-set like data structure with positional access.

    Elements live in a list that defines their order, and a dictionary maps
    every element to its current position in that list. Membership tests and
    `position` are O(1) on average. Removing or inserting anywhere but the end
    renumbers the elements that follow.
    """

    __slots__ = ("_items", "_positions")
    _items: list[Any]
    _positions: dict[Any, int]

    def __init__(self, iterable: Iterable | None = None) -> None:
        self._items = []
        self._positions = {}
        if iterable is not None:
            for value in iterable:
                self.add(value)

    def __contains__(self, value) -> bool:
        return value in self._positions

    def __iter__(self) -> Iterator:
        yield from self._items

    def __reversed__(self) -> Iterator:
        yield from reversed(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int):
        return self._items[index]

    def __eq__(self, other) -> bool:
        if isinstance(other, IndexedOrderedSet):
            return self._items == other._items
        return super().__eq__(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"

    def position(self, value) -> int | None:
        """Return the position of `value`, or ``None`` if it is not present."""
        return self._positions.get(value)

    def add(self, value) -> None:
        if value not in self._positions:
            self._positions[value] = len(self._items)
            self._items.append(value)

    def discard(self, value) -> None:
        position = self._positions.pop(value, None)
        if position is None:
            return
        del self._items[position]
        self._renumber(position)

    def insert(self, index: int, value) -> None:
        """Insert a new `value` before `index`.

        `index` must lie in ``[0, len(self)]``. Inserting an element that is
        already present is an error; callers decide what an existing element
        means for them.
        """
        if value in self._positions:
            raise ValueError(f"{value!r} is already in the set")
        if not 0 <= index <= len(self._items):
            raise IndexError(f"insertion index {index} out of range")
        self._items.insert(index, value)
        self._renumber(index)

    def pop_at(self, index: int):
        """Remove and return the element at `index`."""
        if not 0 <= index < len(self._items):
            raise IndexError(f"index {index} out of range")
        value = self._items.pop(index)
        del self._positions[value]
        self._renumber(index)
        return value

    def clear(self) -> None:
        self._items.clear()
        self._positions.clear()

    def copy(self) -> "IndexedOrderedSet":
        new_set = IndexedOrderedSet()
        new_set._items = self._items.copy()
        new_set._positions = self._positions.copy()
        return new_set

    def reverse(self) -> None:
        self._items.reverse()
        self._renumber(0)

    def sort(self, key: Callable[[Any], Any] | None = None, reverse: bool = False) -> None:
        # `sorted` computes the whole new order before the set is touched.
        self.reorder(sorted(self._items, key=key, reverse=reverse))

    def reorder(self, new_order: Iterable) -> None:
        """Replace the current order by a permutation of the same elements."""
        new_items = list(new_order)
        if len(new_items) != len(self._items) or self._positions.keys() != set(
            new_items
        ):
            raise ValueError("new order must be a permutation of the current elements")
        self._items = new_items
        self._renumber(0)

    def check_integrity(self) -> None:
        if len(self._positions) != len(self._items):
            raise InconsistencyError(
                f"{len(self._items)} elements but {len(self._positions)} recorded positions"
            )
        for i, value in enumerate(self._items):
            if self._positions.get(value) != i:
                raise InconsistencyError(
                    f"{value!r} is at position {i} but recorded at {self._positions.get(value)}"
                )

    def _renumber(self, start: int) -> None:
        positions = self._positions
        items = self._items
        for i in range(start, len(items)):
            positions[items[i]] = i
