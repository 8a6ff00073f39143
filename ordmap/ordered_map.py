"""Mapping that keeps its keys in a user-controlled order.

`OrderedMap` combines two structures that are never exposed on their own: an
`IndexedOrderedSet` holding the keys in order, and a plain ``dict`` holding the
values. Every public method updates both before returning, so the keys seen
through iteration, positional access and keyed access always agree.
"""

import copy
import logging
import warnings
from collections.abc import (
    Callable,
    ItemsView,
    Iterable,
    Iterator,
    KeysView,
    Mapping,
    MutableMapping,
    ValuesView,
)
from enum import Enum
from functools import cmp_to_key, wraps
from typing import Any, Generic, NamedTuple, TypeVar

from ordmap.configdefaults import config
from ordmap.misc.ordered_set import IndexedOrderedSet
from ordmap.printing import dump
from ordmap.utils import (
    IgnoredIndexWarning,
    InconsistencyError,
    PreconditionViolation,
    check_position,
)


_logger = logging.getLogger("ordmap.ordered_map")

K = TypeVar("K")
V = TypeVar("V")
T = TypeVar("T")


class _ClearType(Enum):
    CLEAR = "CLEAR"

    def __repr__(self) -> str:
        return "CLEAR"


CLEAR = _ClearType.CLEAR
"""Assigning this to a key removes the key, e.g. ``m["a"] = CLEAR``."""

_MISSING = object()


class Element(NamedTuple):
    key: Any
    value: Any


class _Storage:
    """Key order and values, possibly shared by several copy-on-write maps."""

    __slots__ = ("order", "values", "sharers")

    def __init__(
        self,
        order: IndexedOrderedSet | None = None,
        values: dict | None = None,
    ) -> None:
        self.order = IndexedOrderedSet() if order is None else order
        self.values = {} if values is None else values
        self.sharers = 1

    def clone(self) -> "_Storage":
        return _Storage(self.order.copy(), self.values.copy())


def _mutator(method):
    @wraps(method)
    def checked(self, *args, **kwargs):
        result = method(self, *args, **kwargs)
        if config.check_invariants:
            self.check_integrity()
        return result

    return checked


class OrderedKeysView(KeysView):
    """Live view of the keys of an `OrderedMap`, in order.

    Besides the usual set-like operations, keys can be read by position.
    """

    __slots__ = ()

    def __getitem__(self, index: int):
        return self._mapping.key_at(index)

    def __reversed__(self) -> Iterator:
        return reversed(self._mapping)

    def __eq__(self, other) -> bool:
        # Two ordered views are the same key sequence or not equal at all.
        if isinstance(other, OrderedKeysView):
            return len(self) == len(other) and all(
                a == b for a, b in zip(self, other, strict=True)
            )
        return super().__eq__(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"


class OrderedValuesView(ValuesView):
    __slots__ = ()

    def __getitem__(self, index: int):
        return self._mapping.value_at(index)

    def __reversed__(self) -> Iterator:
        mapping = self._mapping
        for key in reversed(mapping):
            yield mapping[key]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"


class OrderedItemsView(ItemsView):
    __slots__ = ()

    def __iter__(self) -> Iterator[Element]:
        mapping = self._mapping
        for key in mapping:
            yield Element(key, mapping[key])

    def __getitem__(self, index: int) -> Element:
        return self._mapping.element_at(index)

    def __reversed__(self) -> Iterator[Element]:
        mapping = self._mapping
        for key in reversed(mapping):
            yield Element(key, mapping[key])

    def __repr__(self) -> str:
        return f"{type(self).__name__}({[tuple(e) for e in self]!r})"


class OrderedMap(MutableMapping, Generic[K, V]):
    """A mapping whose keys also have positions.

    Keys are kept in insertion order unless moved by `insert` or `sort`, and
    every entry can be reached either by key (average O(1)) or by position.
    Writing an existing key never moves it: `append`, ``m[key] = value``,
    `assign_at` and `insert` all update the value in place and keep the key's
    current position.

    Copies are independent: ``m.copy()`` shares storage with `m` only until
    one of them is mutated (see the ``copy_on_write`` config flag).

    Iterating the map yields its keys; `items` yields `Element` pairs.
    Mutating a map while iterating over it or one of its views is undefined.
    The class does no locking; callers sharing a map between threads must
    synchronise access themselves.

    Positional methods reject indices outside the valid range, including
    negative ones, with `PreconditionViolation`.
    """

    __slots__ = ("_storage",)
    _storage: _Storage

    def __init__(self, pairs: Mapping | Iterable[tuple] = (), /, **kwargs) -> None:
        self._storage = _Storage()
        self._extend(pairs)
        if kwargs:
            self._extend(kwargs.items())

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple]) -> "OrderedMap":
        """Build a map by appending every ``(key, value)`` of `pairs` in turn.

        The first occurrence of a key fixes its position, the last one its value.
        """
        return cls(pairs)

    @classmethod
    def fromkeys(cls, keys: Iterable, value=None) -> "OrderedMap":
        return cls((key, value) for key in keys)

    @classmethod
    def _from_storage(cls, storage: _Storage) -> "OrderedMap":
        new = cls.__new__(cls)
        new._storage = storage
        return new

    def _mutable(self) -> _Storage:
        storage = self._storage
        if storage.sharers > 1:
            storage.sharers -= 1
            storage = self._storage = storage.clone()
            _logger.debug(f"Detached shared storage holding {len(storage.values)} keys")
        return storage

    # Copying

    def copy(self) -> "OrderedMap[K, V]":
        if not config.copy_on_write:
            return self._from_storage(self._storage.clone())
        self._storage.sharers += 1
        return self._from_storage(self._storage)

    __copy__ = copy

    def __deepcopy__(self, memo) -> "OrderedMap[K, V]":
        storage = _Storage()
        new = self._from_storage(storage)
        memo[id(self)] = new
        for key, value in self.items():
            key = copy.deepcopy(key, memo)
            storage.order.add(key)
            storage.values[key] = copy.deepcopy(value, memo)
        return new

    def __reduce__(self):
        return (self.__class__, ([tuple(e) for e in self.items()],))

    # Queries

    def __len__(self) -> int:
        return len(self._storage.order)

    def __iter__(self) -> Iterator[K]:
        return iter(self._storage.order)

    def __reversed__(self) -> Iterator[K]:
        return reversed(self._storage.order)

    def __contains__(self, key) -> bool:
        return key in self._storage.values

    def __getitem__(self, key: K) -> V:
        return self._storage.values[key]

    def get(self, key, default=None):
        return self._storage.values.get(key, default)

    @property
    def is_empty(self) -> bool:
        return not self._storage.order

    def keys(self) -> OrderedKeysView:
        return OrderedKeysView(self)

    def values(self) -> OrderedValuesView:
        return OrderedValuesView(self)

    def items(self) -> OrderedItemsView:
        return OrderedItemsView(self)

    @property
    def first(self) -> Element | None:
        """The first `Element`, or ``None`` if the map is empty."""
        if not self._storage.order:
            return None
        return self.element_at(0)

    @property
    def last(self) -> Element | None:
        """The last `Element`, or ``None`` if the map is empty."""
        if not self._storage.order:
            return None
        return self.element_at(len(self) - 1)

    def index_for_key(self, key) -> int | None:
        """Return the position of `key`, or ``None`` if it is not in the map."""
        return self._storage.order.position(key)

    def element_at(self, index: int) -> Element:
        order = self._storage.order
        key = order[check_position(index, len(order))]
        return Element(key, self._storage.values[key])

    def key_at(self, index: int) -> K:
        order = self._storage.order
        return order[check_position(index, len(order))]

    def value_at(self, index: int) -> V:
        return self._storage.values[self.key_at(index)]

    # Keyed mutation

    def _append(self, key, value):
        values = self._storage.values
        if key in values:
            previous = values[key]
            self._mutable().values[key] = value
            return previous
        storage = self._mutable()
        storage.order.add(key)
        storage.values[key] = value
        return _MISSING

    def _remove_key(self, key):
        if key not in self._storage.values:
            return _MISSING
        storage = self._mutable()
        storage.order.discard(key)
        return storage.values.pop(key)

    def _extend(self, other) -> None:
        if other is self:
            other = list(self.items())
        elif isinstance(other, Mapping):
            other = other.items()
        elif hasattr(other, "keys"):
            source = other
            other = ((key, source[key]) for key in source.keys())
        for key, value in other:
            self._append(key, value)

    @_mutator
    def append(self, key: K, value: V) -> None:
        """Add `key` at the end, or overwrite its value if it is already present.

        An existing key keeps its position.
        """
        self._append(key, value)

    @_mutator
    def update_value(self, key: K, value: V) -> V | None:
        """Like `append`, but return the previous value (``None`` for a new key).

        A stored ``None`` is returned as ``None`` too; check ``key in m`` first
        when the two cases must be told apart.
        """
        previous = self._append(key, value)
        return None if previous is _MISSING else previous

    @_mutator
    def remove_key(self, key: K) -> V | None:
        """Remove `key` and return its value, or ``None`` if it was not present.

        The remaining keys keep their relative order. A stored ``None`` also
        comes back as ``None``; use ``m.pop(key, default)`` to distinguish it
        from a missing key.
        """
        previous = self._remove_key(key)
        return None if previous is _MISSING else previous

    @_mutator
    def __setitem__(self, key: K, value: V) -> None:
        if value is CLEAR:
            self._remove_key(key)
        else:
            self._append(key, value)

    @_mutator
    def __delitem__(self, key: K) -> None:
        if self._remove_key(key) is _MISSING:
            raise KeyError(key)

    @_mutator
    def update(self, other=(), /, **kwargs) -> None:
        self._extend(other)
        if kwargs:
            self._extend(kwargs.items())

    # Positional mutation

    def _ignored_index(self, key, existing: int, index: int) -> None:
        policy = config.on_ignored_index
        if policy == "raise":
            raise ValueError(
                f"Key {key!r} already sits at position {existing}, "
                f"it cannot be placed at position {index}"
            )
        if policy == "warn":
            warnings.warn(
                f"Key {key!r} already sits at position {existing}; "
                f"position {index} is ignored and only its value is updated",
                IgnoredIndexWarning,
                stacklevel=4,
            )
        _logger.debug(f"Ignoring position {index} for existing key {key!r}")

    def _pop_at(self, index: int) -> Element:
        storage = self._mutable()
        key = storage.order.pop_at(index)
        return Element(key, storage.values.pop(key))

    @_mutator
    def assign_at(self, index: int, element: tuple) -> None:
        """Write ``(key, value)`` through position `index`.

        If `key` is already in the map only its value changes and `index` is
        ignored. A new key is appended at the end, not placed at `index`.
        """
        key, value = element
        check_position(index, len(self))
        existing = self._storage.order.position(key)
        if existing is not None and existing != index:
            self._ignored_index(key, existing, index)
        self._append(key, value)

    @_mutator
    def insert(self, index: int, element: tuple) -> None:
        """Insert ``(key, value)`` before position `index`.

        `index` may equal ``len(self)`` to insert at the end. If `key` is
        already in the map it is not moved; only its value is updated.
        """
        key, value = element
        index = check_position(index, len(self), allow_end=True)
        existing = self._storage.order.position(key)
        if existing is not None:
            if existing != index:
                self._ignored_index(key, existing, index)
            self._mutable().values[key] = value
            return
        storage = self._mutable()
        storage.order.insert(index, key)
        storage.values[key] = value

    @_mutator
    def remove_at(self, index: int) -> None:
        self._pop_at(check_position(index, len(self)))

    @_mutator
    def remove_last(self) -> Element:
        if not self._storage.order:
            raise PreconditionViolation("remove_last() on an empty map")
        return self._pop_at(len(self) - 1)

    @_mutator
    def popitem(self, last: bool = True) -> Element:
        """Remove and return the last (or first) `Element`.

        Raises `KeyError` on an empty map, as mappings do.
        """
        if not self._storage.order:
            raise KeyError("popitem(): map is empty")
        return self._pop_at(len(self) - 1 if last else 0)

    @_mutator
    def clear(self) -> None:
        storage = self._storage
        if storage.sharers > 1:
            storage.sharers -= 1
            self._storage = _Storage()
        else:
            storage.order.clear()
            storage.values.clear()

    # Bulk operations

    @_mutator
    def sort(
        self,
        key: Callable[[Element], Any] | None = None,
        *,
        reverse: bool = False,
        ordered_before: Callable[[Element, Element], bool] | None = None,
    ) -> None:
        """Reorder the keys in place; values are not touched.

        Parameters
        ----------
        key
            Called with each `Element` to produce a sort key.
        reverse
            Sort in descending order.
        ordered_before
            Strict weak ordering called with two `Element`s; returns True when
            the first must come before the second. Mutually exclusive with `key`.

        With neither `key` nor `ordered_before` the keys are compared directly.
        The map is left unchanged if one of the callables raises.
        """
        if key is not None and ordered_before is not None:
            raise TypeError("sort() accepts either key or ordered_before, not both")

        values = self._storage.values
        if ordered_before is not None:

            def compare(a, b):
                element_a = Element(a, values[a])
                element_b = Element(b, values[b])
                if ordered_before(element_a, element_b):
                    return -1
                if ordered_before(element_b, element_a):
                    return 1
                return 0

            sort_key = cmp_to_key(compare)
        elif key is not None:

            def sort_key(k):
                return key(Element(k, values[k]))

        else:
            sort_key = None

        self._mutable().order.sort(key=sort_key, reverse=reverse)

    def map(self, transform: Callable[[Element], T]) -> list[T]:
        """Return ``[transform(element) for element in self.items()]``."""
        return [transform(element) for element in self.items()]

    def filter(self, predicate: Callable[[Element], bool]) -> "OrderedMap[K, V]":
        storage = _Storage()
        for element in self.items():
            if predicate(element):
                storage.order.add(element.key)
                storage.values[element.key] = element.value
        return self._from_storage(storage)

    def reversed(self) -> "OrderedMap[K, V]":
        """Return a new map with the same entries in reverse order."""
        storage = self._storage.clone()
        storage.order.reverse()
        return self._from_storage(storage)

    def __eq__(self, other) -> bool:
        if isinstance(other, OrderedMap):
            if self._storage is other._storage:
                return True
            return len(self) == len(other) and all(
                a == b for a, b in zip(self.items(), other.items(), strict=True)
            )
        if isinstance(other, Mapping):
            return dict(self.items()) == dict(other.items())
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    @_mutator
    def merge(self, other: Mapping | Iterable[tuple]) -> None:
        """Append every entry of `other` in its order.

        Keys already present get the new value and keep their position.
        """
        self._extend(other)

    def concatenate(self, other: Mapping | Iterable[tuple]) -> "OrderedMap":
        """Return a copy of this map with `other` merged into it."""
        new = self.copy()
        new.merge(other)
        return new

    def __or__(self, other):
        if not isinstance(other, Mapping):
            return NotImplemented
        return self.concatenate(other)

    def __ror__(self, other):
        if not isinstance(other, Mapping):
            return NotImplemented
        new = self.__class__(other)
        new.merge(self)
        return new

    def __ior__(self, other):
        self.merge(other)
        return self

    # Diagnostics

    def check_integrity(self) -> None:
        """Raise `InconsistencyError` if keys and values have drifted apart."""
        order = self._storage.order
        values = self._storage.values
        order.check_integrity()
        if len(order) != len(values):
            raise InconsistencyError(
                f"{len(order)} ordered keys but {len(values)} stored values"
            )
        for key in order:
            if key not in values:
                raise InconsistencyError(f"Ordered key {key!r} has no stored value")

    def __repr__(self) -> str:
        if not self._storage.order:
            return f"{type(self).__name__}()"
        return f"{type(self).__name__}({[tuple(e) for e in self.items()]!r})"

    def __str__(self) -> str:
        return dump(self)
