import pytest

from ordmap.misc.ordered_set import IndexedOrderedSet
from ordmap.utils import InconsistencyError


def test_add_keeps_first_position():
    s = IndexedOrderedSet(["b", "a", "c", "a"])
    assert list(s) == ["b", "a", "c"]
    assert len(s) == 3
    assert s.position("a") == 1
    assert s.position("missing") is None
    s.check_integrity()


def test_positional_access():
    s = IndexedOrderedSet("xyz")
    assert s[0] == "x"
    assert s[2] == "z"
    assert list(reversed(s)) == ["z", "y", "x"]


def test_discard_renumbers_following_elements():
    s = IndexedOrderedSet(range(5))
    s.discard(1)
    s.discard(42)
    assert list(s) == [0, 2, 3, 4]
    assert [s.position(v) for v in s] == [0, 1, 2, 3]
    s.check_integrity()


def test_insert():
    s = IndexedOrderedSet(["a", "c"])
    s.insert(1, "b")
    s.insert(3, "d")
    s.insert(0, "_")
    assert list(s) == ["_", "a", "b", "c", "d"]
    assert s.position("d") == 4
    s.check_integrity()

    with pytest.raises(ValueError, match="already in the set"):
        s.insert(0, "c")
    with pytest.raises(IndexError):
        s.insert(6, "z")
    assert "z" not in s


def test_pop_at():
    s = IndexedOrderedSet("abcd")
    assert s.pop_at(1) == "b"
    assert s.pop_at(2) == "d"
    assert list(s) == ["a", "c"]
    assert s.position("c") == 1
    with pytest.raises(IndexError):
        s.pop_at(2)
    with pytest.raises(IndexError):
        s.pop_at(-1)


def test_copy_is_independent():
    s = IndexedOrderedSet("abc")
    t = s.copy()
    t.discard("a")
    t.add("d")
    assert list(s) == ["a", "b", "c"]
    assert list(t) == ["b", "c", "d"]
    assert s.position("b") == 1


def test_set_operations():
    s = IndexedOrderedSet([1, 2, 3])
    s.discard(2)
    s.discard(5)
    assert list(s) == [1, 3]

    # Mixin operations come from MutableSet
    assert s <= {1, 3, 7}
    assert s == {3, 1}
    assert IndexedOrderedSet([1, 3]) != IndexedOrderedSet([3, 1])


def test_reverse_and_sort():
    s = IndexedOrderedSet(["b", "c", "a"])
    s.reverse()
    assert list(s) == ["a", "c", "b"]
    s.sort()
    assert list(s) == ["a", "b", "c"]
    s.sort(key=lambda v: -ord(v))
    assert list(s) == ["c", "b", "a"]
    assert [s.position(v) for v in "abc"] == [2, 1, 0]


def test_sort_failure_keeps_order():
    s = IndexedOrderedSet([3, 1, 2])

    def key(v):
        if v == 2:
            raise RuntimeError("boom")
        return v

    with pytest.raises(RuntimeError, match="boom"):
        s.sort(key=key)
    assert list(s) == [3, 1, 2]
    s.check_integrity()


def test_reorder_requires_permutation():
    s = IndexedOrderedSet("abc")
    with pytest.raises(ValueError):
        s.reorder("ab")
    with pytest.raises(ValueError):
        s.reorder("aab")
    with pytest.raises(ValueError):
        s.reorder("abd")
    s.reorder("cab")
    assert list(s) == ["c", "a", "b"]


def test_check_integrity_detects_corruption():
    s = IndexedOrderedSet("abc")
    s._positions["a"] = 2
    with pytest.raises(InconsistencyError, match="recorded at 2"):
        s.check_integrity()

    s = IndexedOrderedSet("abc")
    s._positions["ghost"] = 3
    with pytest.raises(InconsistencyError, match="recorded positions"):
        s.check_integrity()


def test_unhashable_element():
    s = IndexedOrderedSet()
    with pytest.raises(TypeError):
        s.add([1])
    assert len(s) == 0
