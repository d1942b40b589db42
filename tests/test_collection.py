"""Tests for dubstash.collection."""

import pytest

from dubstash.collection import CollectionKind, classify


class _Bag:
    def __init__(self, *items):
        self._items = list(items)

    def for_each(self, callback):
        for item in self._items:
            callback(item)


class _CamelBag(_Bag):
    def forEach(self, callback):
        self.for_each(callback)


class _Countdown:
    def __init__(self, start):
        self.n = start

    def __iter__(self):
        return self

    def __next__(self):
        if self.n == 0:
            raise StopIteration
        self.n -= 1
        return self.n


class _Plain:
    pass


class TestClassify:
    @pytest.mark.parametrize(
        "value,kind",
        [
            (_Bag(1), CollectionKind.FOR_EACH),
            ({"a": 1}, CollectionKind.MAPPING),
            ([1], CollectionKind.SEQUENCE),
            ((1,), CollectionKind.SEQUENCE),
            (_Countdown(1), CollectionKind.ITERATOR),
            ({1, 2}, CollectionKind.ITERATOR),
            ("abc", CollectionKind.SCALAR),
            (b"abc", CollectionKind.SCALAR),
            (42, CollectionKind.SCALAR),
            (_Plain(), CollectionKind.SCALAR),
        ],
    )
    def test_kinds(self, value, kind):
        assert classify(value).kind is kind


class TestMembers:
    def test_for_each(self):
        assert list(classify(_Bag("O", "K")).members()) == ["O", "K"]

    def test_camel_case_for_each(self):
        assert list(classify(_CamelBag("a")).members()) == ["a"]

    def test_mapping_values_in_order(self):
        assert list(classify({"b": 2, "a": 1}).members()) == [2, 1]

    def test_iterator_consumed_until_exhausted(self):
        assert list(classify(_Countdown(3)).members()) == [2, 1, 0]

    def test_generator(self):
        gen = (x * 2 for x in range(3))
        assert list(classify(gen).members()) == [0, 2, 4]

    def test_scalar_is_single_member(self):
        obj = _Plain()
        assert list(classify(obj).members()) == [obj]
        assert list(classify("abc").members()) == ["abc"]
