"""Collection traversal for ``{{foreach}}`` blocks."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional

_FOR_EACH_METHODS = ("for_each", "forEach")


class CollectionKind(enum.Enum):
    FOR_EACH = "for_each"
    MAPPING = "mapping"
    SEQUENCE = "sequence"
    ITERATOR = "iterator"
    SCALAR = "scalar"


@dataclass(frozen=True)
class Collection:
    """A value classified once by how its members are enumerated."""

    kind: CollectionKind
    source: Any

    def members(self) -> Iterator[Any]:
        if self.kind is CollectionKind.FOR_EACH:
            collected: list[Any] = []
            _for_each_method(self.source)(collected.append)
            yield from collected
        elif self.kind is CollectionKind.MAPPING:
            yield from self.source.values()
        elif self.kind in (CollectionKind.SEQUENCE, CollectionKind.ITERATOR):
            yield from self.source
        else:
            yield self.source


def _for_each_method(value: Any) -> Optional[Callable[[Callable[[Any], Any]], Any]]:
    for attr in _FOR_EACH_METHODS:
        method = getattr(value, attr, None)
        if callable(method):
            return method
    return None


def classify(value: Any) -> Collection:
    """Decide how ``value`` is iterated.

    Objects with a ``for_each(callback)`` method enumerate themselves;
    mappings iterate their values; strings and bytes count as a single
    member like any other non-iterable value.
    """
    if _for_each_method(value) is not None:
        kind = CollectionKind.FOR_EACH
    elif isinstance(value, Mapping):
        kind = CollectionKind.MAPPING
    elif isinstance(value, (list, tuple)):
        kind = CollectionKind.SEQUENCE
    elif isinstance(value, (str, bytes)):
        kind = CollectionKind.SCALAR
    elif isinstance(value, (Iterable, Iterator)):
        kind = CollectionKind.ITERATOR
    else:
        kind = CollectionKind.SCALAR
    return Collection(kind, value)
