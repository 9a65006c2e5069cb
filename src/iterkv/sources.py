"""
Sequence sources: single-pass producers of `Entry(key, value)` pairs.

Anything a chain starts from is turned into an iterator of entries here.
Mappings keep their keys, every other iterable is keyed by position.
"""

from __future__ import annotations

import itertools as it
import typing as tp
from collections.abc import Iterable, Iterator, Mapping


class Entry[K, V](tp.NamedTuple):
    key: K
    value: V


@tp.runtime_checkable
class Keyed[K, V](tp.Protocol):
    """Anything that can hand over its own stream of entries, such as a chain."""

    def __iterkv_entries__(self) -> Iterator[Entry[K, V]]: ...


def is_iterable(obj: object) -> bool:
    return isinstance(obj, (Iterable, Keyed))


def entries_of[K, V](
    iterable: Iterable[V] | Mapping[K, V] | Keyed[K, V],
) -> Iterator[Entry[tp.Any, V]]:
    """
    Produce the entries of any supported origin.

    Example:
        >>> list(entries_of({"a": 1, "b": 2}))
        [Entry(key='a', value=1), Entry(key='b', value=2)]
        >>> list(entries_of("xy"))
        [Entry(key=0, value='x'), Entry(key=1, value='y')]
    """
    if isinstance(iterable, Keyed):
        return iterable.__iterkv_entries__()
    if isinstance(iterable, Mapping):
        return it.starmap(Entry, tp.cast(Mapping[K, V], iterable).items())
    return it.starmap(Entry, enumerate(iterable))


def values_of[V](
    iterable: Iterable[V] | Mapping[tp.Any, V] | Keyed[tp.Any, V],
) -> Iterator[V]:
    """
    Produce only the values of any supported origin, in order.

    Example:
        >>> list(values_of({"a": 1, "b": 2}))
        [1, 2]
    """
    if isinstance(iterable, Keyed):
        return (entry.value for entry in iterable.__iterkv_entries__())
    if isinstance(iterable, Mapping):
        return iter(tp.cast(Mapping[tp.Any, V], iterable).values())
    return iter(iterable)


def range_entries(start: int, end: int, step: int) -> Iterator[Entry[int, int]]:
    """
    Inclusive range from `start` to `end`.

    The direction is decided by comparing `start` and `end`; only the
    magnitude of `step` is used.

    Example:
        >>> [e.value for e in range_entries(4, 0, 1)]
        [4, 3, 2, 1, 0]
        >>> [e.value for e in range_entries(-10, -2, -2)]
        [-10, -8, -6, -4, -2]
    """
    step = abs(step)
    if start > end:
        numbers = range(start, end - 1, -step)
    else:
        numbers = range(start, end + 1, step)
    return it.starmap(Entry, enumerate(numbers))


def repeat_entries[V](value: V, n: int | None = None) -> Iterator[Entry[int, V]]:
    repeated = it.repeat(value) if n is None else it.repeat(value, n)
    return it.starmap(Entry, enumerate(repeated))


def _split(text: str, delimiter: str) -> Iterator[str]:
    start = 0
    while (found := text.find(delimiter, start)) != -1:
        yield text[start:found]
        start = found + len(delimiter)
    yield text[start:]


def split_entries(text: str, delimiter: str = "") -> Iterator[Entry[int, str]]:
    """
    Split `text` into characters, or on each literal `delimiter`.

    Example:
        >>> [e.value for e in split_entries("héllo")]
        ['h', 'é', 'l', 'l', 'o']
        >>> [e.value for e in split_entries("a--b--", "--")]
        ['a', 'b', '']
    """
    pieces = iter(text) if not delimiter else _split(text, delimiter)
    return it.starmap(Entry, enumerate(pieces))
