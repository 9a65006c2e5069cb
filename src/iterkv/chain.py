# pyright: reportPrivateUsage=false
from __future__ import annotations

import importlib
import itertools as it
import logging
import typing as tp
from collections import deque
from collections.abc import Callable, Iterable, Iterator, Mapping
from functools import reduce, wraps

from iterkv import _helpers
from iterkv._helpers import (
    ensure_int,
    ensure_non_negative_int,
    ensure_non_zero_int,
    ensure_str,
    fit_arity,
    invalid,
)
from iterkv.defaults import (
    DEFAULT_DELIMITER,
    EMPTY_DELIMITER,
    UNBOUNDED_END,
    Default,
    Exhausted,
    NoDefault,
)
from iterkv.errors import ErrorKind
from iterkv.sources import (
    Entry,
    Keyed,
    entries_of,
    is_iterable,
    range_entries,
    repeat_entries,
    split_entries,
)
from iterkv.wtyping import KeyedCallback, KeyedPredicate, Source, SupportsIndexedInsert

logger = logging.getLogger(__name__)


class MethodKind:
    @staticmethod
    def adapter[**P](
        func: Callable[
            tp.Concatenate[Source[tp.Any, tp.Any], P], Source[tp.Any, tp.Any]
        ],
    ) -> Callable[tp.Concatenate[KVIter[tp.Any, tp.Any], P], KVIter[tp.Any, tp.Any]]:
        """Install `func` around the held source and hand back the same chain."""

        @wraps(func)
        def inner(
            self: KVIter[tp.Any, tp.Any], *args: P.args, **kwargs: P.kwargs
        ) -> KVIter[tp.Any, tp.Any]:
            self._source = func(self._source, *args, **kwargs)
            return self

        return inner

    @staticmethod
    def consumer[**P, R](
        func: Callable[tp.Concatenate[Iterable[tp.Any], P], R],
    ) -> Callable[tp.Concatenate[KVIter[tp.Any, tp.Any], P], R]:
        @wraps(func)
        def inner(self: KVIter[tp.Any, tp.Any], *args: P.args, **kwargs: P.kwargs) -> R:
            return func(self._source, *args, **kwargs)

        return inner


def _resolve_sink(sink: type | str) -> type[SupportsIndexedInsert]:
    resolved: object = sink
    if isinstance(sink, str):
        module_name, _, attr = sink.rpartition(".")
        try:
            resolved = getattr(importlib.import_module(module_name or "builtins"), attr)
        except (ImportError, AttributeError, ValueError):
            raise invalid(
                f"collection class {sink!r} does not exist",
                ErrorKind.CollectionClassDoesNotExist,
            ) from None
    if not isinstance(resolved, type):
        raise invalid(
            f"collection class {sink!r} does not exist",
            ErrorKind.CollectionClassDoesNotExist,
        )
    if not issubclass(resolved, SupportsIndexedInsert):
        raise invalid(
            f"collection class {resolved.__name__} must support item assignment"
            " and len()",
            ErrorKind.CollectionClassMustImplementArrayAccess,
        )
    logger.debug("collecting into %s", resolved.__qualname__)
    return resolved


@tp.final
class KVIter[K, V](Iterator[Entry[K, V]]):
    """
    Lazily evaluated chain of transformations over key/value entries.

    Every transformation replaces the held source and returns the same
    object; nothing is pulled until a consuming method runs.

    Args:
        iterable: a mapping (keys are kept), or any iterable (keyed by position)

    Raises:
        IterKVError: IterableRequired, if `iterable` is not iterable.

    Example:
        >>> KVIter({"a": 1, "b": 2, "c": 3}).map(lambda v: v * 10).collect()
        {'a': 10, 'b': 20, 'c': 30}
        >>> evens = KVIter.range().filter(lambda v: v % 2 == 0)
        >>> evens.map(lambda v: v * v).take(3).to_list()
        [0, 4, 16]
    """

    def __init__(
        self, iterable: Iterable[V] | Mapping[K, V] | Keyed[K, V] = ()
    ) -> None:
        if not is_iterable(iterable):
            raise invalid(
                "KVIter expects a mapping or an iterable, "
                f"got {type(iterable).__name__}",
                ErrorKind.IterableRequired,
            )
        self._source: Source[tp.Any, tp.Any] = entries_of(iterable)

    @classmethod
    def _adopt[K1, V1](cls, source: Source[K1, V1]) -> KVIter[K1, V1]:
        self = cls.__new__(cls)
        self._source = source
        return tp.cast(KVIter[K1, V1], self)

    @classmethod
    def from_iterable[K1, V1](
        cls, iterable: Iterable[V1] | Mapping[K1, V1] | Keyed[K1, V1]
    ) -> KVIter[K1, V1]:
        """Same as calling `KVIter(iterable)`."""
        return cls(iterable)

    @classmethod
    def from_string(
        cls, text: str, delimiter: str = EMPTY_DELIMITER
    ) -> KVIter[int, str]:
        """
        Iterate over the characters of `text`, or over the pieces between
        each literal occurrence of `delimiter`.

        Raises:
            IterKVError: StringRequired, if either argument is not a string.

        Example:
            >>> KVIter.from_string("Hello world!", "o").to_list()
            ['Hell', ' w', 'rld!']
            >>> KVIter.from_string("abc").collect()
            {0: 'a', 1: 'b', 2: 'c'}
        """
        text = ensure_str(text, "from_string expects a string")
        delimiter = ensure_str(delimiter, "from_string expects a string delimiter")
        return cls._adopt(split_entries(text, delimiter))

    @classmethod
    def range(
        cls, start: int = 0, end: int = UNBOUNDED_END, step: int = 1
    ) -> KVIter[int, int]:
        """
        Inclusive range of integers from `start` to `end`.

        Counting goes down when `start > end`, whatever the sign of `step`.

        Raises:
            IterKVError: IntegerRequired for a non-integer start or end,
                NonZeroIntegerRequired for a zero or non-integer step.

        Example:
            >>> KVIter.range(0, 8, 2).to_list()
            [0, 2, 4, 6, 8]
            >>> KVIter.range(15, 3, 3).to_list()
            [15, 12, 9, 6, 3]
        """
        start = ensure_int(start, "range requires an integer for a start value")
        end = ensure_int(end, "range requires an integer for an end value")
        step = ensure_non_zero_int(
            step, "range requires a non-zero integer for a step value"
        )
        return cls._adopt(range_entries(start, end, step))

    @classmethod
    def repeat[V1](cls, value: V1, n: int | None = None) -> KVIter[int, V1]:
        """
        Yield `value` `n` times, or forever if `n` is None.

        Example:
            >>> KVIter.repeat("x", 3).to_list()
            ['x', 'x', 'x']
            >>> KVIter.repeat(0).take(2).collect()
            {0: 0, 1: 0}
        """
        if n is not None:
            n = ensure_non_negative_int(n, "repeat")
        return cls._adopt(repeat_entries(value, n))

    def __iterkv_entries__(self) -> Source[K, V]:
        """Hand over the underlying source; used when a chain feeds another one."""
        return self._source

    @tp.override
    def __iter__(self) -> Iterator[Entry[K, V]]:
        return self

    @tp.override
    def __next__(self) -> Entry[K, V]:
        return next(self._source)

    @tp.overload
    def next(
        self, default: tp.Literal[Default.NoDefault] = NoDefault
    ) -> Entry[K, V]: ...
    @tp.overload
    def next[TDefault](self, default: TDefault) -> Entry[K, V] | TDefault: ...
    def next[TDefault](self, default: TDefault = NoDefault) -> Entry[K, V] | TDefault:
        """next entry in the chain.

        Example:
            >>> chain = KVIter({"a": 1})
            >>> chain.next()
            Entry(key='a', value=1)
            >>> chain.next(default=None) is None
            True
        """
        if default is NoDefault:
            return next(self._source)
        return next(self._source, default)

    # Adapters

    map = MethodKind.adapter(_helpers.map_values)
    """map(func): apply `func(value, key)` to each value, keys preserved"""
    map_keys = MethodKind.adapter(_helpers.map_keys)
    """map_keys(func): replace each key with `func(value, key)`"""
    filter = MethodKind.adapter(_helpers.filter_entries)
    """filter(predicate): keep entries for which `predicate(value, key) is True`"""
    flat_map = MethodKind.adapter(_helpers.flat_map)
    """flat_map(func): emit the values of each `func(value, key)`, keys renumbered"""
    flatten = MethodKind.adapter(_helpers.flatten)
    """flatten(): expand iterable values by one level, keys renumbered"""
    chain = MethodKind.adapter(_helpers.chain)
    """chain(*iterables): append the values of each iterable, keys renumbered"""
    chunk = MethodKind.adapter(_helpers.chunk)
    """chunk(n): group consecutive values into lists of `n`, keys renumbered"""
    keys = MethodKind.adapter(_helpers.keys)
    """keys(): emit keys as values, keys renumbered"""
    values = MethodKind.adapter(_helpers.values)
    """values(): emit values with keys renumbered"""
    to_pairs = MethodKind.adapter(_helpers.to_pairs)
    """to_pairs(): emit `[key, value]` for each entry, keys renumbered"""
    from_pairs = MethodKind.adapter(_helpers.from_pairs)
    """from_pairs(): unpack each `(key, value)` value into an entry"""
    skip = MethodKind.adapter(_helpers.skip)
    """skip(n): drop the first `n` entries"""
    skip_while = MethodKind.adapter(_helpers.skip_while)
    """skip_while(predicate): drop entries until the predicate is not True"""
    take = MethodKind.adapter(_helpers.take)
    """take(n): stop after `n` entries"""
    take_while = MethodKind.adapter(_helpers.take_while)
    """take_while(predicate): stop at the first entry failing the predicate"""
    step_by = MethodKind.adapter(_helpers.step_by)
    """step_by(n): emit the first entry and every `n`th after it"""

    # Consumers

    def all(self) -> bool:
        """
        Check that every value is exactly True. Stops at the first one that
        is not.

        If self is empty, return True.

        Example:
            >>> KVIter([True, True]).all()
            True
            >>> KVIter([True, 1]).all()
            False
            >>> KVIter(()).all()
            True
        """
        return all(value is True for _, value in self._source)

    def any(self) -> bool:
        """
        Check that at least one value is exactly True. Stops at the first
        one that is.

        If self is empty, return False.

        Example:
            >>> KVIter([False, True]).any()
            True
            >>> KVIter([1, "yes"]).any()
            False
        """
        return any(value is True for _, value in self._source)

    count = MethodKind.consumer(_helpers.count)
    """count(): number of entries left; never returns on an unbounded source"""
    exhaust = MethodKind.consumer(_helpers.consume)
    """exhaust(): consume all entries, e.g. for side-effects"""

    @tp.overload
    def collect(self, sink: None = None, /) -> dict[K, V]: ...
    @tp.overload
    def collect[S: SupportsIndexedInsert](
        self, sink: type[S], /, *args: tp.Any, **kwargs: tp.Any
    ) -> S: ...
    @tp.overload
    def collect(
        self, sink: str, /, *args: tp.Any, **kwargs: tp.Any
    ) -> SupportsIndexedInsert: ...
    def collect(
        self, sink: type | str | None = None, /, *args: tp.Any, **kwargs: tp.Any
    ) -> tp.Any:
        """
        Store every entry as `container[key] = value`.

        Args:
            sink (optional): class, or dotted import path of a class, whose
                instances support item assignment and `len()`. It is built
                with `*args` and `**kwargs`. default, a new dict.

        Returns:
            the filled container.

        Raises:
            IterKVError: CollectionClassDoesNotExist if `sink` cannot be
                resolved to a class, CollectionClassMustImplementArrayAccess
                if it lacks item assignment. Raised before anything is pulled.

        Example:
            >>> KVIter(["a", "b"]).collect()
            {0: 'a', 1: 'b'}
            >>> KVIter({"b": 1, "a": 2}).collect("collections.OrderedDict")
            OrderedDict({'b': 1, 'a': 2})
        """
        container = {} if sink is None else _resolve_sink(sink)(*args, **kwargs)
        for key, value in self._source:
            container[key] = value
        return container

    def join(self, delimiter: str = DEFAULT_DELIMITER) -> str:
        """
        Concatenate the string form of every value, separated by `delimiter`.

        Example:
            >>> KVIter({"a": 1, "b": 2, "c": 3}).join()
            '1, 2, 3'
            >>> KVIter(()).join(" - ")
            ''
        """
        delimiter = ensure_str(delimiter, "join expects a string delimiter")
        return delimiter.join(str(value) for _, value in self._source)

    @tp.overload
    def nth(self, n: int, default: tp.Literal[Default.NoDefault]) -> V: ...
    @tp.overload
    def nth[TDefault](self, n: int, default: TDefault = None) -> V | TDefault: ...
    def nth[TDefault](self, n: int, default: TDefault = None) -> V | TDefault:
        """
        Value of the zero-indexed `n`th entry. Nothing past it is pulled.

        Args:
            n: index of the wanted entry.
            default (optional): returned if the chain ends first. If
                Default.NoDefault, StopIteration is raised instead.
                default: None

        Example:
            >>> KVIter("abc").nth(1)
            'b'
            >>> KVIter("abc").nth(3) is None
            True
        """
        n = ensure_non_negative_int(n, "nth")
        for _, value in it.islice(self._source, n, n + 1):
            return value
        if default is NoDefault:
            raise StopIteration(f"chain ended before index {n}")
        return default

    def reduce[A](self, func: Callable[..., A], initial: A | None = None) -> A | None:
        """
        Fold the chain from the left with `func(accumulator, value, key)`.

        Example:
            >>> KVIter({"a": 1, "b": 2}).reduce(lambda acc, v, k: acc + k * v, "")
            'abb'
            >>> KVIter(()).reduce(lambda acc, v: acc + v, 5)
            5
        """
        func = fit_arity(func, 3, fallback=2, name="reduce")
        return reduce(
            lambda acc, entry: func(acc, entry.value, entry.key), self._source, initial
        )

    def partition(
        self, predicate: KeyedPredicate[K, V]
    ) -> tuple[dict[K, V], dict[K, V]]:
        """
        Split entries by `predicate(value, key)`, keeping their keys.

        Returns:
            (entries for which the predicate is True, all the others)

        Example:
            >>> KVIter({"a": 1, "b": 2, "c": 3}).partition(lambda v: v % 2 == 0)
            ({'b': 2}, {'a': 1, 'c': 3})
        """
        predicate = fit_arity(predicate, 2, fallback=1, name="partition")
        selected: dict[K, V] = {}
        rejected: dict[K, V] = {}
        for key, value in self._source:
            bucket = selected if predicate(value, key) is True else rejected
            bucket[key] = value
        return selected, rejected

    def to_list(self) -> list[V]:
        """
        Values of the chain as a list; keys are dropped.

        Example:
            >>> KVIter({"a": 1, "b": 2}).to_list()
            [1, 2]
        """
        return [value for _, value in self._source]

    def first[TDefault](self, default: TDefault = None) -> V | TDefault:
        """
        First value, or `default` if the chain is empty.

        Example:
            >>> KVIter.range(5, 10).first()
            5
            >>> KVIter(()).first(-1)
            -1
        """
        entry = next(self._source, Exhausted)
        return default if entry is Exhausted else entry.value

    def last[TDefault](self, default: TDefault = None) -> V | TDefault:
        """
        Last value, or `default` if the chain is empty.

        Example:
            >>> KVIter.range(5, 10).last()
            10
        """
        try:
            return deque(self._source, maxlen=1).popleft().value
        except IndexError:
            return default

    def foreach(self, func: KeyedCallback[K, V, object]) -> None:
        """call `func(value, key)` on each entry, and exhaust.

        Example:
            >>> KVIter({"a": 1, "b": 2}).foreach(lambda v, k: print(k, v))
            a 1
            b 2
        """
        self.map(func).exhaust()
