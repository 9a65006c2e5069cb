import inspect
import itertools as it
import logging
from collections import deque
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from iterkv.errors import ErrorKind, IterKVError
from iterkv.sources import Entry, is_iterable, values_of
from iterkv.wtyping import KeyedCallback, KeyedPredicate, Source

logger = logging.getLogger(__name__)


def invalid(message: str, kind: ErrorKind) -> IterKVError:
    logger.debug("rejected argument (%s): %s", kind.name, message)
    return IterKVError(message, kind)


def _is_int(n: object) -> bool:
    return isinstance(n, int) and not isinstance(n, bool)


def ensure_int(n: object, message: str) -> int:
    if not _is_int(n):
        raise invalid(message, ErrorKind.IntegerRequired)
    return n  # pyright: ignore[reportReturnType]


def ensure_non_zero_int(n: object, message: str) -> int:
    if not _is_int(n) or n == 0:
        raise invalid(message, ErrorKind.NonZeroIntegerRequired)
    return n  # pyright: ignore[reportReturnType]


def ensure_non_negative_int(n: object, name: str) -> int:
    if not _is_int(n) or n < 0:  # pyright: ignore[reportOperatorIssue]
        raise invalid(
            f"{name} requires an integer greater than or equal to zero, got {n!r}",
            ErrorKind.PositiveIntegerRequired,
        )
    return n  # pyright: ignore[reportReturnType]


def ensure_positive_int(n: object, name: str) -> int:
    if not _is_int(n) or n <= 0:  # pyright: ignore[reportOperatorIssue]
        raise invalid(
            f"{name} requires an integer greater than zero, got {n!r}",
            ErrorKind.NonZeroPositiveIntegerRequired,
        )
    return n  # pyright: ignore[reportReturnType]


def ensure_str(s: object, message: str) -> str:
    if not isinstance(s, str):
        raise invalid(message, ErrorKind.StringRequired)
    return s


def ensure_iterable(obj: object, message: str) -> object:
    if not is_iterable(obj):
        raise invalid(message, ErrorKind.IterableRequired)
    return obj


def fit_arity[R](
    func: Callable[..., R], nargs: int, *, fallback: int, name: str
) -> Callable[..., R]:
    """
    Adapt `func` so it can always be called with `nargs` positional arguments.

    Callables accepting fewer positional parameters receive only the leading
    arguments. Optional parameters count for Python functions and methods,
    but not for builtins and other callables, so `str.strip` or `round` are
    never handed the key. When no signature is available, `fallback`
    arguments are passed.

    Example:
        >>> fit_arity(str.upper, 2, fallback=1, name="map")("a", 0)
        'A'
        >>> fit_arity(str.strip, 2, fallback=1, name="map")(" a ", 0)
        'a'
        >>> fit_arity(lambda v, k: (k, v), 2, fallback=1, name="map")("a", 0)
        (0, 'a')
        >>> fit_arity(float, 2, fallback=1, name="map")("7", 0)
        7.0
    """
    if not callable(func):
        raise TypeError(f"{name} expects a callable, got {type(func).__name__}")
    try:
        params = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        accepted = fallback
    else:
        optional_counts = inspect.isfunction(func) or inspect.ismethod(func)
        if any(p.kind is p.VAR_POSITIONAL for p in params):
            accepted = nargs
        else:
            accepted = sum(
                p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
                and (optional_counts or p.default is p.empty)
                for p in params
            )
    accepted = max(1, min(accepted, nargs))
    if accepted == nargs:
        return func
    return lambda *args: func(*args[:accepted])


def resequence[V](values: Iterable[V]) -> Source[int, V]:
    return it.starmap(Entry, enumerate(values))


def _values[V](source: Source[Any, V]) -> Iterator[V]:
    return (value for _, value in source)


def _expand(value: object) -> Iterator[object]:
    if is_iterable(value) and not isinstance(value, (str, bytes)):
        yield from values_of(value)  # pyright: ignore[reportArgumentType]
    else:
        yield value


def map_values[K, V, R](
    source: Source[K, V], func: KeyedCallback[K, V, R]
) -> Source[K, R]:
    """Apply `func(value, key)` to every value, keeping keys."""
    func = fit_arity(func, 2, fallback=1, name="map")
    return (Entry(key, func(value, key)) for key, value in source)


def map_keys[K, V, R](
    source: Source[K, V], func: KeyedCallback[K, V, R]
) -> Source[R, V]:
    """Replace every key with `func(value, key)`. Colliding keys are kept as is."""
    func = fit_arity(func, 2, fallback=1, name="map_keys")
    return (Entry(func(value, key), value) for key, value in source)


def filter_entries[K, V](
    source: Source[K, V], predicate: KeyedPredicate[K, V]
) -> Source[K, V]:
    """Keep entries for which `predicate(value, key)` is exactly True."""
    predicate = fit_arity(predicate, 2, fallback=1, name="filter")
    return (entry for entry in source if predicate(entry.value, entry.key) is True)


def flat_map[K, V, R](
    source: Source[K, V], func: KeyedCallback[K, V, Iterable[R]]
) -> Source[int, R]:
    func = fit_arity(func, 2, fallback=1, name="flat_map")
    return resequence(
        item for key, value in source for item in values_of(func(value, key))
    )


def flatten(source: Source[Any, object]) -> Source[int, object]:
    """Expand iterable values by one level; strings and bytes stay whole."""
    return resequence(it.chain.from_iterable(map(_expand, _values(source))))


def chain[V](source: Source[Any, V], *iterables: Iterable[V]) -> Source[int, V]:
    if not iterables:
        return source
    for iterable in iterables:
        _ = ensure_iterable(iterable, "chain expects mappings or iterables")
    tail = map(values_of, iterables)
    return resequence(it.chain(_values(source), it.chain.from_iterable(tail)))


def chunk[V](source: Source[Any, V], n: int) -> Source[int, list[V]]:
    n = ensure_positive_int(n, "chunk")
    return resequence(map(list, it.batched(_values(source), n)))


def keys[K](source: Source[K, Any]) -> Source[int, K]:
    return resequence(key for key, _ in source)


def values[V](source: Source[Any, V]) -> Source[int, V]:
    return resequence(_values(source))


def to_pairs[K, V](source: Source[K, V]) -> Source[int, list[K | V]]:
    return resequence([key, value] for key, value in source)


def _pair_entry(pair: Iterable[Any]) -> Entry[Any, Any]:
    key, value, *_ = pair
    return Entry(key, value)


def from_pairs(source: Source[Any, Iterable[Any]]) -> Source[Any, Any]:
    """Unpack each value as `(key, value)`; items past the second are ignored."""
    return map(_pair_entry, _values(source))


def skip[K, V](source: Source[K, V], n: int) -> Source[K, V]:
    n = ensure_non_negative_int(n, "skip")
    return it.islice(source, n, None)


def skip_while[K, V](
    source: Source[K, V], predicate: KeyedPredicate[K, V]
) -> Source[K, V]:
    """
    Drop entries while `predicate(value, key)` is exactly True.

    Once it is not, that entry and every later one pass through unchecked.
    """
    predicate = fit_arity(predicate, 2, fallback=1, name="skip_while")
    return it.dropwhile(
        lambda entry: predicate(entry.value, entry.key) is True, source
    )


def take[K, V](source: Source[K, V], n: int) -> Source[K, V]:
    n = ensure_non_negative_int(n, "take")
    return it.islice(source, n)


def take_while[K, V](
    source: Source[K, V], predicate: KeyedPredicate[K, V]
) -> Source[K, V]:
    predicate = fit_arity(predicate, 2, fallback=1, name="take_while")
    return it.takewhile(lambda entry: predicate(entry.value, entry.key), source)


def step_by[K, V](source: Source[K, V], n: int) -> Source[K, V]:
    n = ensure_positive_int(n, "step_by")
    if n == 1:
        return source
    return it.islice(source, 0, None, n)


def count(source: Iterable[object]) -> int:
    """
    Example:
        >>> count(it.islice(it.count(), 0, 10, 3))
        4
    """
    return sum(1 for _ in source)


consume = deque[object](maxlen=0).extend
