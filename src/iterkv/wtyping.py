import typing as tp
from collections.abc import Callable, Iterator

from iterkv.sources import Entry

type Source[K, V] = Iterator[Entry[K, V]]
type KeyedCallback[K, V, R] = Callable[[V, K], R]
type KeyedPredicate[K, V] = Callable[[V, K], bool]


@tp.runtime_checkable
class SupportsIndexedInsert(tp.Protocol):
    """A `collect` sink: assignable by key and able to report its length."""

    def __setitem__(self, key: tp.Any, value: tp.Any, /) -> None: ...  # noqa: ANN401

    def __len__(self) -> int: ...
