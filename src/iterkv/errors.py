"""
Error taxonomy for iterkv.

Every failure raised by the library itself is an `IterKVError`; callers tell
failures apart by `kind`.
"""

import enum


class ErrorKind(enum.IntEnum):
    """Distinguishes what kind of argument was rejected."""

    IterableRequired = 1
    IntegerRequired = 2
    NonZeroIntegerRequired = 3
    PositiveIntegerRequired = 4
    NonZeroPositiveIntegerRequired = 5
    StringRequired = 6
    CollectionClassDoesNotExist = 7
    CollectionClassMustImplementArrayAccess = 8


class IterKVError(ValueError):
    """
    Raised synchronously by the call that received an invalid argument.

    Example:
        >>> err = IterKVError("chunk requires an integer greater than zero",
        ...                   ErrorKind.NonZeroPositiveIntegerRequired)
        >>> err.kind
        <ErrorKind.NonZeroPositiveIntegerRequired: 5>
        >>> err.code
        5
    """

    def __init__(self, message: str, kind: ErrorKind) -> None:
        super().__init__(message)
        self.kind = kind

    @property
    def code(self) -> int:
        return int(self.kind)
