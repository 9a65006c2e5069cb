import enum
import sys
from typing import Literal


class Default(enum.Enum):
    """Sentinel values used as defaults."""

    Exhausted = enum.auto()
    NoDefault = enum.auto()


# TODO: Replace with enum.global_enum if ever supported in pyright
Exhausted: Literal[Default.Exhausted] = Default.Exhausted
NoDefault: Literal[Default.NoDefault] = Default.NoDefault

DEFAULT_DELIMITER = ", "
EMPTY_DELIMITER = ""
UNBOUNDED_END = sys.maxsize
