"""The value model.

phpser works on plain Python values:

    None                      N
    bool                      b
    int (signed 64-bit)       i
    float                     d
    bytes / bytearray / str   s   (length is always the UTF-8 byte length)
    list / tuple              a   (keys 0..n-1)
    Mapping                   a   (keys as given, insertion order)
    Record                    O

Record is the only type phpser defines.  It stands in for an O-tagged
object whose class name is not registered with a TypeRegistry, and it
re-serializes under the exact name it was decoded with.

Host objects outside this model opt in through two methods:

    to_attribute_list()        -> [(name, value), ...]   used when encoding
    from_attribute_list(pairs) -> None                   used when decoding
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Protocol, Sequence, Tuple, runtime_checkable


Pair = Tuple[Any, Any]


@dataclass(frozen=True)
class Record:
    """A decoded object of a class phpser could not resolve."""

    name: str
    fields: Tuple[Pair, ...] = ()

    def __post_init__(self) -> None:
        # Accept any iterable of pairs but store an immutable tuple.
        object.__setattr__(self, "fields", tuple((k, v) for k, v in self.fields))

    def get(self, key: Any, default: Any = None) -> Any:
        """Return the value of the last field named `key`."""
        found = default
        for k, v in self.fields:
            if k == key:
                found = v
        return found

    def to_attribute_list(self) -> Tuple[Pair, ...]:
        return self.fields


@runtime_checkable
class AttributeListSource(Protocol):
    def to_attribute_list(self) -> Iterable[Pair]: ...


@runtime_checkable
class AttributeListSink(Protocol):
    def from_attribute_list(self, pairs: Sequence[Pair]) -> None: ...


def is_pair(value: Any) -> bool:
    """True for a 2-item list or tuple, the shape of an associative entry."""
    return isinstance(value, (list, tuple)) and len(value) == 2
