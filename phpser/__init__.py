"""phpser — PHP serialize() / unserialize() and session encoding for Python.

Read and write the text format PHP uses for serialize(), cached objects and
the default "php" session handler, without running PHP.

Quick start:
    >>> from phpser import serialize, deserialize
    >>> serialize({"a": 1, "b": [True, None]})
    b'a:2:{s:1:"a";i:1;s:1:"b";a:2:{i:0;b:1;i:1;N;}}'
    >>> deserialize(b'a:2:{i:0;s:1:"x";i:1;s:1:"y";}')
    [b'x', b'y']

Strings decode to bytes because PHP strings are byte strings; pass
decode_strings=True to get str.  Sessions are detected automatically:
    >>> deserialize(b'a|i:1;b|s:1:"x";')
    {'a': 1, 'b': b'x'}
"""

from __future__ import annotations

from typing import IO, Any

from ._constants import INT64_MAX, INT64_MIN, MAX_DEPTH
from ._decoder import Buffer, Decoder, as_bytes, decode_value
from ._encoder import Encoder, format_float, serialize
from ._errors import (
    ERR_DEPTH,
    ERR_INT_RANGE,
    ERR_MALFORMED,
    ERR_NAME_RESOLUTION,
    ERR_NO_ATTRIBUTE,
    ERR_SESSION_KEY,
    ERR_TRUNCATED,
    ERR_TYPE,
    ERR_UNKNOWN_TAG,
    DepthExceededError,
    IntegerRangeError,
    MalformedInputError,
    NameResolutionError,
    NoSuchAttributeError,
    PHPSerializeError,
    SessionKeyError,
    TruncatedInputError,
    UnknownTypeTagError,
    UnserializableTypeError,
)
from ._model import Record
from ._names import TypeRegistry, camelize_wire_name, from_wire_name, to_wire_name
from ._session import deserialize_session, is_session_stream, serialize_session
from ._stream import StreamReader

__version__ = "1.1.0"

__all__ = [
    # Public API functions
    "serialize",
    "deserialize",
    "serialize_session",
    "deserialize_session",
    "dumps",
    "loads",
    "dump",
    "load",
    # Value model and name mapping
    "Record",
    "TypeRegistry",
    "to_wire_name",
    "camelize_wire_name",
    "from_wire_name",
    "format_float",
    "StreamReader",
    "Encoder",
    "Decoder",
    # Exceptions
    "PHPSerializeError",
    "TruncatedInputError",
    "MalformedInputError",
    "UnknownTypeTagError",
    "NameResolutionError",
    "NoSuchAttributeError",
    "UnserializableTypeError",
    "SessionKeyError",
    "IntegerRangeError",
    "DepthExceededError",
    # Error codes
    "ERR_TRUNCATED",
    "ERR_MALFORMED",
    "ERR_UNKNOWN_TAG",
    "ERR_NAME_RESOLUTION",
    "ERR_NO_ATTRIBUTE",
    "ERR_TYPE",
    "ERR_SESSION_KEY",
    "ERR_INT_RANGE",
    "ERR_DEPTH",
    # Limits
    "MAX_DEPTH",
    "INT64_MIN",
    "INT64_MAX",
]


# ── Core API ──────────────────────────────────────────────────

def deserialize(data: Buffer, assoc: bool = False, **options: Any) -> Any:
    """Decode PHP serialize() output, or a PHP session string.

    Input starting with ``name|`` is treated as a session stream and
    decoded to a dict of name -> value.

    Arrays whose keys are exactly 0..n-1 come back as lists, other arrays
    as dicts.  With `assoc=True` the latter come back as a list of
    (key, value) tuples instead, preserving order and duplicate keys.

    Keyword options:
        registry        TypeRegistry used to resolve O-tagged class names;
                        unresolved names decode to Record
        decode_strings  return str instead of bytes for string values
        encoding        codec for decode_strings and attribute names
        errors          error handler for that codec
        max_depth       container nesting limit (DepthExceededError)
    """
    raw = as_bytes(data, options.get("encoding", "utf-8"))
    if is_session_stream(raw):
        return deserialize_session(raw, assoc, **options)
    return decode_value(raw, assoc, **options)


# pickle / json style aliases
dumps = serialize
loads = deserialize


def dump(value: Any, fp: IO[bytes], assoc: bool = False, **options: Any) -> None:
    """Serialize `value` and write it to the binary file object `fp`."""
    fp.write(serialize(value, assoc, **options))


def load(fp: IO[bytes], assoc: bool = False, **options: Any) -> Any:
    """Read the whole binary file object `fp` and deserialize it."""
    return deserialize(fp.read(), assoc, **options)
