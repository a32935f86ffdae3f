"""Deserializer — PHP serialize() bytes to Python values.

The grammar is strictly prefix-framed: one tag byte, then a header whose
shape depends on the tag, then (for containers) exactly the declared number
of nested values.  Lengths and counts are trusted only as far as the input
actually reaches; every read that runs off the end is a TruncatedInputError.

PHP has a single "array" type that doubles as list and ordered dictionary.
We recover a list when the keys are exactly 0, 1, ..., n-1 in order and a
dict otherwise.  The keys of a recovered list are dropped, which is lossy
for arrays PHP built with explicit 0..n-1 keys; that matches PHP's own
semantics, where such arrays are indistinguishable from lists.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple, Union

from ._constants import (
    CLOSE_BRACE,
    COLON,
    MAX_DEPTH,
    OPEN_BRACE,
    QUOTE,
    SEMICOLON,
    TAG_ARRAY,
    TAG_BOOL,
    TAG_FLOAT,
    TAG_INT,
    TAG_NULL,
    TAG_OBJECT,
    TAG_STRING,
)
from ._errors import (
    DepthExceededError,
    MalformedInputError,
    NameResolutionError,
    NoSuchAttributeError,
    UnknownTypeTagError,
)
from ._model import Pair, Record
from ._names import Registration, TypeRegistry, from_wire_name
from ._stream import StreamReader

Buffer = Union[bytes, bytearray, memoryview, str]

# Tolerant numeric prefix, as PHP reads integers: "12abc" -> 12.
_INT_PREFIX = re.compile(rb"\s*([+-]?\d+)")


def _parse_int(text: bytes, what: str, position: int) -> int:
    m = _INT_PREFIX.match(text)
    if m is None:
        raise MalformedInputError("bad {} {!r} before offset {}".format(what, text, position))
    try:
        return int(m.group(1))
    except ValueError as exc:
        # int() refuses absurdly long digit strings (sys.set_int_max_str_digits).
        raise MalformedInputError("{} too long before offset {}".format(what, position)) from exc


def _is_sequential(pairs: List[Pair]) -> bool:
    # bool is an int subclass; True must not pass for index 1.
    for i, (key, _) in enumerate(pairs):
        if type(key) is not int or key != i:
            return False
    return True


def as_bytes(data: Buffer, encoding: str = "utf-8") -> bytes:
    if isinstance(data, str):
        return data.encode(encoding)
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError("expected a bytes-like object or str, got {}".format(type(data).__name__))


class Decoder:
    """Reads values from one input buffer.

    decode() may be called repeatedly to read consecutive values, which is
    how session streams are consumed.
    """

    def __init__(self, data: Buffer, assoc: bool = False, *,
                 registry: Optional[TypeRegistry] = None, decode_strings: bool = False,
                 encoding: str = "utf-8", errors: str = "strict",
                 max_depth: int = MAX_DEPTH) -> None:
        self.reader = StreamReader(as_bytes(data, encoding))
        self.assoc = assoc
        self.registry = registry
        self.decode_strings = decode_strings
        self.encoding = encoding
        self.errors = errors
        self.max_depth = max_depth

    def decode(self) -> Any:
        return self._decode(0)

    # ── helpers ───────────────────────────────────────────────

    def _read_number(self, delimiter: bytes, what: str) -> int:
        text = self.reader.read_until(delimiter)
        return _parse_int(text, what, self.reader.position)

    def _read_length(self, what: str) -> int:
        n = self._read_number(COLON, what)
        if n < 0:
            raise MalformedInputError("negative {} {} before offset {}".format(
                what, n, self.reader.position))
        return n

    def _text(self, raw: bytes) -> str:
        try:
            return raw.decode(self.encoding, self.errors)
        except UnicodeDecodeError as exc:
            raise MalformedInputError("cannot decode {!r} as {}".format(
                raw, self.encoding)) from exc

    def _enter(self, depth: int) -> None:
        if depth + 1 > self.max_depth:
            raise DepthExceededError(self.max_depth)

    def _read_pairs(self, depth: int) -> List[Pair]:
        count = self._read_length("element count")
        self.reader.expect(OPEN_BRACE)
        pairs: List[Pair] = []
        for _ in range(count):
            key = self._decode(depth + 1)
            value = self._decode(depth + 1)
            pairs.append((key, value))
        self.reader.expect(CLOSE_BRACE)
        return pairs

    # ── dispatch ──────────────────────────────────────────────

    def _decode(self, depth: int) -> Any:
        start = self.reader.position
        tag = self.reader.read_exact(1)

        if tag == TAG_NULL:
            self.reader.expect(SEMICOLON)
            return None

        if tag not in (TAG_BOOL, TAG_INT, TAG_FLOAT, TAG_STRING, TAG_ARRAY, TAG_OBJECT):
            raise UnknownTypeTagError(tag, start)
        self.reader.expect(COLON)

        if tag == TAG_STRING:
            n = self._read_length("string length")
            self.reader.expect(QUOTE)
            raw = self.reader.read_exact(n)
            self.reader.expect(b'";')
            return self._text(raw) if self.decode_strings else raw

        if tag == TAG_INT:
            return self._read_number(SEMICOLON, "integer")

        if tag == TAG_FLOAT:
            text = self.reader.read_until(SEMICOLON)
            try:
                return float(text.decode("ascii"))
            except (UnicodeDecodeError, ValueError) as exc:
                raise MalformedInputError("bad float {!r} at offset {}".format(
                    text, start)) from exc

        if tag == TAG_BOOL:
            flag = self.reader.read_until(SEMICOLON)
            if flag not in (b"0", b"1"):
                raise MalformedInputError("bad boolean {!r} at offset {}".format(flag, start))
            return flag == b"1"

        self._enter(depth)
        if tag == TAG_ARRAY:
            return self._decode_array(depth)
        return self._decode_object(depth)

    def _decode_array(self, depth: int) -> Any:
        pairs = self._read_pairs(depth)

        if _is_sequential(pairs):
            return [v for _, v in pairs]
        if self.assoc:
            return pairs

        result: Dict[Any, Any] = {}
        for key, value in pairs:
            try:
                result[key] = value
            except TypeError as exc:
                raise MalformedInputError("unhashable array key {!r}".format(key)) from exc
        return result

    def _decode_object(self, depth: int) -> Any:
        n = self._read_length("class name length")
        self.reader.expect(QUOTE)
        name = self._text(self.reader.read_exact(n))
        self.reader.expect(b'":')
        fields = self._read_pairs(depth)

        try:
            reg = from_wire_name(name, self.registry)
        except NameResolutionError:
            return Record(name, fields)
        return self._build(reg, fields)

    def _attribute_name(self, key: Any) -> str:
        if isinstance(key, bytes):
            return self._text(key)
        return key if isinstance(key, str) else str(key)

    def _build(self, reg: Registration, fields: List[Pair]) -> Any:
        obj = reg.factory()
        named: List[Tuple[str, Any]] = [(self._attribute_name(k), v) for k, v in fields]

        sink = getattr(obj, "from_attribute_list", None)
        if callable(sink):
            sink(named)
            return obj

        # Attributes a custom factory already set on the instance count as declared.
        present = getattr(obj, "__dict__", None) or {}
        for attr, value in named:
            if attr not in reg.attributes and attr not in present:
                raise NoSuchAttributeError(reg.type_id, attr)
            try:
                setattr(obj, attr, value)
            except AttributeError as exc:
                raise NoSuchAttributeError(reg.type_id, attr) from exc
        return obj


def decode_value(data: Buffer, assoc: bool = False, **options: Any) -> Any:
    """Decode exactly one value; trailing bytes are an error."""
    decoder = Decoder(data, assoc, **options)
    value = decoder.decode()
    if not decoder.reader.at_end():
        raise MalformedInputError("{} trailing bytes after value at offset {}".format(
            decoder.reader.remaining, decoder.reader.position))
    return value
