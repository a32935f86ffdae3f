"""Serializer — Python values to PHP serialize() bytes.

Dispatch order matters in two places:

  * bool before int, because isinstance(True, int) is True and PHP has a
    distinct boolean tag;
  * Record before dataclasses, because Record is itself a dataclass and
    must keep the exact class name it was decoded with.

Everything is rendered into a list of byte chunks and joined once at the
end, so a failure half-way never leaves partial output behind.
"""

from __future__ import annotations

import dataclasses
import math
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Iterable, List, Optional

from ._constants import (
    FLOAT_FIXED_MAX_DECPT,
    FLOAT_FIXED_MIN_DECPT,
    INT64_MAX,
    INT64_MIN,
    MAX_DEPTH,
)
from ._errors import DepthExceededError, IntegerRangeError, UnserializableTypeError
from ._model import AttributeListSource, Pair, Record, is_pair
from ._names import TypeRegistry, host_type_id, to_wire_name


# ── Float rendering ──────────────────────────────────────────

def format_float(value: float) -> str:
    """Render a float the way PHP's serialize() does.

    repr() already yields the shortest digit string that round-trips, which
    is what PHP computes with serialize_precision=-1; only the layout
    differs.  PHP drops a trailing ".0", and switches to "1.0E+25" style
    once the decimal point is more than 17 places right or 4 places left.
    """
    if math.isnan(value):
        return "NAN"
    if math.isinf(value):
        return "INF" if value > 0 else "-INF"

    sign = "-" if math.copysign(1.0, value) < 0 else ""
    if value == 0:
        return sign + "0"

    _, digit_tuple, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    decpt = len(digits) + exponent  # position of the decimal point

    if decpt < FLOAT_FIXED_MIN_DECPT or decpt > FLOAT_FIXED_MAX_DECPT:
        exp = decpt - 1
        return "{}{}.{}E{}{}".format(
            sign, digits[0], digits[1:] or "0", "-" if exp < 0 else "+", abs(exp))
    if decpt <= 0:
        return "{}0.{}{}".format(sign, "0" * -decpt, digits)
    if decpt >= len(digits):
        return sign + digits + "0" * (decpt - len(digits))
    return "{}{}.{}".format(sign, digits[:decpt], digits[decpt:])


# ── Scalars ──────────────────────────────────────────────────

def encode_string(raw: bytes) -> bytes:
    return b"s:%d:\"%s\";" % (len(raw), raw)


def _text_bytes(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8", "surrogateescape")
    return bytes(value)


# ── Encoder ──────────────────────────────────────────────────

class Encoder:
    """One serialize() call's worth of state."""

    def __init__(self, assoc: bool = False, registry: Optional[TypeRegistry] = None,
                 max_depth: int = MAX_DEPTH) -> None:
        self.assoc = assoc
        self.registry = registry
        self.max_depth = max_depth

    def encode(self, value: Any) -> bytes:
        parts: List[bytes] = []
        self._encode(value, parts, 0)
        return b"".join(parts)

    def _encode(self, val: Any, out: List[bytes], depth: int) -> None:
        if val is None:
            out.append(b"N;")
            return

        if isinstance(val, bool):
            out.append(b"b:1;" if val else b"b:0;")
            return

        if isinstance(val, int):
            if val < INT64_MIN or val > INT64_MAX:
                raise IntegerRangeError("integer {} outside signed 64-bit range".format(val))
            out.append(b"i:%d;" % val)
            return

        if isinstance(val, float):
            out.append(b"d:" + format_float(val).encode("ascii") + b";")
            return

        if isinstance(val, (bytes, bytearray, memoryview, str)):
            out.append(encode_string(_text_bytes(val)))
            return

        if isinstance(val, Record):
            self._encode_object(val.name, val.fields, out, depth)
            return

        if isinstance(val, (list, tuple)):
            self._encode_sequence(val, out, depth)
            return

        if isinstance(val, Mapping):
            self._enter(depth)
            out.append(b"a:%d:{" % len(val))
            for k, v in val.items():
                self._encode(k, out, depth + 1)
                self._encode(v, out, depth + 1)
            out.append(b"}")
            return

        if isinstance(val, AttributeListSource):
            name = to_wire_name(host_type_id(val, self.registry))
            attrs = [(_attribute_name(k), v) for k, v in val.to_attribute_list()]
            self._encode_object(name, attrs, out, depth)
            return

        if dataclasses.is_dataclass(val) and not isinstance(val, type):
            name = to_wire_name(host_type_id(val, self.registry))
            attrs = [(f.name, getattr(val, f.name)) for f in dataclasses.fields(val)]
            self._encode_object(name, attrs, out, depth)
            return

        raise UnserializableTypeError(
            "unable to serialize type {}".format(type(val).__qualname__))

    def _enter(self, depth: int) -> None:
        if depth + 1 > self.max_depth:
            raise DepthExceededError(self.max_depth)

    def _encode_sequence(self, seq: Any, out: List[bytes], depth: int) -> None:
        self._enter(depth)
        out.append(b"a:%d:{" % len(seq))
        if self.assoc and seq and is_pair(seq[0]):
            # Associative mode: the caller spelled out the keys.
            for item in seq:
                k, v = _key_value(item)
                self._encode(k, out, depth + 1)
                self._encode(v, out, depth + 1)
        else:
            for i, item in enumerate(seq):
                out.append(b"i:%d;" % i)
                self._encode(item, out, depth + 1)
        out.append(b"}")

    def _encode_object(self, name: str, fields: Iterable[Pair], out: List[bytes],
                       depth: int) -> None:
        self._enter(depth)
        fields = list(fields)
        raw_name = name.encode("utf-8")
        out.append(b"O:%d:\"%s\":%d:{" % (len(raw_name), raw_name, len(fields)))
        for k, v in fields:
            self._encode(k, out, depth + 1)
            self._encode(v, out, depth + 1)
        out.append(b"}")


def _key_value(item: Any) -> Pair:
    """Split an associative entry into key and value.

    Sequences contribute their first two items, missing ones becoming None;
    anything else is a key with a None value.  Every entry yields exactly
    one pair, so the declared count always matches.
    """
    if isinstance(item, (list, tuple)):
        return (item[0] if len(item) > 0 else None,
                item[1] if len(item) > 1 else None)
    return item, None


def _attribute_name(name: Any) -> Any:
    if isinstance(name, (str, bytes)):
        return name
    return str(name)


def serialize(value: Any, assoc: bool = False, *, registry: Optional[TypeRegistry] = None,
              max_depth: int = MAX_DEPTH) -> bytes:
    """Return the PHP serialize() encoding of `value`.

    With `assoc=True`, a list whose first item is a 2-item pair is written
    as an associative array of those pairs instead of a list of lists.
    """
    return Encoder(assoc, registry, max_depth).encode(value)
