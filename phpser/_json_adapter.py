"""JSON bridge for the command line.

JSON has no byte strings, no non-string keys and no objects with a class
name, so the CLI maps:

    bytes          <-> str  (undecodable bytes survive via surrogateescape)
    dict keys      ->  str  (ints become "0", "1", ...)
    tuple          ->  list
    Record         <-> {"__class__": name, "fields": {...}}

The reverse direction only needs to recognise the Record envelope; every
other JSON value is already part of the value model.
"""

from __future__ import annotations

from typing import Any

from ._model import Record

CLASS_KEY = "__class__"
FIELDS_KEY = "fields"


def _text(value: Any, encoding: str) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode(encoding, "surrogateescape")
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    return str(value)


def to_json_compatible(value: Any, encoding: str = "utf-8") -> Any:
    """Convert a decoded value into something json.dumps() accepts."""
    if isinstance(value, (bytes, bytearray)):
        return _text(value, encoding)

    if isinstance(value, Record):
        return {
            CLASS_KEY: value.name,
            FIELDS_KEY: {_text(k, encoding): to_json_compatible(v, encoding)
                         for k, v in value.fields},
        }

    if isinstance(value, dict):
        return {_text(k, encoding): to_json_compatible(v, encoding) for k, v in value.items()}

    if isinstance(value, (list, tuple)):
        return [to_json_compatible(v, encoding) for v in value]

    if hasattr(value, "to_attribute_list"):
        return {
            CLASS_KEY: type(value).__qualname__,
            FIELDS_KEY: {_text(k, encoding): to_json_compatible(v, encoding)
                         for k, v in value.to_attribute_list()},
        }

    return value


def from_json(obj: Any) -> Any:
    """Turn parsed JSON back into encodable values, restoring Records."""
    if isinstance(obj, dict):
        if set(obj) == {CLASS_KEY, FIELDS_KEY} and isinstance(obj[FIELDS_KEY], dict):
            return Record(obj[CLASS_KEY],
                          [(k, from_json(v)) for k, v in obj[FIELDS_KEY].items()])
        return {k: from_json(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [from_json(v) for v in obj]
    return obj
