"""Session codec — PHP's "php" session serialize handler.

A session is a flat run of NAME|value segments with no outer array and no
separators between segments:

    a|i:1;b|s:1:"x";

Each value uses the ordinary serialize() encoding; only the top-level
framing differs.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional

from ._constants import MAX_DEPTH, PIPE, SESSION_KEY_RE, SESSION_NAME_RE
from ._decoder import Buffer, Decoder
from ._encoder import Encoder
from ._errors import MalformedInputError, SessionKeyError, UnserializableTypeError
from ._model import Pair, is_pair
from ._names import TypeRegistry


def _session_name(key: Any) -> bytes:
    if isinstance(key, bytes):
        raw = key
    else:
        raw = str(key).encode("utf-8")
    if PIPE in raw:
        raise SessionKeyError("top level names may not contain pipes: {!r}".format(key))
    if SESSION_KEY_RE.fullmatch(raw) is None:
        raise SessionKeyError(
            "top level names must be non-empty ASCII letters, digits, '_' or '.': {!r}".format(key))
    return raw


def _session_pairs(value: Any) -> Iterable[Pair]:
    if isinstance(value, Mapping):
        return value.items()
    if isinstance(value, (list, tuple)):
        for item in value:
            if not is_pair(item):
                raise UnserializableTypeError(
                    "session entry {!r} is not a (name, value) pair".format(item))
        return value
    raise UnserializableTypeError(
        "unable to serialize sessions with top level type {}; "
        "expected a mapping or a list of (name, value) pairs".format(type(value).__qualname__))


def serialize_session(value: Any, assoc: bool = False, *,
                      registry: Optional[TypeRegistry] = None,
                      max_depth: int = MAX_DEPTH) -> bytes:
    """Encode a mapping (or list of pairs) as a PHP session string."""
    encoder = Encoder(assoc, registry, max_depth)
    parts: List[bytes] = []
    for key, item in _session_pairs(value):
        parts.append(_session_name(key))
        parts.append(PIPE)
        parts.append(encoder.encode(item))
    return b"".join(parts)


def is_session_stream(data: bytes) -> bool:
    """True when `data` starts with a NAME| session segment."""
    return SESSION_NAME_RE.match(data) is not None


def deserialize_session(data: Buffer, assoc: bool = False, **options: Any) -> Dict[str, Any]:
    """Decode a PHP session string into a dict of name -> value.

    Later segments with a repeated name replace earlier ones, as PHP does
    when it populates $_SESSION.
    """
    decoder = Decoder(data, assoc, **options)
    reader = decoder.reader
    session: Dict[str, Any] = {}
    while not reader.at_end():
        m = reader.peek_match(SESSION_NAME_RE)
        if m is None:
            raise MalformedInputError(
                "expected a session name at offset {}".format(reader.position))
        reader.skip(m.end() - m.start())
        session[m.group(1).decode("ascii")] = decoder.decode()
    return session
