"""Error codes and exception classes.

Every failure raised by phpser is a PHPSerializeError carrying a `.code`
string.  Each concrete class also derives from the builtin exception of the
same kind, so callers that already catch TypeError / IndexError /
AttributeError around serialization keep working.
"""

from __future__ import annotations

# ── Error codes ──────────────────────────────────────────────
# Grep-friendly; the conformance vectors compare against these strings.

ERR_TRUNCATED: str = "ERR_TRUNCATED"              # input ended early
ERR_MALFORMED: str = "ERR_MALFORMED"              # bad delimiter / number
ERR_UNKNOWN_TAG: str = "ERR_UNKNOWN_TAG"          # unrecognized type tag
ERR_NAME_RESOLUTION: str = "ERR_NAME_RESOLUTION"  # class name not registered
ERR_NO_ATTRIBUTE: str = "ERR_NO_ATTRIBUTE"        # field not settable on type
ERR_TYPE: str = "ERR_TYPE"                        # value cannot be serialized
ERR_SESSION_KEY: str = "ERR_SESSION_KEY"          # '|' in a session name
ERR_INT_RANGE: str = "ERR_INT_RANGE"              # int outside int64
ERR_DEPTH: str = "ERR_DEPTH"                      # nesting exceeds max_depth


class PHPSerializeError(Exception):
    """Base class for all phpser failures.

    The `.code` attribute is one of the ERR_* strings above.
    """

    code: str = ""

    def __init__(self, msg: str = "", code: str = "") -> None:
        if code:
            self.code = code
        super().__init__(msg or self.code)


class TruncatedInputError(PHPSerializeError, ValueError):
    """The stream ended before the expected bytes or delimiter."""

    code = ERR_TRUNCATED


class MalformedInputError(PHPSerializeError, ValueError):
    """A delimiter or number did not match the grammar."""

    code = ERR_MALFORMED


class UnknownTypeTagError(PHPSerializeError, ValueError):
    code = ERR_UNKNOWN_TAG

    def __init__(self, tag: bytes, position: int) -> None:
        super().__init__("unknown type tag {!r} at offset {}".format(tag, position))
        self.tag = tag
        self.position = position


class NameResolutionError(PHPSerializeError, LookupError):
    """A wire class name has no registered host type.

    The decoder recovers from this by producing a generic Record; it only
    escapes when from_wire_name() is called directly.
    """

    code = ERR_NAME_RESOLUTION

    def __init__(self, wire_name: str, type_id: str) -> None:
        super().__init__(
            "no host type {!r} registered for class name {!r}".format(type_id, wire_name))
        self.wire_name = wire_name
        self.type_id = type_id


class NoSuchAttributeError(PHPSerializeError, AttributeError):
    code = ERR_NO_ATTRIBUTE

    def __init__(self, type_id: str, attribute: object) -> None:
        super().__init__("{} has no settable attribute {!r}".format(type_id, attribute))
        self.type_id = type_id
        self.attribute = attribute


class UnserializableTypeError(PHPSerializeError, TypeError):
    code = ERR_TYPE


class SessionKeyError(PHPSerializeError, IndexError):
    code = ERR_SESSION_KEY


class IntegerRangeError(PHPSerializeError, OverflowError):
    code = ERR_INT_RANGE


class DepthExceededError(PHPSerializeError, ValueError):
    code = ERR_DEPTH

    def __init__(self, max_depth: int) -> None:
        super().__init__("nesting exceeds max_depth={}".format(max_depth))
        self.max_depth = max_depth
