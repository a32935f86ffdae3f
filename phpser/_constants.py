"""Wire-format constants: type tags, delimiters and default limits.

PHP's serialize() output is text framed by single-byte type tags.  Every
tag is followed by ':' except NULL, which is followed directly by ';'.
"""

from __future__ import annotations

import re

# ── Type tags (single byte each) ─────────────────────────────
TAG_NULL: bytes = b"N"
TAG_BOOL: bytes = b"b"
TAG_INT: bytes = b"i"
TAG_FLOAT: bytes = b"d"
TAG_STRING: bytes = b"s"
TAG_ARRAY: bytes = b"a"
TAG_OBJECT: bytes = b"O"

# ── Delimiters ───────────────────────────────────────────────
COLON: bytes = b":"
SEMICOLON: bytes = b";"
QUOTE: bytes = b'"'
OPEN_BRACE: bytes = b"{"
CLOSE_BRACE: bytes = b"}"
PIPE: bytes = b"|"

# ── Signed 64-bit integer range ──────────────────────────────
# PHP has no bignum type; anything wider silently becomes a float on the
# PHP side, so we refuse to emit it.
INT64_MIN: int = -(2**63)
INT64_MAX: int = 2**63 - 1

# ── Float rendering ──────────────────────────────────────────
# serialize_precision=-1 prints the shortest round-trip digits and switches
# to exponent notation once the decimal point moves past 17 places.
FLOAT_FIXED_MAX_DECPT: int = 17
FLOAT_FIXED_MIN_DECPT: int = -3

# ── Limits ───────────────────────────────────────────────────
# Container nesting limit for both directions.  Each level costs a few
# Python frames, so this stays well inside the default recursion limit.
MAX_DEPTH: int = 128

# ── Session framing ──────────────────────────────────────────
# A session stream is a run of NAME|value segments.  \w on a bytes pattern
# is ASCII-only, which is what PHP accepts for session variable names.
SESSION_NAME_RE = re.compile(rb"([\w.]+)\|")
SESSION_KEY_RE = re.compile(rb"[\w.]+")
