"""phpser command-line interface.

Usage:
    printf 'a:1:{i:0;s:1:"x";}' | python3 -m phpser decode
    echo '{"a": 1}' | python3 -m phpser encode
    python3 -m phpser decode --session --input sess_0123abcd
    python3 -m phpser version
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from . import (
    PHPSerializeError,
    __version__,
    deserialize,
    deserialize_session,
    serialize,
    serialize_session,
)
from ._json_adapter import from_json, to_json_compatible

logger = logging.getLogger("phpser.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="phpser",
        description="phpser — convert between PHP serialize() data and JSON",
    )
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log debug information to stderr")
    sub = parser.add_subparsers(dest="command")

    # ── decode ──
    dec_p = sub.add_parser("decode", help="PHP serialized data -> JSON")
    dec_p.add_argument("--input", "-i", metavar="FILE",
                       help="Read from FILE instead of stdin")
    dec_p.add_argument("--assoc", action="store_true",
                       help="Keep non-list arrays as [key, value] pairs")
    dec_p.add_argument("--session", action="store_true",
                       help="Input is a session string (NAME|value...)")
    dec_p.add_argument("--encoding", default="utf-8",
                       help="Text encoding of PHP strings (default: utf-8)")

    # ── encode ──
    enc_p = sub.add_parser("encode", help="JSON -> PHP serialized data")
    enc_p.add_argument("--input", "-i", metavar="FILE",
                       help="Read JSON from FILE instead of stdin")
    enc_p.add_argument("--assoc", action="store_true",
                       help="Write lists of [key, value] pairs as associative arrays")
    enc_p.add_argument("--session", action="store_true",
                       help="Write a session string; the JSON root must be an object")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _read_input(filepath: Optional[str]) -> bytes:
    """Read bytes from a file or stdin."""
    if filepath:
        with open(filepath, "rb") as f:
            return f.read()
    if sys.stdin.isatty():
        print("phpser: reading from stdin (Ctrl-D to end)...", file=sys.stderr)
    return sys.stdin.buffer.read()


def _cmd_decode(args: argparse.Namespace) -> None:
    raw = _read_input(args.input)
    logger.debug("decoding %d bytes (assoc=%s, session=%s)", len(raw), args.assoc, args.session)

    if args.session:
        value = deserialize_session(raw, args.assoc, encoding=args.encoding)
    else:
        value = deserialize(raw, args.assoc, encoding=args.encoding)
    text = json.dumps(to_json_compatible(value, args.encoding), ensure_ascii=False)
    # Undecodable string bytes are lone surrogates here; write them back out raw.
    sys.stdout.buffer.write(text.encode("utf-8", "surrogateescape") + b"\n")
    sys.stdout.buffer.flush()


def _cmd_encode(args: argparse.Namespace) -> None:
    raw = _read_input(args.input)
    value = from_json(json.loads(raw))

    if args.session:
        out = serialize_session(value, args.assoc)
    else:
        out = serialize(value, args.assoc)
    logger.debug("encoded %d bytes", len(out))
    sys.stdout.buffer.write(out)
    sys.stdout.buffer.flush()


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format="%(name)s %(levelname)s: %(message)s")

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "version":
        print(f"phpser {__version__}")
        return

    try:
        if args.command == "decode":
            _cmd_decode(args)
        elif args.command == "encode":
            _cmd_encode(args)
    except PHPSerializeError as e:
        print(f"phpser: error [{e.code}]: {e}", file=sys.stderr)
        sys.exit(2)
    except ValueError as e:
        # JSONDecodeError, or UnicodeDecodeError for input that is not UTF-8
        print(f"phpser: JSON parse error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
