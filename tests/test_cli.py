"""Tests for the command line and its JSON bridge."""

from __future__ import annotations

import io
import json
import os
import sys
import tempfile
import unittest
from contextlib import redirect_stderr
from unittest import mock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from phpser import Record, __version__
from phpser._cli import main
from phpser._json_adapter import from_json, to_json_compatible


class _Stdout(io.StringIO):
    """StringIO with a .buffer, like sys.stdout."""

    def __init__(self) -> None:
        super().__init__()
        self.buffer = io.BytesIO()


class TestJsonAdapter(unittest.TestCase):
    def test_bytes_and_keys(self):
        got = to_json_compatible({b"a": [b"x", 1], 2: None})
        self.assertEqual(got, {"a": ["x", 1], "2": None})

    def test_undecodable_bytes_survive(self):
        got = to_json_compatible(b"\xff")
        self.assertEqual(got.encode("utf-8", "surrogateescape"), b"\xff")

    def test_record_envelope(self):
        rec = Record("foo", [(b"a", 1)])
        self.assertEqual(to_json_compatible(rec), {"__class__": "foo", "fields": {"a": 1}})
        self.assertEqual(from_json({"__class__": "foo", "fields": {"a": 1}}),
                         Record("foo", [("a", 1)]))

    def test_assoc_pairs_become_lists(self):
        self.assertEqual(to_json_compatible([(b"k", 1)]), [["k", 1]])

    def test_plain_dict_not_a_record(self):
        self.assertEqual(from_json({"__class__": "x"}), {"__class__": "x"})


class TestCli(unittest.TestCase):
    def _run(self, argv, stdin: bytes = b""):
        out = _Stdout()
        err = io.StringIO()
        fake_stdin = mock.Mock()
        fake_stdin.isatty.return_value = False
        fake_stdin.buffer = io.BytesIO(stdin)
        code = 0
        with mock.patch.object(sys, "stdin", fake_stdin), \
                mock.patch.object(sys, "stdout", out), redirect_stderr(err):
            try:
                main(argv)
            except SystemExit as e:
                code = e.code
        return code, out, err.getvalue()

    def test_version(self):
        code, out, _ = self._run(["version"])
        self.assertEqual(code, 0)
        self.assertEqual(out.getvalue().strip(), "phpser {}".format(__version__))

    def test_no_command(self):
        code, _, _ = self._run([])
        self.assertEqual(code, 1)

    def test_decode(self):
        code, out, _ = self._run(["decode"], b'a:2:{s:1:"a";i:1;s:1:"b";a:1:{i:0;N;}}')
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out.buffer.getvalue()), {"a": 1, "b": [None]})

    def test_decode_session(self):
        code, out, _ = self._run(["decode", "--session"], b'a|i:1;b|s:1:"x";')
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out.buffer.getvalue()), {"a": 1, "b": "x"})

    def test_decode_assoc(self):
        code, out, _ = self._run(["decode", "--assoc"], b'a:1:{s:1:"k";i:1;}')
        self.assertEqual(json.loads(out.buffer.getvalue()), [["k", 1]])

    def test_decode_undecodable_string(self):
        code, out, _ = self._run(["decode"], b's:1:"\xff";')
        self.assertEqual(code, 0)
        self.assertEqual(out.buffer.getvalue(), b'"\xff"\n')

    def test_decode_non_ascii_text_unescaped(self):
        code, out, _ = self._run(["decode"], 's:2:"é";'.encode("utf-8"))
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out.buffer.getvalue()), "é")

    def test_encode(self):
        code, out, _ = self._run(["encode"], b'{"a": [1, 2.5, true]}')
        self.assertEqual(code, 0)
        self.assertEqual(out.buffer.getvalue(), b'a:1:{s:1:"a";a:3:{i:0;i:1;i:1;d:2.5;i:2;b:1;}}')

    def test_encode_session(self):
        code, out, _ = self._run(["encode", "--session"], b'{"a": 1, "b": "x"}')
        self.assertEqual(out.buffer.getvalue(), b'a|i:1;b|s:1:"x";')

    def test_encode_from_file(self):
        with tempfile.NamedTemporaryFile("wb", suffix=".json", delete=False) as f:
            f.write(b"[null]")
        try:
            code, out, _ = self._run(["encode", "--input", f.name])
        finally:
            os.unlink(f.name)
        self.assertEqual(out.buffer.getvalue(), b"a:1:{i:0;N;}")

    def test_decode_error_exit_code(self):
        code, _, err = self._run(["decode"], b's:5:"ab";')
        self.assertEqual(code, 2)
        self.assertIn("[ERR_TRUNCATED]", err)

    def test_encode_session_error(self):
        code, _, err = self._run(["encode", "--session"], b'{"a|b": 1}')
        self.assertEqual(code, 2)
        self.assertIn("[ERR_SESSION_KEY]", err)

    def test_bad_json(self):
        code, _, err = self._run(["encode"], b"{nope")
        self.assertEqual(code, 2)
        self.assertIn("JSON parse error", err)

    def test_encode_input_not_utf8(self):
        code, _, err = self._run(["encode"], b'"\xff"')
        self.assertEqual(code, 2)
        self.assertIn("JSON parse error", err)


if __name__ == "__main__":
    unittest.main()
