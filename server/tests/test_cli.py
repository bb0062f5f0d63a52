from contextlib import redirect_stderr, redirect_stdout
from io import StringIO
from pathlib import Path
import sys
import tempfile
import unittest
from unittest.mock import patch

SERVER_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(SERVER_DIR))

import cli


class CliTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, text: str) -> str:
        path = self.tmp / "art.ans"
        path.write_text(text, encoding="utf-8")
        return str(path)

    def _run(self, *argv: str) -> tuple[int, str, str]:
        out, err = StringIO(), StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = cli.main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_converts_file(self):
        code, out, err = self._run(self._write("\x1b[38;2;0;255;255mHello, World!"))
        self.assertEqual(code, 0)
        self.assertEqual(out, "\x1b[96mHello, World!\n")
        self.assertEqual(err, "")

    def test_reads_stdin(self):
        with patch.object(sys, "stdin", StringIO("\x1b[38;5;51mhi")):
            code, out, _ = self._run("-")
        self.assertEqual(code, 0)
        self.assertEqual(out, "\x1b[96mhi\n")

    def test_writes_output_file(self):
        target = self.tmp / "out.ans"
        code, out, _ = self._run(self._write("\x1b[38;5;0;48;5;37m▄"), "-o", str(target))
        self.assertEqual(code, 0)
        self.assertEqual(out, "")
        self.assertEqual(target.read_text(encoding="utf-8"), "\x1b[36m▀\n")

    def test_malformed_input_fails(self):
        code, out, err = self._run(self._write("\x1b[38;9mx"))
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("error:", err)
        self.assertIn("unknown color mode 9", err)

    def test_skip_policy(self):
        code, out, _ = self._run(self._write("\x1b[38;9mx"), "--errors", "skip")
        self.assertEqual(code, 0)
        self.assertEqual(out, "x\n")

    def test_missing_file(self):
        code, out, err = self._run(str(self.tmp / "missing.ans"))
        self.assertEqual(code, 2)
        self.assertEqual(out, "")
        self.assertIn("failed to read", err)


if __name__ == "__main__":
    unittest.main()
