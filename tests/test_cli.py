from __future__ import annotations

import io
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest.mock import patch

from justquery.__main__ import main

HTML = '<div><p class="a">one</p><p class="a">two</p></div>'


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.path = Path(self._tmp.name) / "page.html"
        self.path.write_text(HTML, encoding="utf-8")

    def _run(self, *args: str) -> str:
        out = io.StringIO()
        with redirect_stdout(out):
            main([str(self.path), *args])
        return out.getvalue()

    def _exit_code(self, *args: str) -> int:
        with redirect_stdout(io.StringIO()), redirect_stderr(io.StringIO()), self.assertRaises(SystemExit) as cm:
            main([str(self.path), *args])
        return cm.exception.code

    def test_selector_text(self) -> None:
        assert self._run("--selector", "p.a", "--format", "text") == "one\ntwo\n"

    def test_first(self) -> None:
        assert self._run("--selector", "p.a", "--format", "text", "--first") == "one\n"

    def test_selector_html(self) -> None:
        assert self._run("--selector", "p") == '<p class="a">one</p>\n<p class="a">two</p>\n'

    def test_root_is_pretty_printed(self) -> None:
        assert self._run() == '<div>\n  <p class="a">one</p>\n  <p class="a">two</p>\n</div>\n'

    def test_no_pretty(self) -> None:
        assert self._run("--no-pretty") == HTML + "\n"

    def test_stdin(self) -> None:
        out = io.StringIO()
        with patch("sys.stdin", io.StringIO(HTML)), redirect_stdout(out):
            main(["-", "--selector", "p", "--first", "--format", "text"])
        assert out.getvalue() == "one\n"

    def test_no_match_exits_1(self) -> None:
        assert self._exit_code("--selector", "span") == 1

    def test_invalid_selector_exits_2(self) -> None:
        assert self._exit_code("--selector", "div > p") == 2

    def test_missing_path_exits_1(self) -> None:
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit) as cm:
            main([])
        assert cm.exception.code == 1


if __name__ == "__main__":
    unittest.main()
