"""console.py の単体テスト（パイプ入力の経路）"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import io

import console
import pytest


@pytest.fixture
def piped_stdin(monkeypatch):
    def _pipe(text: str) -> io.StringIO:
        stream = io.StringIO(text)
        monkeypatch.setattr(sys, "stdin", stream)
        monkeypatch.setattr(sys, "platform", "linux")
        return stream
    return _pipe


class TestWaitForKey:

    def test_consumes_exactly_one_line(self, piped_stdin, capsys):
        stream = piped_stdin("first\nsecond\n")

        console.wait_for_key()

        assert stream.readline() == "second\n"
        assert capsys.readouterr().out == console.PRESS_ANY_KEY + "\n"

    def test_empty_input_returns(self, piped_stdin):
        piped_stdin("")
        console.wait_for_key()


class TestReadLine:

    def test_reads_line(self, piped_stdin):
        piped_stdin("50\nauto\n")
        assert console.read_line() == "50"
        assert console.read_line() == "auto"

    def test_eof(self, piped_stdin):
        piped_stdin("")
        with pytest.raises(EOFError):
            console.read_line()
