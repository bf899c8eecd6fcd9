"""screen.py の単体テスト（mss はフェイクに差し替える）"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import mss
import mss.exception
import pytest
import screen
from intensity import Color


class FakeShot:
    def __init__(self, rgb):
        self._rgb = rgb

    def pixel(self, x, y):
        assert (x, y) == (0, 0)
        return self._rgb


class FakeMss:
    def __init__(self, rgb=(255, 0, 0), error=None):
        self._rgb = rgb
        self._error = error
        self.regions = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def grab(self, region):
        self.regions.append(region)
        if self._error is not None:
            raise self._error
        return FakeShot(self._rgb)


class TestScreenSampler:

    def test_grabs_one_pixel(self, monkeypatch):
        fake = FakeMss(rgb=(200, 0, 0))
        monkeypatch.setattr(mss, "mss", lambda: fake)

        color = screen.ScreenSampler().sample_pixel(1147, 878)

        assert color == Color(200, 0, 0)
        assert fake.regions == [{"left": 1147, "top": 878, "width": 1, "height": 1}]

    def test_grab_error(self, monkeypatch):
        fake = FakeMss(error=mss.exception.ScreenShotError("no display"))
        monkeypatch.setattr(mss, "mss", lambda: fake)

        with pytest.raises(screen.ScreenSampleError, match="no display"):
            screen.ScreenSampler().sample_pixel(0, 0)
