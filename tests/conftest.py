"""
テスト用のフェイク実装

実サーバー・実画面に触れずに ControlLoop / AutoModeRunner を動かすため、
DeviceClient / VibrationDevice / ScreenSampler の代わりを用意する。
"""

import sys
import threading
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from control_state import ControlState
from devices.base import DeviceCommandError, DeviceConnectError
from intensity import Color


class FakeDevice:
    def __init__(self, name: str, vibrator_count: int = 1, fail: bool = False):
        self.name = name
        self.vibrator_count = vibrator_count
        self.fail = fail
        self.commands: list[list[float]] = []
        self._lock = threading.Lock()

    def vibrate(self, speeds):
        if self.fail:
            raise DeviceCommandError(f"{self.name}: boom")
        with self._lock:
            self.commands.append(list(speeds))


class FakeClient:
    def __init__(self, devices=None, connect_error: str | None = None):
        self._devices = list(devices or [])
        self.connect_error = connect_error
        self.calls: list[str] = []
        self.address: str | None = None

    def connect(self, address: str) -> None:
        self.calls.append("connect")
        self.address = address
        if self.connect_error is not None:
            raise DeviceConnectError(self.connect_error)

    def start_scanning(self) -> None:
        self.calls.append("start_scanning")

    def stop_scanning(self) -> None:
        self.calls.append("stop_scanning")

    @property
    def devices(self):
        return list(self._devices)

    def disconnect(self) -> None:
        self.calls.append("disconnect")


class FakeSampler:
    """colors を順番に返す。尽きたら最後の色を返し続ける。"""

    def __init__(self, colors, on_sample=None):
        self._colors = [Color(*c) for c in colors]
        self._on_sample = on_sample
        self.samples: list[tuple[int, int]] = []

    def sample_pixel(self, x: int, y: int) -> Color:
        self.samples.append((x, y))
        index = min(len(self.samples), len(self._colors)) - 1
        if self._on_sample is not None:
            self._on_sample(len(self.samples))
        return self._colors[index]


class FakeAutoRunner:
    """ControlState だけを操作する AutoModeRunner の代わり（スレッドを起動しない）。"""

    def __init__(self, state: ControlState):
        self._state = state
        self.started = 0
        self.stopped = 0

    def ensure_running(self) -> bool:
        started = self._state.request_auto()
        if started:
            self.started += 1
        return started

    def stop(self, timeout=None) -> None:
        self.stopped += 1
        self._state.stop_auto()


@pytest.fixture
def state():
    return ControlState()


@pytest.fixture
def output():
    return []
