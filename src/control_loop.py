"""
コンソール制御ループ

接続 → 1 回だけスキャン → 対話ループ（手動強度 / 自動モード切り替え）→ 切断。
"""

import logging
import time
from typing import Callable

from auto_mode import AutoModeRunner
from control_state import ControlState
from devices.base import DeviceClient, DeviceConnectError
from handlers.vibration import Output, broadcast_intensity
from intensity import InputKind, format_number, parse_input, percent_to_intensity

logger = logging.getLogger(__name__)

PROMPT = "Enter vibration value (0-100) or type 'auto' to revert to RGB control:"


class ControlLoop:
    """対話ループ本体。入出力と待機は差し替え可能。"""

    def __init__(self, client: DeviceClient, state: ControlState, auto_runner: AutoModeRunner,
                 address: str, loop_interval: float = 1.0,
                 read_line: Callable[[], str] = input,
                 wait_for_key: Callable[[], None] = lambda: None,
                 out: Output = print,
                 sleep: Callable[[float], None] = time.sleep):
        self._client = client
        self._state = state
        self._auto = auto_runner
        self._address = address
        self._loop_interval = loop_interval
        self._read_line = read_line
        self._wait_for_key = wait_for_key
        self._out = out
        self._sleep = sleep
        self._connected = False

    def run(self) -> int:
        """プログラム全体を実行する。戻り値は終了コード。"""
        if not self.connect():
            self._wait_for_key()
            return 0

        try:
            self.discover()
            self._wait_for_key()
            self.interact()
        finally:
            self.shutdown()
        return 0

    # ------------------------------------------------------------------ #
    # 起動                                                                 #
    # ------------------------------------------------------------------ #

    def connect(self) -> bool:
        """サーバーに接続する。失敗は致命的で再試行しない。"""
        try:
            self._client.connect(self._address)
        except DeviceConnectError as e:
            logger.error(f"Connection to {self._address} failed: {e}")
            self._out("Can't connect, exiting!")
            self._out(f"Message: {e}")
            return False

        self._connected = True
        self._out("Connected!")
        return True

    def discover(self) -> None:
        """スキャンを 1 回だけ行い、見つかったデバイスを表示する。"""
        self._client.start_scanning()
        self._client.stop_scanning()

        devices = self._client.devices
        logger.info(f"Discovered {len(devices)} device(s)")
        self._out("Client knows about these devices:")
        for device in devices:
            self._out(f"- {device.name}")

    # ------------------------------------------------------------------ #
    # 対話ループ                                                           #
    # ------------------------------------------------------------------ #

    def interact(self) -> None:
        """"quit" / "exit" / 入力終端まで繰り返す。"""
        while True:
            self._out(PROMPT)
            try:
                text = self._read_line()
            except EOFError:
                logger.info("Console input closed")
                return

            kind = self.handle_input(text)
            if kind is InputKind.QUIT:
                return
            if kind in (InputKind.INVALID_INPUT, InputKind.INVALID_VALUE):
                continue

            self._sleep(self._loop_interval)

    def handle_input(self, text: str) -> InputKind:
        """
        1 行分の入力を処理する。

        有効な入力（auto / 数値）の後は現在の強度を全デバイスへ送る。
        無効な入力ではデバイスに何も送らない。
        """
        parsed = parse_input(text)

        if parsed.kind is InputKind.QUIT:
            logger.info("Quit requested")
            return parsed.kind

        if parsed.kind is InputKind.INVALID_INPUT:
            self._out("Invalid input. Please enter a valid number or 'auto'.")
            return parsed.kind

        if parsed.kind is InputKind.INVALID_VALUE:
            self._out("Invalid value. Please enter a number between 0 and 100.")
            return parsed.kind

        if parsed.kind is InputKind.AUTO:
            self._out("Reverting to RGB control.")
            self._auto.ensure_running()
        else:
            self._state.set_manual(percent_to_intensity(parsed.value))
            self._out(f"Manual vibration intensity set to {format_number(parsed.value)}%.")

        broadcast_intensity(self._client.devices, self._state.intensity, self._out)
        return parsed.kind

    # ------------------------------------------------------------------ #
    # 終了                                                                 #
    # ------------------------------------------------------------------ #

    def shutdown(self) -> None:
        """自動モードを止めて切断する。2 回目以降は何もしない。"""
        if not self._connected:
            return
        self._connected = False

        self._auto.stop(timeout=5)
        self._client.disconnect()
        self._out("Disconnected!")
        logger.info(f"Disconnected from {self._address}")
