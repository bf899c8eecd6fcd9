"""Buttplug デバイス実装（Intiface Central などのサーバーへ websocket 接続）"""

import asyncio
import logging
import threading
from typing import Sequence

from buttplug import Client, ProtocolSpec, WebsocketConnector

from .base import DeviceCommandError, DeviceConnectError

logger = logging.getLogger(__name__)

# Buttplug v3 の振動アクチュエータ種別
_VIBRATE_TYPE = "vibrate"


def _is_vibrator(actuator) -> bool:
    return str(getattr(actuator, "type", "")).lower() == _VIBRATE_TYPE


class ButtplugVibrator:
    """サーバー上の 1 台のデバイス。VibrationDevice Protocol に準拠。"""

    def __init__(self, owner: "ButtplugDeviceClient", device):
        self._owner = owner
        self._device = device

    @property
    def name(self) -> str:
        return self._device.name

    @property
    def vibrator_count(self) -> int:
        return len(self._vibrators())

    def _vibrators(self) -> list:
        return [a for a in self._device.actuators if _is_vibrator(a)]

    def vibrate(self, speeds: Sequence[float]) -> None:
        vibrators = self._vibrators()
        if len(speeds) != len(vibrators):
            raise DeviceCommandError(
                f"{self.name}: expected {len(vibrators)} speeds, got {len(speeds)}"
            )
        self._owner._run_command(self._vibrate(vibrators, speeds), self.name)

    @staticmethod
    async def _vibrate(vibrators: list, speeds: Sequence[float]) -> None:
        for actuator, speed in zip(vibrators, speeds):
            await actuator.command(float(speed))

    def __repr__(self) -> str:
        return f"ButtplugVibrator({self.name!r}, vibrators={self.vibrator_count})"


class ButtplugDeviceClient:
    """Buttplug クライアントの同期ラッパー。DeviceClient Protocol に準拠。

    buttplug ライブラリは asyncio 前提なので、専用のイベントループを
    daemon スレッドで動かし、各メソッドは run_coroutine_threadsafe で待つ。
    対話ループと自動モードワーカーの両方から呼んでも安全。
    """

    def __init__(self, client_name: str, connect_timeout: float = 10.0,
                 command_timeout: float = 5.0,
                 client_factory=None, connector_factory=None):
        self._client_name = client_name
        self._connect_timeout = connect_timeout
        self._command_timeout = command_timeout
        self._client_factory = client_factory or (lambda name: Client(name, ProtocolSpec.v3))
        self._connector_factory = connector_factory or (
            lambda address, client: WebsocketConnector(address, logger=client.logger)
        )
        self._client = None
        self._connected = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None

    def _start_loop(self) -> None:
        """イベントループを起動する。既に動作中なら何もしない（冪等）。"""
        if self._loop is not None and not self._loop.is_closed():
            return
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_loop, args=(self._loop,), daemon=True)
        self._thread.start()

    @staticmethod
    def _run_loop(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        loop.run_forever()

    def _stop_loop(self) -> None:
        if self._loop is None:
            return
        self._loop.call_soon_threadsafe(self._loop.stop)
        if self._thread is not None:
            self._thread.join(timeout=5)
        self._loop.close()
        self._loop = None
        self._thread = None

    def _run_coro(self, coro, timeout: float):
        if self._loop is None:
            coro.close()
            raise RuntimeError("Buttplug loop not started")
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result(timeout=timeout)

    def _run_command(self, coro, device_name: str) -> None:
        if not self.is_connected:
            coro.close()
            raise DeviceCommandError(f"{device_name}: client is not connected")
        try:
            self._run_coro(coro, timeout=self._command_timeout)
        except Exception as e:
            raise DeviceCommandError(f"{device_name}: [{type(e).__name__}] {e}") from e

    # ------------------------------------------------------------------ #
    # DeviceClient インターフェース                                        #
    # ------------------------------------------------------------------ #

    @property
    def is_connected(self) -> bool:
        return self._connected and self._loop is not None

    def connect(self, address: str) -> None:
        self._start_loop()
        self._client = self._client_factory(self._client_name)
        connector = self._connector_factory(address, self._client)

        logger.info(f"Connecting to {address} as {self._client_name!r}...")
        try:
            self._run_coro(self._client.connect(connector), timeout=self._connect_timeout)
        except Exception as e:
            logger.error(f"Buttplug connect failed: [{type(e).__name__}] {e!r}")
            self._stop_loop()
            self._client = None
            # ライブラリ側のラップを剥がして元のメッセージを伝える
            inner = e.__cause__ or e
            raise DeviceConnectError(str(inner) or type(inner).__name__) from e

        self._connected = True
        logger.info(f"Buttplug connected: {address}")

    def start_scanning(self) -> None:
        self._run_coro(self._client.start_scanning(), timeout=self._command_timeout)
        logger.debug("Scanning started")

    def stop_scanning(self) -> None:
        self._run_coro(self._client.stop_scanning(), timeout=self._command_timeout)
        logger.debug("Scanning stopped")

    @property
    def devices(self) -> list[ButtplugVibrator]:
        if self._client is None:
            return []
        return [ButtplugVibrator(self, d) for d in list(self._client.devices.values())]

    def disconnect(self) -> None:
        if not self.is_connected:
            return
        self._connected = False
        try:
            self._run_coro(self._client.disconnect(), timeout=self._command_timeout)
        except Exception as e:
            logger.debug(f"Buttplug disconnect error (ignored): {e}")
        finally:
            self._stop_loop()
        logger.info("Buttplug disconnected")
