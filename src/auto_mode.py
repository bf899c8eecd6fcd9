"""
自動モード（RGB 制御）ワーカー

画面上の固定座標の色を一定間隔でサンプルし、強度に変換して
全デバイスへ送る。ControlState が AUTO の間だけ動き、同時に 1 つまで。
"""

import logging
import threading
import time
from typing import Callable

from control_state import ControlState
from devices.base import DeviceClient
from handlers.vibration import Output, broadcast_intensity
from intensity import IntensityConfig, format_percent, map_color_to_intensity
from screen import ScreenSampleError

logger = logging.getLogger(__name__)


class AutoModeRunner:
    """自動モードのバックグラウンドスレッドを管理する。"""

    def __init__(self, state: ControlState, client: DeviceClient, sampler,
                 pixel: tuple[int, int] = (1147, 878), interval: float = 0.05,
                 cfg: IntensityConfig = IntensityConfig(),
                 out: Output = print, sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            state: 共有状態
            client: 送信先デバイスを持つクライアント
            sampler: sample_pixel(x, y) -> Color を持つオブジェクト
            pixel: サンプルする画面座標
            interval: サイクル間隔（秒）
            cfg: 色→強度変換設定
            out: コンソール出力先
            sleep: 待機関数（テストで差し替える）
        """
        self._state = state
        self._client = client
        self._sampler = sampler
        self._pixel = pixel
        self._interval = interval
        self._cfg = cfg
        self._out = out
        self._sleep = sleep
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def ensure_running(self) -> bool:
        """
        AUTO に切り替え、ワーカーが居なければ起動する。

        Returns:
            新しくワーカーを起動した場合 True
        """
        if not self._state.request_auto():
            logger.debug("[Auto] Worker already running")
            return False

        self._thread = threading.Thread(target=self._run, name="auto-mode", daemon=True)
        try:
            self._thread.start()
        except RuntimeError:
            self._state.release_auto_task()
            raise
        logger.info(f"[Auto] Worker started: pixel={self._pixel}, interval={self._interval}s")
        return True

    def stop(self, timeout: float | None = None) -> None:
        """MANUAL に戻し、実行中のサイクルが終わるのを待つ。"""
        self._state.stop_auto()
        if self._thread is not None:
            self._thread.join(timeout)

    # ------------------------------------------------------------------ #
    # ワーカー本体                                                         #
    # ------------------------------------------------------------------ #

    def _run(self) -> None:
        # continue_auto_task() が False を返した時点でスロットは解放済み。
        # その直後に別のワーカーが起動している可能性があるので、ここでは触らない
        released = False
        try:
            while self._state.continue_auto_task():
                self.run_cycle()
                self._sleep(self._interval)
            released = True
        except Exception as e:
            logger.error(f"[Auto] Worker crashed: {e}", exc_info=True)
        finally:
            if not released:
                self._state.release_auto_task()
            logger.info("[Auto] Worker stopped")

    def run_cycle(self) -> float | None:
        """1 サイクル分（サンプル → 変換 → 送信）を実行する。

        Returns:
            送信した強度。サンプル失敗や MANUAL への切り替えで送らなかった場合 None。
        """
        x, y = self._pixel
        try:
            color = self._sampler.sample_pixel(x, y)
        except ScreenSampleError as e:
            logger.warning(f"[Auto] Pixel sample failed: {e}")
            return None

        intensity = self._state.apply_auto_intensity(
            lambda current: map_color_to_intensity(color, current, self._cfg)
        )
        if intensity is None:
            logger.debug("[Auto] Mode switched to manual mid-cycle, sample dropped")
            return None

        logger.debug(f"[Auto] Sampled {tuple(color)} -> {intensity:.3f}")
        self._out(f"Auto mode: Vibration intensity based on RGB: {format_percent(intensity)}%")
        broadcast_intensity(self._client.devices, intensity, self._out)
        return intensity
