"""
ControlState 状態管理

Mode（手動 / 自動）と現在の強度を保持する唯一のオブジェクト。
対話ループ（メインスレッド）と自動モードのワーカースレッドの両方から
呼ばれるため、すべての読み書きを 1 本の Lock で保護する。

自動モードのワーカーは同時に 1 つまで。起動フラグは AUTO への切り替えと
同じロック内で立て、ワーカー自身が終了時に下ろす。
"""

import logging
import threading
from enum import Enum

logger = logging.getLogger(__name__)


class Mode(Enum):
    MANUAL = "manual"
    AUTO = "auto"


class ControlState:
    """強度とモードを管理する。"""

    def __init__(self, intensity: float = 0.0):
        self._lock = threading.Lock()
        self._mode = Mode.MANUAL
        self._intensity = intensity
        self._auto_task_active = False

    # ------------------------------------------------------------------ #
    # 参照                                                                 #
    # ------------------------------------------------------------------ #

    @property
    def mode(self) -> Mode:
        with self._lock:
            return self._mode

    @property
    def intensity(self) -> float:
        with self._lock:
            return self._intensity

    @property
    def auto_task_active(self) -> bool:
        with self._lock:
            return self._auto_task_active

    # ------------------------------------------------------------------ #
    # 対話ループから呼ばれる                                               #
    # ------------------------------------------------------------------ #

    def set_manual(self, intensity: float) -> None:
        """手動入力の強度を設定し MANUAL に切り替える。"""
        if not 0.0 <= intensity <= 1.0:
            raise ValueError(f"intensity out of range: {intensity!r}")
        with self._lock:
            self._intensity = intensity
            self._mode = Mode.MANUAL
        logger.debug(f"[State] Manual intensity={intensity:.3f}")

    def request_auto(self) -> bool:
        """
        AUTO に切り替える。

        Returns:
            ワーカーが動いていなかった場合 True（呼び出し側が新しく起動する）。
            True を返した時点で起動フラグは立っている。
        """
        with self._lock:
            self._mode = Mode.AUTO
            if self._auto_task_active:
                return False
            self._auto_task_active = True
        logger.debug("[State] Auto mode requested, worker slot claimed")
        return True

    def stop_auto(self) -> None:
        """MANUAL に戻す（強度は変えない）。実行中のサイクルは止めない。"""
        with self._lock:
            self._mode = Mode.MANUAL

    # ------------------------------------------------------------------ #
    # 自動モードワーカーから呼ばれる                                       #
    # ------------------------------------------------------------------ #

    def continue_auto_task(self) -> bool:
        """
        ワーカーのループ先頭で呼ぶ。

        AUTO なら True。MANUAL なら起動フラグを下ろして False を返す。
        判定と解除を同じロック内で行うので、終了直前に "auto" が来ても
        ワーカーが居なくなることはない。
        """
        with self._lock:
            if self._mode is Mode.AUTO:
                return True
            self._auto_task_active = False
            return False

    def release_auto_task(self) -> None:
        """ワーカーが異常終了した場合の後始末。

        continue_auto_task() が False を返した後には呼ばないこと
        （新しいワーカーのスロットを消してしまう）。
        """
        with self._lock:
            self._auto_task_active = False

    def apply_auto_intensity(self, compute) -> float | None:
        """
        現在の強度から新しい強度を計算して保存する。

        Args:
            compute: 現在の強度を受け取り新しい強度を返す関数

        Returns:
            保存した強度。既に MANUAL に戻っていた場合は保存せず None。
        """
        with self._lock:
            if self._mode is not Mode.AUTO:
                return None
            self._intensity = compute(self._intensity)
            return self._intensity
