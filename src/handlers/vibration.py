"""バイブレーション送信ハンドラ

対話ループと自動モードの両方から呼ばれ、現在の強度を
振動対応デバイスすべてに送る。
"""

import logging
from typing import Callable, Iterable

from devices.base import DeviceCommandError, VibrationDevice
from intensity import format_percent

logger = logging.getLogger(__name__)

Output = Callable[[str], None]


def broadcast_intensity(devices: Iterable[VibrationDevice], intensity: float,
                        out: Output = print) -> int:
    """
    全デバイスに強度を送る。各デバイスの全チャンネルに同じ値を複製する。

    1 台の送信失敗は記録するだけで、次のデバイスへの送信は続ける。

    Args:
        devices: 送信対象（振動非対応のデバイスは報告のみ）
        intensity: 強度（0.0〜1.0）
        out: コンソール出力先

    Returns:
        送信に成功したデバイス数
    """
    sent = 0
    for device in devices:
        count = device.vibrator_count
        out(f"{device.name} supports vibration: {count > 0}")
        if count <= 0:
            continue

        try:
            device.vibrate([intensity] * count)
        except DeviceCommandError as e:
            logger.error(f"[Vibration] Send failed: {e}")
            out(f"Failed to send vibration command to {device.name}: {e}")
            continue

        sent += 1
        out(f"Sent vibration command to {device.name} with intensity {format_percent(intensity)}%")
    return sent
