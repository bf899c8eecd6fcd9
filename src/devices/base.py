"""デバイス抽象化 Protocol"""

from typing import Protocol, Sequence, runtime_checkable


class DeviceError(Exception):
    """デバイス操作に関するエラーの基底クラス。"""


class DeviceConnectError(DeviceError):
    """サーバーへの接続に失敗した。メッセージは内部エラーのもの。"""


class DeviceCommandError(DeviceError):
    """デバイスへのコマンド送信に失敗した。"""


@runtime_checkable
class VibrationDevice(Protocol):
    """サーバーが見つけた 1 台のデバイス（読み取り専用ビュー）。"""

    @property
    def name(self) -> str:
        ...

    @property
    def vibrator_count(self) -> int:
        """独立して制御できる振動チャンネルの数。0 なら振動非対応。"""
        ...

    def vibrate(self, speeds: Sequence[float]) -> None:
        """チャンネルごとの強度（0.0〜1.0）を送る。

        Raises:
            DeviceCommandError: 送信に失敗した場合
        """
        ...


@runtime_checkable
class DeviceClient(Protocol):
    """デバイス制御サーバーのクライアント。

    ライブラリの違いを隠蔽する。
    すべてのメソッドは同期呼び出し（内部で非同期処理をする場合はラップする）。
    """

    def connect(self, address: str) -> None:
        """サーバーに接続する。

        Raises:
            DeviceConnectError: 接続できなかった場合
        """
        ...

    def start_scanning(self) -> None:
        ...

    def stop_scanning(self) -> None:
        ...

    @property
    def devices(self) -> list[VibrationDevice]:
        """現在クライアントが把握しているデバイス一覧。"""
        ...

    def disconnect(self) -> None:
        """サーバーとの接続を切断する。"""
        ...
