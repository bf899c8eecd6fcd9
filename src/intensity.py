"""
強度計算モジュール

外部状態に依存しない純粋関数のみを提供する。
設定値は IntensityConfig にまとめて渡すので、pytest から任意の値でテスト可能。
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import NamedTuple

AUTO_COMMAND = "auto"
QUIT_COMMANDS = ("quit", "exit")

MIN_PERCENT = 0.0
MAX_PERCENT = 100.0


class Color(NamedTuple):
    """スクリーンから取得した 1 ピクセルの色（各 0〜255）。"""
    r: int
    g: int
    b: int


@dataclass(frozen=True)
class IntensityConfig:
    """色→強度変換に必要な設定値セット。"""
    min_red_fraction: float = 0.04


def map_color_to_intensity(color: Color, current: float, cfg: IntensityConfig) -> float:
    """
    ピクセルの色をバイブレーション強度（0.0〜1.0）に変換する。

    画面上の赤いインジケータを想定している：
      G または B が 0 より大きい     → current をそのまま返す（赤以外は無視）
      R/255 < min_red_fraction       → 0.0
      それ以外                        → R/255

    Args:
        color: サンプルした色
        current: 現在の強度（赤以外の色のときに返す値）
        cfg: 強度計算設定

    Returns:
        新しい強度（0.0〜1.0）
    """
    if color.g > 0 or color.b > 0:
        return current

    red = color.r / 255
    if red < cfg.min_red_fraction:
        return 0.0
    return red


def percent_to_intensity(percent: float) -> float:
    """0〜100 の入力値を 0.0〜1.0 の強度にする。"""
    return percent / 100


def format_number(value: float) -> str:
    """指数表記を使わずに数値を表示する（50.0 → "50", 1e-05 → "0.00001"）。"""
    text = format(Decimal(repr(float(value))), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_percent(intensity: float) -> str:
    """強度を表示用のパーセント文字列にする（0.5 → "50"）。"""
    return format_number(intensity * 100)


class InputKind(Enum):
    AUTO = "auto"
    QUIT = "quit"
    MANUAL = "manual"
    INVALID_INPUT = "invalid_input"
    INVALID_VALUE = "invalid_value"


@dataclass(frozen=True)
class ParsedInput:
    kind: InputKind
    value: float | None = None  # MANUAL のときだけ 0〜100 の値が入る


def parse_input(text: str) -> ParsedInput:
    """
    コンソール 1 行を解釈する。

    "auto" / "quit" / "exit" は大文字小文字を区別しない。
    数値は 0〜100 の範囲のみ受け付け、範囲外（inf・nan を含む）は INVALID_VALUE。
    """
    command = text.strip().lower()

    if command == AUTO_COMMAND:
        return ParsedInput(InputKind.AUTO)
    if command in QUIT_COMMANDS:
        return ParsedInput(InputKind.QUIT)

    try:
        value = float(command)
    except ValueError:
        return ParsedInput(InputKind.INVALID_INPUT)

    if not MIN_PERCENT <= value <= MAX_PERCENT:
        return ParsedInput(InputKind.INVALID_VALUE)

    return ParsedInput(InputKind.MANUAL, value)
