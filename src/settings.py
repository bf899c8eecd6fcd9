"""
設定管理モジュール

読み込み優先順位（後勝ち）:
  1. config/default.toml  （デフォルト値・git管理）
  2. config/user.toml     （ユーザー上書き・gitignore）
  3. .env                 （ログレベルのみ）

どのファイルも無ければ dataclass のデフォルト値で動作する。
"""

import tomllib
import os
from pathlib import Path
from dataclasses import dataclass, field
from dotenv import load_dotenv

# .env を読み込む
load_dotenv()

# プロジェクトルート（src/ の一つ上）
_ROOT = Path(__file__).parent.parent
_DEFAULT_TOML = _ROOT / "config" / "default.toml"
_USER_TOML = _ROOT / "config" / "user.toml"

LOG_LEVEL_ENV = "PIXEL_VIBE_LOG_LEVEL"


def _load_toml(path: Path) -> dict:
    if not path.exists():
        return {}
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict, override: dict) -> dict:
    """override を base にマージ（ネストも対応）"""
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


@dataclass
class ServerSettings:
    address: str = "ws://127.0.0.1:12345"
    client_name: str = "PerilousPleasures"
    connect_timeout: float = 10.0


@dataclass
class AutoModeSettings:
    pixel_x: int = 1147
    pixel_y: int = 878
    interval: float = 0.05          # サンプリング間隔（秒）
    min_red_fraction: float = 0.04  # これ未満の赤は 0 扱い


@dataclass
class ManualSettings:
    loop_interval: float = 1.0  # 対話ループ 1 周ごとの待ち（秒）


@dataclass
class DeviceSettings:
    command_timeout: float = 5.0


@dataclass
class DebugSettings:
    log_level: str = "INFO"
    log_to_file: bool = False


@dataclass
class Settings:
    server: ServerSettings = field(default_factory=ServerSettings)
    auto_mode: AutoModeSettings = field(default_factory=AutoModeSettings)
    manual: ManualSettings = field(default_factory=ManualSettings)
    device: DeviceSettings = field(default_factory=DeviceSettings)
    debug: DebugSettings = field(default_factory=DebugSettings)


def _apply_toml(settings: Settings, data: dict) -> None:
    """TOML の dict を Settings に適用する（未知のキーは無視）"""
    def _walk(obj, d: dict):
        for k, v in d.items():
            if isinstance(v, dict):
                sub = getattr(obj, k, None)
                if sub is not None:
                    _walk(sub, v)
            elif hasattr(obj, k):
                setattr(obj, k, v)

    _walk(settings, data)


def load(default_toml: Path = _DEFAULT_TOML, user_toml: Path = _USER_TOML) -> Settings:
    """設定を読み込んで Settings を返す"""
    merged = _deep_merge(_load_toml(default_toml), _load_toml(user_toml))

    s = Settings()
    _apply_toml(s, merged)

    level = os.getenv(LOG_LEVEL_ENV, "")
    if level:
        s.debug.log_level = level.upper()

    return s


# モジュールロード時に一度だけ読み込む
settings = load()


def reload() -> None:
    """設定を再読み込みする"""
    global settings
    settings = load()
