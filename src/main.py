import logging
import sys
from pathlib import Path

import console
import settings as settings_module
from auto_mode import AutoModeRunner
from control_loop import ControlLoop
from control_state import ControlState
from devices.buttplug_device import ButtplugDeviceClient
from intensity import IntensityConfig
from screen import ScreenSampler
from version import __version__

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE = Path(__file__).parent.parent / "logs" / "pixel_vibe.log"

logger = logging.getLogger(__name__)


def setup_logging(level: str, log_to_file: bool) -> None:
    """ルートロガーを設定する（コンソール + 任意でファイル）"""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_to_file:
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(LOG_FILE, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )


def build_loop(cfg: settings_module.Settings) -> ControlLoop:
    """設定から ControlLoop と依存オブジェクト一式を組み立てる"""
    state = ControlState()
    client = ButtplugDeviceClient(
        client_name=cfg.server.client_name,
        connect_timeout=cfg.server.connect_timeout,
        command_timeout=cfg.device.command_timeout,
    )
    auto_runner = AutoModeRunner(
        state=state,
        client=client,
        sampler=ScreenSampler(),
        pixel=(cfg.auto_mode.pixel_x, cfg.auto_mode.pixel_y),
        interval=cfg.auto_mode.interval,
        cfg=IntensityConfig(min_red_fraction=cfg.auto_mode.min_red_fraction),
    )
    return ControlLoop(
        client=client,
        state=state,
        auto_runner=auto_runner,
        address=cfg.server.address,
        loop_interval=cfg.manual.loop_interval,
        read_line=console.read_line,
        wait_for_key=console.wait_for_key,
    )


def main() -> int:
    """メインプログラム"""
    cfg = settings_module.settings
    setup_logging(cfg.debug.log_level, cfg.debug.log_to_file)

    logger.info(f"===== Pixel Vibe v{__version__} Starting =====")
    loop = build_loop(cfg)
    try:
        return loop.run()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    finally:
        logger.info("===== Pixel Vibe Stopped =====")


if __name__ == "__main__":
    sys.exit(main())
