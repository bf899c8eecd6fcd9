"""スクリーンの 1 ピクセルを取得する"""

import mss
import mss.exception

from intensity import Color


class ScreenSampleError(Exception):
    """ピクセル取得に失敗した。"""


class ScreenSampler:
    """mss で画面上の指定座標の色を読む。

    mss のハンドルはスレッドをまたげないため、呼び出しごとに開く。
    """

    def sample_pixel(self, x: int, y: int) -> Color:
        region = {"left": x, "top": y, "width": 1, "height": 1}
        try:
            with mss.mss() as sct:
                shot = sct.grab(region)
        except mss.exception.ScreenShotError as e:
            raise ScreenSampleError(f"grab failed at ({x}, {y}): {e}") from e

        r, g, b = shot.pixel(0, 0)
        return Color(r, g, b)
