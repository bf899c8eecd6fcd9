"""コンソール入力（1 行読み込み・キー待ち）"""

import sys

PRESS_ANY_KEY = "Press any key to continue."


def read_line() -> str:
    """1 行読む。入力終端（Ctrl+D / Ctrl+Z）では EOFError。"""
    return input()


def wait_for_key() -> None:
    """何かキーが押されるまで待つ。"""
    print(PRESS_ANY_KEY, flush=True)

    if sys.platform == "win32":
        import msvcrt
        msvcrt.getwch()
        return

    if not sys.stdin.isatty():
        # パイプ入力では 1 行消費する
        sys.stdin.readline()
        return

    import termios
    import tty
    fd = sys.stdin.fileno()
    old = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        sys.stdin.read(1)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)
