"""Arrow-key single choice selector for the terminal."""

from __future__ import annotations

import os
import shutil
import sys
from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, slots=True)
class SelectorResult:
    action: Literal["select", "cancel"]
    value: str | None
    index: int


def is_interactive_terminal() -> bool:
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _color_enabled() -> bool:
    if not is_interactive_terminal():
        return False
    if os.getenv("NO_COLOR") is not None:
        return False
    return os.getenv("TERM", "").lower() != "dumb"


def _paint(text: str, *codes: str) -> str:
    if not _color_enabled() or not codes:
        return text
    return f"\x1b[{';'.join(codes)}m{text}\x1b[0m"


def _clear() -> None:
    sys.stdout.write("\x1b[2J\x1b[H")


def _read_key() -> str:
    if os.name == "nt":
        import msvcrt

        ch = msvcrt.getwch()
        if ch in ("\r", "\n"):
            return "enter"
        if ch in ("q", "Q", "\x03"):
            return "cancel"
        if ch in ("\x00", "\xe0"):
            ch2 = msvcrt.getwch()
            if ch2 == "H":
                return "up"
            if ch2 == "P":
                return "down"
        return "other"

    import termios
    import tty

    fd = sys.stdin.fileno()
    old = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        ch = sys.stdin.read(1)
        if ch in ("\r", "\n"):
            return "enter"
        if ch in ("q", "Q", "\x03"):
            return "cancel"
        if ch == "k":
            return "up"
        if ch == "j":
            return "down"
        if ch == "\x1b":
            if sys.stdin.read(1) == "[":
                c3 = sys.stdin.read(1)
                if c3 == "A":
                    return "up"
                if c3 == "B":
                    return "down"
            return "cancel"
        return "other"
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)


def _truncate(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    if width <= 3:
        return text[:width]
    return text[: width - 3] + "..."


def _render(*, title: str, options: list[str], index: int) -> None:
    width = max(40, min(140, shutil.get_terminal_size((100, 30)).columns)) - 6
    _clear()
    print(_paint(title, "1", "96"))
    print()
    for i, option in enumerate(options):
        label = _truncate(option, width)
        if i == index:
            print(_paint(f"> {label}", "1", "30", "46"))
        else:
            print(f"  {_paint(label, '97')}")
    print()
    print(_paint("Up/Down + Enter to choose, q to cancel", "2", "37"))
    sys.stdout.flush()


def select_one(*, title: str, options: list[str], initial_index: int = 0) -> SelectorResult:
    """Block until the user picks one option or cancels.

    Raises:
        ValueError: No options were given.
        RuntimeError: stdin/stdout is not a TTY.
    """
    if not options:
        raise ValueError("selector requires at least one option")
    if not is_interactive_terminal():
        raise RuntimeError("interactive selector requires a TTY")

    idx = max(0, min(initial_index, len(options) - 1))
    while True:
        _render(title=title, options=options, index=idx)
        key = _read_key()

        if key == "up":
            idx = (idx - 1) % len(options)
        elif key == "down":
            idx = (idx + 1) % len(options)
        elif key == "enter":
            return SelectorResult(action="select", value=options[idx], index=idx)
        elif key == "cancel":
            return SelectorResult(action="cancel", value=None, index=idx)
