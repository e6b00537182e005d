from __future__ import annotations

import shutil
import signal
import sys
from dataclasses import dataclass
from typing import Callable

import colorama
from colorama import Fore, Style

from lyricer.parts.colors import DEFAULT_COLOR, PartColorTable, resolve_color
from lyricer.parts.layout import group_in_pairs
from lyricer.sync.session import PlaybackSession
from lyricer.timeline.model import LyricLine

CSI = "\x1b["

# color tokens in color.json that the terminal can show directly
_TERMINAL_COLORS: dict[str, str] = {
    "black": Fore.BLACK,
    "red": Fore.RED,
    "green": Fore.GREEN,
    "yellow": Fore.YELLOW,
    "blue": Fore.BLUE,
    "magenta": Fore.MAGENTA,
    "cyan": Fore.CYAN,
    "white": Fore.WHITE,
    "primary": Fore.BLUE,
    "secondary": Fore.MAGENTA,
    "success": Fore.GREEN,
    "warning": Fore.YELLOW,
    "danger": Fore.RED,
}


@dataclass(frozen=True, slots=True)
class Theme:
    title: str = Fore.CYAN + Style.BRIGHT
    current: str = Fore.GREEN + Style.BRIGHT
    dim: str = Style.DIM
    badge: str = Fore.WHITE + Style.DIM
    warning: str = Fore.YELLOW + Style.BRIGHT
    reset: str = Style.RESET_ALL


def format_time(ms: int) -> str:
    minutes, rem = divmod(max(ms, 0), 60_000)
    return f"{minutes}:{rem // 1000:02d}"


class AnsiRenderer:
    def __init__(self, use_alt_screen: bool = True, theme: Theme | None = None):
        self.use_alt_screen = use_alt_screen
        self.theme = theme or Theme()
        self._entered = False
        self._resize_handler: Callable[..., None] | None = None
        self._last_frame: list[str] | None = None

    def __enter__(self):
        self.enter()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.exit()

    def enter(self) -> None:
        if self._entered:
            return
        colorama.just_fix_windows_console()
        if self.use_alt_screen:
            sys.stdout.write(CSI + "?1049h")  # alt screen
        sys.stdout.write(CSI + "?25l")  # hide cursor
        sys.stdout.write(CSI + "H" + CSI + "2J")  # home + clear
        sys.stdout.flush()
        self._entered = True

        # Register SIGWINCH handler for resize
        def _on_resize(signum=None, frame=None):
            if self._last_frame is not None:
                self._write(self._last_frame)

        self._resize_handler = _on_resize
        if hasattr(signal, "SIGWINCH"):
            signal.signal(signal.SIGWINCH, _on_resize)

    def exit(self) -> None:
        if not self._entered:
            return
        # Restore default SIGWINCH handler
        if self._resize_handler and hasattr(signal, "SIGWINCH"):
            signal.signal(signal.SIGWINCH, signal.SIG_DFL)
        self._resize_handler = None
        sys.stdout.write(self.theme.reset)
        sys.stdout.write(CSI + "?25h")  # show cursor
        if self.use_alt_screen:
            sys.stdout.write(CSI + "?1049l")  # normal screen
        sys.stdout.flush()
        self._entered = False
        self._last_frame = None

    def badge(self, part: str, colors: PartColorTable | None) -> str:
        color = resolve_color(colors, part)
        code = self.theme.badge if color == DEFAULT_COLOR else _TERMINAL_COLORS.get(color.lower(), self.theme.badge)
        return f"{code}[{part}]{self.theme.reset}"

    def line_rows(self, line: LyricLine, colors: PartColorTable | None, style: str) -> list[str]:
        """
        Badges two per row; the lyric text follows the first row.
        """
        text = f"{style}{line.text}{self.theme.reset}"
        pairs = group_in_pairs(line.parts)
        if not pairs:
            return [text]
        rows = ["".join(self.badge(p, colors) for p in pair) for pair in pairs]
        rows[0] = f"{rows[0]} {text}"
        return rows

    def build_frame(
        self,
        title: str,
        session: PlaybackSession,
        context_lines: int = 2,
        rows: int | None = None,
        duration_ms: int | None = None,
    ) -> list[str]:
        if rows is None:
            _cols, rows = shutil.get_terminal_size(fallback=(80, 24))
        lines = session.timeline.lines
        current_idx = session.active_index

        # reserve 1 line for title, 1 for progress
        body_rows = max(rows - 2, 1)

        def rows_for(i: int) -> list[str]:
            style = self.theme.current if i == current_idx else self.theme.dim
            return self.line_rows(lines[i], session.colors, style)

        # budget is in screen rows: a line with many parts spans several
        if current_idx < 0:
            body: list[str] = []
            first = len(lines)
            nxt = 0
        else:
            body = rows_for(current_idx)[:body_rows]
            first = current_idx
            nxt = current_idx + 1
            while first > 0 and current_idx - first < context_lines:
                block = rows_for(first - 1)
                if len(body) + len(block) > body_rows:
                    break
                body = block + body
                first -= 1

        while nxt < len(lines) and len(body) < body_rows:
            body.extend(rows_for(nxt)[: body_rows - len(body)])
            nxt += 1

        # near the end: use leftover rows for earlier lines
        while first > 0 and current_idx >= 0:
            block = rows_for(first - 1)
            if len(body) + len(block) > body_rows:
                break
            body = block + body
            first -= 1

        out: list[str] = [f"{self.theme.title}♫ {title} ♫{self.theme.reset}"]
        out.extend(body)

        if session.show_progress:
            progress = format_time(session.position_ms)
            if duration_ms:
                progress = f"{progress} / {format_time(duration_ms)}"
            out.append(f"{self.theme.dim}{progress}{self.theme.reset}")
        return out

    def render(
        self,
        title: str,
        session: PlaybackSession,
        context_lines: int = 2,
        duration_ms: int | None = None,
    ) -> None:
        self._write(self.build_frame(title, session, context_lines, duration_ms=duration_ms))

    def render_message(self, title: str, messages: list[str]) -> None:
        frame = [f"{self.theme.title}♫ {title} ♫{self.theme.reset}"]
        frame.extend(f"{self.theme.warning}{m}{self.theme.reset}" for m in messages)
        self._write(frame)

    def _write(self, frame: list[str]) -> None:
        # Store frame for SIGWINCH redraw
        self._last_frame = frame
        # move home + clear, then print full frame
        sys.stdout.write(CSI + "H" + CSI + "2J")
        sys.stdout.write("\n".join(frame))
        sys.stdout.write(self.theme.reset)
        sys.stdout.flush()
