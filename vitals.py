#!/usr/bin/env python3
# vitals.py - terminal heartbeat monitor
import argparse
import curses
import importlib.util
import logging
import os
import sys
import threading
from pathlib import Path

import vitals_config as config
from vitals_events import INPUT, TICK, EventDispatcher
from vitals_probe import HttpProbe, LivenessSignal, ProbeWatcher
from vitals_render import rasterize
from vitals_wave import WaveformState

logger = logging.getLogger(__name__)

STYLES_DIR = Path(__file__).parent / "styles"


class HeartbeatMonitor:
    """Single-threaded render loop: one event in, one full repaint out"""

    QUIT_KEYS = ("q", "Q")
    PULSE_KEYS = ("p", "P")

    def __init__(self, stdscr, style_module, state, events, watcher=None):
        self.stdscr = stdscr
        self.style = style_module
        self.state = state
        self.events = events
        self.watcher = watcher

        curses.curs_set(0)
        curses.use_default_colors()
        self._init_colors()

        self.marker = getattr(self.style, "MARKER", "braille")
        self.colors = {n: curses.color_pair(n) for n in config.COLOR_PAIRS}
        self.frames = 0
        self.height, self.width = stdscr.getmaxyx()

    def _init_colors(self):
        # 256-color palette if available, else basic 8 colors
        rich = curses.COLORS >= 256
        for pair, (color256, basic) in config.COLOR_PAIRS.items():
            fg = color256 if rich else getattr(curses, f"COLOR_{basic}")
            curses.init_pair(pair, fg, -1)

    def _sync_size(self):
        # Keys are read off stdin directly, so curses never sees KEY_RESIZE
        try:
            size = os.get_terminal_size(sys.__stdout__.fileno())
        except (OSError, ValueError):
            return
        if curses.is_term_resized(size.lines, size.columns):
            curses.resizeterm(size.lines, size.columns)

    def safe_addstr(self, y, x, text, attr=0):
        try:
            if 0 <= y < self.height and 0 <= x < self.width:
                text = str(text)[: self.width - x - 1]
                self.stdscr.addstr(y, x, text, attr)
        except curses.error:
            pass

    def draw_border(self):
        """Canvas frame with the status line folded into the top edge"""
        frame = self.colors[4]
        inner = max(0, self.width - 2)
        self.safe_addstr(0, 0, "┌" + "─" * inner, frame)
        for y in range(1, self.height - 1):
            self.safe_addstr(y, 0, "│", frame)
            # The last column can't take a full-width safe_addstr
            try:
                self.stdscr.addstr(y, self.width - 1, "│", frame)
            except curses.error:
                pass
        self.safe_addstr(self.height - 1, 0, "└" + "─" * inner, frame)

        title = " ◉ VITALS "
        self.safe_addstr(0, 2, title, self.colors[1] | curses.A_BOLD)
        x = 2 + len(title)

        if self.watcher is None:
            probe = " probe off "
        else:
            probe = f" probe ok:{self.watcher.successes} fail:{self.watcher.failures} "
        self.safe_addstr(0, x, probe, self.colors[4])
        x += len(probe)

        if self.state.is_beating:
            self.safe_addstr(0, x, " ♥ ", self.colors[6] | curses.A_BOLD)

        hints = [("p", "Pulse"), ("q", "Quit")]
        hint_width = sum(len(k) + len(label) + 2 for k, label in hints)
        hx = self.width - hint_width - 2
        for key, label in hints:
            self.safe_addstr(0, hx, key, self.colors[5] | curses.A_BOLD)
            self.safe_addstr(0, hx + len(key), f":{label} ", self.colors[4])
            hx += len(key) + len(label) + 2

        style_name = f" ◈ {getattr(self.style, 'STYLE_NAME', 'Unknown')} "
        self.safe_addstr(self.height - 1, 2, style_name, self.colors[4])

    def draw_points(self, points, kind, rows, cols):
        char, attr = self.style.render_point(kind, self.colors)
        # The cursor is always a single glyph
        marker = self.marker if kind == "trace" else "dot"
        cells = rasterize(
            points,
            rows,
            cols,
            config.X_BOUNDS,
            config.Y_BOUNDS,
            marker=marker,
            char=char or "•",
        )
        for (row, col), glyph in cells.items():
            self.safe_addstr(row + 1, col + 1, glyph, attr)

    def draw_frame(self):
        """Full repaint: frame, whole trace, then the cursor on top"""
        self._sync_size()
        self.height, self.width = self.stdscr.getmaxyx()
        self.stdscr.erase()
        self.draw_border()

        rows = max(0, self.height - 2)
        cols = max(0, self.width - 2)
        self.draw_points(self.state.line.visible(), "trace", rows, cols)
        self.draw_points([self.state.cursor], "cursor", rows, cols)

        self.stdscr.refresh()
        self.frames += 1

    def handle_event(self, event) -> bool:
        """Apply one event. Returns False when the loop should stop."""
        if event.kind == TICK:
            self.state.advance()
        elif event.kind == INPUT:
            if event.key in self.QUIT_KEYS:
                logger.info("quit requested after %d frames", self.frames)
                return False
            if event.key in self.PULSE_KEYS:
                self.state.signal.set()
        return True

    def run(self):
        """Main loop"""
        while True:
            self.draw_frame()
            if not self.handle_event(self.events.next()):
                break


def available_styles():
    if not STYLES_DIR.exists():
        return []
    return sorted(f.stem for f in STYLES_DIR.glob("*.py") if f.stem != "__init__")


def _import_style(style_name):
    style_path = STYLES_DIR / f"{style_name}.py"
    spec = importlib.util.spec_from_file_location(style_name, style_path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def load_default_style():
    """Fallback to a known safe style"""
    for default_name in [config.DEFAULT_STYLE, "classic_wave"]:
        if (STYLES_DIR / f"{default_name}.py").exists():
            try:
                return _import_style(default_name)
            except Exception as e:
                logger.warning("default style %s failed to load: %s", default_name, e)
                continue

    print("CRITICAL: No default styles found!", file=sys.stderr)
    sys.exit(1)


def load_style(style_name=None):
    """Load a rendering style by module name, falling back to the default"""
    if style_name is None:
        return load_default_style()

    styles = available_styles()
    if style_name not in styles:
        print(f"Style '{style_name}' not found!", file=sys.stderr)
        print(f"Available styles: {', '.join(styles)}", file=sys.stderr)
        return load_default_style()

    try:
        return _import_style(style_name)
    except Exception as e:
        print(f"Error loading style '{style_name}': {e}", file=sys.stderr)
        return load_default_style()


def list_styles():
    for idx, name in enumerate(available_styles(), 1):
        module = _import_style(name)
        desc = getattr(module, "STYLE_DESCRIPTION", "No description")
        title = getattr(module, "STYLE_NAME", name)
        print(f"  {idx:2d}. {name:14s} {title:16s} - {desc}")


def _configure_logging(log_level, log_file):
    """Log to a file only; curses owns the terminal while running"""
    if log_file:
        handler = logging.FileHandler(os.path.expanduser(log_file), encoding="utf-8")
    else:
        handler = logging.NullHandler()
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=config.LOG_FORMAT,
        handlers=[handler],
        force=True,
    )


def _positive_float(value):
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return number


def _positive_int(value):
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return number


def build_parser():
    parser = argparse.ArgumentParser(
        prog="vitals",
        description="Terminal heartbeat monitor driven by a liveness probe",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Keys:
  p    inject a pulse
  q    quit

Examples:
  vitals                                  # probe the default endpoint
  vitals --probe-url http://svc:8080/ok   # probe another endpoint
  vitals --no-probe --auto-pulse 250      # self-contained demo trace
        """,
    )
    parser.add_argument("--style", help="Rendering style (see --list-styles)")
    parser.add_argument("--list-styles", action="store_true", help="List styles and exit")
    parser.add_argument(
        "--tick-ms",
        type=_positive_float,
        default=config.TICK_RATE_MS,
        help=f"Trace tick period in milliseconds (default {config.TICK_RATE_MS})",
    )
    parser.add_argument("--probe-url", default=config.PROBE_URL, help="Liveness endpoint")
    parser.add_argument(
        "--probe-interval",
        type=_positive_float,
        default=config.PROBE_INTERVAL,
        help=f"Seconds between probes (default {config.PROBE_INTERVAL})",
    )
    parser.add_argument(
        "--probe-timeout",
        type=_positive_float,
        default=config.PROBE_TIMEOUT,
        help="Per-probe socket timeout in seconds (default: none)",
    )
    parser.add_argument("--no-probe", action="store_true", help="Disable the liveness probe")
    parser.add_argument(
        "--auto-pulse",
        type=_positive_int,
        default=config.AUTO_PULSE_PERIOD,
        metavar="N",
        help="Also pulse every N cursor units",
    )
    parser.add_argument("--log-file", help="Write logs to this file")
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Logging level")
    return parser


def main(stdscr, args, style_module):
    """Run inside curses.wrapper: start producers, loop, then shut down"""
    stop_event = threading.Event()
    signal = LivenessSignal()
    state = WaveformState(signal=signal, auto_pulse_period=args.auto_pulse)

    watcher = None
    if not args.no_probe:
        probe = HttpProbe(args.probe_url, timeout=args.probe_timeout)
        watcher = ProbeWatcher(signal, probe, args.probe_interval, stop_event=stop_event)

    events = EventDispatcher(
        tick_rate=args.tick_ms / 1000.0,
        input_fd=sys.stdin.fileno(),
        stop_event=stop_event,
    )

    monitor = HeartbeatMonitor(stdscr, style_module, state, events, watcher)
    events.start()
    if watcher is not None:
        watcher.start()

    try:
        monitor.run()
    finally:
        events.close()
        if watcher is not None:
            watcher.join()
    return monitor


def cli(argv=None):
    args = build_parser().parse_args(argv)

    if args.list_styles:
        list_styles()
        return 0

    _configure_logging(args.log_level, args.log_file)
    style_module = load_style(args.style)

    if args.no_probe:
        print("[Vitals] Probe disabled")
    else:
        print(f"[Vitals] Probing {args.probe_url} every {args.probe_interval:g}s")

    try:
        monitor = curses.wrapper(main, args, style_module)
    except curses.error as e:
        print(f"Error: terminal setup failed: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n[Vitals] Interrupted")
        return 0

    watcher = monitor.watcher
    if watcher is not None:
        print(
            f"[Vitals] Stopped. Probe: {watcher.successes} ok, {watcher.failures} failed, "
            f"{monitor.state.pulse_count} pulses"
        )
    else:
        print(f"[Vitals] Stopped. {monitor.state.pulse_count} pulses")
    return 0


if __name__ == "__main__":
    sys.exit(cli())
