#!/usr/bin/env python3
"""
Waveform state for the Vitals heartbeat trace.

The trace lives in a fixed-size ring of (x, y) points. A cursor walks the
ring one slot per tick, writing the live leading point, while the slot
DECAY_OFFSET behind it is erased so a constant-length trail stays visible.
When a pulse is active, a three-phase beat shape is stamped over the slots
just ahead of the cursor.

Usage:
    state = WaveformState()
    state.signal.set()      # request a pulse
    state.advance()         # one tick
    points = state.line.visible()
"""

import logging

import numpy as np

import vitals_config as config
from vitals_probe import LivenessSignal

logger = logging.getLogger(__name__)


class PointRing:
    """Fixed-capacity ring of 2-D points, indexed modulo capacity.

    Every slot always holds a point. Empty slots hold the sentinel.
    """

    def __init__(self, capacity: int, sentinel=config.SENTINEL):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.sentinel = np.asarray(sentinel, dtype=np.float64)
        self.points = np.empty((capacity, 2), dtype=np.float64)
        self.points[:] = self.sentinel

    def __len__(self):
        return self.capacity

    def __getitem__(self, index):
        return self.get(index)

    def index(self, i: int) -> int:
        """Map any logical index (negative included) into [0, capacity)"""
        return i % self.capacity

    def get(self, i: int):
        x, y = self.points[self.index(i)]
        return (float(x), float(y))

    def set(self, i: int, point):
        self.points[self.index(i)] = point

    def set_span(self, start: int, points):
        """Write consecutive slots starting at ``start``, wrapping as needed"""
        points = np.asarray(points, dtype=np.float64)
        idx = (start + np.arange(len(points))) % self.capacity
        self.points[idx] = points

    def clear(self, i: int):
        self.points[self.index(i)] = self.sentinel

    def is_set(self, i: int) -> bool:
        return not np.array_equal(self.points[self.index(i)], self.sentinel)

    def visible_mask(self) -> np.ndarray:
        return np.any(self.points != self.sentinel, axis=1)

    def visible(self) -> np.ndarray:
        """Non-sentinel points in slot order, shape (n, 2)"""
        return self.points[self.visible_mask()]


def pulse_phase(offset: int):
    """Phase of the beat shape at ``offset`` cursor units past the origin.

    Returns 1 (rise), 2 (fall), 3 (recover) or None outside (0, PULSE_END].
    """
    if 0 < offset <= config.PULSE_RISE_END:
        return 1
    if config.PULSE_RISE_END < offset <= config.PULSE_FALL_END:
        return 2
    if config.PULSE_FALL_END < offset <= config.PULSE_END:
        return 3
    return None


# Baseline direction per phase
PHASE_DIRECTION = {1: 1.0, 2: -1.0, 3: 1.0}


class WaveformState:
    """Cursor, point ring and pulse state driven one tick at a time.

    Only the render loop thread may call advance(). The liveness signal is
    the one piece shared with other threads.
    """

    def __init__(
        self,
        width=config.BUFFER_WIDTH,
        center=config.CENTER_Y,
        signal=None,
        auto_pulse_period=config.AUTO_PULSE_PERIOD,
        decay_offset=config.DECAY_OFFSET,
    ):
        if auto_pulse_period is not None and auto_pulse_period <= 0:
            raise ValueError(
                f"auto_pulse_period must be positive, got {auto_pulse_period}"
            )
        self.width = width
        self.center = center
        self.decay_offset = decay_offset
        self.auto_pulse_period = auto_pulse_period
        self.signal = signal if signal is not None else LivenessSignal()

        self.line = PointRing(width)
        self.x = 0
        self.y = center

        # None when idle, else the cursor position the pulse started at
        self.pulse_origin = None
        self.pulse_count = 0

    @property
    def is_beating(self) -> bool:
        return self.pulse_origin is not None

    @property
    def cursor(self):
        return (float(self.x), float(self.y))

    def decay_index(self, x: int) -> int:
        return self.line.index(x - self.decay_offset)

    def advance(self):
        """Move the trace forward by one tick"""
        if self.x >= self.width:
            self.x = 0
            self.y = self.center
            # A pulse cut by the wrap ends here; the baseline stays centred
            if self.is_beating:
                logger.debug("pulse %d cut short at wrap", self.pulse_count)
                self.pulse_origin = None

        x = self.x
        self.line.set(x, (x, self.y))

        # Always take the signal so a success during a pulse is dropped
        requested = self.signal.take()
        if self._auto_pulse_due(x):
            requested = True
        if requested and not self.is_beating:
            self.start_pulse(x)

        if self.is_beating:
            self._beat()

        self.line.clear(self.decay_index(x))
        self.x += 1

    def start_pulse(self, origin: int):
        self.pulse_origin = origin
        self.pulse_count += 1
        logger.debug("pulse %d started at x=%d", self.pulse_count, origin)

    def _auto_pulse_due(self, x: int) -> bool:
        return self.auto_pulse_period is not None and x % self.auto_pulse_period == 0

    def _beat(self):
        offset = self.x - self.pulse_origin
        if offset > config.PULSE_END:
            self.pulse_origin = None
            return

        phase = pulse_phase(offset)
        if phase is None:
            return

        direction = PHASE_DIRECTION[phase]
        self.y += direction * config.PULSE_STEP

        steps = np.arange(config.PULSE_SPAN, dtype=np.float64)
        stroke = np.column_stack(
            (np.full(config.PULSE_SPAN, float(self.x)), self.y + direction * steps)
        )
        self.line.set_span(self.x, stroke)
