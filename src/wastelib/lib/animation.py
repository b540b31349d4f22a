"""
Patch based animations and a timed player driving them.

An animation consists of a base image and updates. Each update is a list of
patches that modify bytes of a working copy of the base image. A sequence
knows which update comes next and how long the current frame stays visible;
the player turns these delays into scheduled wakeups.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Protocol

from .exceptions import OutOfRangeError
from .image import PicImage, check_coordinates, pic_color

logger = logging.getLogger(__name__)

# Milliseconds per delay unit.
DEFAULT_SPEED = 50


class AnimationFrame:
    """
    Mutable working copy of a base image. Patches never reach the base.
    """

    def __init__(self, base: PicImage):
        self.width = base.width
        self.height = base.height
        self.data = bytearray(base.data)

    def _check_patch(self, offset: int, size: int) -> None:
        if offset < 0 or offset + size > len(self.data):
            raise OutOfRangeError(
                f"Patch of {size} bytes at {offset} outside frame of {len(self.data)} bytes"
            )

    def replace(self, offset: int, payload: bytes) -> None:
        self._check_patch(offset, len(payload))
        self.data[offset : offset + len(payload)] = payload

    def xor(self, offset: int, payload: bytes) -> None:
        self._check_patch(offset, len(payload))
        for i, value in enumerate(payload):
            self.data[offset + i] ^= value

    def color_at(self, x: int, y: int) -> int:
        check_coordinates(self, x, y)
        return pic_color(self.data, self.width, x, y)

    def to_image(self) -> PicImage:
        """Snapshot of the current frame."""
        return PicImage(width=self.width, height=self.height, data=bytes(self.data))


class AnimationSequence(ABC):
    """
    Pure animation state. ``reset`` returns to the base frame and ``advance``
    applies the next update, returning the delay (in units) until the
    following one.
    """

    frame: AnimationFrame

    @abstractmethod
    def reset(self) -> AnimationFrame: ...

    @abstractmethod
    def advance(self) -> int: ...

    @property
    @abstractmethod
    def delay(self) -> int:
        """Delay in units before the next advance."""


class Cancellable(Protocol):
    def cancel(self) -> Any: ...


class Scheduler(Protocol):
    """
    Schedules a one shot callback. Asyncio event loops fit this protocol.
    """

    def call_later(self, delay: float, callback: Callable[[], Any]) -> Cancellable: ...


class TimerScheduler:
    """Scheduler running callbacks on daemon ``threading.Timer`` threads."""

    def call_later(self, delay: float, callback: Callable[[], Any]) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class AnimationPlayer:
    """
    Plays an animation sequence by scheduling one wakeup at a time.

    ``on_draw`` is called with the current frame after every change. The
    player is idle until ``start`` and returns to idle on ``stop`` or
    ``reset``. Scheduled wakeups may run on another thread; all state
    changes happen under one reentrant lock, so ``on_draw`` may call back
    into the player.
    """

    def __init__(
        self,
        sequence: AnimationSequence,
        on_draw: Callable[[AnimationFrame], Any],
        speed: int = DEFAULT_SPEED,
        scheduler: Optional[Scheduler] = None,
    ):
        self.sequence = sequence
        self.on_draw = on_draw
        self.speed = speed
        self.scheduler = scheduler if scheduler is not None else TimerScheduler()
        self._lock = threading.RLock()
        self._pending: Optional[Cancellable] = None
        # Bumped for every scheduled wakeup; stale wakeups compare unequal
        self._generation = 0
        self.frame = self.sequence.reset()
        self.on_draw(self.frame)

    @property
    def running(self) -> bool:
        return self._pending is not None

    @property
    def next_delay(self) -> int:
        """Delay in milliseconds until the next frame."""
        return self.sequence.delay * self.speed

    def next(self) -> None:
        """Advances one step and draws the result."""
        with self._lock:
            self.sequence.advance()
            self.on_draw(self.frame)

    def _schedule(self) -> None:
        self._generation += 1
        generation = self._generation
        self._pending = self.scheduler.call_later(
            self.next_delay / 1000, lambda: self._animate(generation)
        )

    def _animate(self, generation: int) -> None:
        with self._lock:
            if self._pending is None or generation != self._generation:
                return
            self.next()
            # on_draw may have stopped or restarted the player
            if self._pending is not None and generation == self._generation:
                self._schedule()

    def start(self) -> None:
        with self._lock:
            if self._pending is not None:
                return
            logger.debug(f"Starting animation with {self.speed} ms per unit")
            self._schedule()

    def stop(self) -> None:
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
                self._generation += 1

    def reset(self) -> None:
        with self._lock:
            self.stop()
            self.frame = self.sequence.reset()
            self.on_draw(self.frame)
