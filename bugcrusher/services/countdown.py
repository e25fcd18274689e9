import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Callable

from bugcrusher.core.config import COUNTDOWN_TICK_SECONDS, DISPLAY_OFFSET
from bugcrusher.services.grouping_oracle import as_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeLeft:
    hours: int
    minutes: int
    seconds: int

    @property
    def total_seconds(self) -> int:
        return self.hours * 3600 + self.minutes * 60 + self.seconds

    def __str__(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}"


ZERO = TimeLeft(0, 0, 0)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def compute_deadline(anchor: datetime, target_seconds: int | None) -> datetime:
    """
    Deadline of the session anchored at `anchor` (a UTC instant).

    The anchor is shifted by the fixed regional offset before the duration is
    added. A missing duration counts as zero, so the session is already over.
    """
    duration = timedelta(seconds=target_seconds or 0)
    return as_utc(anchor) + DISPLAY_OFFSET + duration


def tick(deadline: datetime, now: datetime) -> TimeLeft | None:
    """Remaining time until `deadline`, or None once it has passed."""
    remaining = int((as_utc(deadline) - as_utc(now)).total_seconds())
    if remaining <= 0:
        return None

    return TimeLeft(
        hours=remaining // 3600,
        minutes=(remaining // 60) % 60,
        seconds=remaining % 60,
    )


class CountdownClock:
    """
    Ticks a deadline against the wall clock.

    Once the deadline passes the clock freezes at 00:00:00 and `on_expire`
    runs exactly once; later ticks keep returning ZERO without side effects.
    """

    def __init__(
        self,
        deadline: datetime,
        on_expire: Callable[[], None] | None = None,
        clock: Callable[[], datetime] = _utcnow,
        interval: float = COUNTDOWN_TICK_SECONDS,
    ):
        self.deadline = as_utc(deadline)
        self.expired = False
        self._on_expire = on_expire
        self._clock = clock
        self._interval = interval

    def advance(self) -> TimeLeft:
        left = tick(self.deadline, self._clock())
        if left is not None:
            return left

        if not self.expired:
            self.expired = True
            logger.info("countdown reached %s", self.deadline.isoformat())
            if self._on_expire is not None:
                self._on_expire()
        return ZERO

    async def ticks(self) -> AsyncIterator[TimeLeft]:
        """One value per interval, ending with the single expiry tick. Cancel to stop early."""
        while True:
            left = self.advance()
            yield left
            if self.expired:
                return
            await asyncio.sleep(self._interval)
