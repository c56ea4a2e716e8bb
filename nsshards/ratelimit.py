"""Request spacing for the NS API.

NS enforces a blanket limit on API requests, and a separate, much longer,
cooldown between telegrams. A telegram is itself an API request,
so sending one has to satisfy both.
"""

import contextlib
import enum
import logging
import numbers
import threading
import time
from typing import Callable, Iterator, Optional

from nsshards.exceptions import InvalidArgument

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

# Minimum periods (in seconds) accepted by the NS API
STANDARD_FLOOR = 0.6
RECRUITMENT_TELEGRAM_FLOOR = 180.0
NON_RECRUITMENT_TELEGRAM_FLOOR = 30.0


class RequestClass(enum.Enum):
    """Determines which cooldowns apply to a request."""

    STANDARD = "standard"
    RECRUITMENT_TELEGRAM = "recruitment telegram"
    NON_RECRUITMENT_TELEGRAM = "non-recruitment telegram"

    @property
    def telegram(self) -> bool:
        """Whether this class of request sends a telegram."""
        return self is not RequestClass.STANDARD


def _check_period(name: str, value: float, floor: float) -> float:
    """Returns the value as a float, raising InvalidArgument if it is not
    a number or is below the floor.
    """
    if not isinstance(value, numbers.Real) or isinstance(value, bool):
        raise InvalidArgument(f"{name} must be a number of seconds, got {value!r}.")
    if value < floor:
        raise InvalidArgument(f"{name} must not be less than {floor} seconds, got {value}.")
    return float(value)


class RateGate:
    """
    Class that keeps track of request times to ensure safely staying below the NS ratelimits.
    .wait should be called before each request, and .record after each successful request.
    .admission wraps both around a block of code, holding a lock for the duration,
    so one RateGate can be shared between threads.

    Two timestamps are tracked: the last request of any kind,
    and the last telegram. Telegrams update both.
    """

    def __init__(
        self,
        standardPeriod: float = STANDARD_FLOOR,
        recruitmentTelegramPeriod: float = RECRUITMENT_TELEGRAM_FLOOR,
        nonRecruitmentTelegramPeriod: float = 60.0,
        enabled: bool = True,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Constructs a RateGate, all periods are in seconds.

        standardPeriod: minimum spacing between any two requests (at least 0.6).
        recruitmentTelegramPeriod: minimum spacing after a recruitment telegram (at least 180).
        nonRecruitmentTelegramPeriod: minimum spacing after other telegrams (at least 30).
        enabled: if False, no waiting is ever done, mostly useful for testing.

        clock and sleep can be replaced, but should agree on units (seconds).
        """
        self._standardPeriod = _check_period(
            "standardPeriod", standardPeriod, STANDARD_FLOOR
        )
        self._recruitmentTelegramPeriod = _check_period(
            "recruitmentTelegramPeriod",
            recruitmentTelegramPeriod,
            RECRUITMENT_TELEGRAM_FLOOR,
        )
        self._nonRecruitmentTelegramPeriod = _check_period(
            "nonRecruitmentTelegramPeriod",
            nonRecruitmentTelegramPeriod,
            NON_RECRUITMENT_TELEGRAM_FLOOR,
        )
        self.enabled = enabled

        self.clock = clock
        self.sleep = sleep

        # Clock readings of the last requests, None if there has not been one
        self.lastStandard: Optional[float] = None
        self.lastTelegram: Optional[float] = None

        self._lock = threading.Lock()

    @property
    def standardPeriod(self) -> float:
        """Minimum spacing between any two requests."""
        return self._standardPeriod

    @property
    def recruitmentTelegramPeriod(self) -> float:
        """Minimum spacing between a telegram and a following recruitment telegram."""
        return self._recruitmentTelegramPeriod

    @property
    def nonRecruitmentTelegramPeriod(self) -> float:
        """Minimum spacing between a telegram and a following non-recruitment telegram."""
        return self._nonRecruitmentTelegramPeriod

    def _telegram_period(self, requestClass: RequestClass) -> float:
        if requestClass is RequestClass.RECRUITMENT_TELEGRAM:
            return self._recruitmentTelegramPeriod
        return self._nonRecruitmentTelegramPeriod

    def _wait_since(self, last: Optional[float], period: float) -> None:
        """Blocks until period has elapsed since last."""
        if last is None:
            return
        deadline = last + period
        remaining = deadline - self.clock()
        # Loop in case sleep returns early
        while remaining > 0:
            logger.debug("Waiting %ss to avoid ratelimit", remaining)
            self.sleep(remaining)
            remaining = deadline - self.clock()

    def wait(self, requestClass: RequestClass = RequestClass.STANDARD) -> None:
        """Will wait until it is safe to send a request of the given class.

        Telegrams first wait out the telegram cooldown, then the standard one.
        """
        if not self.enabled:
            return
        if requestClass.telegram:
            self._wait_since(self.lastTelegram, self._telegram_period(requestClass))
        self._wait_since(self.lastStandard, self._standardPeriod)

    def record(self, requestClass: RequestClass = RequestClass.STANDARD) -> None:
        """Marks that a request of the given class was just made."""
        now = self.clock()
        self.lastStandard = now
        if requestClass.telegram:
            self.lastTelegram = now

    @contextlib.contextmanager
    def admission(
        self, requestClass: RequestClass = RequestClass.STANDARD
    ) -> Iterator[None]:
        """Waits before, and records after, the request made inside the block.

        Nothing is recorded if the block raises.
        """
        with self._lock:
            self.wait(requestClass)
            yield
            self.record(requestClass)
