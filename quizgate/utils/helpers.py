import datetime as dt
from typing import Callable

Clock = Callable[[], dt.datetime]


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def iso_timestamp(clock: Clock = utc_now) -> str:
    return clock().isoformat()


def epoch_millis(clock: Clock = utc_now) -> int:
    return int(clock().timestamp() * 1000)
