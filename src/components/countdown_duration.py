"""Countdown Duration Component.

Computes the time remaining until a deadline and breaks it down into the
day/hour/minute/second fields shown on each countdown frame.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

import pytz

from my_config import get_config

logger = logging.getLogger(__name__)

# Time calculations (milliseconds)
MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR


class _Expired:
    """Marker returned when the deadline is not in the future."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return 'EXPIRED'


EXPIRED = _Expired()


def _pad(value: int) -> str:
    # Only single-character values get a leading zero, so 100 days stays "100"
    text = str(value)
    return '0' + text if len(text) == 1 else text


@dataclass(frozen=True)
class CountdownFields:
    """Zero-padded display strings for one frame."""
    days: str
    hours: str
    minutes: str
    seconds: str


class CountdownDuration:
    """A mutable span of time counting down one second per frame."""

    def __init__(self, milliseconds: int):
        self.milliseconds = int(milliseconds)

    def __repr__(self):
        return f"CountdownDuration(milliseconds={self.milliseconds})"

    def as_days(self) -> float:
        return self.milliseconds / MS_PER_DAY

    def as_hours(self) -> float:
        return self.milliseconds / MS_PER_HOUR

    def as_minutes(self) -> float:
        return self.milliseconds / MS_PER_MINUTE

    def as_seconds(self) -> float:
        return self.milliseconds / MS_PER_SECOND

    def subtract_second(self):
        """Advance the countdown by one second, in place."""
        self.milliseconds -= MS_PER_SECOND

    def is_exhausted(self) -> bool:
        return self.milliseconds < 0

    def breakdown(self) -> CountdownFields:
        """Break the remaining time into padded days/hours/minutes/seconds.

        Each field is the floored total in that unit minus the larger units
        already accounted for.
        """
        days = math.floor(self.as_days())
        hours = math.floor(self.as_hours()) - days * 24
        minutes = math.floor(self.as_minutes()) - days * 24 * 60 - hours * 60
        seconds = (math.floor(self.as_seconds()) - days * 24 * 60 * 60
                   - hours * 60 * 60 - minutes * 60)

        return CountdownFields(_pad(days), _pad(hours), _pad(minutes), _pad(seconds))


CountdownValue = Union[CountdownDuration, _Expired]


def get_timezone(tz_name: Optional[str] = None) -> pytz.BaseTzInfo:
    return pytz.timezone(tz_name or get_config().countdown_timezone)


def parse_deadline(deadline_str: str, tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """Parse an ISO 8601 date or datetime string into an aware datetime.

    Args:
        deadline_str: e.g. 2019-10-18 or 2025-11-11T15:00:00-05:00
        tz: Timezone used for naive timestamps (defaults to the configured one)

    Raises:
        ValueError: If deadline_str cannot be parsed
    """
    tz = tz or get_timezone()
    try:
        deadline = datetime.fromisoformat(deadline_str.strip().replace('Z', '+00:00'))
    except (ValueError, AttributeError) as parse_err:
        logger.error(f"Failed to parse deadline '{deadline_str}': {parse_err}")
        raise ValueError(f'Invalid deadline format: {parse_err}') from parse_err

    if deadline.tzinfo is None:
        deadline = tz.localize(deadline)
    return deadline


def compute_remaining(deadline_str: str, now: Optional[datetime] = None,
                      tz: Optional[pytz.BaseTzInfo] = None) -> CountdownValue:
    """Return the time left until deadline_str, or EXPIRED if it has passed.

    Args:
        deadline_str: ISO 8601 timestamp of the target instant
        now: Current instant (aware); defaults to datetime.now() in tz
        tz: Timezone for naive timestamps

    Returns:
        CountdownDuration when the deadline is in the future, otherwise EXPIRED
    """
    tz = tz or get_timezone()
    deadline = parse_deadline(deadline_str, tz)
    if now is None:
        now = datetime.now(tz)
    elif now.tzinfo is None:
        now = tz.localize(now)

    delta = deadline - now
    difference = (delta.days * 86400 + delta.seconds) * MS_PER_SECOND + delta.microseconds // 1000
    logger.debug(f"Deadline {deadline.isoformat()} is {difference}ms from {now.isoformat()}")

    if difference <= 0:
        return EXPIRED
    return CountdownDuration(difference)
