# /tests/test_countdown_duration.py
"""
Unit tests for the countdown duration calculator

Tests remaining-time computation, the expired marker, field breakdown
and zero-padding rules.
"""

from datetime import datetime, timedelta

import pytest
import pytz

from src.components.countdown_duration import (
    EXPIRED,
    MS_PER_DAY,
    CountdownDuration,
    compute_remaining,
    parse_deadline,
)

UTC = pytz.utc


@pytest.fixture
def now():
    """Fixed reference instant for deterministic tests"""
    return datetime(2025, 11, 11, 12, 0, 0, tzinfo=UTC)


class TestComputeRemaining:
    """Test cases for compute_remaining"""

    def test_future_deadline_returns_duration(self, now):
        """Test that a deadline 65 seconds away yields 00:00:01:05"""
        target = (now + timedelta(seconds=65)).isoformat()
        result = compute_remaining(target, now=now, tz=UTC)

        assert isinstance(result, CountdownDuration)
        fields = result.breakdown()
        assert (fields.days, fields.hours, fields.minutes, fields.seconds) == ('00', '00', '01', '05')

    def test_past_deadline_is_expired(self, now):
        """Test that a deadline one second ago returns the expired marker"""
        target = (now - timedelta(seconds=1)).isoformat()
        assert compute_remaining(target, now=now, tz=UTC) is EXPIRED

    def test_deadline_equal_to_now_is_expired(self, now):
        """Test that zero remaining time counts as expired"""
        assert compute_remaining(now.isoformat(), now=now, tz=UTC) is EXPIRED

    def test_naive_deadline_uses_timezone(self, now):
        """Test that naive timestamps are localized to the given timezone"""
        eastern = pytz.timezone('US/Eastern')
        # 12:00 UTC is 07:00 EST on this date
        result = compute_remaining('2025-11-11T08:00:00', now=now, tz=eastern)
        assert result.as_seconds() == 3600

    def test_zulu_suffix_is_accepted(self, now):
        """Test that a trailing Z parses as UTC"""
        result = compute_remaining('2025-11-11T12:00:30Z', now=now, tz=UTC)
        assert result.as_seconds() == 30

    def test_date_only_deadline(self, now):
        """Test that a plain date is treated as midnight"""
        result = compute_remaining('2025-11-12', now=now, tz=UTC)
        assert result.as_hours() == 12

    def test_invalid_deadline_raises(self, now):
        """Test that unparseable timestamps raise ValueError"""
        with pytest.raises(ValueError):
            compute_remaining('not-a-date', now=now, tz=UTC)

    def test_parse_deadline_keeps_offset(self):
        """Test that an explicit offset is preserved"""
        deadline = parse_deadline('2025-11-11T15:00:00-05:00', tz=UTC)
        assert deadline.utcoffset() == timedelta(hours=-5)


class TestCountdownDuration:
    """Test cases for CountdownDuration"""

    def test_unit_conversions(self):
        """Test float conversions into each unit"""
        duration = CountdownDuration(90 * 60 * 1000)
        assert duration.as_hours() == 1.5
        assert duration.as_minutes() == 90
        assert duration.as_seconds() == 5400
        assert duration.as_days() == pytest.approx(0.0625)

    def test_subtract_second_mutates_in_place(self):
        """Test that each subtraction removes exactly one second"""
        duration = CountdownDuration(3000)
        duration.subtract_second()
        duration.subtract_second()
        assert duration.milliseconds == 1000
        assert not duration.is_exhausted()

        duration.subtract_second()
        assert duration.milliseconds == 0
        assert not duration.is_exhausted()

        duration.subtract_second()
        assert duration.is_exhausted()

    def test_three_digit_days_are_not_padded(self):
        """Test that 100 days renders as '100', not '0100'"""
        fields = CountdownDuration(100 * MS_PER_DAY).breakdown()
        assert fields.days == '100'
        assert fields.hours == '00'

    def test_two_digit_fields_are_not_padded(self):
        """Test that values with two digits are left as they are"""
        ms = ((12 * 24 + 23) * 3600 + 45 * 60 + 59) * 1000
        fields = CountdownDuration(ms).breakdown()
        assert (fields.days, fields.hours, fields.minutes, fields.seconds) == ('12', '23', '45', '59')

    def test_exact_day_boundary(self):
        """Test that exactly 24 hours decomposes to 01:00:00:00"""
        fields = CountdownDuration(MS_PER_DAY).breakdown()
        assert (fields.days, fields.hours, fields.minutes, fields.seconds) == ('01', '00', '00', '00')

    def test_one_millisecond_below_day_boundary(self):
        """Test the boundary just below a full day"""
        fields = CountdownDuration(MS_PER_DAY - 1).breakdown()
        assert (fields.days, fields.hours, fields.minutes, fields.seconds) == ('00', '23', '59', '59')

    def test_fractional_seconds_are_floored(self):
        """Test that partial seconds don't round up"""
        fields = CountdownDuration(5999).breakdown()
        assert fields.seconds == '05'

    def test_breakdown_follows_subtraction(self):
        """Test that breakdown reflects the mutated value"""
        duration = CountdownDuration(60 * 1000)
        assert duration.breakdown().minutes == '01'
        duration.subtract_second()
        fields = duration.breakdown()
        assert (fields.minutes, fields.seconds) == ('00', '59')


class TestExpiredMarker:
    """Test cases for the EXPIRED sentinel"""

    def test_expired_is_falsy(self):
        assert not EXPIRED

    def test_expired_is_not_a_duration(self):
        assert not isinstance(EXPIRED, CountdownDuration)
        assert repr(EXPIRED) == 'EXPIRED'
