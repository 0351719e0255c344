"""Tests for cron schedule evaluation."""

from datetime import datetime

import pytest

from backup_local.schedule_checker import ScheduleChecker


class TestShouldRun:
    """Tests for ScheduleChecker.should_run."""

    def test_daily_schedule(self):
        """Test a daily midnight schedule is due every day."""
        assert ScheduleChecker.should_run("0 0 * * *", datetime(2025, 3, 4, 5, 0))

    def test_weekday_schedule(self):
        """Test a Monday-only schedule is due on Monday only."""
        monday = datetime(2025, 3, 3, 5, 0)
        tuesday = datetime(2025, 3, 4, 5, 0)
        assert ScheduleChecker.should_run("0 0 * * 1", monday)
        assert not ScheduleChecker.should_run("0 0 * * 1", tuesday)

    def test_later_in_the_day(self):
        """Test a schedule later today is not yet due."""
        assert not ScheduleChecker.should_run("0 22 * * *", datetime(2025, 3, 4, 5, 0))
        assert ScheduleChecker.should_run("0 22 * * *", datetime(2025, 3, 4, 23, 0))

    def test_due_exactly_on_the_tick(self):
        """Test a start at the exact scheduled instant counts as due."""
        assert ScheduleChecker.should_run("0 0 * * *", datetime(2025, 3, 4, 0, 0, 0))
        assert ScheduleChecker.should_run("30 5 * * *", datetime(2025, 3, 4, 5, 30, 0))

    def test_not_due_on_the_tick_of_another_day(self):
        """Test the exact-tick case still respects the day of week."""
        tuesday_midnight = datetime(2025, 3, 4, 0, 0, 0)
        assert not ScheduleChecker.should_run("0 0 * * 1", tuesday_midnight)

    def test_invalid_schedule(self):
        """Test evaluation errors raise ValueError."""
        with pytest.raises(ValueError, match="Error evaluating schedule"):
            ScheduleChecker.should_run("not a cron", datetime(2025, 3, 4, 5, 0))


class TestNextRunTime:
    """Tests for ScheduleChecker.next_run_time."""

    def test_next_monday(self):
        """Test the next run of a weekly schedule."""
        result = ScheduleChecker.next_run_time("0 0 * * 1", datetime(2025, 3, 4, 5, 0))
        assert result == datetime(2025, 3, 10, 0, 0)


class TestValidateScheduleFormat:
    """Tests for ScheduleChecker.validate_schedule_format."""

    def test_valid_and_invalid(self):
        """Test validity of cron expressions."""
        assert ScheduleChecker.validate_schedule_format("0 0 * * *")
        assert ScheduleChecker.validate_schedule_format(" */5 * * * 1-5 ")
        assert not ScheduleChecker.validate_schedule_format("every day")
