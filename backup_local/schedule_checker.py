"""Schedule checking logic for cron-based backup runs."""

from datetime import datetime
from typing import Optional

from croniter import croniter


class ScheduleChecker:
    """Handles evaluation of the cron schedule a backup runs on."""

    @staticmethod
    def should_run(schedule: str, current_time: Optional[datetime] = None) -> bool:
        """
        Check if the backup should run today based on its cron schedule.

        Args:
            schedule: Cron schedule string
            current_time: Current time (defaults to now)

        Returns:
            True if the schedule fired today up to now, False otherwise
        """
        if current_time is None:
            current_time = datetime.now()

        schedule = schedule.strip()

        try:
            cron = croniter(schedule, current_time)
            prev_occurrence = cron.get_prev(datetime)
        except Exception as e:
            raise ValueError(f"Error evaluating schedule '{schedule}': {e}")

        # The job is started from cron once a day; it is due when the
        # schedule matched between midnight and now, including the current
        # minute, which get_prev skips when called exactly on the tick.
        today_start = current_time.replace(hour=0, minute=0, second=0, microsecond=0)
        return prev_occurrence >= today_start or croniter.match(schedule, current_time)

    @staticmethod
    def next_run_time(schedule: str, current_time: Optional[datetime] = None) -> datetime:
        """
        Get the next time the backup is scheduled to run.

        Args:
            schedule: Cron schedule string
            current_time: Current time (defaults to now)

        Returns:
            Next scheduled run time
        """
        if current_time is None:
            current_time = datetime.now()

        schedule = schedule.strip()

        try:
            cron = croniter(schedule, current_time)
            return cron.get_next(datetime)
        except Exception as e:
            raise ValueError(f"Error calculating next run time for '{schedule}': {e}")

    @staticmethod
    def validate_schedule_format(schedule: str) -> bool:
        """Validate that a schedule string is a valid cron expression."""
        try:
            croniter(schedule.strip())
            return True
        except Exception:
            return False
