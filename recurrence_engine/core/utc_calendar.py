"""UTC calendar context used by every engine computation.

All-day tasks are stored as UTC midnight, so splitting a timestamp into its
date and time-of-day must happen against UTC. Reading those components
through the process's local timezone shifts all-day dates by the local
offset. The engine therefore never touches ambient timezone state: every
function receives a ``UtcCalendar`` and does its arithmetic through it.
"""

from datetime import date, datetime, time, timedelta, timezone

from dateutil.relativedelta import relativedelta

from recurrence_engine.utils.weekdays import Weekdays

UTC = timezone.utc


class UtcCalendar:
    """Stateless calendar arithmetic pinned to UTC.

    Month and year arithmetic uses ``relativedelta`` so that end-of-month
    dates clamp (Jan 31 + 1 month is Feb 28 or Feb 29) instead of
    overflowing into the next month.
    """

    tz = UTC

    def to_utc(self, value: datetime) -> datetime:
        """Return ``value`` as an aware UTC datetime.

        Naive datetimes are taken to already be UTC. Plain dates become UTC
        midnight of that day.
        """
        if not isinstance(value, datetime):
            if isinstance(value, date):
                return datetime.combine(value, time.min, tzinfo=self.tz)
            raise TypeError(f"expected datetime or date, got {type(value).__name__}")
        if value.tzinfo is None:
            return value.replace(tzinfo=self.tz)
        return value.astimezone(self.tz)

    def setting_time(self, day_source: datetime, time_source: datetime) -> datetime:
        """Combine the UTC date of ``day_source`` with the time of ``time_source``."""
        day_part = self.to_utc(day_source)
        time_part = self.to_utc(time_source)
        return day_part.replace(
            hour=time_part.hour,
            minute=time_part.minute,
            second=time_part.second,
            microsecond=time_part.microsecond,
        )

    def add_days(self, value: datetime, days: int) -> datetime:
        return self.to_utc(value) + timedelta(days=days)

    def add_months(self, value: datetime, months: int) -> datetime:
        return self.to_utc(value) + relativedelta(months=months)

    def add_years(self, value: datetime, years: int) -> datetime:
        return self.to_utc(value) + relativedelta(years=years)

    def replace_fields(
        self, value: datetime, year=None, month=None, day=None
    ) -> datetime:
        """Set absolute year/month/day, clamping the day to the month length."""
        return self.to_utc(value) + relativedelta(year=year, month=month, day=day)

    def calendar_date(self, value) -> date:
        """Return the UTC calendar date of a datetime (dates pass through)."""
        if isinstance(value, date) and not isinstance(value, datetime):
            return value
        return self.to_utc(value).date()

    def start_of_day(self, value: datetime) -> datetime:
        return self.to_utc(value).replace(hour=0, minute=0, second=0, microsecond=0)

    def first_of_month(self, value: datetime) -> datetime:
        """Midnight UTC on the first day of ``value``'s month."""
        return self.start_of_day(value).replace(day=1)

    def weekday_index(self, value: datetime) -> int:
        """Day of week with 0 = Sunday ... 6 = Saturday."""
        # datetime.weekday() counts from Monday = 0.
        return (self.to_utc(value).weekday() + 1) % 7

    def day_name(self, value: datetime) -> str:
        return Weekdays.from_index(self.weekday_index(value)).name


UTC_CALENDAR = UtcCalendar()


def format_timestamp(value):
    """Render a timestamp as ISO 8601 UTC with a ``Z`` suffix (None passes through)."""
    if value is None:
        return None
    utc_value = UTC_CALENDAR.to_utc(value)
    text = utc_value.replace(tzinfo=None).isoformat(timespec="milliseconds")
    return f"{text}Z"
