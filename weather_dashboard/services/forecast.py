"""
Forecast normalization.

The provider's 5-day forecast is a chronological list of 3-hour samples. The
dashboard shows it two ways:
- hourly: the first 8 samples as-is (24 hours of 3-hour ticks)
- daily:  samples grouped by the city's local calendar day, one card per day

Day boundaries follow the city's UTC offset (`city.timezone` in the forecast
payload), not the server's UTC calendar day, so a sample at 23:00 UTC lands
on the next day for a city at UTC+3.
"""
import math
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from weather_dashboard.models import DailyEntry, ForecastSample, HourlyEntry

HOURLY_LIMIT = 8
DAILY_LIMIT = 6


def round_half_up(value: float) -> int:
    """Nearest integer, halves toward +inf (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def pop_percent(pop: Optional[float]) -> int:
    """Rescale a 0..1 precipitation probability to a 0..100 integer."""
    pct = round_half_up((pop or 0.0) * 100)
    return min(100, max(0, pct))


def day_key(timestamp: int, tz_offset: int = 0) -> date:
    """Calendar day of a unix timestamp, shifted by the city's UTC offset in seconds."""
    return datetime.fromtimestamp(timestamp, tz=timezone(timedelta(seconds=tz_offset))).date()


def to_hourly(samples: Sequence[ForecastSample], limit: int = HOURLY_LIMIT) -> List[HourlyEntry]:
    return [
        HourlyEntry(
            time=s.dt,
            temp=round_half_up(s.main.temp),
            feels_like=round_half_up(s.main.feels_like),
            icon=s.condition.icon,
            description=s.condition.description,
            humidity=s.main.humidity,
            wind_speed=s.wind.speed,
            pop=pop_percent(s.pop),
        )
        for s in samples[:limit]
    ]


def to_daily(
    samples: Iterable[ForecastSample],
    tz_offset: int = 0,
    limit: int = DAILY_LIMIT,
) -> List[DailyEntry]:
    # Days in first-seen order; the upstream list is chronological.
    groups: Dict[date, List[ForecastSample]] = {}
    for s in samples:
        groups.setdefault(day_key(s.dt, tz_offset), []).append(s)

    daily: List[DailyEntry] = []
    for steps in list(groups.values())[:limit]:
        # Representative icon/description is the first sample of the day.
        first = steps[0]
        temps = [s.main.temp for s in steps]
        daily.append(
            DailyEntry(
                date=first.dt,
                high=round_half_up(max(temps)),
                low=round_half_up(min(temps)),
                icon=first.condition.icon,
                description=first.condition.description,
                pop=pop_percent(max(s.pop or 0.0 for s in steps)),
            )
        )
    return daily
