"""
Time-window availability of service instances.

Deutsch:
    Zeitfenster-basierte Verfügbarkeit von Service-Instanzen.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from .models import AvailabilityPeriod, Interval, Service, ServiceInstance


def _normalise_now(now: Optional[datetime]) -> datetime:
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    else:
        now = now.astimezone(timezone.utc)
    return now.replace(microsecond=0)


def is_interval_now(interval: Interval, now: datetime) -> bool:
    """``now`` must already be a UTC instant."""

    if interval.days is not None and now.isoweekday() not in interval.days:
        return False
    time_of_day = now.timetz().replace(tzinfo=None)
    if interval.start_time is not None and interval.start_time > time_of_day:
        return False
    if interval.end_time is not None and interval.end_time <= time_of_day:
        return False
    return True


def is_period_active(period: AvailabilityPeriod, now: datetime) -> bool:
    if period.valid_from is not None and period.valid_from > now:
        return False
    if period.valid_to is not None and period.valid_to < now:
        return False
    return True


def is_available(instance: ServiceInstance, now: Optional[datetime] = None) -> bool:
    """
    Decide whether ``instance`` may be offered at ``now`` (defaults to the
    current UTC time, read once).

    Deutsch:
        Entscheidet, ob die Instanz zum Zeitpunkt ``now`` verfügbar ist.
    """

    if instance.availability is None:
        return True
    current = _normalise_now(now)
    for period in instance.availability:
        if not is_period_active(period, current):
            continue
        if not period.intervals:
            return True
        if any(is_interval_now(interval, current) for interval in period.intervals):
            return True
    return False


def available_instances(service: Service, now: Optional[datetime] = None) -> List[ServiceInstance]:
    current = _normalise_now(now)
    return [instance for instance in service.instances if is_available(instance, current)]
