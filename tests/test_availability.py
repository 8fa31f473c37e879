from __future__ import annotations

from datetime import datetime, time, timedelta, timezone
from pathlib import Path

import pytest

from dvbi_catalogue import is_available, parse_service_list
from dvbi_catalogue.availability import available_instances
from dvbi_catalogue.models import AvailabilityPeriod, Interval, ServiceInstance

FIXTURE_DIR = Path(__file__).parent / "fixtures"
UTC = timezone.utc


def _period_instance() -> ServiceInstance:
    return ServiceInstance(
        availability=[
            AvailabilityPeriod(
                valid_from=datetime(2024, 1, 1, tzinfo=UTC),
                valid_to=datetime(2024, 12, 31, tzinfo=UTC),
            )
        ]
    )


def _office_hours_instance() -> ServiceInstance:
    return ServiceInstance(
        availability=[
            AvailabilityPeriod(
                intervals=[Interval(days=frozenset({1}), start_time=time(8), end_time=time(17))]
            )
        ]
    )


@pytest.mark.parametrize(
    ("now", "expected"),
    [
        (datetime(2024, 1, 1, tzinfo=UTC), True),
        (datetime(2024, 6, 15, 12, 30, tzinfo=UTC), True),
        (datetime(2024, 12, 31, tzinfo=UTC), True),
        (datetime(2023, 12, 31, 23, 59, 59, tzinfo=UTC), False),
        (datetime(2025, 1, 1, tzinfo=UTC), False),
    ],
)
def test_validity_period(now: datetime, expected: bool) -> None:
    assert is_available(_period_instance(), now) is expected


@pytest.mark.parametrize(
    ("now", "expected"),
    [
        (datetime(2024, 1, 1, 10, 0, tzinfo=UTC), True),  # Monday
        (datetime(2024, 1, 1, 8, 0, tzinfo=UTC), True),
        (datetime(2024, 1, 1, 17, 0, tzinfo=UTC), False),
        (datetime(2024, 1, 1, 18, 0, tzinfo=UTC), False),
        (datetime(2024, 1, 2, 10, 0, tzinfo=UTC), False),  # Tuesday
    ],
)
def test_interval(now: datetime, expected: bool) -> None:
    assert is_available(_office_hours_instance(), now) is expected


def test_interval_evaluated_in_utc() -> None:
    berlin_noon = datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
    assert is_available(_office_hours_instance(), berlin_noon)
    assert is_available(_office_hours_instance(), datetime(2024, 1, 1, 10, 0))


def test_instance_without_availability_is_always_available() -> None:
    assert is_available(ServiceInstance())
    assert is_available(ServiceInstance(), datetime(1970, 1, 1, tzinfo=UTC))


def test_empty_availability_is_never_available() -> None:
    assert not is_available(ServiceInstance(availability=[]), datetime(2024, 1, 1, tzinfo=UTC))


def test_open_ended_period_without_intervals() -> None:
    instance = ServiceInstance(availability=[AvailabilityPeriod()])
    assert is_available(instance, datetime(2024, 1, 1, tzinfo=UTC))


def test_available_instances_from_document() -> None:
    catalogue = parse_service_list((FIXTURE_DIR / "servicelist_2019.xml").read_bytes())
    three = catalogue.service("tag:example.test,2024:three")
    monday_evening = datetime(2024, 1, 1, 18, 0, tzinfo=UTC)
    titles = [instance.titles[0].text for instance in available_instances(three, monday_evening)]
    assert titles == ["Three (PlayReady)", "Three catch-up"]

    two = catalogue.service("tag:example.test,2024:two")
    assert available_instances(two, datetime(2024, 5, 1, tzinfo=UTC)) == two.instances
    assert available_instances(two, datetime(2025, 5, 1, tzinfo=UTC)) == []
