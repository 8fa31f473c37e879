from __future__ import annotations

from datetime import datetime, time, timezone

import pytest

from dvbi_catalogue import DvbChannel, is_available, parse_service_list
from dvbi_catalogue.instances import parse_days, parse_instant, parse_time_of_day
from dvbi_catalogue.xml_nav import ServiceListError

DASH = """
  <DASHDeliveryParameters>
    <UriBasedLocation contentType="application/dash+xml"><URI>https://example.test/{name}.mpd</URI></UriBasedLocation>
  </DASHDeliveryParameters>"""


def _service_list(*instances: str) -> str:
    return (
        '<ServiceList xmlns="urn:dvb:metadata:servicediscovery:2019" xmlns:tva="urn:tva:metadata:2019">'
        "<Service><UniqueIdentifier>svc</UniqueIdentifier><ServiceName>Svc</ServiceName>"
        + "".join(instances)
        + "</Service></ServiceList>"
    )


def _protected(name: str, *systems: str) -> str:
    declarations = "".join(f"<DRMSystemId><DRMSystemId>{system}</DRMSystemId></DRMSystemId>" for system in systems)
    return f"<ServiceInstance><ContentProtection>{declarations}</ContentProtection>{DASH.format(name=name)}</ServiceInstance>"


def _plain(name: str) -> str:
    return f"<ServiceInstance>{DASH.format(name=name)}</ServiceInstance>"


def _urls(payload: str, **kwargs) -> list:
    catalogue = parse_service_list(payload, **kwargs)
    return [instance.dash_url for instance in catalogue.services[0].instances]


def test_unsupported_drm_instance_is_dropped() -> None:
    payload = _service_list(_protected("y", "Y"), _plain("clear"), _protected("x", "X", "Z"))
    assert _urls(payload, supported_drm_systems=["X"]) == [
        "https://example.test/clear.mpd",
        "https://example.test/x.mpd",
    ]


def test_no_drm_filter_keeps_everything() -> None:
    payload = _service_list(_protected("y", "Y"), _plain("clear"))
    assert _urls(payload) == ["https://example.test/y.mpd", "https://example.test/clear.mpd"]


def test_empty_drm_list_keeps_only_unprotected() -> None:
    payload = _service_list(_protected("y", "Y"), _plain("clear"))
    assert _urls(payload, supported_drm_systems=[]) == ["https://example.test/clear.mpd"]


def test_drm_system_id_as_plain_text() -> None:
    payload = _service_list(
        f"<ServiceInstance><ContentProtection><DRMSystemId>X</DRMSystemId></ContentProtection>{DASH.format(name='x')}</ServiceInstance>"
    )
    catalogue = parse_service_list(payload, supported_drm_systems=["x"])
    instance = catalogue.services[0].instances[0]
    assert instance.content_protection[0].drm_system_id == "X"


def test_broadcast_instance_resolution() -> None:
    payload = _service_list(
        "<ServiceInstance><DVBCDeliveryParameters>"
        '<DVBTriplet origNetId="0x0085" tsId="1" serviceId="0x10"/>'
        "</DVBCDeliveryParameters></ServiceInstance>",
        '<ServiceInstance><DVBTriplet origNetId="1" tsId="1" serviceId="1"/></ServiceInstance>',
    )
    cable = DvbChannel(133, 1, 16, name="Cable")
    orphan = DvbChannel(1, 1, 1, name="No delivery")
    catalogue = parse_service_list(payload, channel_map=[cable, orphan])
    (instance,) = catalogue.services[0].instances
    assert instance.delivery_kind == "DVB-C"
    assert instance.dvb_channel is cable
    assert catalogue.services[0].source_types == "DVB-C"


def _two_services(first_instance: str) -> str:
    return (
        '<ServiceList xmlns="urn:dvb:metadata:servicediscovery:2019">'
        "<Service><UniqueIdentifier>first</UniqueIdentifier><ServiceName>First</ServiceName>"
        + first_instance
        + "</Service>"
        "<Service><UniqueIdentifier>second</UniqueIdentifier><ServiceName>Second</ServiceName>"
        + _plain("second")
        + "</Service></ServiceList>"
    )


@pytest.mark.parametrize(
    "triplet",
    [
        '<DVBTriplet origNetId="1" serviceId="1"/>',
        '<DVBTriplet origNetId="x" tsId="1" serviceId="1"/>',
    ],
)
def test_unusable_triplet_drops_only_its_instance(triplet: str) -> None:
    payload = _two_services(
        f"<ServiceInstance><DVBTDeliveryParameters>{triplet}</DVBTDeliveryParameters></ServiceInstance>"
    )
    catalogue = parse_service_list(payload, channel_map=[DvbChannel(1, 1, 1)])
    first, second = catalogue.services
    assert first.instances == []
    assert [instance.dash_url for instance in second.instances] == ["https://example.test/second.mpd"]


def test_instance_level_linked_applications() -> None:
    payload = _service_list(
        "<ServiceInstance><RelatedMaterial>"
        '<tva:HowRelated href="urn:dvb:metadata:cs:LinkedApplicationCS:2019:1.1"/>'
        "<tva:MediaLocator><tva:MediaUri>https://example.test/app.html</tva:MediaUri></tva:MediaLocator>"
        "</RelatedMaterial></ServiceInstance>"
    )
    # a parallel application alone does not make an instance usable
    assert parse_service_list(payload).services[0].instances == []


def test_parse_instant() -> None:
    assert parse_instant(None) is None
    assert parse_instant("2024-03-01T12:00:00Z") == datetime(2024, 3, 1, 12, tzinfo=timezone.utc)
    assert parse_instant("2024-03-01T14:00:00+02:00") == datetime(2024, 3, 1, 12, tzinfo=timezone.utc)
    assert parse_instant("2024-03-01T12:00:00") == datetime(2024, 3, 1, 12, tzinfo=timezone.utc)
    with pytest.raises(ServiceListError):
        parse_instant("yesterday")


def test_parse_time_of_day() -> None:
    assert parse_time_of_day("08:00:00Z") == time(8, 0)
    assert parse_time_of_day("10:30:00+02:00") == time(8, 30)
    assert parse_time_of_day("17:00:00") == time(17, 0)
    with pytest.raises(ServiceListError):
        parse_time_of_day("25:00:00")


def test_parse_days() -> None:
    assert parse_days(None) is None
    assert parse_days("1 3,5") == frozenset({1, 3, 5})
    with pytest.raises(ServiceListError):
        parse_days("8")
    with pytest.raises(ServiceListError):
        parse_days("mon")


def test_interval_until_midnight() -> None:
    payload = _two_services(
        "<ServiceInstance><Availability><Period>"
        '<Interval startTime="20:00:00Z" endTime="24:00:00Z"/>'
        f"</Period></Availability>{DASH.format(name='late')}</ServiceInstance>"
    )
    catalogue = parse_service_list(payload)
    assert len(catalogue.services) == 2
    (late,) = catalogue.services[0].instances
    (interval,) = late.availability[0].intervals
    assert interval.start_time == time(20, 0)
    assert interval.end_time is None
    assert is_available(late, datetime(2024, 1, 1, 23, 59, 59, tzinfo=timezone.utc))
    assert not is_available(late, datetime(2024, 1, 1, 19, 59, 59, tzinfo=timezone.utc))


def test_end_of_day_time() -> None:
    assert parse_time_of_day("24:00:00") == time(0, 0)
    assert parse_time_of_day("24:00:00Z", end_bound=True) is None
    assert parse_time_of_day("24:00:00", end_bound=True) is None
    assert parse_time_of_day("24:00:00+02:00", end_bound=True) == time(22, 0)
