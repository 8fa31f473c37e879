"""
Service instance resolution.

Each ``ServiceInstance`` element is turned into a playable source (DASH URL
or a broadcast channel from the client's channel map), filtered by the
client's supported DRM systems. Instances that offer nothing usable under
the caller's inputs are dropped silently.

Deutsch:
    Auflösung der Service-Instanzen (DASH oder Rundfunk), gefiltert nach
    unterstützten DRM-Systemen.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timezone
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple
from xml.etree import ElementTree as ET

from .localized import localized_texts
from .models import (
    DELIVERY_CABLE,
    DELIVERY_DASH,
    DELIVERY_SATELLITE,
    DELIVERY_TERRESTRIAL,
    AvailabilityPeriod,
    ContentProtection,
    DvbChannel,
    Interval,
    ServiceInstance,
)
from .related import HowRelatedProfile, linked_applications, related_links
from .xml_nav import (
    Document,
    ServiceListError,
    children,
    first_of_optional,
    optional_attribute,
    optional_text,
    text_of,
)

log = logging.getLogger(__name__)

Triplet = Tuple[int, int, int]

BROADCAST_DELIVERY: Tuple[Tuple[str, str], ...] = (
    ("DVBTDeliveryParameters", DELIVERY_TERRESTRIAL),
    ("DVBSDeliveryParameters", DELIVERY_SATELLITE),
    ("DVBCDeliveryParameters", DELIVERY_CABLE),
)

_DAYS_SPLIT = re.compile(r"[\s,]+")
END_OF_DAY = "24:00:00"


def index_channel_map(channels: Optional[Sequence[DvbChannel]]) -> Optional[Dict[Triplet, DvbChannel]]:
    if channels is None:
        return None
    return {channel.triplet: channel for channel in channels}


def resolve_instances(
    doc: Document,
    service_el: ET.Element,
    profile: HowRelatedProfile,
    *,
    service_id: str,
    supported_drm_systems: Optional[Sequence[str]] = None,
    channel_index: Optional[Dict[Triplet, DvbChannel]] = None,
) -> List[ServiceInstance]:
    instances: List[ServiceInstance] = []
    supported = None
    if supported_drm_systems is not None:
        supported = {system.lower() for system in supported_drm_systems}
    for position, instance_el in enumerate(children(service_el, "ServiceInstance")):
        instance = _resolve_instance(doc, instance_el, profile, supported, channel_index)
        if instance is None:
            log.debug("service %s: instance %d dropped", service_id, position)
            continue
        instances.append(instance)
    return instances


def _resolve_instance(
    doc: Document,
    element: ET.Element,
    profile: HowRelatedProfile,
    supported: Optional[set[str]],
    channel_index: Optional[Dict[Triplet, DvbChannel]],
) -> Optional[ServiceInstance]:
    instance = ServiceInstance(
        titles=localized_texts(doc, element, "DisplayName"),
        priority=optional_attribute(element, "priority"),
        content_protection=parse_content_protection(element),
    )

    if supported is not None and instance.content_protection:
        if not any(cp.drm_system_id.lower() in supported for cp in instance.content_protection):
            log.info(
                "dropping instance protected by unsupported DRM systems: %s",
                ", ".join(cp.drm_system_id for cp in instance.content_protection),
            )
            return None

    availability_el = first_of_optional(element, "Availability")
    if availability_el is not None:
        instance.availability = parse_availability(availability_el)

    instance.parallel_apps, instance.media_presentation_apps = linked_applications(
        list(related_links(element, profile))
    )

    if _attach_source(element, instance, channel_index):
        return instance
    if instance.media_presentation_apps:
        log.debug("keeping instance without playable source for its media presentation app")
        return instance
    return None


def _attach_source(
    element: ET.Element,
    instance: ServiceInstance,
    channel_index: Optional[Dict[Triplet, DvbChannel]],
) -> bool:
    dash_el = first_of_optional(element, "DASHDeliveryParameters", deep=True)
    if dash_el is not None:
        url = optional_text(dash_el, "URI", deep=True)
        if url is None:
            log.info("DASH delivery without URI ignored")
            return False
        instance.delivery_kind = DELIVERY_DASH
        instance.dash_url = url
        return True

    if channel_index is None:
        return False
    triplet_el = first_of_optional(element, "DVBTriplet", deep=True)
    if triplet_el is None:
        return False
    try:
        triplet = parse_triplet(triplet_el)
    except ServiceListError as exc:
        log.info("broadcast instance with unusable triplet ignored: %s", exc)
        return False
    channel = channel_index.get(triplet)
    if channel is None:
        log.info("no broadcast channel for triplet %d.%d.%d", *triplet)
        return False
    for tag, kind in BROADCAST_DELIVERY:
        if first_of_optional(element, tag, deep=True) is not None:
            instance.delivery_kind = kind
            instance.dvb_channel = channel
            return True
    log.info("triplet %d.%d.%d has no terrestrial/satellite/cable delivery parameters", *triplet)
    return False


def parse_content_protection(element: ET.Element) -> List[ContentProtection]:
    descriptors: List[ContentProtection] = []
    for protection_el in children(element, "ContentProtection"):
        for declaration in children(protection_el, "DRMSystemId"):
            system_id = optional_text(declaration, "DRMSystemId") or text_of(declaration)
            if system_id is None:
                log.debug("DRMSystemId declaration without system identifier ignored")
                continue
            descriptors.append(
                ContentProtection(
                    drm_system_id=system_id,
                    encryption_scheme=optional_attribute(declaration, "encryptionScheme"),
                    cps_index=optional_attribute(declaration, "cpsIndex"),
                )
            )
    return descriptors


def parse_availability(element: ET.Element) -> List[AvailabilityPeriod]:
    periods: List[AvailabilityPeriod] = []
    for period_el in children(element, "Period"):
        period = AvailabilityPeriod(
            valid_from=parse_instant(optional_attribute(period_el, "validFrom")),
            valid_to=parse_instant(optional_attribute(period_el, "validTo")),
        )
        for interval_el in children(period_el, "Interval"):
            period.intervals.append(
                Interval(
                    days=parse_days(optional_attribute(interval_el, "days")),
                    recurrence=optional_attribute(interval_el, "recurrence"),
                    start_time=parse_time_of_day(optional_attribute(interval_el, "startTime")),
                    end_time=parse_time_of_day(optional_attribute(interval_el, "endTime"), end_bound=True),
                )
            )
        periods.append(period)
    return periods


def parse_triplet(element: ET.Element) -> Triplet:
    return (
        _parse_int(element.get("origNetId"), "DVBTriplet origNetId"),
        _parse_int(element.get("tsId"), "DVBTriplet tsId"),
        _parse_int(element.get("serviceId"), "DVBTriplet serviceId"),
    )


def parse_instant(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise ServiceListError(f"invalid availability instant {value!r}") from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_time_of_day(value: Optional[str], *, end_bound: bool = False) -> Optional[time]:
    """
    Parse ``HH:MM:SS`` with optional ``Z`` or offset into a UTC time of day.

    ``24:00:00`` is midnight at the end of the day. As an ``end_bound`` that
    lands on UTC midnight it yields ``None`` (no upper limit).
    """

    if value is None:
        return None
    text = value[:-1] if value.endswith("Z") else value
    end_of_day = text.startswith(END_OF_DAY)
    if end_of_day:
        text = "00:00:00" + text[len(END_OF_DAY) :]
    try:
        parsed = time.fromisoformat(text)
    except ValueError as exc:
        raise ServiceListError(f"invalid interval time {value!r}") from exc
    if parsed.tzinfo is not None:
        anchored = datetime.combine(date(2000, 1, 3), parsed).astimezone(timezone.utc)
        parsed = anchored.time()
    parsed = parsed.replace(microsecond=0)
    if end_of_day and end_bound and parsed == time(0):
        return None
    return parsed


def parse_days(value: Optional[str]) -> Optional[FrozenSet[int]]:
    if value is None:
        return None
    days = set()
    for token in _DAYS_SPLIT.split(value.strip()):
        if not token:
            continue
        day = _parse_int(token, "interval day")
        if not 1 <= day <= 7:
            raise ServiceListError(f"interval day {day} outside 1..7")
        days.add(day)
    return frozenset(days)


def _parse_int(value: Optional[str], what: str) -> int:
    if value is None:
        raise ServiceListError(f"missing {what}")
    text = value.strip()
    try:
        if text.lower().startswith("0x"):
            return int(text, 16)
        return int(text)
    except ValueError as exc:
        raise ServiceListError(f"invalid {what} {value!r}") from exc
