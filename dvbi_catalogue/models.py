"""
Shared data models for the service list catalogue.

Deutsch:
    Gemeinsame Datenmodelle für den Servicelisten-Katalog.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, time
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Tuple

DeliveryKind = str  # "DVB-DASH", "DVB-T", "DVB-S", "DVB-C"

DELIVERY_DASH: DeliveryKind = "DVB-DASH"
DELIVERY_TERRESTRIAL: DeliveryKind = "DVB-T"
DELIVERY_SATELLITE: DeliveryKind = "DVB-S"
DELIVERY_CABLE: DeliveryKind = "DVB-C"


@dataclass(frozen=True)
class LocalizedText:
    lang: str
    text: str


@dataclass(frozen=True)
class PostcodeRange:
    start: str
    end: str


@dataclass(frozen=True)
class Coordinates:
    latitude: str
    longitude: str
    radius: str


@dataclass
class Region:
    """
    Targeting region, flattened out of the nested region list.

    Deutsch:
        Zielregion, aus der verschachtelten Regionsliste abgeflacht.
    """

    region_id: str
    country_codes: Optional[str] = None
    name: Optional[str] = None
    names: List[LocalizedText] = field(default_factory=list)
    postcodes: List[str] = field(default_factory=list)
    postcode_ranges: List[PostcodeRange] = field(default_factory=list)
    wildcard_postcodes: List[str] = field(default_factory=list)
    coordinates: List[Coordinates] = field(default_factory=list)
    depth: int = 1


@dataclass(frozen=True)
class LcnEntry:
    service_ref: str
    channel_number: int


@dataclass
class LcnTable:
    """
    Logical channel numbers, optionally scoped to target regions.

    Deutsch:
        Logische Kanalnummern, optional auf Zielregionen beschränkt.
    """

    entries: List[LcnEntry] = field(default_factory=list)
    target_regions: List[str] = field(default_factory=list)

    def channel_for(self, service_ref: str) -> Optional[int]:
        for entry in self.entries:
            if entry.service_ref == service_ref:
                return entry.channel_number
        return None

    def applies_to(self, region_id: str) -> bool:
        return region_id in self.target_regions

    def max_channel_number(self) -> int:
        return max((entry.channel_number for entry in self.entries), default=0)


@dataclass(frozen=True)
class ContentProtection:
    drm_system_id: str
    encryption_scheme: Optional[str] = None
    cps_index: Optional[str] = None


@dataclass(frozen=True)
class LinkedApplication:
    url: str
    content_type: Optional[str] = None


@dataclass(frozen=True)
class Interval:
    days: Optional[FrozenSet[int]] = None
    recurrence: Optional[str] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None


@dataclass
class AvailabilityPeriod:
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    intervals: List[Interval] = field(default_factory=list)


@dataclass(frozen=True)
class DvbChannel:
    """
    Broadcast channel record known to the client, keyed by its DVB triplet.

    Deutsch:
        Dem Client bekannter Rundfunkkanal, adressiert über das DVB-Triplet.
    """

    original_network_id: int
    transport_stream_id: int
    service_id: int
    name: Optional[str] = None
    extra: Dict[str, str] = field(default_factory=dict, hash=False, compare=False)

    @property
    def triplet(self) -> Tuple[int, int, int]:
        return (self.original_network_id, self.transport_stream_id, self.service_id)


@dataclass
class ServiceInstance:
    """
    One way of obtaining a service: a DASH URL or a tuned broadcast channel.

    Deutsch:
        Eine Bezugsquelle eines Services: DASH-URL oder Rundfunkkanal.
    """

    titles: List[LocalizedText] = field(default_factory=list)
    priority: Optional[str] = None
    content_protection: List[ContentProtection] = field(default_factory=list)
    availability: Optional[List[AvailabilityPeriod]] = None
    parallel_apps: List[LinkedApplication] = field(default_factory=list)
    media_presentation_apps: List[LinkedApplication] = field(default_factory=list)
    delivery_kind: Optional[DeliveryKind] = None
    dash_url: Optional[str] = None
    dvb_channel: Optional[DvbChannel] = None


@dataclass(frozen=True)
class ContentGuide:
    schedule_info_uri: Optional[str] = None
    more_episodes_uri: Optional[str] = None
    program_info_uri: Optional[str] = None


@dataclass
class Service:
    """
    Service (channel) entry of the catalogue.

    Deutsch:
        Service-/Sendereintrag des Katalogs.
    """

    code: int
    service_id: str
    title: str
    titles: List[LocalizedText] = field(default_factory=list)
    providers: List[LocalizedText] = field(default_factory=list)
    target_regions: Optional[List[str]] = None
    image: Optional[str] = None
    out_of_service_image: Optional[str] = None
    content_guide: ContentGuide = field(default_factory=ContentGuide)
    content_guide_service_ref: Optional[str] = None
    lcn: Optional[int] = None
    lcn_assigned: bool = False
    instances: List[ServiceInstance] = field(default_factory=list)
    source_types: str = ""
    parallel_apps: List[LinkedApplication] = field(default_factory=list)
    media_presentation_apps: List[LinkedApplication] = field(default_factory=list)

    @property
    def provider(self) -> Optional[str]:
        return self.providers[0].text if self.providers else None

    def valid_in(self, region_id: str) -> bool:
        return self.target_regions is None or region_id in self.target_regions


@dataclass
class ServiceCatalogue:
    """
    Complete catalogue built from one service list document.

    Deutsch:
        Vollständiger Katalog aus einem Servicelisten-Dokument.
    """

    services: List[Service] = field(default_factory=list)
    regions: List[Region] = field(default_factory=list)
    lcn_tables: List[LcnTable] = field(default_factory=list)
    image: Optional[str] = None
    profile: str = "2019"

    def service(self, service_id: str) -> Optional[Service]:
        for service in self.services:
            if service.service_id == service_id:
                return service
        return None

    def to_dict(self) -> Dict[str, Any]:
        return _plain(self)


@dataclass(frozen=True)
class ServiceListOffering:
    name: str
    url: str


@dataclass
class ProviderOffering:
    name: Optional[str] = None
    service_lists: List[ServiceListOffering] = field(default_factory=list)


@dataclass
class ParseOptions:
    """
    Caller-supplied inputs controlling instance resolution.

    Deutsch:
        Vom Aufrufer gelieferte Eingaben für die Instanzauflösung.
    """

    supported_drm_systems: Optional[Sequence[str]] = None
    channel_map: Optional[Sequence[DvbChannel]] = None


def _plain(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {item.name: _plain(getattr(value, item.name)) for item in fields(value)}
    if isinstance(value, (frozenset, set)):
        return sorted(_plain(item) for item in value)
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, (datetime, time)):
        return value.isoformat()
    return value
