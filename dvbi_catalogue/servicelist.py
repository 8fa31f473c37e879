"""
Service list to catalogue transformation and region selection.

Deutsch:
    Umwandlung einer DVB-I-Serviceliste in einen Katalog und Regionsauswahl.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Union
from xml.etree import ElementTree as ET

from .instances import Triplet, index_channel_map, resolve_instances
from .lcn import default_lcn_table, parse_lcn_tables
from .localized import localized_texts
from .models import ContentGuide, DvbChannel, LcnTable, ParseOptions, Service, ServiceCatalogue
from .regions import parse_region_list
from .related import (
    OUT_OF_SERVICE_IMAGE,
    SERVICE_ICON,
    SERVICE_LIST_IMAGE,
    HowRelatedProfile,
    detect_profile,
    linked_applications,
    media_for,
    related_links,
)
from .xml_nav import (
    Document,
    ServiceListError,
    children,
    first_of_optional,
    optional_text,
    parse_document,
    required_text,
    texts_of,
)

log = logging.getLogger(__name__)

__all__ = [
    "RegionSelectionError",
    "ServiceListError",
    "parse_service_list",
    "select_region",
]


class RegionSelectionError(ServiceListError):
    """Raised when no LCN table targets the requested region. / Keine LCN-Tabelle für die Region."""


def parse_service_list(
    payload: Union[str, bytes],
    options: Optional[ParseOptions] = None,
    *,
    supported_drm_systems: Optional[Sequence[str]] = None,
    channel_map: Optional[Sequence[DvbChannel]] = None,
) -> ServiceCatalogue:
    """
    Build a ``ServiceCatalogue`` from a service list payload.

    ``supported_drm_systems`` drops instances protected only by other DRM
    systems; ``channel_map`` enables broadcast (DVB-T/S/C) instances. Keyword
    arguments override the corresponding ``options`` fields.

    Deutsch:
        Erzeugt einen Katalog aus einer Serviceliste. Nicht unterstützte
        DRM-Instanzen werden verworfen; Rundfunkinstanzen benötigen eine
        Kanalliste.
    """

    options = options or ParseOptions()
    if supported_drm_systems is None:
        supported_drm_systems = options.supported_drm_systems
    if channel_map is None:
        channel_map = options.channel_map

    doc = parse_document(payload)
    profile = detect_profile(doc)
    catalogue = ServiceCatalogue(profile=profile.name)
    catalogue.image = media_for(list(related_links(doc.root, profile)), profile.href(SERVICE_LIST_IMAGE))
    catalogue.regions = parse_region_list(doc)
    catalogue.lcn_tables = parse_lcn_tables(doc)

    content_guide = _parse_content_guide(doc)
    channel_index = index_channel_map(channel_map)
    lcn_table = default_lcn_table(catalogue.lcn_tables)

    for code, service_el in enumerate(children(doc.root, "Service")):
        service = _parse_service(
            doc,
            service_el,
            code,
            profile,
            content_guide,
            supported_drm_systems,
            channel_index,
        )
        if lcn_table is not None:
            service.lcn = lcn_table.channel_for(service.service_id)
        catalogue.services.append(service)

    _assign_missing_channel_numbers(catalogue.services, lcn_table)
    log.info(
        "parsed service list (profile %s) -> %d services, %d regions, %d LCN tables",
        profile.name,
        len(catalogue.services),
        len(catalogue.regions),
        len(catalogue.lcn_tables),
    )
    return catalogue


def _parse_content_guide(doc: Document) -> ContentGuide:
    source = first_of_optional(doc.root, "ContentGuideSource")
    if source is None:
        return ContentGuide()
    return ContentGuide(
        schedule_info_uri=_endpoint_uri(source, "ScheduleInfoEndpoint"),
        more_episodes_uri=_endpoint_uri(source, "MoreEpisodesEndpoint"),
        program_info_uri=_endpoint_uri(source, "ProgramInfoEndpoint"),
    )


def _endpoint_uri(source: ET.Element, name: str) -> Optional[str]:
    endpoint = first_of_optional(source, name, deep=True)
    if endpoint is None:
        return None
    return optional_text(endpoint, "URI", deep=True)


def _parse_service(
    doc: Document,
    element: ET.Element,
    code: int,
    profile: HowRelatedProfile,
    content_guide: ContentGuide,
    supported_drm_systems: Optional[Sequence[str]],
    channel_index: Optional[Dict[Triplet, DvbChannel]],
) -> Service:
    title = required_text(element, "ServiceName", f"ServiceName of service #{code}")
    service_id = required_text(element, "UniqueIdentifier", f"UniqueIdentifier of service {title!r}")
    service = Service(
        code=code,
        service_id=service_id,
        title=title,
        titles=localized_texts(doc, element, "ServiceName"),
        providers=localized_texts(doc, element, "ProviderName"),
        content_guide=content_guide,
        content_guide_service_ref=optional_text(element, "ContentGuideServiceRef"),
    )
    target_regions = children(element, "TargetRegion")
    if target_regions:
        service.target_regions = texts_of(target_regions)

    links = list(related_links(element, profile))
    service.image = media_for(links, profile.href(SERVICE_ICON))
    service.out_of_service_image = media_for(links, profile.href(OUT_OF_SERVICE_IMAGE))
    service.parallel_apps, service.media_presentation_apps = linked_applications(links)

    service.instances = resolve_instances(
        doc,
        element,
        profile,
        service_id=service_id,
        supported_drm_systems=supported_drm_systems,
        channel_index=channel_index,
    )
    kinds: List[str] = []
    for instance in service.instances:
        if instance.delivery_kind and instance.delivery_kind not in kinds:
            kinds.append(instance.delivery_kind)
    service.source_types = "/".join(kinds)
    return service


def _assign_missing_channel_numbers(services: List[Service], lcn_table: Optional[LcnTable]) -> None:
    highest = lcn_table.max_channel_number() if lcn_table is not None else 0
    for service in services:
        if service.lcn is not None:
            highest = max(highest, service.lcn)
    for service in services:
        if service.lcn is None:
            highest += 1
            service.lcn = highest
            service.lcn_assigned = True
            log.debug("service %s auto-assigned channel number %d", service.service_id, highest)


def find_lcn_table(catalogue: ServiceCatalogue, region_id: str) -> LcnTable:
    for table in catalogue.lcn_tables:
        if table.applies_to(region_id):
            return table
    raise RegionSelectionError(f"no LCN table found for region {region_id!r}")


def select_region(catalogue: ServiceCatalogue, region_id: str) -> None:
    """
    Narrow ``catalogue.services`` in place to the services valid in
    ``region_id`` and apply that region's channel numbers.

    Deutsch:
        Beschränkt den Katalog auf die in der Region gültigen Services und
        übernimmt deren Kanalnummern.
    """

    table = find_lcn_table(catalogue, region_id)
    selected: List[Service] = []
    for service in catalogue.services:
        if not service.valid_in(region_id):
            continue
        channel_number = table.channel_for(service.service_id)
        if channel_number is not None:
            service.lcn = channel_number
            service.lcn_assigned = False
        selected.append(service)
    log.info("region %s: %d of %d services selected", region_id, len(selected), len(catalogue.services))
    catalogue.services = selected
