"""
Service list discovery (provider directory) parsing.

Deutsch:
    Einlesen des Anbieterverzeichnisses (Service List Discovery).
"""

from __future__ import annotations

import logging
from typing import List, Union

from .models import ProviderOffering, ServiceListOffering
from .xml_nav import descendants, first_of_optional, first_of_required, parse_document, required_text, text_of

log = logging.getLogger(__name__)

SLD_NAMESPACE = "urn:dvb:metadata:servicelistdiscovery:2019"


def parse_provider_offerings(payload: Union[str, bytes]) -> List[ProviderOffering]:
    doc = parse_document(payload)
    offerings: List[ProviderOffering] = []
    for offering_el in descendants(doc.root, "ProviderOffering", SLD_NAMESPACE):
        offering = ProviderOffering()
        provider_el = first_of_optional(offering_el, "Provider", SLD_NAMESPACE, deep=True)
        if provider_el is not None:
            offering.name = text_of(first_of_optional(provider_el, "Name", SLD_NAMESPACE, deep=True))
        for list_el in descendants(offering_el, "ServiceListOffering", SLD_NAMESPACE):
            name = required_text(list_el, "ServiceListName", "ServiceListName", SLD_NAMESPACE, deep=True)
            uri_el = first_of_required(
                list_el, "ServiceListURI", f"ServiceListURI of {name!r}", SLD_NAMESPACE, deep=True
            )
            url = required_text(uri_el, "URI", f"URI of service list {name!r}", deep=True)
            offering.service_lists.append(ServiceListOffering(name=name, url=url))
        offerings.append(offering)
    log.info("parsed provider directory -> %d providers", len(offerings))
    return offerings
