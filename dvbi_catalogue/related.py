"""
Related-material links: imagery and linked applications.

The namespace of ``HowRelated``/``MediaLocator`` and the base of the
classification codes depend on the service list profile; ``MediaUri`` is
always a TV-Anytime element.

Deutsch:
    RelatedMaterial-Verweise: Bilder und verknüpfte Anwendungen.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple
from xml.etree import ElementTree as ET

from .models import LinkedApplication
from .xml_nav import Document, children, first_of_optional, optional_attribute, text_of

log = logging.getLogger(__name__)

TVA_NAMESPACE = "urn:tva:metadata:2019"
SERVICE_DISCOVERY_2020_NAMESPACE = "urn:dvb:metadata:servicediscovery:2020"

SERVICE_LIST_IMAGE = "1001.1"
SERVICE_ICON = "1001.2"
OUT_OF_SERVICE_IMAGE = "1000.1"

LINKED_APP_PARALLEL = "urn:dvb:metadata:cs:LinkedApplicationCS:2019:1.1"
LINKED_APP_MEDIA_PRESENTATION = "urn:dvb:metadata:cs:LinkedApplicationCS:2019:1.2"


@dataclass(frozen=True)
class HowRelatedProfile:
    name: str
    namespace: str
    href_base: str

    def href(self, code: str) -> str:
        return self.href_base + code


PROFILE_2019 = HowRelatedProfile(
    name="2019",
    namespace=TVA_NAMESPACE,
    href_base="urn:dvb:metadata:cs:HowRelatedCS:2019:",
)
PROFILE_2020 = HowRelatedProfile(
    name="2020",
    namespace=SERVICE_DISCOVERY_2020_NAMESPACE,
    href_base="urn:dvb:metadata:cs:HowRelatedCS:2020:",
)


def detect_profile(doc: Document) -> HowRelatedProfile:
    if doc.namespace == SERVICE_DISCOVERY_2020_NAMESPACE:
        return PROFILE_2020
    return PROFILE_2019


@dataclass(frozen=True)
class RelatedLink:
    how_related: str
    media_uri: Optional[str] = None
    content_type: Optional[str] = None


def related_links(parent: ET.Element, profile: HowRelatedProfile) -> Iterator[RelatedLink]:
    """Yield the classified ``RelatedMaterial`` children of ``parent``."""

    for material in children(parent, "RelatedMaterial"):
        how_related = first_of_optional(material, "HowRelated", profile.namespace, deep=True)
        href = optional_attribute(how_related, "href") if how_related is not None else None
        if href is None:
            log.debug("skipping RelatedMaterial without HowRelated href")
            continue
        locator = first_of_optional(material, "MediaLocator", profile.namespace, deep=True)
        media_uri = None
        if locator is not None:
            media_uri = first_of_optional(locator, "MediaUri", TVA_NAMESPACE, deep=True)
        yield RelatedLink(
            how_related=href,
            media_uri=text_of(media_uri),
            content_type=optional_attribute(media_uri, "contentType") if media_uri is not None else None,
        )


def media_for(links: List[RelatedLink], href: str) -> Optional[str]:
    for link in links:
        if link.how_related == href and link.media_uri:
            return link.media_uri
    return None


def linked_applications(links: List[RelatedLink]) -> Tuple[List[LinkedApplication], List[LinkedApplication]]:
    parallel: List[LinkedApplication] = []
    media_presentation: List[LinkedApplication] = []
    for link in links:
        if link.how_related not in {LINKED_APP_PARALLEL, LINKED_APP_MEDIA_PRESENTATION}:
            continue
        if not link.media_uri:
            log.debug("linked application %s without MediaUri ignored", link.how_related)
            continue
        app = LinkedApplication(url=link.media_uri, content_type=link.content_type)
        if link.how_related == LINKED_APP_PARALLEL:
            parallel.append(app)
        else:
            media_presentation.append(app)
    return parallel, media_presentation
