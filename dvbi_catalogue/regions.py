"""
Region list parsing and postcode lookup.

Deutsch:
    Einlesen der Regionsliste und Zuordnung von Postleitzahlen.
"""

from __future__ import annotations

import logging
from typing import List, Optional
from xml.etree import ElementTree as ET

from .localized import localized_texts
from .models import Coordinates, PostcodeRange, Region, ServiceCatalogue
from .xml_nav import (
    Document,
    ServiceListError,
    children,
    first_of_optional,
    optional_attribute,
    required_attribute,
    required_text,
    text_of,
    texts_of,
)

log = logging.getLogger(__name__)

MAX_REGION_DEPTH = 4
WILDCARD = "*"


def parse_region_list(doc: Document) -> List[Region]:
    """
    Flatten the document's region hierarchy, parents before children.

    Deutsch:
        Flacht die Regionshierarchie ab (Eltern vor Kindern).
    """

    region_list = first_of_optional(doc.root, "RegionList")
    if region_list is None:
        return []
    regions: List[Region] = []
    for element in children(region_list, "Region"):
        _collect_region(doc, element, 1, regions)
    log.debug("parsed %d regions", len(regions))
    return regions


def _collect_region(doc: Document, element: ET.Element, depth: int, out: List[Region]) -> None:
    if depth > MAX_REGION_DEPTH:
        raise ServiceListError(
            f"region {element.get('regionID')!r} nested deeper than {MAX_REGION_DEPTH} levels"
        )
    out.append(_parse_region(doc, element, depth))
    for child in children(element, "Region"):
        _collect_region(doc, child, depth + 1, out)


def _parse_region(doc: Document, element: ET.Element, depth: int) -> Region:
    region = Region(
        region_id=required_attribute(element, "regionID", "Region"),
        country_codes=optional_attribute(element, "countryCodes"),
        depth=depth,
    )
    name_elements = children(element, "RegionName")
    if len(name_elements) == 1:
        region.name = text_of(name_elements[0])
    elif len(name_elements) > 1:
        region.names = localized_texts(doc, element, "RegionName")
    region.wildcard_postcodes = texts_of(children(element, "WildcardPostcode"))
    region.postcodes = texts_of(children(element, "Postcode"))
    for range_el in children(element, "PostcodeRange"):
        region.postcode_ranges.append(
            PostcodeRange(
                start=required_attribute(range_el, "from", f"PostcodeRange of region {region.region_id}"),
                end=required_attribute(range_el, "to", f"PostcodeRange of region {region.region_id}"),
            )
        )
    for coord_el in children(element, "Coordinates"):
        what = f"coordinates of region {region.region_id}"
        region.coordinates.append(
            Coordinates(
                latitude=required_text(coord_el, "Latitude", f"latitude in {what}"),
                longitude=required_text(coord_el, "Longitude", f"longitude in {what}"),
                radius=required_text(coord_el, "Radius", f"radius in {what}"),
            )
        )
    return region


def match_postcode_range(postcode_range: PostcodeRange, postcode: str) -> bool:
    # Bounds compare as strings; "999" sorts after "1000".
    return postcode_range.start <= postcode <= postcode_range.end


def match_postcode_wildcard(pattern: str, postcode: str) -> bool:
    index = pattern.find(WILDCARD)
    if index == -1:
        return False
    if index == len(pattern) - 1:
        return postcode.startswith(pattern[:-1])
    if index == 0:
        return postcode.endswith(pattern[1:])
    return postcode.startswith(pattern[:index]) and postcode.endswith(pattern[index + 1 :])


def region_matches_postcode(region: Region, postcode: str) -> bool:
    if postcode in region.postcodes:
        return True
    if any(match_postcode_range(item, postcode) for item in region.postcode_ranges):
        return True
    return any(match_postcode_wildcard(item, postcode) for item in region.wildcard_postcodes)


def find_region_for_postcode(catalogue: ServiceCatalogue, postcode: str) -> Optional[Region]:
    for region in catalogue.regions:
        if region_matches_postcode(region, postcode):
            log.debug("postcode %s matched region %s", postcode, region.region_id)
            return region
    return None
