from __future__ import annotations

from pathlib import Path

import pytest

from dvbi_catalogue import RegionSelectionError, ServiceListError, parse_service_list, select_region
from dvbi_catalogue.models import ServiceCatalogue

FIXTURE_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture()
def catalogue() -> ServiceCatalogue:
    return parse_service_list((FIXTURE_DIR / "servicelist_2019.xml").read_bytes())


def _numbers(catalogue: ServiceCatalogue) -> dict:
    return {service.service_id.rsplit(":", 1)[-1]: service.lcn for service in catalogue.services}


def test_select_berlin(catalogue: ServiceCatalogue) -> None:
    select_region(catalogue, "DE-BE")
    assert _numbers(catalogue) == {"one": 101, "three": 103, "four": 10, "five": 12, "six": 13}
    three = catalogue.service("tag:example.test,2024:three")
    assert three is not None and not three.lcn_assigned
    five = catalogue.service("tag:example.test,2024:five")
    assert five is not None and five.lcn_assigned


def test_select_hamburg(catalogue: ServiceCatalogue) -> None:
    select_region(catalogue, "DE-HH")
    assert _numbers(catalogue) == {"one": 1, "two": 201, "four": 10, "five": 12, "six": 13}


def test_selection_keeps_unrestricted_services(catalogue: ServiceCatalogue) -> None:
    unrestricted = sum(1 for service in catalogue.services if service.target_regions is None)
    select_region(catalogue, "DE-HH")
    assert len(catalogue.services) >= unrestricted


def test_unknown_region_is_fatal(catalogue: ServiceCatalogue) -> None:
    with pytest.raises(RegionSelectionError, match="XX"):
        select_region(catalogue, "XX")
    assert issubclass(RegionSelectionError, ServiceListError)
    assert len(catalogue.services) == 6


def test_region_without_lcn_table_is_fatal(catalogue: ServiceCatalogue) -> None:
    # DE is a known region but no LCN table targets it
    with pytest.raises(RegionSelectionError):
        select_region(catalogue, "DE")
