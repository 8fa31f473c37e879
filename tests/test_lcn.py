from __future__ import annotations

from pathlib import Path

import pytest

from dvbi_catalogue.lcn import default_lcn_table, parse_lcn_tables
from dvbi_catalogue.models import LcnEntry, LcnTable
from dvbi_catalogue.xml_nav import ServiceListError, parse_document

FIXTURE_DIR = Path(__file__).parent / "fixtures"


def test_parse_lcn_tables() -> None:
    doc = parse_document((FIXTURE_DIR / "servicelist_2019.xml").read_bytes())
    tables = parse_lcn_tables(doc)

    assert [table.target_regions for table in tables] == [[], ["DE-BE"], ["DE-HH"]]
    assert tables[0].entries[0] == LcnEntry("tag:example.test,2024:one", 1)
    assert tables[1].channel_for("tag:example.test,2024:three") == 103
    assert tables[1].channel_for("tag:example.test,2024:two") is None
    assert tables[2].applies_to("DE-HH")
    assert not tables[0].applies_to("DE-HH")
    assert tables[0].max_channel_number() == 10


def test_lcn_requires_numeric_channel_number() -> None:
    doc = parse_document('<ServiceList><LCNTableList><LCNTable><LCN serviceRef="a" channelNumber="x"/></LCNTable></LCNTableList></ServiceList>')
    with pytest.raises(ServiceListError, match="channelNumber"):
        parse_lcn_tables(doc)


def test_lcn_requires_attributes() -> None:
    doc = parse_document('<ServiceList><LCNTableList><LCNTable><LCN channelNumber="4"/></LCNTable></LCNTableList></ServiceList>')
    with pytest.raises(ServiceListError, match="serviceRef"):
        parse_lcn_tables(doc)


def test_default_lcn_table_prefers_unscoped() -> None:
    scoped = LcnTable(entries=[LcnEntry("a", 5)], target_regions=["r1"])
    unscoped = LcnTable(entries=[LcnEntry("a", 1)])
    assert default_lcn_table([scoped, unscoped]) is unscoped
    assert default_lcn_table([scoped]) is scoped
    assert default_lcn_table([]) is None
