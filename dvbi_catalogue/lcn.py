"""
Logical channel number tables.

Deutsch:
    Tabellen der logischen Kanalnummern (LCN).
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .models import LcnEntry, LcnTable
from .xml_nav import Document, ServiceListError, descendants, required_attribute, texts_of

log = logging.getLogger(__name__)


def parse_lcn_tables(doc: Document) -> List[LcnTable]:
    tables: List[LcnTable] = []
    for index, table_el in enumerate(descendants(doc.root, "LCNTable")):
        table = LcnTable(target_regions=texts_of(list(descendants(table_el, "TargetRegion"))))
        for lcn_el in descendants(table_el, "LCN"):
            service_ref = required_attribute(lcn_el, "serviceRef", f"LCN in table {index}")
            raw_number = required_attribute(lcn_el, "channelNumber", f"LCN {service_ref}")
            try:
                channel_number = int(raw_number)
            except ValueError as exc:
                raise ServiceListError(
                    f"invalid channelNumber {raw_number!r} for service {service_ref}"
                ) from exc
            table.entries.append(LcnEntry(service_ref=service_ref, channel_number=channel_number))
        log.debug(
            "LCN table %d: %d entries, regions=%s",
            index,
            len(table.entries),
            ",".join(table.target_regions) or "-",
        )
        tables.append(table)
    return tables


def default_lcn_table(tables: List[LcnTable]) -> Optional[LcnTable]:
    for table in tables:
        if not table.target_regions:
            return table
    return tables[0] if tables else None
