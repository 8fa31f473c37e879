"""
Consistency checks for built catalogues.

The parser does not enforce unique service identifiers or collision-free
channel numbers; this module reports them.

Deutsch:
    Konsistenzprüfungen für erzeugte Kataloge.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Dict, List

from .lcn import default_lcn_table
from .models import ServiceCatalogue

log = logging.getLogger(__name__)


class ValidationError(Exception):
    """Raised when validation fails. / Wird geworfen, wenn die Validierung scheitert."""


@dataclass
class CatalogueStats:
    services: int
    instances: int
    regions: int
    lcn_tables: int
    auto_assigned_lcns: int
    services_without_instances: int
    delivery_kinds: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        return {
            "services": self.services,
            "instances": self.instances,
            "regions": self.regions,
            "lcn_tables": self.lcn_tables,
            "auto_assigned_lcns": self.auto_assigned_lcns,
            "services_without_instances": self.services_without_instances,
            "delivery_kinds": dict(self.delivery_kinds),
        }


@dataclass
class CatalogueReport:
    warnings: List[str]
    stats: CatalogueStats
    duplicate_service_ids: List[str]
    colliding_lcns: Dict[int, List[str]]


def validate_catalogue(catalogue: ServiceCatalogue) -> CatalogueReport:
    warnings: List[str] = []

    id_counts = Counter(service.service_id for service in catalogue.services)
    duplicates = sorted(service_id for service_id, count in id_counts.items() if count > 1)
    if duplicates:
        warnings.append(f"duplicate service identifiers: {', '.join(duplicates)}")

    colliding: Dict[int, List[str]] = {}
    table = default_lcn_table(catalogue.lcn_tables)
    if table is not None:
        by_number: Dict[int, List[str]] = defaultdict(list)
        for entry in table.entries:
            by_number[entry.channel_number].append(entry.service_ref)
        colliding = {number: refs for number, refs in sorted(by_number.items()) if len(refs) > 1}
        for number, refs in colliding.items():
            warnings.append(f"channel number {number} declared for {', '.join(refs)}")

    region_ids = {region.region_id for region in catalogue.regions}
    for index, lcn_table in enumerate(catalogue.lcn_tables):
        unknown = [region for region in lcn_table.target_regions if region_ids and region not in region_ids]
        if unknown:
            warnings.append(f"LCN table {index} targets unknown regions: {', '.join(unknown)}")

    empty = [service.service_id for service in catalogue.services if not service.instances]
    if empty:
        warnings.append(f"{len(empty)} services have no usable instances")

    stats = _build_stats(catalogue, len(empty))
    for warning in warnings:
        log.debug("catalogue warning: %s", warning)
    return CatalogueReport(
        warnings=warnings,
        stats=stats,
        duplicate_service_ids=duplicates,
        colliding_lcns=colliding,
    )


def assert_unique_service_ids(report: CatalogueReport) -> None:
    if report.duplicate_service_ids:
        details = ", ".join(report.duplicate_service_ids[:5])
        raise ValidationError(f"duplicate service identifiers remain: {details}")


def assert_no_lcn_collisions(report: CatalogueReport) -> None:
    if report.colliding_lcns:
        details = ", ".join(str(number) for number in list(report.colliding_lcns)[:5])
        raise ValidationError(f"colliding channel numbers in default LCN table: {details}")


def _build_stats(catalogue: ServiceCatalogue, without_instances: int) -> CatalogueStats:
    kinds: Counter[str] = Counter()
    instances = 0
    for service in catalogue.services:
        for instance in service.instances:
            instances += 1
            kinds[instance.delivery_kind or "application"] += 1
    return CatalogueStats(
        services=len(catalogue.services),
        instances=instances,
        regions=len(catalogue.regions),
        lcn_tables=len(catalogue.lcn_tables),
        auto_assigned_lcns=sum(1 for service in catalogue.services if service.lcn_assigned),
        services_without_instances=without_instances,
        delivery_kinds=dict(kinds),
    )
