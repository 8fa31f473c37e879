"""
DVB-I service list catalogue toolkit.

Deutsch:
    Werkzeuge zum Einlesen von DVB-I-Servicelisten in einen Senderkatalog.
"""

from __future__ import annotations

__version__ = "0.3.0"

from .availability import is_available
from .models import DvbChannel, ParseOptions, ServiceCatalogue
from .providers import parse_provider_offerings
from .regions import find_region_for_postcode
from .servicelist import RegionSelectionError, ServiceListError, parse_service_list, select_region

__all__ = [
    "__version__",
    "DvbChannel",
    "ParseOptions",
    "RegionSelectionError",
    "ServiceCatalogue",
    "ServiceListError",
    "find_region_for_postcode",
    "is_available",
    "parse_provider_offerings",
    "parse_service_list",
    "select_region",
]
