"""
Human-readable labels for codes found in service lists and programme metadata.

Deutsch:
    Lesbare Bezeichnungen für Codes aus Servicelisten und Programmdaten.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

LANGUAGE_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "en": "English",
        "de": "Deutsch",
        "fi": "Suomi",
        "zh": "Chinese",
    }
)

CREDIT_ROLES: Mapping[str, str] = MappingProxyType(
    {
        "urn:tva:metadata:cs:TVARoleCS:2011:V20": "Production Company",
        "urn:tva:metadata:cs:TVARoleCS:2011:AD6": "Presenter",
        "urn:mpeg:mpeg7:cs:RoleCS:2001:ACTOR": "Actor",
    }
)

PARENTAL_RATINGS: Mapping[str, str] = MappingProxyType(
    {
        "urn:fvc:metadata:cs:ContentRatingCS:2014-07:no_parental_controls": "None",
        "urn:fvc:metadata:cs:ContentRatingCS:2014-07:fifteen": "15",
    }
)


def language_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code, code)
