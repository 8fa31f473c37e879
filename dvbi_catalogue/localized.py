"""
Language-tagged text extraction.

TV-Anytime inherits ``xml:lang`` from the nearest ancestor that declares it,
so the language of a text node is resolved by walking up the document.

Deutsch:
    Extraktion sprachmarkierter Texte (``xml:lang`` wird vom Vorfahren geerbt).
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence
from xml.etree import ElementTree as ET

from .models import LocalizedText
from .xml_nav import XML_LANG, Document, children, text_of

log = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "default"
MAX_LANGUAGE_DEPTH = 64


def element_language(doc: Document, element: Optional[ET.Element]) -> str:
    current = element
    steps = 0
    while current is not None:
        if steps >= MAX_LANGUAGE_DEPTH:
            log.debug("no xml:lang within %d ancestor levels, using default", MAX_LANGUAGE_DEPTH)
            break
        lang = current.get(XML_LANG)
        if lang:
            return lang
        current = doc.parent(current)
        steps += 1
    return DEFAULT_LANGUAGE


def localized_text(doc: Document, element: ET.Element) -> Optional[LocalizedText]:
    text = text_of(element)
    if text is None:
        return None
    return LocalizedText(lang=element_language(doc, element), text=text)


def localized_texts(doc: Document, parent: ET.Element, name: str) -> List[LocalizedText]:
    values: List[LocalizedText] = []
    for element in children(parent, name):
        value = localized_text(doc, element)
        if value is not None:
            values.append(value)
    return values


def pick_localized(texts: Sequence[LocalizedText], lang: Optional[str]) -> Optional[str]:
    """
    Select the text for ``lang``: a single variant always wins, otherwise an
    exact match, then the ``default`` variant, then the first one.

    Deutsch:
        Wählt den Text für ``lang`` (exakt, dann ``default``, dann der erste).
    """

    if not texts:
        return None
    if len(texts) == 1:
        return texts[0].text
    fallback: Optional[str] = None
    for item in texts:
        if item.lang == lang:
            return item.text
        if item.lang == DEFAULT_LANGUAGE and fallback is None:
            fallback = item.text
    if fallback is not None:
        return fallback
    return texts[0].text
