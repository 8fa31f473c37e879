"""
Logging setup for the command line.

Library modules only create module loggers; handlers are installed here,
once, when the CLI starts.

Deutsch:
    Logging-Einrichtung für die Kommandozeile. Die Bibliotheksmodule legen
    nur Logger an, Handler werden einmalig beim Start der CLI gesetzt.
"""

from __future__ import annotations

import logging
import os

LOGLEVEL_ENV = "DVBI_CATALOGUE_LOGLEVEL"
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"

# HTTP client libraries log every connection at DEBUG.
QUIET_LOGGERS = ("urllib3", "requests")


def resolve_level(default_level: str = "INFO") -> int:
    """Level from ``DVBI_CATALOGUE_LOGLEVEL`` or ``default_level``; unknown names fall back to INFO."""

    name = (os.getenv(LOGLEVEL_ENV) or default_level).strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(default_level: str = "INFO", *, verbose: bool = False) -> int:
    """
    Configure the root logger and return the effective level.

    ``verbose`` forces DEBUG regardless of the environment.

    Deutsch:
        Setzt das Root-Logging auf und liefert die wirksame Stufe.
    """

    level = logging.DEBUG if verbose else resolve_level(default_level)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root.setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    return level
