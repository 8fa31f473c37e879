"""
Payload loading for the command line: local files or HTTP(S) URLs.

Deutsch:
    Laden von Dokumenten für die Kommandozeile: lokale Dateien oder HTTP(S).
"""

from __future__ import annotations

import logging
import random
import time
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlparse

import requests

from . import __version__

log = logging.getLogger(__name__)

HTTP_RETRY_ATTEMPTS = 4
HTTP_TIMEOUT = 30
HTTP_BACKOFF_BASE = 1.5
USER_AGENT = f"dvbi-catalogue/{__version__}"


class FetchError(Exception):
    """Raised when a payload cannot be loaded. / Dokument konnte nicht geladen werden."""


def is_url(source: Union[str, Path]) -> bool:
    return urlparse(str(source)).scheme in {"http", "https"}


def load_payload(source: Union[str, Path]) -> bytes:
    if is_url(source):
        return fetch_url(str(source))
    path = Path(source)
    if not path.is_file():
        raise FetchError(f"input file {path} not found")
    return path.read_bytes()


def fetch_url(url: str) -> bytes:
    session = _get_http_session()
    last_exc: Optional[Exception] = None
    for attempt in range(HTTP_RETRY_ATTEMPTS):
        try:
            response = session.get(url, timeout=HTTP_TIMEOUT)
        except requests.RequestException as exc:
            log.debug("GET %s failed (attempt %d): %s", url, attempt + 1, exc)
            last_exc = exc
            _sleep_with_jitter(attempt)
            continue
        if response.status_code == 429 or 500 <= response.status_code < 600:
            log.debug("GET %s returned %d (attempt %d)", url, response.status_code, attempt + 1)
            response.close()
            if attempt == HTTP_RETRY_ATTEMPTS - 1:
                raise FetchError(f"http fetch failed for {url}: {response.status_code}")
            _sleep_with_jitter(attempt)
            continue
        if response.status_code >= 400:
            response.close()
            raise FetchError(f"http fetch failed for {url}: {response.status_code}")
        log.info("fetched %s (%d bytes)", url, len(response.content))
        return response.content
    if last_exc:
        raise FetchError(f"http fetch failed for {url}: {last_exc}") from last_exc
    raise FetchError(f"http fetch failed for {url}: exceeded retries")


def _get_http_session() -> requests.Session:
    global _HTTP_SESSION
    if _HTTP_SESSION is None:
        session = requests.Session()
        session.headers.update(
            {
                "User-Agent": USER_AGENT,
                "Accept": "application/xml, text/xml, */*",
                "Accept-Encoding": "gzip, deflate",
            }
        )
        _HTTP_SESSION = session
    return _HTTP_SESSION


_HTTP_SESSION: Optional[requests.Session] = None


def _sleep_with_jitter(attempt: int) -> None:
    base = HTTP_BACKOFF_BASE ** attempt
    time.sleep(random.uniform(0.5, 1.5) * base)
