"""
JSON schemas for the YAML files read by ``dvbi_catalogue.config``.

Deutsch:
    JSON-Schemata für die YAML-Dateien der Client-Konfiguration.
"""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any, Dict

from jsonschema import Draft7Validator

CLIENT_SCHEMA = "client.schema.json"
CHANNEL_MAP_SCHEMA = "channelmap.schema.json"

__all__ = ["CHANNEL_MAP_SCHEMA", "CLIENT_SCHEMA", "load_schema", "validator_for"]


def load_schema(name: str) -> Dict[str, Any]:
    return json.loads(resources.files(__name__).joinpath(name).read_text(encoding="utf-8"))


@lru_cache(maxsize=None)
def validator_for(name: str) -> Draft7Validator:
    """Checked, cached validator for a bundled schema."""

    schema = load_schema(name)
    Draft7Validator.check_schema(schema)
    return Draft7Validator(schema)
