"""
Client configuration and broadcast channel maps (YAML).

Deutsch:
    Client-Konfiguration und Rundfunk-Kanallisten (YAML).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

import yaml
from jsonschema import Draft7Validator

from .models import DvbChannel, ParseOptions
from .schemas import CHANNEL_MAP_SCHEMA, CLIENT_SCHEMA, validator_for

log = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when a configuration file is invalid. / Ungültige Konfigurationsdatei."""


@dataclass
class ClientConfig:
    """
    Receiver-side settings: preferred language, location and capabilities.

    Deutsch:
        Empfängerseitige Einstellungen: Sprache, Standort und Fähigkeiten.
    """

    language: Optional[str] = None
    region: Optional[str] = None
    postcode: Optional[str] = None
    drm_systems: Optional[List[str]] = None
    channels: Optional[List[DvbChannel]] = None
    source_path: Optional[Path] = None

    def parse_options(self) -> ParseOptions:
        return ParseOptions(supported_drm_systems=self.drm_systems, channel_map=self.channels)


def load_client_config(path: Union[str, Path]) -> ClientConfig:
    path = Path(path)
    data = _load_yaml(path)
    if data is None:
        data = {}
    _validate(validator_for(CLIENT_SCHEMA), data, path)

    config = ClientConfig(
        language=data.get("language"),
        region=data.get("region"),
        postcode=data.get("postcode"),
        drm_systems=list(data["drm_systems"]) if "drm_systems" in data else None,
        source_path=path,
    )
    channels: Optional[List[DvbChannel]] = None
    if "channels" in data:
        channels = [_coerce_channel(item, path, index) for index, item in enumerate(data["channels"])]
    map_ref = data.get("channel_map")
    if map_ref:
        map_path = Path(map_ref)
        if not map_path.is_absolute():
            map_path = path.parent / map_path
        channels = (channels or []) + load_channel_map(map_path)
    config.channels = channels
    log.debug(
        "loaded client config %s (language=%s, region=%s, drm=%s, channels=%s)",
        path,
        config.language,
        config.region,
        config.drm_systems,
        len(channels) if channels is not None else "-",
    )
    return config


def load_channel_map(path: Union[str, Path]) -> List[DvbChannel]:
    """
    Load a YAML channel map (``channels:`` list of onid/tsid/sid records).

    Deutsch:
        Lädt eine YAML-Kanalliste (onid/tsid/sid-Einträge).
    """

    path = Path(path)
    data = _load_yaml(path)
    _validate(validator_for(CHANNEL_MAP_SCHEMA), data, path)
    channels = [_coerce_channel(item, path, index) for index, item in enumerate(data["channels"])]
    log.info("loaded channel map %s -> %d channels", path, len(channels))
    return channels


def _load_yaml(path: Path) -> Any:
    if not path.exists():
        raise ConfigError(f"configuration file {path} not found")
    try:
        with path.open("r", encoding="utf-8") as fh:
            return yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path} is not valid YAML: {exc}") from exc


def _validate(validator: Draft7Validator, data: Any, path: Path) -> None:
    errors = sorted(validator.iter_errors(data), key=lambda err: [str(part) for part in err.path])
    if errors:
        messages = "; ".join(
            f"{'.'.join(str(part) for part in error.path) or '<root>'} -> {error.message}" for error in errors
        )
        raise ConfigError(f"{path} failed schema validation: {messages}")


def _coerce_channel(item: Mapping[str, Any], path: Path, index: int) -> DvbChannel:
    extra = item.get("extra") or {}
    return DvbChannel(
        original_network_id=_coerce_identifier(item.get("onid"), path, index),
        transport_stream_id=_coerce_identifier(item.get("tsid"), path, index),
        service_id=_coerce_identifier(item.get("sid"), path, index),
        name=item.get("name"),
        extra={str(key): str(value) for key, value in extra.items()},
    )


def _coerce_identifier(value: Any, path: Path, index: int) -> int:
    try:
        if isinstance(value, str) and value.lower().startswith("0x"):
            return int(value, 16)
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{path}: channel {index} has invalid identifier {value!r}") from exc
