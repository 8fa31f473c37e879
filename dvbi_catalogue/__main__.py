"""Click-based command line entry point for dvbi-catalogue."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

import click

from . import __version__
from .availability import is_available
from .config import ClientConfig, ConfigError, load_channel_map, load_client_config
from .fetch import FetchError, load_payload
from .labels import language_name
from .localized import pick_localized
from .logging_conf import configure_logging
from .models import ParseOptions, ServiceCatalogue
from .providers import parse_provider_offerings
from .regions import find_region_for_postcode
from .servicelist import ServiceListError, parse_service_list, select_region
from .validate import validate_catalogue

log = logging.getLogger(__name__)

_SOURCE = click.argument("source")
_CONFIG = click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(path_type=Path, exists=True, dir_okay=False),
    help="Client configuration (YAML).",
)
_DRM = click.option(
    "--drm-system",
    "drm_systems",
    multiple=True,
    help="Supported DRM system identifier (repeatable).",
)
_CHANNEL_MAP = click.option(
    "--channel-map",
    "channel_map_path",
    default=None,
    type=click.Path(path_type=Path, exists=True, dir_okay=False),
    help="YAML channel map enabling DVB-T/S/C instances.",
)
_LANG = click.option("--lang", default=None, help="Preferred language for titles.")


@click.group(help="DVB-I service list catalogue toolkit")
@click.version_option(__version__)
@click.option("--verbose", is_flag=True, help="Enable verbose logging output.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """
    Root CLI group configuring logging before subcommands execute.
    """

    level = configure_logging(verbose=verbose)
    log.debug("logging at %s", logging.getLevelName(level))
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command("parse")
@_SOURCE
@_CONFIG
@_DRM
@_CHANNEL_MAP
@_LANG
@click.option("--region", default=None, help="Restrict the catalogue to this region identifier.")
@click.option("--postcode", default=None, help="Resolve the region from a postcode.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the catalogue as JSON.")
def cli_parse(
    source: str,
    config_path: Optional[Path],
    drm_systems: Tuple[str, ...],
    channel_map_path: Optional[Path],
    lang: Optional[str],
    region: Optional[str],
    postcode: Optional[str],
    as_json: bool,
) -> None:
    """Build the catalogue of a service list and list its services."""

    config = _load_config(config_path)
    catalogue = _build_catalogue(source, _parse_options(config, drm_systems, channel_map_path))
    lang = lang or config.language
    region = region or config.region
    postcode = postcode or config.postcode
    if region is None and postcode is not None:
        matched = find_region_for_postcode(catalogue, postcode)
        if matched is None:
            raise click.ClickException(f"no region matches postcode {postcode}")
        region = matched.region_id
    if region is not None:
        try:
            select_region(catalogue, region)
        except ServiceListError as exc:
            raise click.ClickException(str(exc)) from exc

    report = validate_catalogue(catalogue)
    for warning in report.warnings:
        log.warning("%s", warning)

    if as_json:
        payload = catalogue.to_dict()
        payload["stats"] = report.stats.to_dict()
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return
    if lang:
        click.echo(f"Language: {language_name(lang)}")
    for service in sorted(catalogue.services, key=lambda svc: (svc.lcn or 0, svc.code)):
        title = pick_localized(service.titles, lang) or service.title
        kinds = service.source_types or "-"
        click.echo(f"{service.lcn:>4}  {title}  [{kinds}]  {service.provider or ''}".rstrip())


@cli.command("postcode")
@_SOURCE
@click.argument("postcode")
@_LANG
def cli_postcode(source: str, postcode: str, lang: Optional[str]) -> None:
    """Find the region a postcode belongs to."""

    catalogue = _build_catalogue(source, ParseOptions())
    region = find_region_for_postcode(catalogue, postcode)
    if region is None:
        raise click.ClickException(f"no region matches postcode {postcode}")
    name = region.name or pick_localized(region.names, lang) or ""
    click.echo(f"{region.region_id}  {name}".rstrip())


@cli.command("availability")
@_SOURCE
@_CONFIG
@_DRM
@_CHANNEL_MAP
@_LANG
@click.option("--at", "at", default=None, help="ISO-8601 instant to evaluate (default: now).")
def cli_availability(
    source: str,
    config_path: Optional[Path],
    drm_systems: Tuple[str, ...],
    channel_map_path: Optional[Path],
    lang: Optional[str],
    at: Optional[str],
) -> None:
    """Show which service instances are available at a given instant."""

    config = _load_config(config_path)
    catalogue = _build_catalogue(source, _parse_options(config, drm_systems, channel_map_path))
    lang = lang or config.language
    now = _parse_at(at)
    for service in catalogue.services:
        title = pick_localized(service.titles, lang) or service.title
        click.echo(f"{service.lcn:>4}  {title}")
        for position, instance in enumerate(service.instances):
            label = pick_localized(instance.titles, lang) or f"instance {position}"
            state = "available" if is_available(instance, now) else "unavailable"
            target = instance.dash_url or (instance.dvb_channel.name if instance.dvb_channel else None) or "-"
            click.echo(f"      {label}  {instance.delivery_kind or 'application'}  {target}  {state}")


@cli.command("providers")
@_SOURCE
def cli_providers(source: str) -> None:
    """List the service lists offered in a provider directory."""

    try:
        offerings = parse_provider_offerings(load_payload(source))
    except (FetchError, ServiceListError) as exc:
        raise click.ClickException(str(exc)) from exc
    for offering in offerings:
        click.echo(offering.name or "(unnamed provider)")
        for item in offering.service_lists:
            click.echo(f"  {item.name}  {item.url}")


def _load_config(config_path: Optional[Path]) -> ClientConfig:
    if config_path is None:
        return ClientConfig()
    try:
        return load_client_config(config_path)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


def _parse_options(
    config: ClientConfig,
    drm_systems: Sequence[str],
    channel_map_path: Optional[Path],
) -> ParseOptions:
    options = config.parse_options()
    if drm_systems:
        options.supported_drm_systems = list(drm_systems)
    if channel_map_path is not None:
        try:
            options.channel_map = load_channel_map(channel_map_path)
        except ConfigError as exc:
            raise click.ClickException(str(exc)) from exc
    return options


def _build_catalogue(source: str, options: ParseOptions) -> ServiceCatalogue:
    try:
        return parse_service_list(load_payload(source), options)
    except (FetchError, ServiceListError) as exc:
        raise click.ClickException(str(exc)) from exc


def _parse_at(value: Optional[str]) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise click.BadParameter(f"invalid instant {value!r}", param_hint="--at") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def main(argv: Optional[Iterable[str]] = None) -> int:
    """
    Entry point returning an exit code for setuptools console scripts.
    """

    argv_list = list(argv or sys.argv[1:])
    try:
        cli.main(args=argv_list, prog_name="dvbi-catalogue", standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return 1
    except SystemExit as exc:
        return int(exc.code or 0)
    return 0


if __name__ == "__main__":
    sys.exit(main())
