"""CLI entry point for the mitigation engine."""

from __future__ import annotations

import json
from typing import Any, Callable

import click
from pydantic import ValidationError

from .core.config import MitigationConfig, PolicyOverride, load_settings
from .core.enums import EnforcementLevel, OutcomeStatus, ScanMode
from .core.errors import MitigationError
from .observability.logger import get_logger, setup_logging
from .policy.catalog import load_catalog
from .policy.models import ScanReport
from .policy.register import MitigationRegister

log = get_logger(__name__)

# Separates mitigation and policy in --enable / --disable
_OVERRIDE_SEP = "::"

_STATUS_MARKS = {
    OutcomeStatus.SKIPPED: "-",
    OutcomeStatus.COMPLIANT: "✓",
    OutcomeStatus.APPLIED: "+",
    OutcomeStatus.NON_COMPLIANT: "✗",
    OutcomeStatus.FAILED: "!",
}


def _scan_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by list/audit/enforce."""
    options = [
        click.option("--catalog", required=True, help="Catalog as module:attribute"),
        click.option("--config", default=None, help="Config file path (TOML)"),
        click.option("--level", default=None, help="Enforcement level override"),
        click.option(
            "--enable", multiple=True,
            help="Force a mitigation (or MITIGATION::POLICY) on",
        ),
        click.option(
            "--disable", multiple=True,
            help="Force a mitigation (or MITIGATION::POLICY) off",
        ),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


def _parse_override(raw: str, enforced: bool) -> PolicyOverride:
    mitigation, sep, policy = raw.partition(_OVERRIDE_SEP)
    return PolicyOverride(
        mitigation=mitigation,
        policy=policy if sep else None,
        enforced=enforced,
    )


def _prepare(
    catalog: str,
    config: str | None,
    level: str | None,
    enable: tuple[str, ...],
    disable: tuple[str, ...],
) -> tuple[MitigationConfig, MitigationRegister]:
    """Load settings and catalog, then gate and override every policy."""
    try:
        settings = load_settings(config)
        setup_logging(
            settings.observability.log_level,
            settings.observability.log_format,
        )
        scan = settings.scan.model_copy(deep=True)
        if level is not None:
            scan.enforcement_level = EnforcementLevel.parse(level)
        scan.overrides.extend(_parse_override(name, True) for name in enable)
        scan.overrides.extend(_parse_override(name, False) for name in disable)
        register = load_catalog(catalog)
        register.apply_configuration(scan)
    except (MitigationError, ValidationError) as exc:
        raise click.ClickException(str(exc)) from exc
    return scan, register


def _print_report(report: ScanReport) -> None:
    click.echo(
        f"Scan {report.scan_id} ({report.mode.value}) "
        f"at level {report.enforcement_level.value}"
    )
    for mreport in report.mitigations:
        state = "compliant" if mreport.compliant else "NOT compliant"
        level = mreport.enforcement_level
        suffix = (
            f" [level {level.value}]"
            if level is not None and level != report.enforcement_level
            else ""
        )
        click.echo(f"  {mreport.mitigation}: {state}{suffix}")
        for outcome in mreport.outcomes:
            mark = _STATUS_MARKS[outcome.status]
            line = f"    {mark} {outcome.policy} [{outcome.level.value}] {outcome.status.value}"
            if outcome.reason:
                line += f" ({outcome.reason})"
            click.echo(line)
    counts = ", ".join(f"{k}={v}" for k, v in report.counts().items() if v)
    click.echo(f"Total: {report.total} policies ({counts or 'none'})")


@click.group()
def main() -> None:
    """System hardening mitigation engine."""


@main.command()
def levels() -> None:
    """List enforcement levels, lowest first."""
    for level in EnforcementLevel:
        click.echo(f"{level.rank}  {level.value}")


@main.command("list")
@_scan_options
def list_policies(
    catalog: str,
    config: str | None,
    level: str | None,
    enable: tuple[str, ...],
    disable: tuple[str, ...],
) -> None:
    """Show every policy and whether it is enabled at the chosen level."""
    scan, register = _prepare(catalog, config, level, enable, disable)
    click.echo(f"Enforcement level: {scan.enforcement_level.value}")
    for mitigation in register.mitigations:
        click.echo(mitigation.name)
        for policy in mitigation.policies:
            flag = "on " if policy.is_enforced else "off"
            click.echo(f"  [{flag}] {policy.name} (min {policy.level.value})")


def _run(
    mode: ScanMode,
    catalog: str,
    config: str | None,
    level: str | None,
    enable: tuple[str, ...],
    disable: tuple[str, ...],
    as_json: bool,
) -> None:
    _, register = _prepare(catalog, config, level, enable, disable)
    report = register.run(mode)
    if as_json:
        click.echo(json.dumps(report.model_dump(mode="json"), indent=2))
    else:
        _print_report(report)
    log.info(
        "scan_complete",
        mode=mode.value,
        policies=report.total,
        failures=len(report.failures),
        compliant=report.compliant,
    )
    if not report.compliant:
        raise SystemExit(1)


@main.command()
@_scan_options
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
def audit(
    catalog: str,
    config: str | None,
    level: str | None,
    enable: tuple[str, ...],
    disable: tuple[str, ...],
    as_json: bool,
) -> None:
    """Check enabled policies against the system. Exits 1 if any mismatch."""
    _run(ScanMode.AUDIT, catalog, config, level, enable, disable, as_json)


@main.command()
@_scan_options
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
def enforce(
    catalog: str,
    config: str | None,
    level: str | None,
    enable: tuple[str, ...],
    disable: tuple[str, ...],
    as_json: bool,
) -> None:
    """Apply enabled policies. Exits 1 if any policy could not be applied."""
    _run(ScanMode.ENFORCE, catalog, config, level, enable, disable, as_json)


@main.command()
@_scan_options
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
def scan(
    catalog: str,
    config: str | None,
    level: str | None,
    enable: tuple[str, ...],
    disable: tuple[str, ...],
    as_json: bool,
) -> None:
    """Run in the mode set by the config file (audit by default)."""
    try:
        mode = load_settings(config).scan.mode
    except (MitigationError, ValidationError) as exc:
        raise click.ClickException(str(exc)) from exc
    _run(mode, catalog, config, level, enable, disable, as_json)
