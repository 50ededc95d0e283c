"""Main CLI entry point using Typer."""

import json
import logging
import signal
import sys
import threading
from datetime import datetime, timezone
from functools import partial
from typing import Dict, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..cloud.connection import create_connection
from ..collectors.registry import KIND_LABELS, KIND_SPECS, build_sources
from ..errors import ConfigurationError, NotificationError, ServiceUnavailableError
from ..models.ignore import IgnoreSet
from ..models.report import RunReport
from ..models.run_config import DEFAULT_PROTECTION_TAG, DEFAULT_RESOURCE_TTL, RunConfig, split_kinds
from ..prune import FanIn, ResourcePruner
from ..prune.filters import default_predicates
from ..prune.notify import notify_slack
from ..utils.duration import format_duration, parse_duration
from ..utils.logging import setup_logging
from .config import Config

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="osprune",
    help="OpenStack stale resource pruner - find and delete leftover CI resources",
    add_completion=False,
)

# Stdout carries the JSON report, everything for humans goes to stderr
console = Console(stderr=True)

# Global config
config: Optional[Config] = None

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


@app.callback()
def main(
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Config file (default: $OSPRUNE_CONFIG or ~/.config/osprune/config.yaml)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output except errors"),
):
    """OpenStack stale resource pruner."""
    global config

    try:
        config = Config.load(config_file)
    except (OSError, ValueError) as e:
        console.print(f"✗ Cannot load configuration: {e}", style="bold red")
        raise typer.Exit(code=1)

    log_level = "ERROR" if quiet else ("DEBUG" if verbose else config.log_level)
    setup_logging(level=log_level, verbose=verbose)


@app.command()
def version():
    """Show version information."""
    import openstack.version

    from .. import __version__

    console.print(f"osprune version {__version__}")
    console.print(f"Python {sys.version.split()[0]}")
    console.print(f"openstacksdk {openstack.version.__version__}")


@app.command()
def kinds():
    """List the resource kinds that can be pruned."""
    table = Table(title="Resource kinds")
    table.add_column("Key", style="cyan")
    table.add_column("Label")
    table.add_column("Service")
    table.add_column("Optional")

    for spec in KIND_SPECS:
        table.add_row(spec.key, spec.label, spec.service_type, "yes" if spec.optional else "no")

    console.print(table)


@app.command()
def run(
    resource_ttl: Optional[str] = typer.Option(
        None, "--resource-ttl", "-t", help="Minimum age of resources to prune, e.g. 7h or 90m (default: 7h)"
    ),
    dry_run: bool = typer.Option(True, "--dry-run/--no-dry-run", help="Only report stale resources"),
    include: Optional[str] = typer.Option(
        None, "--include", help="Comma-separated kinds to process exclusively (takes precedence over --exclude)"
    ),
    exclude: Optional[str] = typer.Option(None, "--exclude", help="Comma-separated kinds to skip"),
    slack_hook: Optional[str] = typer.Option(
        None, "--slack-hook", help="Slack webhook notified of failed deletions (default: $SLACK_HOOK)"
    ),
    ignore_file: Optional[str] = typer.Option(None, "--ignore-file", help="YAML or JSON list of resources to keep"),
    cloud: Optional[str] = typer.Option(None, "--cloud", help="clouds.yaml entry (default: $OS_CLOUD)"),
    protection_tag: Optional[str] = typer.Option(
        None, "--protection-tag", help=f"Tag that keeps a resource (default: {DEFAULT_PROTECTION_TAG})"
    ),
    cluster_label: Optional[str] = typer.Option(
        None, "--cluster-label", help="Label prefixed to notifications (default: $CLUSTER_TYPE)"
    ),
):
    """Find stale resources and, with --no-dry-run, delete them.

    Prints the JSON run report to stdout. Exit codes: 0 success, 1 invalid
    configuration or missing required service, 2 notification failure,
    3 report output failure.
    """
    defaults = config or Config.load()

    ttl_value = resource_ttl or defaults.resource_ttl
    try:
        ttl = parse_duration(ttl_value) if ttl_value else DEFAULT_RESOURCE_TTL
    except ValueError as e:
        console.print(f"✗ Invalid resource TTL: {e}", style="bold red")
        raise typer.Exit(code=1)

    run_config = RunConfig(
        resource_ttl=ttl,
        dry_run=dry_run,
        include=split_kinds(include),
        exclude=split_kinds(exclude),
        slack_hook=slack_hook or defaults.slack_hook,
        protection_tag=protection_tag or defaults.protection_tag or DEFAULT_PROTECTION_TAG,
        cluster_label=cluster_label or defaults.cluster_label,
        ignore_file=ignore_file or defaults.ignore_file,
        cloud=cloud or defaults.cloud,
    )

    try:
        run_config.validate()
        ignore_set = IgnoreSet.load(run_config.ignore_file, KIND_LABELS) if run_config.ignore_file else IgnoreSet()
    except ConfigurationError as e:
        console.print(f"✗ {e}", style="bold red")
        raise typer.Exit(code=1)
    except (OSError, ValueError) as e:
        console.print(f"✗ Cannot load ignore file: {e}", style="bold red")
        raise typer.Exit(code=1)

    verb = "Listing" if run_config.dry_run else "Deleting"
    logger.info(f"{verb} everything older than {format_duration(run_config.resource_ttl)}")

    stop_event = threading.Event()
    previous_handlers = _install_stop_handlers(stop_event)
    try:
        report, fan_in = _prune(run_config, ignore_set, stop_event)
    finally:
        _restore_handlers(previous_handlers)

    try:
        _write_report(report)
    except OSError as e:
        console.print(f"✗ Cannot write report: {e}", style="bold red")
        raise typer.Exit(code=3)

    _print_summary(report, fan_in)

    if report.has_failures and run_config.slack_hook:
        try:
            notify_slack(run_config.slack_hook, report, run_config.cluster_label)
        except NotificationError as e:
            console.print(f"✗ {e}", style="bold red")
            raise typer.Exit(code=2)


def _prune(run_config: RunConfig, ignore_set: IgnoreSet, stop_event: threading.Event):
    """List the selected kinds and run one pruning pass over the merged stream."""
    started_at = datetime.now(timezone.utc)

    try:
        sources = build_sources(run_config.selected_kinds(), partial(create_connection, run_config.cloud))
    except ServiceUnavailableError as e:
        console.print(f"✗ {e}", style="bold red")
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"✗ Cannot connect to OpenStack: {e}", style="bold red")
        logger.exception("Error connecting to OpenStack")
        raise typer.Exit(code=1)

    fan_in = FanIn(sources, stop_event=stop_event)
    pruner = ResourcePruner(
        default_predicates(run_config, started_at, ignore_set),
        dry_run=run_config.dry_run,
        stop_event=stop_event,
    )
    report = pruner.run(fan_in, started_at=started_at)
    return report, fan_in


def _install_stop_handlers(stop_event: threading.Event) -> Dict[int, object]:
    """Turn SIGINT/SIGTERM into a stop request. Returns the replaced handlers."""

    def handler(signum, frame):
        logger.warning(f"Received signal {signum}, stopping after the current resource")
        stop_event.set()

    previous = {}
    for signum in STOP_SIGNALS:
        previous[signum] = signal.signal(signum, handler)
    return previous


def _restore_handlers(previous: Dict[int, object]) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler)


def _write_report(report: RunReport) -> None:
    indent = 2 if sys.stdin is not None and sys.stdin.isatty() else None
    sys.stdout.write(json.dumps(report.to_dict(), indent=indent) + "\n")
    sys.stdout.flush()


def _print_summary(report: RunReport, fan_in: FanIn) -> None:
    """Print per-kind totals to stderr."""
    counts: Dict[str, Dict[str, int]] = {}
    for column, entries in (
        ("found", report.found),
        ("deleted", report.deleted),
        ("failed", report.failed_to_delete),
    ):
        for entry in entries:
            counts.setdefault(entry.resource_type, {}).setdefault(column, 0)
            counts[entry.resource_type][column] += 1

    table = Table(title="Pruning summary")
    table.add_column("Kind", style="cyan")
    table.add_column("Listed", justify="right")
    table.add_column("Stale", justify="right")
    table.add_column("Deleted", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")

    for key, listed in fan_in.counts.items():
        label = KIND_LABELS.get(key, key)
        row = counts.get(label, {})
        listed_text = f"{listed} (incomplete)" if key in fan_in.incomplete else str(listed)
        table.add_row(
            label,
            listed_text,
            str(row.get("found", 0)),
            str(row.get("deleted", 0)),
            str(row.get("failed", 0)),
        )

    console.print(table)

    if fan_in.incomplete:
        console.print(
            f"⚠ Listing ended early for: {', '.join(sorted(fan_in.incomplete))}",
            style="yellow",
        )


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()
