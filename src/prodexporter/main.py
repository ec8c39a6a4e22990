"""
prodexporter entry point.

Usage:
    prodexporter --url http://localhost:8080            Export gauges on :9000/metrics
    prodexporter --url http://localhost:8080 snapshot   One-shot table of current stats
    prodexporter fake-server --port 8080                Simulated stats endpoint
"""

from __future__ import annotations

import json
import logging
import sys

import click

from prodexporter import __version__
from prodexporter.collector.production_collector import (
    DEFAULT_INTERVAL_SECONDS,
    ProductionMetricsCollector,
)
from prodexporter.errors import ExporterError
from prodexporter.registry import default_registry


log = logging.getLogger("prodexporter")


def _require_url(ctx) -> str:
    url = ctx.obj["url"]
    if not url:
        click.echo("Please specify the stats endpoint: --url <base address> (or PRODEXPORTER_URL)")
        raise SystemExit(1)
    return url


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="prodexporter")
@click.option("--url", envvar="PRODEXPORTER_URL", default=None,
              help="Base address of the remote monitoring server (e.g. http://localhost:8080)")
@click.option("--port", default=9000, help="Port to serve /metrics on")
@click.option("--interval", default=DEFAULT_INTERVAL_SECONDS, type=click.FloatRange(min=0, min_open=True),
              help="Poll interval in seconds")
@click.option("--timeout", default=5.0, type=click.FloatRange(min=0, min_open=True),
              help="HTTP timeout in seconds")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx, url: str, port: int, interval: float, timeout: float, verbose: bool):
    """prodexporter - factory production stats as Prometheus gauges."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    ctx.ensure_object(dict)
    ctx.obj["url"] = url
    ctx.obj["interval"] = interval
    ctx.obj["timeout"] = timeout

    # No subcommand: run the exporter
    if ctx.invoked_subcommand is None:
        from prometheus_client import start_http_server

        url = _require_url(ctx)
        registry = default_registry()
        collector = ProductionMetricsCollector(
            base_url=url,
            registry=registry,
            interval_seconds=interval,
            timeout_seconds=timeout,
        )

        start_http_server(port, registry=registry.collector_registry)
        click.echo(f"Serving metrics on :{port}/metrics, polling {collector.name()}")
        log.info("Exporter started: port=%d, interval=%.1fs", port, interval)

        task = collector.begin_collecting()
        try:
            while not task.join(timeout=1.0):
                pass
        except KeyboardInterrupt:
            log.info("Interrupted, stopping collector")
        finally:
            collector.close()
        click.echo(f"Stopped after {task.ticks} polls ({task.failures} failed).")


@cli.command()
@click.option("--json", "as_json", is_flag=True, default=False,
              help="Print one JSON object per item instead of a table")
@click.pass_context
def snapshot(ctx, as_json: bool):
    """Fetch the stats endpoint once and print what it reports."""
    from rich.console import Console
    from rich.table import Table
    from prodexporter.registry import MetricRegistry

    url = _require_url(ctx)
    # Private registry: a one-shot read shouldn't touch process-wide gauges
    collector = ProductionMetricsCollector(
        base_url=url,
        registry=MetricRegistry(),
        timeout_seconds=ctx.obj["timeout"],
    )

    try:
        details = collector.fetch_details()
    except ExporterError as e:
        click.echo(f"Couldn't read production stats: {e}", err=True)
        raise SystemExit(1)
    finally:
        collector.close()

    if as_json:
        for detail in details:
            sys.stdout.write(json.dumps(detail.summary()) + "\n")
        sys.stdout.flush()
        return

    console = Console()
    if not details:
        console.print("\n[dim]Endpoint reported no items.[/dim]\n")
        return

    table = Table(show_header=True, header_style="bold cyan", title=collector.name())
    table.add_column("Item")
    table.add_column("Produced/min", justify="right")
    table.add_column("Prod cap", justify="right")
    table.add_column("Prod %", justify="right")
    table.add_column("Consumed/min", justify="right")
    table.add_column("Cons cap", justify="right")
    table.add_column("Cons %", justify="right")

    def fmt(value, suffix=""):
        return "[dim]-[/dim]" if value is None else f"{value:,.1f}{suffix}"

    for d in sorted(details, key=lambda d: d.item_name):
        table.add_row(
            d.item_name,
            fmt(d.current_production),
            fmt(d.production_capacity),
            fmt(d.production_percent, "%"),
            fmt(d.current_consumption),
            fmt(d.consumption_capacity),
            fmt(d.consumption_percent, "%"),
        )

    console.print(table)


@cli.command("fake-server")
@click.option("--host", default="127.0.0.1", help="Interface to bind")
@click.option("--port", default=8080, help="Port to serve /getProdStats on")
@click.option("--seed", default=42, help="Simulator random seed")
def fake_server(host: str, port: int, seed: int):
    """Run a simulated /getProdStats endpoint for local development."""
    from prodexporter.mock.fake_frm_server import run_fake_server

    run_fake_server(host=host, port=port, seed=seed)


if __name__ == "__main__":
    cli()
