#!/usr/bin/env python3
"""
govindex CLI

Command-line interface for replaying governance event logs.

Usage:
    govindex replay [events_file] [--config FILE] [--strict] [--json]
    govindex show-config [--config FILE]
"""

import json
import os
from typing import Dict, List, Optional

import click

from ..config import IndexerConfig, load_config
from ..engine import AggregationEngine, EngineOptions, ShardedIndexer
from ..entities import to_decimal
from ..events import Event, read_events
from ..exceptions import ConfigurationError, EventError
from ..logger import set_log_level
from ..metrics import IndexerMetrics


def _load(config_path: Optional[str]) -> IndexerConfig:
    try:
        cfg = load_config(config_path)
        cfg.validate()
    except ConfigurationError as e:
        raise click.ClickException(str(e))
    set_log_level(cfg.indexer.log_level)
    return cfg


def _print_summary(engine: AggregationEngine, title: str) -> None:
    gov = engine.governance
    stats = engine.get_stats()

    click.echo(click.style("═══════════════════════════════════════", fg="cyan"))
    click.echo(click.style(f"  {title}", fg="cyan", bold=True))
    click.echo(click.style("═══════════════════════════════════════", fg="cyan"))
    click.echo(f"Events applied:       {stats['events_processed']}")
    click.echo(f"Events rolled back:   {stats['events_failed']}")
    click.echo(f"Last block:           {stats['last_block']}")
    click.echo()
    click.echo(click.style(f"Governance {gov.id}:", fg="green"))
    click.echo(f"  Token holders:      {gov.current_token_holders}")
    click.echo(f"  Delegates:          {gov.current_delegates}")
    click.echo(f"  Delegated votes:    {to_decimal(gov.delegated_votes_raw)}")
    click.echo(f"  Proposals:          {gov.proposals}")
    click.echo(f"    canceled:         {gov.proposals_canceled}")
    click.echo(f"    queued:           {gov.proposals_queued}")
    click.echo(f"    executed:         {gov.proposals_executed}")
    click.echo(f"  Quorum numerator:   {gov.quorum_numerator}")
    click.echo(f"  Timelock:           {gov.timelock or '-'}")

    faults = stats["faults"]
    click.echo()
    if faults:
        click.echo(click.style(f"Integrity faults ({engine.faults.total}):", fg="yellow"))
        for kind, count in faults.items():
            click.echo(f"  {kind:<26}{count}")
    else:
        click.echo(click.style("No integrity faults", fg="green"))


def _read(path: str) -> List[Event]:
    if not os.path.isfile(path):
        raise click.ClickException(f"Event log not found: {path}")
    try:
        return list(read_events(path))
    except EventError as e:
        raise click.ClickException(f"Failed to read events: {e}")


@click.group()
@click.version_option(version="1.0.0", prog_name="govindex")
def cli():
    """govindex - governance event aggregation engine

    Replays token, delegation, proposal, vote and staking events into
    holder, delegate, proposal and governance entities.
    """
    pass


@cli.command("replay")
@click.argument("events_file", required=False, type=click.Path(exists=True, dir_okay=False))
@click.option("--config", "-c", "config_path", type=click.Path(), help="Path to config.toml")
@click.option("--strict", is_flag=True, help="Reject proposal events with an illegal lifecycle transition")
@click.option("--json", "as_json", is_flag=True, help="Print the full snapshot as JSON")
def replay_cmd(events_file: Optional[str], config_path: Optional[str], strict: bool, as_json: bool):
    """Replay a JSON-lines event log.

    Without EVENTS_FILE the logs come from the [source] section: every
    [source.shards] entry is replayed on its own engine, otherwise
    [source] path is replayed.

    Examples:

        govindex replay data/events.jsonl

        govindex replay data/events.jsonl --strict --json > snapshot.json

        govindex replay --config config.toml
    """
    cfg = _load(config_path)
    options = cfg.engine_options()
    if strict:
        options.strict_lifecycle = True

    if events_file is None and cfg.source.shards:
        _replay_shards(cfg, options, as_json)
        return

    events = _read(events_file or cfg.source.path)

    metrics = IndexerMetrics() if cfg.metrics.enabled else None
    engine = AggregationEngine(options=options, metrics=metrics, shard=str(cfg.indexer.chain_id))
    engine.process(events)

    if as_json:
        click.echo(json.dumps(engine.snapshot(), indent=2))
        return

    _print_summary(engine, f"{cfg.indexer.name} (chain {cfg.indexer.chain_id})")
    if metrics is not None:
        click.echo()
        click.echo(metrics.expose())


def _replay_shards(cfg: IndexerConfig, options: EngineOptions, as_json: bool) -> None:
    streams = {shard: _read(path) for shard, path in sorted(cfg.source.shards.items())}

    metrics: Dict[str, IndexerMetrics] = {}
    if cfg.metrics.enabled:
        metrics = {shard: IndexerMetrics() for shard in streams}

    indexer = ShardedIndexer(options=options, metrics_factory=metrics.get if metrics else None)
    indexer.replay(streams)

    if as_json:
        click.echo(json.dumps(indexer.snapshot(), indent=2))
        return

    for shard, engine in sorted(indexer.shards.items()):
        _print_summary(engine, f"{cfg.indexer.name} (chain {shard})")
        if shard in metrics:
            click.echo()
            click.echo(metrics[shard].expose())
        click.echo()


@cli.command("show-config")
@click.option("--config", "-c", "config_path", type=click.Path(), help="Path to config.toml")
def show_config_cmd(config_path: Optional[str]):
    """Print the resolved configuration as JSON."""
    cfg = _load(config_path)
    click.echo(json.dumps(cfg.to_dict(), indent=2))


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
