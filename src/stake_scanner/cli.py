"""CLI entry point for the stake scanner."""

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

import click

from stake_scanner.chain.nodes import NodeConnectionError
from stake_scanner.config import load_config
from stake_scanner.interfaces.store import PersistenceError
from stake_scanner.models.config import ScanMode, ScannerConfig, StorageBackend
from stake_scanner.runner import StakeScanRunner
from stake_scanner.storage import SnapshotRepository, make_store

log = logging.getLogger(__name__)


def _read_address_file(path: str) -> list[str]:
    """One address per line; blank lines and '#' comments are ignored."""
    lines = Path(path).read_text(encoding="utf-8").splitlines()
    return [ln.strip() for ln in lines if ln.strip() and not ln.strip().startswith("#")]


def _fmt(amount: float) -> str:
    return f"{amount:,.4f}"


def _echo_summary(data: dict) -> None:
    """Print a snapshot in its serialized (dashboard) form."""
    stats = data.get("stats") or {}
    click.echo(f"Addresses:    {data.get('successCount', 0)}/{data.get('totalAddresses', 0)} ok")
    failed = data.get("failedAddresses") or []
    if failed:
        click.echo(f"Failed:       {len(failed)}")
    click.echo(f"Records:      {len(data.get('allRecords') or [])} total, "
               f"{len(data.get('activeRecords') or [])} active")
    click.echo(f"Total staked: {_fmt(stats.get('totalStaked', 0))}")
    click.echo(f"  1d pool:    {_fmt(stats.get('totalStaked1d', 0))} ({stats.get('count1d', 0)} stakes)")
    click.echo(f"  15d pool:   {_fmt(stats.get('totalStaked15d', 0))} ({stats.get('count15d', 0)} stakes)")
    click.echo(f"  30d pool:   {_fmt(stats.get('totalStaked30d', 0))} ({stats.get('count30d', 0)} stakes)")
    click.echo("Unlocking within:")
    click.echo(f"  2 days:     {_fmt(stats.get('unlock2d', 0))}")
    click.echo(f"  7 days:     {_fmt(stats.get('unlock7d', 0))}")
    click.echo(f"  15 days:    {_fmt(stats.get('unlock15d', 0))}")
    daily = data.get("dailyStats") or []
    if daily:
        click.echo(f"Days:         {daily[0][0]} .. {daily[-1][0]} ({len(daily)} days)")


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """stake-scanner - snapshot staking-contract deposits for a list of addresses."""
    ctx.ensure_object(dict)
    try:
        cfg = load_config(config_path)
    except ValueError as exc:
        click.echo(f"Error: invalid configuration: {exc}", err=True)
        sys.exit(1)
    ctx.obj["cfg"] = cfg

    level = logging.DEBUG if verbose else getattr(logging, cfg.log_level.upper())
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Scan ───────────────────────────────────────────────


@cli.command()
@click.argument("addresses", nargs=-1)
@click.option("-f", "--file", "address_file", type=click.Path(exists=True, dir_okay=False),
              default=None, help="File with one address per line")
@click.option("--mode", type=click.Choice([m.value for m in ScanMode]),
              default=ScanMode.FULL.value, show_default=True, help="Scan mode")
@click.pass_context
def scan(ctx: click.Context, addresses: tuple[str, ...], address_file: str | None, mode: str) -> None:
    """Scan ADDRESSES (and/or --file) and save the snapshot."""
    cfg: ScannerConfig = ctx.obj["cfg"]

    targets = list(addresses)
    if address_file:
        targets.extend(_read_address_file(address_file))
    targets = list(dict.fromkeys(targets))
    if not targets:
        click.echo("Error: no addresses given.", err=True)
        sys.exit(1)

    async def _scan():
        store = make_store(cfg)
        try:
            await store.initialize()
        except PersistenceError as exc:
            log.error("Store unavailable, scanning without saving: %s", exc)
            return await StakeScanRunner(cfg, repository=None).run_scan(targets, mode)
        try:
            repo = SnapshotRepository(store, cfg.data_key, cfg.address_key)
            runner = StakeScanRunner(cfg, repository=repo)
            return await runner.run_scan(targets, mode)
        finally:
            await store.close()

    click.echo(f"Scanning {len(targets)} addresses (batch size {cfg.scan.batch_size})")
    try:
        report = asyncio.run(_scan())
    except (NodeConnectionError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Node:         {report.endpoint}")
    click.echo(f"LP balance:   {_fmt(float(report.pool_balance))}")
    _echo_summary(report.result.to_dict())
    if not report.persisted:
        click.echo("Warning: snapshot was not saved.", err=True)


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def show(ctx: click.Context) -> None:
    """Show the latest saved snapshot."""
    cfg: ScannerConfig = ctx.obj["cfg"]

    async def _load():
        store = make_store(cfg)
        await store.initialize()
        try:
            return await SnapshotRepository(store, cfg.data_key, cfg.address_key).load_latest()
        finally:
            await store.close()

    try:
        data = asyncio.run(_load())
    except (PersistenceError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if data is None:
        click.echo("No snapshot saved yet.")
        return

    if updated := data.get("lastUpdate"):
        ts = datetime.fromtimestamp(updated / 1000, tz=timezone.utc)
        click.echo(f"Updated:      {ts:%Y-%m-%d %H:%M:%S} UTC")
    _echo_summary(data)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show scanner configuration."""
    cfg: ScannerConfig = ctx.obj["cfg"]
    click.echo(f"Staking:      {cfg.staking_contract}")
    click.echo(f"Token:        {cfg.token_contract}")
    click.echo(f"LP pool:      {cfg.lp_pool}")
    click.echo(f"RPC nodes:    {len(cfg.rpc_endpoints)}")
    for endpoint in cfg.rpc_endpoints:
        click.echo(f"  {endpoint}")
    click.echo(f"Batch:        {cfg.scan.batch_size} addresses, {cfg.scan.batch_delay}s apart")
    click.echo(f"Retries:      {cfg.scan.retry_limit} x {cfg.scan.retry_delay}s (linear)")
    click.echo(f"Time budget:  {cfg.scan.scan_timeout or 'unlimited'}")
    click.echo(f"Storage:      {cfg.storage_backend.value}")
    if cfg.storage_backend == StorageBackend.SQLITE:
        click.echo(f"DB path:      {cfg.db_path}")
    else:
        click.echo(f"KV URL:       {cfg.kv_url or '(not set)'}")
        click.echo(f"KV token:     {'***configured***' if cfg.kv_token else '(not set)'}")


@cli.command()
@click.pass_context
def balance(ctx: click.Context) -> None:
    """Query the LP pool token balance."""
    cfg: ScannerConfig = ctx.obj["cfg"]
    runner = StakeScanRunner(cfg)
    try:
        amount = asyncio.run(runner.pool_balance())
    except NodeConnectionError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    click.echo(f"LP pool {cfg.lp_pool}: {_fmt(float(amount))}")
