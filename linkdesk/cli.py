#!/usr/bin/env python3
#
# linkdesk/cli.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Maintenance commands: database setup, log retention, whitelist seeding."""

from __future__ import annotations

import click

from .db import sqlite as sqlite_db
from .utils.config import Config, ConfigValidationError, load_config
from .utils.crypto import hash_password
from .utils.network import is_valid_ip


def _format_bytes(size: int) -> str:
	for unit, factor in (("GB", 1024 ** 3), ("MB", 1024 ** 2), ("KB", 1024)):
		if size >= factor:
			return f"{size / factor:.2f} {unit}"
	return f"{size} bytes"


def _config(ctx: click.Context) -> Config:
	"""Load the configuration once per invocation; the password is not needed here."""
	root = ctx.find_root()
	if root.obj is None:
		try:
			root.obj = load_config(require_password=False)
		except ConfigValidationError as exc:
			raise click.ClickException(str(exc)) from exc
	return root.obj


def _open_db(ctx: click.Context):
	"""Open the configured database with the schema in place."""
	cfg = _config(ctx)
	conn = sqlite_db.connect(cfg.db_path)
	sqlite_db.init_schema(conn)
	ctx.call_on_close(lambda: sqlite_db.close_connection(conn))
	return conn


@click.group()
def cli() -> None:
	"""LinkDesk maintenance commands."""


@cli.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
	"""Create all tables and indexes (safe to run repeatedly)."""
	cfg = _config(ctx)
	conn = _open_db(ctx)
	click.secho(f"\n✅  Database initialised: {cfg.db_path}", fg="green")
	click.echo("\nTables:")
	for table in sqlite_db.list_tables(conn):
		click.echo(f"  - {table}")
	click.echo(f"\nDatabase size: {_format_bytes(cfg.db_path.stat().st_size)}")


@cli.command("prune-logs")
@click.option("--days", type=click.IntRange(min=0), default=None, help="Keep this many days (default: configured retention).")
@click.pass_context
def prune_logs(ctx: click.Context, days: int | None) -> None:
	"""Delete login-log entries older than the retention window."""
	cfg = _config(ctx)
	days = cfg.log_retention_days if days is None else days
	deleted = sqlite_db.prune_logins(_open_db(ctx), days)
	click.echo(f"Deleted {deleted} login log entries older than {days} days.")


@cli.command("whitelist-add")
@click.argument("ip_address")
@click.option("--description", default="", help="Free-text note shown in the admin list.")
@click.option("--added-by", default="cli", show_default=True)
@click.pass_context
def whitelist_add(ctx: click.Context, ip_address: str, description: str, added_by: str) -> None:
	"""Add or refresh a whitelisted IP address."""
	ip_address = ip_address.strip()
	if not is_valid_ip(ip_address):
		raise click.BadParameter("Invalid IP address format", param_hint="IP_ADDRESS")
	entry_id = sqlite_db.add_whitelist_ip(_open_db(ctx), ip_address, description=description, added_by=added_by)
	click.secho(f"Whitelisted {ip_address} (id={entry_id})", fg="green")


@cli.command("whitelist-list")
@click.pass_context
def whitelist_list(ctx: click.Context) -> None:
	"""Print the whitelist, newest first."""
	rows = sqlite_db.list_whitelist(_open_db(ctx))
	if not rows:
		click.echo("Whitelist is empty.")
		return
	for row in rows:
		click.echo(f"{row['id']:>5}  {row['ip_address']:<40} {row['added_by'] or '':<12} {row['description'] or ''}")


@cli.command("hash-password")
@click.password_option(prompt="Link manager password")
def hash_password_cmd(password: str) -> None:
	"""Print a PBKDF2 hash suitable for LINKDESK_PASSWORD."""
	click.echo(hash_password(password))


if __name__ == "__main__":
	cli()
