"""
tests/test_cli.py
"""
from __future__ import annotations

import os
import subprocess
import sys
from datetime import timedelta
from pathlib import Path

import pytest
from click.testing import CliRunner

from linkdesk.cli import cli
from linkdesk.db import sqlite as sqlite_db
from linkdesk.utils.crypto import verify_password
from linkdesk.utils.time import utcnow


@pytest.fixture
def runner(tmp_path, monkeypatch) -> CliRunner:
	monkeypatch.setenv("LINKDESK_DATA_DIR", str(tmp_path))
	monkeypatch.setenv("LINKDESK_PASSWORD", "cli-secret")
	return CliRunner()


def _db(tmp_path):
	conn = sqlite_db.connect(tmp_path / "app.db")
	sqlite_db.init_schema(conn)
	return conn


def test_init_db_lists_tables(runner, tmp_path):
	result = runner.invoke(cli, ["init-db"])
	assert result.exit_code == 0, result.output
	for table in ("app_settings", "ip_whitelist", "login_attempts", "login_log", "sessions"):
		assert f"- {table}" in result.output
	assert (tmp_path / "app.db").exists()


def test_whitelist_add_and_list(runner, tmp_path):
	result = runner.invoke(cli, ["whitelist-add", "203.0.113.7", "--description", "vpn"])
	assert result.exit_code == 0, result.output
	assert "Whitelisted 203.0.113.7" in result.output

	result = runner.invoke(cli, ["whitelist-list"])
	assert "203.0.113.7" in result.output
	assert "vpn" in result.output

	conn = _db(tmp_path)
	try:
		assert sqlite_db.is_ip_whitelisted(conn, "203.0.113.7")
	finally:
		sqlite_db.close_connection(conn)


def test_whitelist_add_rejects_bad_ip(runner):
	result = runner.invoke(cli, ["whitelist-add", "not-an-ip"])
	assert result.exit_code != 0
	assert "Invalid IP address format" in result.output


def test_whitelist_list_empty(runner):
	result = runner.invoke(cli, ["whitelist-list"])
	assert result.exit_code == 0
	assert "Whitelist is empty." in result.output


def test_prune_logs(runner, tmp_path):
	conn = _db(tmp_path)
	try:
		conn.execute(
			"INSERT INTO login_log (email, auth_method, success, logged_at) VALUES (?, ?, ?, ?)",
			("old@example.com", "unknown", 1, utcnow() - timedelta(days=40)),
		)
		conn.commit()
	finally:
		sqlite_db.close_connection(conn)

	result = runner.invoke(cli, ["prune-logs"])
	assert result.exit_code == 0, result.output
	assert "Deleted 1 login log entries older than 30 days." in result.output


def test_hash_password(runner):
	result = runner.invoke(cli, ["hash-password"], input="s3cret\ns3cret\n")
	assert result.exit_code == 0, result.output
	hashed = result.output.strip().splitlines()[-1]
	assert verify_password("s3cret", hashed)


def test_invalid_config_is_reported(runner, monkeypatch):
	monkeypatch.setenv("LINKDESK_SESSION_TIMEOUT", "soon")
	result = runner.invoke(cli, ["whitelist-list"])
	assert result.exit_code != 0
	assert "LINKDESK_SESSION_TIMEOUT must be an integer" in result.output


def _run_cli(tmp_path, *args: str) -> subprocess.CompletedProcess:
	"""Run the CLI as a fresh process with no link manager password configured."""
	env = {k: v for k, v in os.environ.items() if k not in ("LINKDESK_PASSWORD", "PYTEST_CURRENT_TEST")}
	env["LINKDESK_DATA_DIR"] = str(tmp_path)
	return subprocess.run(
		[sys.executable, "-m", "linkdesk.cli", *args],
		cwd=str(Path(__file__).resolve().parents[1]),
		env=env,
		capture_output=True,
		text=True,
		timeout=60,
	)


def test_hash_password_without_configured_password(tmp_path):
	result = _run_cli(tmp_path, "hash-password", "--password", "s3cret")
	assert result.returncode == 0, result.stderr
	assert verify_password("s3cret", result.stdout.strip().splitlines()[-1])


def test_db_commands_without_configured_password(tmp_path):
	result = _run_cli(tmp_path, "whitelist-add", "192.0.2.44")
	assert result.returncode == 0, result.stderr
	result = _run_cli(tmp_path, "whitelist-list")
	assert result.returncode == 0, result.stderr
	assert "192.0.2.44" in result.stdout


def test_prune_logs_rejects_negative_days(runner):
	result = runner.invoke(cli, ["prune-logs", "--days", "-1"])
	assert result.exit_code != 0
