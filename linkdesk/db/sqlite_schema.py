#!/usr/bin/env python3
#
# linkdesk/db/sqlite_schema.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""SQLite schema initialization."""

from __future__ import annotations

import logging
import sqlite3

from .sqlite_runtime import transaction

_log = logging.getLogger(__name__)

TABLES = ("ip_whitelist", "login_log", "app_settings", "login_attempts", "sessions")


def init_schema(conn: sqlite3.Connection) -> None:
	"""Create every table and index the application needs (idempotent)."""
	with transaction(conn):
		# Trusted client addresses
		conn.execute(
			"""
			CREATE TABLE IF NOT EXISTS ip_whitelist (
				id INTEGER PRIMARY KEY AUTOINCREMENT,
				ip_address TEXT NOT NULL UNIQUE,
				description TEXT,
				added_by TEXT,
				added_at timestamp NOT NULL
			)
			"""
		)

		# Authentication audit trail
		conn.execute(
			"""
			CREATE TABLE IF NOT EXISTS login_log (
				id INTEGER PRIMARY KEY AUTOINCREMENT,
				email TEXT,
				name TEXT,
				ip_address TEXT,
				user_agent TEXT,
				auth_method TEXT,
				success INTEGER NOT NULL DEFAULT 1,
				failure_reason TEXT,
				logged_at timestamp NOT NULL
			)
			"""
		)
		conn.execute("CREATE INDEX IF NOT EXISTS idx_login_log_date ON login_log(logged_at DESC)")
		conn.execute("CREATE INDEX IF NOT EXISTS idx_login_log_email ON login_log(email)")

		# Key-value settings restricted to the declared schema
		conn.execute(
			"""
			CREATE TABLE IF NOT EXISTS app_settings (
				key TEXT PRIMARY KEY,
				value TEXT,
				updated_at timestamp NOT NULL
			)
			"""
		)

		# Failed link-manager logins per client IP
		conn.execute(
			"""
			CREATE TABLE IF NOT EXISTS login_attempts (
				ip_address TEXT PRIMARY KEY,
				attempt_count INTEGER NOT NULL DEFAULT 0,
				last_attempt_at timestamp NOT NULL
			)
			"""
		)

		# Link-manager sessions (token stored hashed)
		conn.execute(
			"""
			CREATE TABLE IF NOT EXISTS sessions (
				id INTEGER PRIMARY KEY AUTOINCREMENT,
				token_hash TEXT NOT NULL UNIQUE,
				client_ip TEXT,
				created_at timestamp NOT NULL,
				last_activity_at timestamp NOT NULL
			)
			"""
		)
		conn.execute("CREATE INDEX IF NOT EXISTS idx_sessions_activity ON sessions(last_activity_at)")

	_log.debug("SQLite schema ready")


def list_tables(conn: sqlite3.Connection) -> list[str]:
	"""Return the names of all user tables, sorted."""
	cur = conn.execute(
		"SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
	)
	return [row["name"] for row in cur.fetchall()]
