#!/usr/bin/env python3
#
# linkdesk/db/sqlite_auth.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Session storage and login-attempt lockout tracking."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta

from ..utils.crypto import hash_token
from .sqlite_runtime import transaction


# ---------------------------------------------------------------------------
# Session operations
# ---------------------------------------------------------------------------

def create_session(conn: sqlite3.Connection, token: str, client_ip: str, now: datetime) -> int:
	"""Store a new session (token hashed) and return its row id."""
	with transaction(conn):
		cur = conn.execute(
			"""
			INSERT INTO sessions (token_hash, client_ip, created_at, last_activity_at)
			VALUES (?, ?, ?, ?)
			""",
			(hash_token(token), client_ip, now, now),
		)
		return cur.lastrowid


def get_session(conn: sqlite3.Connection, token: str) -> sqlite3.Row | None:
	"""Look up a session by its raw token. Pure read, no expiry check."""
	cur = conn.execute(
		"SELECT id, client_ip, created_at, last_activity_at FROM sessions WHERE token_hash = ?",
		(hash_token(token),),
	)
	return cur.fetchone()


def touch_session(conn: sqlite3.Connection, token: str, now: datetime) -> None:
	"""Record activity on a session (sliding expiration)."""
	with transaction(conn):
		conn.execute(
			"UPDATE sessions SET last_activity_at = ? WHERE token_hash = ?",
			(now, hash_token(token)),
		)


def delete_session(conn: sqlite3.Connection, token: str) -> None:
	"""Delete a session (logout or expiry)."""
	with transaction(conn):
		conn.execute("DELETE FROM sessions WHERE token_hash = ?", (hash_token(token),))


def delete_idle_sessions(conn: sqlite3.Connection, idle_before: datetime) -> int:
	"""Delete sessions with no activity since ``idle_before``. Returns count deleted."""
	with transaction(conn):
		cur = conn.execute("DELETE FROM sessions WHERE last_activity_at < ?", (idle_before,))
		return cur.rowcount


# ---------------------------------------------------------------------------
# Login attempt tracking (sliding lockout window)
# ---------------------------------------------------------------------------

def lockout_remaining(
	conn: sqlite3.Connection,
	ip_address: str,
	*,
	max_attempts: int,
	window_seconds: int,
	now: datetime,
) -> int:
	"""Return seconds until ``ip_address`` may try again, or 0 when not locked.

	Counters whose last attempt is older than the window are dropped first,
	so the window slides on the most recent failure.
	"""
	cutoff = now - timedelta(seconds=window_seconds)
	with transaction(conn):
		conn.execute("DELETE FROM login_attempts WHERE last_attempt_at < ?", (cutoff,))
		row = conn.execute(
			"SELECT attempt_count, last_attempt_at FROM login_attempts WHERE ip_address = ?",
			(ip_address,),
		).fetchone()

	if not row or row["attempt_count"] < max_attempts:
		return 0
	unlock_at = row["last_attempt_at"] + timedelta(seconds=window_seconds)
	return max(1, int((unlock_at - now).total_seconds()))


def record_failed_login(conn: sqlite3.Connection, ip_address: str, now: datetime) -> int:
	"""Increment the failure counter for an IP and return the new count."""
	with transaction(conn, immediate=True):
		conn.execute(
			"""
			INSERT INTO login_attempts (ip_address, attempt_count, last_attempt_at)
			VALUES (?, 1, ?)
			ON CONFLICT(ip_address) DO UPDATE SET
				attempt_count = attempt_count + 1,
				last_attempt_at = excluded.last_attempt_at
			""",
			(ip_address, now),
		)
		row = conn.execute(
			"SELECT attempt_count FROM login_attempts WHERE ip_address = ?",
			(ip_address,),
		).fetchone()
	return row["attempt_count"] if row else 0


def clear_login_attempts(conn: sqlite3.Connection, ip_address: str) -> None:
	"""Clear failed login attempts for an IP after successful login."""
	with transaction(conn):
		conn.execute("DELETE FROM login_attempts WHERE ip_address = ?", (ip_address,))
