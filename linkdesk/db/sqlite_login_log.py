#!/usr/bin/env python3
#
# linkdesk/db/sqlite_login_log.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Login audit log: append, paginate, prune."""

from __future__ import annotations

import sqlite3
from datetime import timedelta

from ..utils.time import utcnow
from .sqlite_runtime import transaction

MAX_PAGE_SIZE = 500
DEFAULT_PAGE_SIZE = 100


def record_login(
	conn: sqlite3.Connection,
	*,
	email: str,
	name: str,
	ip_address: str,
	user_agent: str,
	auth_method: str,
	success: bool = True,
	failure_reason: str | None = None,
) -> int:
	"""Append one authentication event. ``logged_at`` is assigned here."""
	with transaction(conn):
		cur = conn.execute(
			"""
			INSERT INTO login_log
				(email, name, ip_address, user_agent, auth_method, success, failure_reason, logged_at)
			VALUES (?, ?, ?, ?, ?, ?, ?, ?)
			""",
			(
				email,
				name,
				ip_address,
				user_agent,
				auth_method,
				1 if success else 0,
				failure_reason,
				utcnow(),
			),
		)
		return cur.lastrowid


def clamp_page(limit: int | None, offset: int | None) -> tuple[int, int]:
	"""Clamp paging arguments to ``0 <= limit <= 500`` and ``offset >= 0``."""
	limit = DEFAULT_PAGE_SIZE if limit is None else limit
	offset = 0 if offset is None else offset
	return max(0, min(limit, MAX_PAGE_SIZE)), max(offset, 0)


def list_logins(
	conn: sqlite3.Connection,
	limit: int | None = DEFAULT_PAGE_SIZE,
	offset: int | None = 0,
) -> tuple[list[dict], int]:
	"""Return one page of log entries (newest first) and the total entry count."""
	limit, offset = clamp_page(limit, offset)
	total = conn.execute("SELECT COUNT(*) FROM login_log").fetchone()[0]
	cur = conn.execute(
		"""
		SELECT id, email, name, ip_address, user_agent, auth_method, success, failure_reason, logged_at
		FROM login_log
		ORDER BY logged_at DESC, id DESC
		LIMIT ? OFFSET ?
		""",
		(limit, offset),
	)
	entries = []
	for row in cur.fetchall():
		entry = dict(row)
		entry["success"] = bool(entry["success"])
		entries.append(entry)
	return entries, total


def prune_logins(conn: sqlite3.Connection, older_than_days: int) -> int:
	"""Delete entries older than ``older_than_days`` and return how many were removed."""
	if older_than_days < 0:
		raise ValueError(f"older_than_days must be >= 0, got {older_than_days}")
	cutoff = utcnow() - timedelta(days=older_than_days)
	with transaction(conn):
		cur = conn.execute("DELETE FROM login_log WHERE logged_at < ?", (cutoff,))
		return cur.rowcount
