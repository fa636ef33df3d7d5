#!/usr/bin/env python3
#
# linkdesk/db/sqlite_whitelist.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""IP whitelist database helpers."""

from __future__ import annotations

import sqlite3

from ..utils.network import normalize_ip
from ..utils.time import utcnow
from .sqlite_runtime import transaction


def is_ip_whitelisted(conn: sqlite3.Connection, ip_address: str) -> bool:
	"""Return True when ``ip_address`` is in the whitelist."""
	cur = conn.execute(
		"SELECT 1 FROM ip_whitelist WHERE ip_address = ? LIMIT 1",
		(normalize_ip(ip_address),),
	)
	return cur.fetchone() is not None


def list_whitelist(conn: sqlite3.Connection) -> list[sqlite3.Row]:
	"""Return all whitelist entries, newest first."""
	cur = conn.execute(
		"""
		SELECT id, ip_address, description, added_by, added_at
		FROM ip_whitelist
		ORDER BY added_at DESC, id DESC
		"""
	)
	return cur.fetchall()


def add_whitelist_ip(
	conn: sqlite3.Connection,
	ip_address: str,
	description: str = "",
	added_by: str = "admin",
) -> int:
	"""Insert or refresh a whitelist entry keyed on the address and return its id.

	The caller validates ``ip_address``; re-adding an address keeps its id and
	replaces description, author and timestamp.
	"""
	ip_address = normalize_ip(ip_address)
	with transaction(conn):
		conn.execute(
			"""
			INSERT INTO ip_whitelist (ip_address, description, added_by, added_at)
			VALUES (?, ?, ?, ?)
			ON CONFLICT(ip_address) DO UPDATE SET
				description = excluded.description,
				added_by = excluded.added_by,
				added_at = excluded.added_at
			""",
			(ip_address, description, added_by, utcnow()),
		)
		row = conn.execute("SELECT id FROM ip_whitelist WHERE ip_address = ?", (ip_address,)).fetchone()
	return row["id"]


def remove_whitelist_ip(conn: sqlite3.Connection, entry_id: int) -> bool:
	"""Delete a whitelist entry by id. Returns True if a row was removed."""
	with transaction(conn):
		cur = conn.execute("DELETE FROM ip_whitelist WHERE id = ?", (entry_id,))
		return cur.rowcount > 0
