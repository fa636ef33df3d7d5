#!/usr/bin/env python3
#
# linkdesk/db/sqlite_runtime.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""SQLite runtime helpers: adapters, connections, and transactions."""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from ..utils.time import parse_utc, to_db_text

_log = logging.getLogger(__name__)


def _convert_datetime(value: bytes) -> datetime:
	text = value.decode("utf-8", errors="replace")
	dt = parse_utc(text)
	if dt is None:
		_log.error("Corrupt timestamp in database: %r - returning epoch", text)
		return datetime(1970, 1, 1, tzinfo=timezone.utc)
	return dt


# NOTE: sqlite3 adapter/converter registration is process-global.
sqlite3.register_adapter(datetime, to_db_text)
sqlite3.register_converter("timestamp", _convert_datetime)


# ---------------------------------------------------------------------------
# Connection Registry
# ---------------------------------------------------------------------------

_OPEN_CONNECTIONS: set[sqlite3.Connection] = set()
_CONNECTIONS_LOCK = threading.Lock()
_WAL_RETRIES = 5


def connect(db_path: Path) -> sqlite3.Connection:
	"""Open a SQLite connection configured for this application.

	Retries WAL activation while another worker holds the database lock.
	"""
	db_path.parent.mkdir(parents=True, exist_ok=True)
	conn = sqlite3.connect(
		str(db_path),
		detect_types=sqlite3.PARSE_DECLTYPES,
		check_same_thread=False,
		timeout=10.0,  # busy timeout for multi-process access
	)
	conn.row_factory = sqlite3.Row

	for attempt in range(_WAL_RETRIES):
		try:
			mode = conn.execute("PRAGMA journal_mode").fetchone()[0].upper()
			if mode != "WAL":
				conn.execute("PRAGMA journal_mode=WAL")
				_log.debug("Enabled WAL mode for %s", db_path)
			break
		except sqlite3.OperationalError as e:
			if "locked" not in str(e).lower() or attempt == _WAL_RETRIES - 1:
				conn.close()
				raise
			wait = 0.1 * (2 ** attempt)
			_log.debug(
				"Database locked during WAL activation (attempt %d/%d), retrying in %.1fs",
				attempt + 1,
				_WAL_RETRIES,
				wait,
			)
			time.sleep(wait)

	with _CONNECTIONS_LOCK:
		_OPEN_CONNECTIONS.add(conn)
	return conn


def close_connection(conn: sqlite3.Connection) -> None:
	"""Close and untrack a SQLite connection."""
	with _CONNECTIONS_LOCK:
		_OPEN_CONNECTIONS.discard(conn)
	conn.close()


def close_all_connections() -> int:
	"""Close all tracked connections for graceful shutdown."""
	with _CONNECTIONS_LOCK:
		connections = list(_OPEN_CONNECTIONS)
		_OPEN_CONNECTIONS.clear()

	closed = 0
	for conn in connections:
		try:
			conn.close()
			closed += 1
		except sqlite3.Error as e:
			_log.warning("Failed to close SQLite connection: %s", e)
	return closed


@contextmanager
def transaction(conn: sqlite3.Connection, *, immediate: bool = False):
	"""Transaction context manager that commits or rolls back on error.

	Nested use is a no-op: the outermost transaction controls commit/rollback.
	"""
	started_tx = False
	if not conn.in_transaction:
		conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
		started_tx = True
	try:
		yield
		if started_tx:
			conn.commit()
	except Exception:
		if started_tx and conn.in_transaction:
			conn.rollback()
		raise
