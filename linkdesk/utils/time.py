#!/usr/bin/env python3
#
# linkdesk/utils/time.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Timezone-aware time utilities."""

from __future__ import annotations

from datetime import datetime, timezone

# Display format used inside the links document
LINK_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def utcnow() -> datetime:
	"""Return the current UTC time as a timezone-aware datetime."""
	return datetime.now(timezone.utc)


def to_db_text(dt: datetime) -> str:
	"""Serialize an aware datetime to the fixed-width text stored in SQLite.

	Microseconds are always emitted so that lexical order equals
	chronological order for range queries such as log pruning.
	"""
	if dt.tzinfo is None:
		raise ValueError("Naive datetime not allowed - must be timezone-aware")
	return dt.astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def parse_utc(s: str) -> datetime | None:
	"""Parse an ISO-8601 timestamp string to a UTC datetime.

	Handles both 'Z' suffix and '+00:00' offset notation.
	Returns None for unparseable or naive timestamps.
	"""
	if not s:
		return None
	try:
		if s.endswith("Z"):
			s = s[:-1] + "+00:00"
		dt = datetime.fromisoformat(s)
		if dt.tzinfo is None:
			return None
		return dt.astimezone(timezone.utc)
	except (ValueError, TypeError):
		return None


def link_timestamp(dt: datetime) -> str:
	"""Format a datetime the way link records carry it (``YYYY-MM-DD HH:MM:SS``)."""
	return dt.astimezone(timezone.utc).strftime(LINK_TIMESTAMP_FORMAT)
