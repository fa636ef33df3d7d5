#!/usr/bin/env python3
#
# linkdesk/db/sqlite_settings.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Application settings database helpers."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..models.settings import SettingRule
from ..utils.time import utcnow
from .sqlite_runtime import transaction


# ---------------------------------------------------------------------------
# Raw key-value operations
# ---------------------------------------------------------------------------

def set_setting(conn: sqlite3.Connection, key: str, value: str) -> None:
	"""Set a raw setting value."""
	with transaction(conn):
		conn.execute(
			"""
			INSERT INTO app_settings (key, value, updated_at) VALUES (?, ?, ?)
			ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
			""",
			(key, value, utcnow()),
		)


# ---------------------------------------------------------------------------
# Schema-aware operations
# ---------------------------------------------------------------------------

@dataclass
class SettingsUpdate:
	"""Outcome of a partial settings update."""
	saved: dict[str, Any] = field(default_factory=dict)
	errors: list[str] = field(default_factory=list)


def get_all_settings(conn: sqlite3.Connection, schema: Iterable[SettingRule]) -> dict[str, Any]:
	"""Return every declared key with its stored value or declared default."""
	stored = {
		row["key"]: row["value"]
		for row in conn.execute("SELECT key, value FROM app_settings").fetchall()
	}
	return {rule.key: rule.decode(stored.get(rule.key)) for rule in schema}


def update_settings(
	conn: sqlite3.Connection,
	schema: Iterable[SettingRule],
	values: Mapping[str, Any],
) -> SettingsUpdate:
	"""Validate and persist each key independently.

	Valid keys are saved even when others in the same call are rejected.
	"""
	rules = {rule.key: rule for rule in schema}
	result = SettingsUpdate()
	for key, value in values.items():
		rule = rules.get(key)
		if rule is None:
			result.errors.append(f"Unknown setting: {key}")
			continue
		error = rule.validate(value)
		if error:
			result.errors.append(error)
			continue
		encoded = rule.encode(value)
		set_setting(conn, key, encoded)
		result.saved[key] = rule.decode(encoded)
	return result
