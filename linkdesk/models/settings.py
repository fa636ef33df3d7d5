#!/usr/bin/env python3
#
# linkdesk/models/settings.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Declared application settings and their validation rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

SettingType = Literal["enum", "string", "boolean", "integer"]

_TRUE_VALUES = {"true", "1"}
_BOOLEAN_STRINGS = {"true", "false", "1", "0"}


@dataclass(frozen=True)
class SettingRule:
	"""Validation rule for one allowed setting key."""
	key: str
	type: SettingType
	default: Any
	values: tuple[str, ...] = ()

	def validate(self, value: Any) -> str | None:
		"""Return an error message if ``value`` is not acceptable, else None."""
		if self.type == "enum":
			if not isinstance(value, str) or value not in self.values:
				return f"{self.key} must be one of: {', '.join(self.values)}"
		elif self.type == "boolean":
			if not isinstance(value, bool) and not (isinstance(value, str) and value in _BOOLEAN_STRINGS):
				return f"{self.key} must be a boolean"
		elif self.type == "string":
			if not isinstance(value, str):
				return f"{self.key} must be a string"
		elif self.type == "integer":
			if isinstance(value, bool) or not _is_integer_like(value):
				return f"{self.key} must be an integer"
		return None

	def encode(self, value: Any) -> str:
		"""Normalize a validated value into its stored text form."""
		if self.type == "boolean":
			if isinstance(value, bool):
				return "true" if value else "false"
			return "true" if value in _TRUE_VALUES else "false"
		if self.type == "integer":
			return str(int(float(value)))
		return str(value)

	def decode(self, raw: str | None) -> Any:
		"""Convert stored text back to the declared type, falling back to the default."""
		if raw is None:
			return self.default
		if self.type == "boolean":
			return raw.strip().lower() in _TRUE_VALUES
		if self.type == "integer":
			try:
				return int(raw)
			except ValueError:
				return self.default
		return raw


def _is_integer_like(value: Any) -> bool:
	if isinstance(value, int):
		return True
	if isinstance(value, float):
		return value.is_integer()
	if isinstance(value, str):
		try:
			return float(value.strip()).is_integer()
		except ValueError:
			return False
	return False


DEFAULT_SETTINGS_SCHEMA: tuple[SettingRule, ...] = (
	SettingRule("theme", "enum", "dark", values=("light", "dark", "auto")),
	SettingRule("language", "string", "en"),
	SettingRule("notifications_enabled", "boolean", True),
)
