#!/usr/bin/env python3
#
# linkdesk/models/auth.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Identity, whitelist and audit-log payload models."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


def _strip(v: Any) -> str:
	return "" if v is None else str(v).strip()


class WhitelistAdd(BaseModel):
	"""Payload for ``add_ip``. Address syntax is checked by the handler."""
	ip_address: str = ""
	description: str = ""
	added_by: str = "admin"

	@field_validator("ip_address", "description", mode="before")
	@classmethod
	def strip_text(cls, v: Any) -> str:
		return _strip(v)

	@field_validator("added_by", mode="before")
	@classmethod
	def default_author(cls, v: Any) -> str:
		return _strip(v) or "admin"


class WhitelistRemove(BaseModel):
	"""Payload for ``remove_ip``; a non-numeric id coerces to 0 (invalid)."""
	id: int = 0

	@field_validator("id", mode="before")
	@classmethod
	def coerce_id(cls, v: Any) -> int:
		try:
			return int(v)
		except (TypeError, ValueError):
			return 0


class LoginEvent(BaseModel):
	"""Payload for ``log_auth``."""
	email: str = ""
	name: str = ""
	method: str = "unknown"
	success: bool = True
	failure_reason: Optional[str] = Field(None, max_length=512)

	@field_validator("email", "name", mode="before")
	@classmethod
	def strip_text(cls, v: Any) -> str:
		return _strip(v)

	@field_validator("method", mode="before")
	@classmethod
	def default_method(cls, v: Any) -> str:
		return _strip(v) or "unknown"
