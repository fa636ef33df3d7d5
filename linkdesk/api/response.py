#!/usr/bin/env python3
#
# linkdesk/api/response.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Common API response helpers.

The link manager speaks ``{"success": bool, ...}`` while the identity and
settings endpoints speak ``{"ok": bool, ...}``. Each router declares its
envelope key with :func:`envelope` so errors raised anywhere below it are
rendered in the same shape.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from fastapi import Request

SUCCESS_KEY = "success"
OK_KEY = "ok"


def envelope(key: str) -> Callable[[Request], str]:
	"""Router dependency that records which envelope key the endpoint uses."""
	def _mark(request: Request) -> str:
		request.state.envelope_key = key
		return key
	return _mark


def envelope_key(request: Request) -> str:
	return getattr(request.state, "envelope_key", OK_KEY)


def ok_response(key: str = OK_KEY, **extra: Any) -> dict[str, Any]:
	"""Build a success envelope."""
	payload: dict[str, Any] = {key: True}
	payload.update(extra)
	return payload


def error_response(key: str, error: str, **extra: Any) -> dict[str, Any]:
	"""Build a failure envelope."""
	payload: dict[str, Any] = {key: False, "error": error}
	payload.update(extra)
	return payload
