#!/usr/bin/env python3
#
# linkdesk/api/dispatch.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Action dispatch: request context, parameters and the command table."""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from fastapi import Request, Response

from ..utils.config import Config
from ..utils.identity import Identity
from .errors import UnknownAction

_log = logging.getLogger(__name__)

A = TypeVar("A", bound=Enum)


@dataclass
class RequestContext:
	"""Everything a handler may know about the current request.

	Built once per request and passed explicitly to the handler; handlers
	never reach for ambient request or session state.
	"""
	cfg: Config
	conn: sqlite3.Connection
	response: Response
	client_ip: str
	user_agent: str
	identity: Identity
	session_token: str | None = None
	scheme: str = "http"


@dataclass(frozen=True)
class ActionParams:
	"""Submitted fields: query string plus a decoded form or JSON body."""
	query: Mapping[str, str] = field(default_factory=dict)
	body: Any = None

	@property
	def fields(self) -> Mapping[str, Any]:
		"""The body when it is an object, else an empty mapping."""
		return self.body if isinstance(self.body, Mapping) else {}

	def get(self, key: str, default: Any = None) -> Any:
		"""Look a field up in the body first, then in the query string."""
		if key in self.fields:
			return self.fields[key]
		return self.query.get(key, default)

	def action(self, default: str = "") -> str:
		"""The requested action; the query string wins over the body."""
		value = self.query.get("action") or self.fields.get("action") or default
		return str(value).strip()


Handler = Callable[[RequestContext, ActionParams], dict[str, Any]]


class ActionTable(Generic[A]):
	"""Registered handlers for a closed set of actions.

	Usage::

		table = ActionTable(SettingsAction)

		@table.register(SettingsAction.GET)
		def _get(ctx, params): ...

		table.ensure_complete()
	"""

	def __init__(self, actions: type[A]):
		self.actions = actions
		self._handlers: dict[A, Handler] = {}

	def register(self, action: A) -> Callable[[Handler], Handler]:
		if not isinstance(action, self.actions):
			raise TypeError(f"{action!r} is not a {self.actions.__name__}")

		def decorator(func: Handler) -> Handler:
			if action in self._handlers:
				raise ValueError(f"Handler already registered for {action.value!r}")
			self._handlers[action] = func
			return func

		return decorator

	def ensure_complete(self) -> None:
		"""Fail at import time if any declared action lacks a handler."""
		missing = [a.value for a in self.actions if a not in self._handlers]
		if missing:
			raise RuntimeError(f"{self.actions.__name__} has no handler for: {', '.join(missing)}")

	def parse(self, name: str) -> A:
		try:
			return self.actions(name)
		except ValueError:
			raise UnknownAction() from None

	def dispatch(self, name: str, ctx: RequestContext, params: ActionParams) -> dict[str, Any]:
		"""Run the handler registered for ``name``; unknown names raise ``UnknownAction``."""
		action = self.parse(name)
		_log.debug("ACTION %s.%s ip=%s", self.actions.__name__, action.value, ctx.client_ip)
		return self._handlers[action](ctx, params)


async def read_params(request: Request) -> ActionParams:
	"""Decode query string and body.

	JSON bodies may hold any JSON value; form bodies become a flat mapping.
	An unparseable body is treated as empty.
	"""
	query = dict(request.query_params)
	if request.method in ("GET", "HEAD"):
		return ActionParams(query=query)

	content_type = request.headers.get("content-type", "")
	if "application/x-www-form-urlencoded" in content_type or "multipart/form-data" in content_type:
		form = await request.form()
		return ActionParams(query=query, body={k: v for k, v in form.items() if isinstance(v, str)})

	raw = await request.body()
	if not raw.strip():
		return ActionParams(query=query)
	try:
		return ActionParams(query=query, body=json.loads(raw))
	except (json.JSONDecodeError, UnicodeDecodeError):
		_log.debug("Ignoring undecodable request body (%d bytes)", len(raw))
		return ActionParams(query=query)
