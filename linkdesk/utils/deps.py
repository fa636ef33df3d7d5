#!/usr/bin/env python3
#
# linkdesk/utils/deps.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""FastAPI dependency helpers."""

from __future__ import annotations

import sqlite3
from collections.abc import Generator

from fastapi import Depends, Request, Response

from ..api.dispatch import RequestContext
from ..api.errors import StorageUnavailable
from ..db import sqlite as sqlite_db
from .config import Config
from .identity import resolve_identity
from .network import resolve_client_ip

SESSION_COOKIE = "linkdesk_session"


def get_config(request: Request) -> Config:
	"""Get the application configuration from app state."""
	return request.app.state.cfg


def get_conn(request: Request) -> Generator[sqlite3.Connection, None, None]:
	"""Yield a per-request SQLite connection, closed on every exit path."""
	try:
		conn = sqlite_db.connect(request.app.state.cfg.db_path)
	except (sqlite3.Error, OSError) as exc:
		raise StorageUnavailable(f"Database unavailable: {exc}") from exc
	try:
		yield conn
	finally:
		sqlite_db.close_connection(conn)


def get_client_ip(request: Request, cfg: Config = Depends(get_config)) -> str:
	direct_ip = request.client.host if request.client else None
	return resolve_client_ip(request.headers, direct_ip, cfg.trusted_proxies)


def get_request_context(
	request: Request,
	response: Response,
	cfg: Config = Depends(get_config),
	conn: sqlite3.Connection = Depends(get_conn),
	client_ip: str = Depends(get_client_ip),
) -> RequestContext:
	"""Assemble the explicit per-request context handed to action handlers."""
	identity = resolve_identity(
		request.headers,
		request.cookies,
		jwt_key=cfg.access_jwt_key,
		jwt_algorithms=cfg.access_jwt_algorithms,
		jwt_audience=cfg.access_jwt_audience,
	)
	return RequestContext(
		cfg=cfg,
		conn=conn,
		response=response,
		client_ip=client_ip,
		user_agent=request.headers.get("user-agent") or "unknown",
		identity=identity,
		session_token=request.cookies.get(SESSION_COOKIE),
		scheme=request.url.scheme,
	)
