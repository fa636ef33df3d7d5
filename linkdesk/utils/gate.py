#!/usr/bin/env python3
#
# linkdesk/utils/gate.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Credential gate for the link manager: shared password, sessions, lockout."""

from __future__ import annotations

import logging
from datetime import timedelta

from ..api.dispatch import RequestContext
from ..api.errors import InvalidCredentials, RateLimited, Unauthenticated
from ..db import sqlite as sqlite_db
from .crypto import new_token, verify_shared_secret
from .deps import SESSION_COOKIE
from .time import utcnow

_log = logging.getLogger(__name__)

AUTH_METHOD_PASSWORD = "password"


def _audit(ctx: RequestContext, success: bool, failure_reason: str | None = None) -> None:
	sqlite_db.record_login(
		ctx.conn,
		email=ctx.identity.email,
		name=ctx.identity.name,
		ip_address=ctx.client_ip,
		user_agent=ctx.user_agent,
		auth_method=AUTH_METHOD_PASSWORD,
		success=success,
		failure_reason=failure_reason,
	)


def _set_session_cookie(ctx: RequestContext, token: str) -> None:
	ctx.response.set_cookie(
		key=SESSION_COOKIE,
		value=token,
		httponly=True,
		secure=(ctx.scheme == "https"),
		samesite="strict",
		path="/",
	)


def _clear_session_cookie(ctx: RequestContext) -> None:
	ctx.response.delete_cookie(key=SESSION_COOKIE, path="/")


def login(ctx: RequestContext, password: str) -> str:
	"""Check ``password`` and open a session. Returns the new session token.

	Raises:
		RateLimited: the client IP reached the attempt ceiling inside the window.
		InvalidCredentials: the password does not match.
	"""
	cfg = ctx.cfg
	now = utcnow()

	retry_after = sqlite_db.lockout_remaining(
		ctx.conn,
		ctx.client_ip,
		max_attempts=cfg.max_login_attempts,
		window_seconds=cfg.lockout_seconds,
		now=now,
	)
	if retry_after:
		_log.info("LOGIN_LOCKED ip=%s remaining=%ds", ctx.client_ip, retry_after)
		_audit(ctx, False, "locked_out")
		raise RateLimited(retry_after)

	if not verify_shared_secret(password, cfg.password):
		count = sqlite_db.record_failed_login(ctx.conn, ctx.client_ip, now)
		if count >= cfg.max_login_attempts:
			_log.warning("LOGIN_FAILED ip=%s attempts=%d locked_for=%ds", ctx.client_ip, count, cfg.lockout_seconds)
		else:
			_log.info("LOGIN_FAILED ip=%s attempts=%d", ctx.client_ip, count)
		_audit(ctx, False, "invalid_password")
		raise InvalidCredentials()

	sqlite_db.clear_login_attempts(ctx.conn, ctx.client_ip)
	sqlite_db.delete_idle_sessions(ctx.conn, now - timedelta(seconds=cfg.session_timeout))
	if ctx.session_token:
		sqlite_db.delete_session(ctx.conn, ctx.session_token)
	token = new_token()
	sqlite_db.create_session(ctx.conn, token, ctx.client_ip, now)
	_set_session_cookie(ctx, token)
	ctx.session_token = token
	_audit(ctx, True)
	_log.info("LOGIN_SUCCESS ip=%s", ctx.client_ip)
	return token


def logout(ctx: RequestContext) -> None:
	"""Destroy the current session, if any."""
	if ctx.session_token:
		sqlite_db.delete_session(ctx.conn, ctx.session_token)
		_log.info("LOGOUT ip=%s", ctx.client_ip)
	ctx.session_token = None
	_clear_session_cookie(ctx)


def check_auth(ctx: RequestContext) -> bool:
	"""Return True while the session is active, refreshing its activity time.

	A session idle for at least ``session_timeout`` seconds is deleted.
	"""
	token = ctx.session_token
	if not token:
		return False
	session = sqlite_db.get_session(ctx.conn, token)
	if session is None:
		_clear_session_cookie(ctx)
		return False

	now = utcnow()
	if now - session["last_activity_at"] >= timedelta(seconds=ctx.cfg.session_timeout):
		sqlite_db.delete_session(ctx.conn, token)
		_clear_session_cookie(ctx)
		ctx.session_token = None
		_log.info("SESSION_EXPIRED ip=%s", ctx.client_ip)
		return False

	sqlite_db.touch_session(ctx.conn, token, now)
	return True


def require_session(ctx: RequestContext) -> None:
	"""Raise ``Unauthenticated`` unless the request carries an active session."""
	if not check_auth(ctx):
		raise Unauthenticated()
