#!/usr/bin/env python3
#
# linkdesk/api/auth.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Identity, IP whitelist and login-log API routes."""

from __future__ import annotations

import logging
import sqlite3
from enum import Enum
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError as PydanticValidationError

from ..db import sqlite as sqlite_db
from ..models.auth import LoginEvent, WhitelistAdd, WhitelistRemove
from ..utils.config import Config
from ..utils.deps import get_client_ip, get_config, get_request_context
from ..utils.identity import resolve_identity
from ..utils.network import is_valid_ip
from ..utils.rate_limit import RATE_LIMIT_API, limiter
from .dispatch import ActionParams, ActionTable, RequestContext, read_params
from .errors import InvalidAddress, ValidationError
from .response import OK_KEY, envelope, ok_response

_log = logging.getLogger(__name__)

router = APIRouter(tags=["auth"], dependencies=[Depends(envelope(OK_KEY))])


class AuthAction(str, Enum):
	CHECK_IP = "check_ip"
	GET_WHITELIST = "get_whitelist"
	ADD_IP = "add_ip"
	REMOVE_IP = "remove_ip"
	LOG_AUTH = "log_auth"
	GET_LOGS = "get_logs"
	CLEAR_LOGS = "clear_logs"


actions: ActionTable[AuthAction] = ActionTable(AuthAction)


def _int_param(value: Any, default: int) -> int:
	if value is None or value == "":
		return default
	try:
		return int(value)
	except (TypeError, ValueError):
		return default


def _first_error(exc: PydanticValidationError) -> str:
	errors = exc.errors()
	if not errors:
		return "Invalid input"
	err = errors[0]
	loc = ".".join(str(part) for part in err.get("loc", ()))
	return f"{loc}: {err.get('msg', 'invalid value')}" if loc else err.get("msg", "Invalid input")


# ---------------------------------------------------------------------------
# Whitelist actions
# ---------------------------------------------------------------------------

@actions.register(AuthAction.CHECK_IP)
def _check_ip(ctx: RequestContext, params: ActionParams) -> dict[str, Any]:
	whitelisted = sqlite_db.is_ip_whitelisted(ctx.conn, ctx.client_ip)
	return ok_response(ip=ctx.client_ip, whitelisted=whitelisted)


@actions.register(AuthAction.GET_WHITELIST)
def _get_whitelist(ctx: RequestContext, params: ActionParams) -> dict[str, Any]:
	rows = sqlite_db.list_whitelist(ctx.conn)
	return ok_response(ips=[dict(row) for row in rows])


@actions.register(AuthAction.ADD_IP)
def _add_ip(ctx: RequestContext, params: ActionParams) -> dict[str, Any]:
	payload = WhitelistAdd.model_validate(dict(params.fields))
	if not payload.ip_address:
		raise ValidationError("IP address is required")
	if not is_valid_ip(payload.ip_address):
		raise InvalidAddress()

	entry_id = sqlite_db.add_whitelist_ip(
		ctx.conn,
		payload.ip_address,
		description=payload.description,
		added_by=payload.added_by,
	)
	_log.info("WHITELIST_ADD ip=%s id=%d by=%s from=%s", payload.ip_address, entry_id, payload.added_by, ctx.client_ip)
	return ok_response(message="IP added to whitelist", id=entry_id)


@actions.register(AuthAction.REMOVE_IP)
def _remove_ip(ctx: RequestContext, params: ActionParams) -> dict[str, Any]:
	payload = WhitelistRemove.model_validate(dict(params.fields))
	if payload.id <= 0:
		raise ValidationError("Invalid ID")
	if sqlite_db.remove_whitelist_ip(ctx.conn, payload.id):
		_log.info("WHITELIST_REMOVE id=%d from=%s", payload.id, ctx.client_ip)
	return ok_response(message="IP removed from whitelist")


# ---------------------------------------------------------------------------
# Login log actions
# ---------------------------------------------------------------------------

@actions.register(AuthAction.LOG_AUTH)
def _log_auth(ctx: RequestContext, params: ActionParams) -> dict[str, Any]:
	try:
		event = LoginEvent.model_validate(dict(params.fields))
	except PydanticValidationError as exc:
		raise ValidationError(_first_error(exc)) from None

	entry_id = sqlite_db.record_login(
		ctx.conn,
		email=event.email,
		name=event.name,
		ip_address=ctx.client_ip,
		user_agent=ctx.user_agent,
		auth_method=event.method,
		success=event.success,
		failure_reason=event.failure_reason,
	)
	return ok_response(id=entry_id)


@actions.register(AuthAction.GET_LOGS)
def _get_logs(ctx: RequestContext, params: ActionParams) -> dict[str, Any]:
	limit, offset = sqlite_db.clamp_page(
		_int_param(params.query.get("limit"), 100),
		_int_param(params.query.get("offset"), 0),
	)
	logs, total = sqlite_db.list_logins(ctx.conn, limit, offset)
	return ok_response(logs=logs, total=total, limit=limit, offset=offset)


@actions.register(AuthAction.CLEAR_LOGS)
def _clear_logs(ctx: RequestContext, params: ActionParams) -> dict[str, Any]:
	days = _int_param(params.query.get("days"), ctx.cfg.log_retention_days)
	if days < 0:
		raise ValidationError("days must be a non-negative integer")
	deleted = sqlite_db.prune_logins(ctx.conn, days)
	_log.info("LOGIN_LOG_PRUNED days=%d deleted=%d from=%s", days, deleted, ctx.client_ip)
	return ok_response(deleted=deleted)


actions.ensure_complete()


@router.api_route("/auth", methods=["GET", "POST"])
@limiter.limit(RATE_LIMIT_API)
async def auth_endpoint(request: Request, ctx: RequestContext = Depends(get_request_context)):
	"""Whitelist and login-log actions selected by ``action``."""
	params = await read_params(request)
	return await run_in_threadpool(actions.dispatch, params.action(), ctx, params)


# ---------------------------------------------------------------------------
# Current user
# ---------------------------------------------------------------------------

def _whitelist_lookup(cfg: Config, client_ip: str) -> bool:
	"""Whitelist check that fails open to False when the database is unusable."""
	try:
		conn = sqlite_db.connect(cfg.db_path)
	except (sqlite3.Error, OSError) as exc:
		_log.warning("WHITELIST_LOOKUP_FAILED ip=%s error=%s", client_ip, exc)
		return False
	try:
		return sqlite_db.is_ip_whitelisted(conn, client_ip)
	except sqlite3.Error as exc:
		_log.warning("WHITELIST_LOOKUP_FAILED ip=%s error=%s", client_ip, exc)
		return False
	finally:
		sqlite_db.close_connection(conn)


@router.get("/user")
@limiter.limit(RATE_LIMIT_API)
def current_user(
	request: Request,
	cfg: Config = Depends(get_config),
	client_ip: str = Depends(get_client_ip),
):
	"""Report who the caller is, how they were identified and whether their IP is trusted."""
	identity = resolve_identity(
		request.headers,
		request.cookies,
		jwt_key=cfg.access_jwt_key,
		jwt_algorithms=cfg.access_jwt_algorithms,
		jwt_audience=cfg.access_jwt_audience,
	)
	return ok_response(
		email=identity.email,
		name=identity.name,
		auth_method=identity.auth_method,
		ip_whitelisted=_whitelist_lookup(cfg, client_ip),
		client_ip=client_ip,
	)
