#!/usr/bin/env python3
#
# linkdesk/api/links.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Link manager endpoint: password gate plus bookmark CRUD, import and export."""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError as PydanticValidationError

from ..db.json_links import LinkStore
from ..models.links import Link
from ..utils import gate
from ..utils.deps import get_request_context
from ..utils.rate_limit import RATE_LIMIT_LINKS, limiter
from ..utils.time import utcnow
from .dispatch import ActionParams, ActionTable, RequestContext, read_params
from .errors import InvalidFormat, InvalidURL
from .response import SUCCESS_KEY, envelope, ok_response

_log = logging.getLogger(__name__)

router = APIRouter(tags=["links"], dependencies=[Depends(envelope(SUCCESS_KEY))])


class LinkAction(str, Enum):
	LOGIN = "login"
	LOGOUT = "logout"
	CHECK_AUTH = "check_auth"
	GET_LINKS = "get_links"
	SAVE_LINK = "save_link"
	DELETE_LINK = "delete_link"
	EXPORT_LINKS = "export_links"
	IMPORT_LINKS = "import_links"


# Actions reachable without an active session
PUBLIC_ACTIONS = frozenset({LinkAction.LOGIN, LinkAction.LOGOUT, LinkAction.CHECK_AUTH})

actions: ActionTable[LinkAction] = ActionTable(LinkAction)


def _store(ctx: RequestContext) -> LinkStore:
	return LinkStore(ctx.cfg.links_file)


# ---------------------------------------------------------------------------
# Session actions
# ---------------------------------------------------------------------------

@actions.register(LinkAction.LOGIN)
def _login(ctx: RequestContext, params: ActionParams) -> dict[str, Any]:
	gate.login(ctx, str(params.get("password") or ""))
	return ok_response(SUCCESS_KEY)


@actions.register(LinkAction.LOGOUT)
def _logout(ctx: RequestContext, params: ActionParams) -> dict[str, Any]:
	gate.logout(ctx)
	return ok_response(SUCCESS_KEY)


@actions.register(LinkAction.CHECK_AUTH)
def _check_auth(ctx: RequestContext, params: ActionParams) -> dict[str, Any]:
	return ok_response(SUCCESS_KEY, authenticated=gate.check_auth(ctx))


# ---------------------------------------------------------------------------
# Link actions (session required)
# ---------------------------------------------------------------------------

@actions.register(LinkAction.GET_LINKS)
def _get_links(ctx: RequestContext, params: ActionParams) -> dict[str, Any]:
	return ok_response(SUCCESS_KEY, links=_store(ctx).load())


@actions.register(LinkAction.SAVE_LINK)
def _save_link(ctx: RequestContext, params: ActionParams) -> dict[str, Any]:
	try:
		link = Link.from_form(params.fields, utcnow())
	except PydanticValidationError:
		raise InvalidURL() from None
	created = _store(ctx).upsert(link)
	_log.info("LINK_SAVED id=%s new=%s ip=%s", link.id, created, ctx.client_ip)
	return ok_response(SUCCESS_KEY, id=link.id)


@actions.register(LinkAction.DELETE_LINK)
def _delete_link(ctx: RequestContext, params: ActionParams) -> dict[str, Any]:
	link_id = str(params.get("id") or "")
	removed = _store(ctx).delete(link_id)
	if removed:
		_log.info("LINK_DELETED id=%s ip=%s", link_id, ctx.client_ip)
	return ok_response(SUCCESS_KEY)


@actions.register(LinkAction.EXPORT_LINKS)
def _export_links(ctx: RequestContext, params: ActionParams) -> dict[str, Any]:
	return ok_response(SUCCESS_KEY, links=_store(ctx).load())


@actions.register(LinkAction.IMPORT_LINKS)
def _import_links(ctx: RequestContext, params: ActionParams) -> dict[str, Any]:
	data = params.get("data", "[]")
	if isinstance(data, str):
		try:
			data = json.loads(data)
		except json.JSONDecodeError:
			raise InvalidFormat() from None
	if not isinstance(data, list):
		raise InvalidFormat()
	count = _store(ctx).replace_all(data)
	_log.info("LINKS_IMPORTED count=%d ip=%s", count, ctx.client_ip)
	return ok_response(SUCCESS_KEY, count=count)


actions.ensure_complete()


def run_action(name: str, ctx: RequestContext, params: ActionParams) -> dict[str, Any]:
	"""Enforce the session requirement, then dispatch."""
	action = actions.parse(name)
	if action not in PUBLIC_ACTIONS:
		gate.require_session(ctx)
	return actions.dispatch(action.value, ctx, params)


@router.post("")
@limiter.limit(RATE_LIMIT_LINKS)
async def links_endpoint(request: Request, ctx: RequestContext = Depends(get_request_context)):
	"""Single entry point; the ``action`` field selects the operation."""
	params = await read_params(request)
	return await run_in_threadpool(run_action, params.action(), ctx, params)
