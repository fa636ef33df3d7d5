#!/usr/bin/env python3
#
# linkdesk/api/settings.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Application settings endpoint."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool

from ..db import sqlite as sqlite_db
from ..utils.deps import get_request_context
from ..utils.rate_limit import RATE_LIMIT_API, limiter
from .dispatch import ActionParams, ActionTable, RequestContext, read_params
from .response import OK_KEY, envelope, error_response, ok_response

_log = logging.getLogger(__name__)

router = APIRouter(tags=["settings"], dependencies=[Depends(envelope(OK_KEY))])


class SettingsAction(str, Enum):
	GET = "get"
	SET = "set"


actions: ActionTable[SettingsAction] = ActionTable(SettingsAction)


@actions.register(SettingsAction.GET)
def _get(ctx: RequestContext, params: ActionParams) -> dict[str, Any]:
	return ok_response(settings=sqlite_db.get_all_settings(ctx.conn, ctx.cfg.settings_schema))


@actions.register(SettingsAction.SET)
def _set(ctx: RequestContext, params: ActionParams) -> dict[str, Any]:
	values = {key: value for key, value in params.fields.items() if key != "action"}
	result = sqlite_db.update_settings(ctx.conn, ctx.cfg.settings_schema, values)
	if result.saved:
		_log.info("SETTINGS_UPDATED keys=%s ip=%s", ",".join(sorted(result.saved)), ctx.client_ip)

	if result.errors:
		return {OK_KEY: False, "errors": result.errors, "settings": result.saved}
	if not result.saved:
		return error_response(OK_KEY, "No valid settings provided")
	return ok_response(settings=result.saved)


actions.ensure_complete()


@router.api_route("", methods=["GET", "POST"])
@limiter.limit(RATE_LIMIT_API)
async def settings_endpoint(request: Request, ctx: RequestContext = Depends(get_request_context)):
	"""``get`` returns every declared setting; ``set`` updates the submitted keys."""
	params = await read_params(request)
	action = params.action(default=SettingsAction.GET.value)
	return await run_in_threadpool(actions.dispatch, action, ctx, params)
