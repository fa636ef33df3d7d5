#!/usr/bin/env python3
#
# linkdesk/utils/request_id.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Request ID middleware for tracing."""

from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

_log = logging.getLogger(__name__)

# Client-supplied ids are echoed back, so keep them short and printable
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class RequestIDMiddleware(BaseHTTPMiddleware):
	"""Tag each request with an id, echo it in ``X-Request-ID`` and log the outcome."""

	async def dispatch(self, request: Request, call_next: Callable) -> Response:
		supplied = request.headers.get("X-Request-ID", "")
		request_id = supplied if _REQUEST_ID_RE.match(supplied) else uuid.uuid4().hex
		request.state.request_id = request_id

		started = time.perf_counter()
		response = await call_next(request)
		elapsed_ms = (time.perf_counter() - started) * 1000

		response.headers["X-Request-ID"] = request_id
		_log.debug(
			"REQUEST id=%s method=%s path=%s status=%d ms=%.1f",
			request_id,
			request.method,
			request.url.path,
			response.status_code,
			elapsed_ms,
		)
		return response
