#!/usr/bin/env python3
#
# linkdesk/main.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""FastAPI application factory and startup lifecycle wiring."""

from __future__ import annotations

import logging
import sqlite3
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from slowapi.errors import RateLimitExceeded

from .api import auth as auth_api
from .api import links as links_api
from .api import settings as settings_api
from .api.errors import LinkDeskError, StorageUnavailable
from .api.response import envelope_key, error_response
from .db.sqlite_runtime import close_all_connections, close_connection, connect
from .db.sqlite_schema import init_schema
from .utils.config import Config, load_config
from .utils.rate_limit import limiter
from .utils.request_id import RequestIDMiddleware

_log = logging.getLogger(__name__)

# ANSI color codes for log levels (if TTY)
_LOG_COLORS = {
	"DEBUG": "\033[36m",    # Cyan
	"INFO": "\033[32m",     # Green
	"WARNING": "\033[33m",  # Yellow
	"ERROR": "\033[31m",    # Red
	"CRITICAL": "\033[35m", # Magenta
}
_RESET = "\033[0m"
_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class _ColoredFormatter(logging.Formatter):
	"""Formatter that colors the level name when writing to a TTY."""

	def format(self, record):
		orig_levelname = record.levelname
		color = _LOG_COLORS.get(orig_levelname)
		record.levelname = f"{color}{orig_levelname:<8}{_RESET}" if color else f"{orig_levelname:<8}"
		try:
			return super().format(record)
		finally:
			record.levelname = orig_levelname


def _setup_logging(log_level: str) -> None:
	"""Configure unified logging for the entire application."""
	level = getattr(logging, log_level, logging.INFO)
	if sys.stdout.isatty():
		formatter: logging.Formatter = _ColoredFormatter(
			fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
			datefmt=_DATE_FORMAT,
		)
	else:
		formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT)

	# force=True removes any pre-existing handlers (e.g. from uvicorn)
	logging.basicConfig(level=level, handlers=[logging.StreamHandler(sys.stdout)], force=True)
	for handler in logging.root.handlers:
		handler.setFormatter(formatter)

	# Route uvicorn through the root handler
	for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
		logger = logging.getLogger(name)
		logger.handlers.clear()
		logger.setLevel(level)
		logger.propagate = True

	for name in ("httpcore", "httpx", "multipart"):
		logging.getLogger(name).setLevel(logging.WARNING)


@asynccontextmanager
async def _lifespan(app: FastAPI):
	"""Create the schema on startup; close tracked connections on shutdown."""
	cfg: Config = app.state.cfg

	conn = connect(cfg.db_path)
	try:
		init_schema(conn)
	finally:
		close_connection(conn)
	_log.info("LinkDesk started (db=%s, links=%s)", cfg.db_path, cfg.links_file)

	yield

	closed = close_all_connections()
	_log.info("LinkDesk shutdown complete (connections_closed=%d)", closed)


# ---------------------------------------------------------------------------
# Exception handlers: every failure becomes the endpoint's JSON envelope
# ---------------------------------------------------------------------------

async def _linkdesk_error_handler(request: Request, exc: LinkDeskError) -> JSONResponse:
	return JSONResponse(
		status_code=exc.status_code,
		content=error_response(envelope_key(request), exc.message),
		headers=exc.headers or None,
	)


async def _storage_error_handler(request: Request, exc: Exception) -> JSONResponse:
	_log.error("STORAGE_ERROR path=%s error=%s", request.url.path, exc)
	return await _linkdesk_error_handler(request, StorageUnavailable())


async def _validation_error_handler(request: Request, exc: PydanticValidationError) -> JSONResponse:
	return JSONResponse(
		status_code=200,
		content=error_response(envelope_key(request), "Invalid input"),
	)


async def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
	_log.info("RATE_LIMITED path=%s limit=%s", request.url.path, exc.detail)
	return JSONResponse(
		status_code=429,
		content=error_response(envelope_key(request), f"Rate limit exceeded: {exc.detail}"),
	)


def create_app(cfg: Config | None = None) -> FastAPI:
	"""Application factory for LinkDesk."""
	cfg = cfg or load_config()
	_setup_logging(cfg.log_level)

	app = FastAPI(
		title="LinkDesk",
		description="Password-gated link manager with IP whitelist, login log and settings",
		version="0.1.0",
		lifespan=_lifespan,
		docs_url="/api/docs",
		redoc_url="/api/redoc",
	)
	app.state.cfg = cfg

	# ─── MIDDLEWARE ──────────────────────────────────────────
	app.add_middleware(RequestIDMiddleware)

	limiter.enabled = cfg.rate_limit_enabled
	app.state.limiter = limiter

	# ─── ERROR ENVELOPES ─────────────────────────────────────
	app.add_exception_handler(LinkDeskError, _linkdesk_error_handler)
	app.add_exception_handler(sqlite3.Error, _storage_error_handler)
	app.add_exception_handler(OSError, _storage_error_handler)
	app.add_exception_handler(PydanticValidationError, _validation_error_handler)
	app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)

	# ─── API ROUTES ──────────────────────────────────────────
	app.include_router(links_api.router, prefix="/api/links")
	app.include_router(auth_api.router, prefix="/api")
	app.include_router(settings_api.router, prefix="/api/settings")

	return app
