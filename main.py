#!/usr/bin/env python3
#
# main.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

# LinkDesk - link manager and access admin endpoints
# Local development entry point
#

import os

import uvicorn
from linkdesk.utils.config import load_config

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _uvicorn_log_config(level: str) -> dict:
	"""Uvicorn dict-config using the application's log format at ``level``."""
	formatter = {"format": _LOG_FORMAT, "datefmt": _DATE_FORMAT}
	return {
		"version": 1,
		"disable_existing_loggers": False,
		"formatters": {"default": formatter, "access": dict(formatter)},
		"handlers": {
			# Server messages to stderr, access lines to stdout
			"default": {"formatter": "default", "class": "logging.StreamHandler", "stream": "ext://sys.stderr"},
			"access": {"formatter": "access", "class": "logging.StreamHandler", "stream": "ext://sys.stdout"},
		},
		"loggers": {
			"uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
			"uvicorn.error": {"level": level},
			"uvicorn.access": {"handlers": ["access"], "level": level, "propagate": False},
		},
	}


if __name__ == "__main__":
	cfg = load_config()

	uvicorn.run(
		"linkdesk:create_app",
		host=os.environ.get("LINKDESK_HOST", "127.0.0.1"),
		port=cfg.port,
		reload=os.environ.get("LINKDESK_DEV_RELOAD", "").lower() in ("1", "true", "yes"),
		factory=True,
		log_config=_uvicorn_log_config(cfg.log_level),
	)
