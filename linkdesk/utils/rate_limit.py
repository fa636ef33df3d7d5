#!/usr/bin/env python3
#
# linkdesk/utils/rate_limit.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Request rate limiting using slowapi.

This throttles raw request volume per client IP. The password lockout
(a fixed number of failures per window) lives in ``linkdesk.utils.gate``.
"""

from __future__ import annotations

from slowapi import Limiter
from starlette.requests import Request

from .network import resolve_client_ip

# Rate limit presets
RATE_LIMIT_API = "120/minute"     # Identity, whitelist and settings endpoints
RATE_LIMIT_LINKS = "30/minute"    # Link manager (includes password attempts)


def client_ip_key(request: Request) -> str:
	"""Bucket requests by the resolved client IP, the same address the lockout uses."""
	cfg = getattr(request.app.state, "cfg", None)
	trusted = cfg.trusted_proxies if cfg is not None else None
	direct_ip = request.client.host if request.client else None
	return resolve_client_ip(request.headers, direct_ip, trusted)


# Global limiter instance
limiter = Limiter(key_func=client_ip_key)

__all__ = [
	"RATE_LIMIT_API",
	"RATE_LIMIT_LINKS",
	"client_ip_key",
	"limiter",
]
