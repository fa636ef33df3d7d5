#!/usr/bin/env python3
#
# linkdesk/api/errors.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Error taxonomy shared by all action endpoints.

Every error carries the HTTP status it maps to; the exception handlers in
``linkdesk.main`` turn them into the endpoint's JSON envelope.
"""

from __future__ import annotations


class LinkDeskError(Exception):
	"""Base class for errors reported to the client as a JSON envelope."""
	status_code: int = 400
	default_message: str = "Request failed"

	def __init__(self, message: str | None = None, *, headers: dict[str, str] | None = None):
		self.message = message or self.default_message
		self.headers = headers or {}
		super().__init__(self.message)


class ValidationError(LinkDeskError):
	"""User-correctable input problem. Reported with HTTP 200 and a failure envelope."""
	status_code = 200
	default_message = "Invalid input"


class InvalidURL(ValidationError):
	default_message = "Invalid URL"


class InvalidAddress(ValidationError):
	default_message = "Invalid IP address format"


class InvalidFormat(ValidationError):
	default_message = "Invalid data format"


class Unauthenticated(LinkDeskError):
	status_code = 401
	default_message = "Not authenticated"


class InvalidCredentials(LinkDeskError):
	status_code = 401
	default_message = "Invalid password"


class RateLimited(LinkDeskError):
	status_code = 429
	default_message = "Too many login attempts. Please try again later."

	def __init__(self, retry_after: int, message: str | None = None):
		super().__init__(message, headers={"Retry-After": str(max(retry_after, 1))})
		self.retry_after = retry_after


class UnknownAction(LinkDeskError):
	status_code = 400
	default_message = "Unknown action"


class StorageUnavailable(LinkDeskError):
	status_code = 503
	default_message = "Storage unavailable"
