#!/usr/bin/env python3
#
# linkdesk/models/links.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Link (bookmark) models."""

from __future__ import annotations

import html
import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any
from urllib.parse import urlsplit

import bleach
from pydantic import BaseModel, Field, field_validator

from ..utils.crypto import new_link_id
from ..utils.time import link_timestamp

DEFAULT_CATEGORY = "Uncategorized"

# Characters that may legally appear in a URL; everything else is dropped
_URL_DISALLOWED_RE = re.compile(r"[^A-Za-z0-9$\-_.+!*'(),{}|\\^~\[\]`<>#%\";/?:@&=]")
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")


def strip_tags(value: str) -> str:
	"""Remove HTML tags from user-supplied text, leaving the plain text."""
	return html.unescape(bleach.clean(value, tags=set(), strip=True))


def sanitize_url(value: str) -> str:
	"""Drop characters that are not legal anywhere in a URL."""
	return _URL_DISALLOWED_RE.sub("", value.strip())


def is_valid_url(value: str) -> bool:
	"""Return True for an absolute URL with a scheme and a host."""
	if not value:
		return False
	try:
		parts = urlsplit(value)
		hostname = parts.hostname
		parts.port  # raises ValueError for a malformed port
	except ValueError:
		return False
	return bool(parts.scheme and _SCHEME_RE.match(parts.scheme) and hostname)


class Link(BaseModel):
	"""One bookmark as stored in the links document."""
	id: str = Field(..., min_length=1)
	title: str = ""
	url: str
	category: str = DEFAULT_CATEGORY
	description: str = ""
	created: str
	updated: str

	@field_validator("url")
	@classmethod
	def url_absolute(cls, v: str) -> str:
		if not is_valid_url(v):
			raise ValueError("Invalid URL")
		return v

	@classmethod
	def from_form(cls, fields: Mapping[str, Any], now: datetime) -> "Link":
		"""Build a link from submitted form fields.

		Text fields are stripped of markup, a missing id gets a fresh one and
		``updated`` is always set to ``now``. Raises ``ValueError`` for a bad URL.
		"""
		stamp = link_timestamp(now)
		return cls(
			id=str(fields.get("id") or new_link_id()),
			title=strip_tags(str(fields.get("title") or "")),
			url=sanitize_url(str(fields.get("url") or "")),
			category=strip_tags(str(fields.get("category") or DEFAULT_CATEGORY)),
			description=strip_tags(str(fields.get("description") or "")),
			created=str(fields.get("created") or stamp),
			updated=stamp,
		)
