#!/usr/bin/env python3
#
# linkdesk/utils/identity.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Caller identity resolution from the access proxy header or signed cookie.

Precedence:

1. ``Cf-Access-Authenticated-User-Email`` injected by the access proxy.
   Treated as ground truth.
2. ``CF_Authorization`` cookie holding a three-part signed token. The
   signature, expiry and (when configured) audience are verified; without a
   configured key the cookie is ignored.
3. Anonymous.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from jose import JWTError, jwt

_log = logging.getLogger(__name__)

__all__ = [
	"ACCESS_EMAIL_HEADER",
	"ACCESS_COOKIE",
	"AUTH_METHOD_HEADER",
	"AUTH_METHOD_JWT",
	"AUTH_METHOD_NONE",
	"Identity",
	"ANONYMOUS",
	"display_name_from_email",
	"decode_access_token",
	"resolve_identity",
]

ACCESS_EMAIL_HEADER = "cf-access-authenticated-user-email"
ACCESS_COOKIE = "CF_Authorization"

AUTH_METHOD_HEADER = "cloudflare_header"
AUTH_METHOD_JWT = "cloudflare_jwt"
AUTH_METHOD_NONE = "none"


@dataclass(frozen=True)
class Identity:
	"""Who the caller is and how we know it."""
	email: str = ""
	name: str = ""
	auth_method: str = AUTH_METHOD_NONE

	@property
	def is_anonymous(self) -> bool:
		return not self.email

	@property
	def trust_level(self) -> str:
		"""``proxy`` for header identities, ``token`` for verified cookies, else ``anonymous``."""
		if self.auth_method == AUTH_METHOD_HEADER:
			return "proxy"
		if self.auth_method == AUTH_METHOD_JWT:
			return "token"
		return "anonymous"


ANONYMOUS = Identity()


def display_name_from_email(email: str) -> str:
	"""Derive a display name from the local part (``john.smith@x`` -> ``John Smith``)."""
	if not email:
		return ""
	local = email.split("@", 1)[0]
	parts = local.replace("_", ".").split(".")
	return " ".join(part[:1].upper() + part[1:] for part in parts)


def decode_access_token(
	token: str,
	key: str,
	algorithms: Sequence[str],
	audience: str | None = None,
) -> dict | None:
	"""Verify a signed access token and return its claims, or None if it does not verify."""
	if not key or token.count(".") != 2:
		return None
	try:
		claims = jwt.decode(
			token,
			key,
			algorithms=list(algorithms),
			audience=audience,
			options={"verify_aud": audience is not None},
		)
	except JWTError as exc:
		_log.info("ACCESS_TOKEN_REJECTED reason=%s", exc)
		return None
	return claims if isinstance(claims, dict) else None


def resolve_identity(
	headers: Mapping[str, str],
	cookies: Mapping[str, str],
	*,
	jwt_key: str = "",
	jwt_algorithms: Sequence[str] = ("RS256",),
	jwt_audience: str | None = None,
) -> Identity:
	"""Resolve the caller's identity following the documented precedence."""
	email = (headers.get(ACCESS_EMAIL_HEADER) or "").strip()
	if email:
		return Identity(email=email, name=display_name_from_email(email), auth_method=AUTH_METHOD_HEADER)

	token = cookies.get(ACCESS_COOKIE) or ""
	if token:
		if not jwt_key:
			_log.debug("ACCESS_TOKEN_IGNORED reason=no verification key configured")
			return ANONYMOUS
		claims = decode_access_token(token, jwt_key, jwt_algorithms, jwt_audience)
		email = str((claims or {}).get("email") or "").strip()
		if email:
			return Identity(email=email, name=display_name_from_email(email), auth_method=AUTH_METHOD_JWT)

	return ANONYMOUS
