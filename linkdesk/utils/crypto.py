#!/usr/bin/env python3
#
# linkdesk/utils/crypto.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Cryptographic helpers for the shared password, session tokens and link ids."""

from __future__ import annotations

import hashlib
import hmac
import os
import secrets

_PBKDF2_PREFIX = "pbkdf2:"
_PBKDF2_ITERATIONS = 600_000  # OWASP recommended minimum for PBKDF2-SHA256


def hash_password(password: str) -> str:
	"""Hash a password using PBKDF2-SHA256 with random salt.

	Returns:
		Format: 'pbkdf2:sha256:iterations$salt$hash'
	"""
	salt = os.urandom(16)
	dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ITERATIONS)
	return f"pbkdf2:sha256:{_PBKDF2_ITERATIONS}${salt.hex()}${dk.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
	"""Verify a password against a stored PBKDF2 hash (constant time)."""
	try:
		method, salt_hex, hash_hex = password_hash.split("$")
		scheme, algorithm, iterations = method.split(":")
		if scheme != "pbkdf2":
			return False
		dk = hashlib.pbkdf2_hmac(
			algorithm,
			password.encode("utf-8"),
			bytes.fromhex(salt_hex),
			int(iterations),
		)
		return hmac.compare_digest(dk, bytes.fromhex(hash_hex))
	except (ValueError, TypeError):
		return False


def verify_shared_secret(candidate: str, configured: str) -> bool:
	"""Check a submitted password against the configured shared secret.

	The configured value may be plain text or a ``pbkdf2:`` hash produced by
	:func:`hash_password`. An empty configured secret never matches.
	"""
	if not configured:
		return False
	if configured.startswith(_PBKDF2_PREFIX):
		return verify_password(candidate, configured)
	return hmac.compare_digest(candidate.encode("utf-8"), configured.encode("utf-8"))


def new_token() -> str:
	"""Generate a new secure random session token (32 bytes, URL-safe base64)."""
	return secrets.token_urlsafe(32)


def hash_token(token: str) -> str:
	"""Hash a session token for storage using SHA-256."""
	return hashlib.sha256(token.encode("utf-8")).hexdigest()


def new_link_id() -> str:
	"""Generate an opaque identifier for a link record."""
	return secrets.token_hex(8)
