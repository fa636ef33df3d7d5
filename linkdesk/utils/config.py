#!/usr/bin/env python3
#
# linkdesk/utils/config.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Configuration loading and app-level defaults."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from ..models.settings import DEFAULT_SETTINGS_SCHEMA, SettingRule

_log = logging.getLogger(__name__)


class ConfigValidationError(Exception):
	"""Raised when critical configuration is missing or invalid."""


DEFAULT_SESSION_TIMEOUT = 1800  # 30 minutes
DEFAULT_MAX_LOGIN_ATTEMPTS = 5
DEFAULT_LOCKOUT_SECONDS = 900  # 15 minutes
DEFAULT_LOG_RETENTION_DAYS = 30
DEFAULT_PORT = 8000


@dataclass(frozen=True)
class Config:
	"""Resolved runtime configuration derived from env and defaults."""
	data_dir: Path
	db_path: Path
	links_file: Path
	password: str
	session_timeout: int = DEFAULT_SESSION_TIMEOUT
	max_login_attempts: int = DEFAULT_MAX_LOGIN_ATTEMPTS
	lockout_seconds: int = DEFAULT_LOCKOUT_SECONDS
	log_retention_days: int = DEFAULT_LOG_RETENTION_DAYS
	access_jwt_key: str = ""
	access_jwt_algorithms: tuple[str, ...] = ("RS256",)
	access_jwt_audience: str | None = None
	trusted_proxies: frozenset[str] = frozenset()
	rate_limit_enabled: bool = True
	port: int = DEFAULT_PORT
	log_level: str = "INFO"
	settings_schema: tuple[SettingRule, ...] = field(default=DEFAULT_SETTINGS_SCHEMA)


def _parse_value(raw: str) -> str:
	"""Extract value, respecting quotes and stripping inline comments."""
	raw = raw.strip()
	if raw and raw[0] in ('"', "'"):
		quote = raw[0]
		end = raw.find(quote, 1)
		if end != -1:
			return raw[1:end]
	if " #" in raw:
		raw = raw.split(" #", 1)[0]
	return raw.strip()


def load_dotenv(dotenv_path: Path | None = None) -> None:
	"""Load simple KEY=VALUE pairs from settings.env.

	Blank lines, comments and ``export`` prefixes are handled; variables
	already present in the environment are never overridden.
	"""
	project_root = Path(__file__).resolve().parents[2]
	dotenv_path = dotenv_path or (project_root / "settings.env")
	if not dotenv_path.exists():
		return
	for raw_line in dotenv_path.read_text(encoding="utf-8").splitlines():
		line = raw_line.strip()
		if not line or line.startswith("#") or "=" not in line:
			continue
		key, value = line.split("=", 1)
		key = key.strip()
		if key.startswith("export "):
			key = key[7:].strip()
		if not key:
			continue
		os.environ.setdefault(key, _parse_value(value))


def _env_int(name: str, default: int, *, minimum: int = 0) -> int:
	raw = os.getenv(name, "").strip()
	if not raw:
		return default
	try:
		value = int(raw)
	except ValueError as exc:
		raise ConfigValidationError(f"{name} must be an integer, got {raw!r}") from exc
	if value < minimum:
		raise ConfigValidationError(f"{name} must be >= {minimum}, got {value}")
	return value


def _env_list(name: str) -> tuple[str, ...]:
	raw = os.getenv(name, "")
	return tuple(item.strip() for item in raw.split(",") if item.strip())


def _env_bool(name: str, default: bool) -> bool:
	raw = os.getenv(name, "").strip().lower()
	if not raw:
		return default
	return raw in ("1", "true", "yes", "on")


def load_config(*, require_password: bool = True) -> Config:
	"""Load configuration from environment variables (optionally via settings.env).

	Maintenance commands that never check the link manager password pass
	``require_password=False``; the password is then left empty.
	"""
	load_dotenv()
	project_root = Path(__file__).resolve().parents[2]

	data_dir = Path(os.getenv("LINKDESK_DATA_DIR", str(project_root / "data"))).resolve()
	try:
		if data_dir.exists() and not data_dir.is_dir():
			raise ConfigValidationError(f"Path exists but is not a directory: {data_dir}")
		data_dir.mkdir(parents=True, exist_ok=True)
	except OSError as exc:
		raise ConfigValidationError(f"Cannot create data directory: {exc}") from exc

	allowed_levels = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
	log_level = os.getenv("LOG_LEVEL", "INFO").upper()
	if log_level not in allowed_levels:
		log_level = "INFO"

	password = os.getenv("LINKDESK_PASSWORD", "")
	if not password and require_password:
		if "pytest" not in sys.modules and "PYTEST_CURRENT_TEST" not in os.environ:
			raise ConfigValidationError(
				"LINKDESK_PASSWORD is not set. "
				"Refusing to start the link manager without a shared secret. "
				"Store a hash with: linkdesk hash-password"
			)
		password = "test-only-password-do-not-use-in-production"
		_log.debug("Using test-only link manager password")

	algorithms = _env_list("LINKDESK_ACCESS_JWT_ALGORITHMS") or ("RS256",)
	audience = os.getenv("LINKDESK_ACCESS_JWT_AUDIENCE", "").strip() or None

	return Config(
		data_dir=data_dir,
		db_path=(data_dir / "app.db").resolve(),
		links_file=(data_dir / "links_data.json").resolve(),
		password=password,
		session_timeout=_env_int("LINKDESK_SESSION_TIMEOUT", DEFAULT_SESSION_TIMEOUT, minimum=1),
		max_login_attempts=_env_int("LINKDESK_MAX_LOGIN_ATTEMPTS", DEFAULT_MAX_LOGIN_ATTEMPTS, minimum=1),
		lockout_seconds=_env_int("LINKDESK_LOCKOUT_SECONDS", DEFAULT_LOCKOUT_SECONDS, minimum=1),
		log_retention_days=_env_int("LINKDESK_LOG_RETENTION_DAYS", DEFAULT_LOG_RETENTION_DAYS),
		access_jwt_key=os.getenv("LINKDESK_ACCESS_JWT_KEY", ""),
		access_jwt_algorithms=algorithms,
		access_jwt_audience=audience,
		trusted_proxies=frozenset(_env_list("LINKDESK_TRUSTED_PROXIES")),
		rate_limit_enabled=_env_bool("LINKDESK_RATE_LIMIT_ENABLED", True),
		port=_env_int("LINKDESK_PORT", DEFAULT_PORT, minimum=1),
		log_level=log_level,
	)
