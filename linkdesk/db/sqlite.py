#!/usr/bin/env python3
#
# linkdesk/db/sqlite.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""SQLite database access layer (single import point for callers)."""

from __future__ import annotations

from .sqlite_auth import (
	clear_login_attempts,
	create_session,
	delete_idle_sessions,
	delete_session,
	get_session,
	lockout_remaining,
	record_failed_login,
	touch_session,
)
from .sqlite_login_log import clamp_page, list_logins, prune_logins, record_login
from .sqlite_runtime import close_all_connections, close_connection, connect, transaction
from .sqlite_schema import init_schema, list_tables
from .sqlite_settings import SettingsUpdate, get_all_settings, set_setting, update_settings
from .sqlite_whitelist import add_whitelist_ip, is_ip_whitelisted, list_whitelist, remove_whitelist_ip

__all__ = [
	# Runtime
	"connect",
	"close_connection",
	"close_all_connections",
	"transaction",
	"init_schema",
	"list_tables",
	# Sessions and lockout
	"create_session",
	"get_session",
	"touch_session",
	"delete_session",
	"delete_idle_sessions",
	"lockout_remaining",
	"record_failed_login",
	"clear_login_attempts",
	# Whitelist
	"is_ip_whitelisted",
	"list_whitelist",
	"add_whitelist_ip",
	"remove_whitelist_ip",
	# Login log
	"record_login",
	"list_logins",
	"prune_logins",
	"clamp_page",
	# Settings
	"SettingsUpdate",
	"set_setting",
	"get_all_settings",
	"update_settings",
]
