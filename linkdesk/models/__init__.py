#!/usr/bin/env python3
#
# linkdesk/models/__init__.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Pydantic models and declared schemas for LinkDesk."""

from .auth import LoginEvent, WhitelistAdd, WhitelistRemove
from .links import DEFAULT_CATEGORY, Link
from .settings import DEFAULT_SETTINGS_SCHEMA, SettingRule

__all__ = [
	# Links
	"DEFAULT_CATEGORY",
	"Link",
	# Identity / whitelist / audit log
	"LoginEvent",
	"WhitelistAdd",
	"WhitelistRemove",
	# Settings
	"DEFAULT_SETTINGS_SCHEMA",
	"SettingRule",
]
