#!/usr/bin/env python3
#
# linkdesk/__init__.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""LinkDesk – password-gated link manager with access admin endpoints."""

from .main import create_app

__all__ = ["create_app"]
