#!/usr/bin/env python3
#
# linkdesk/utils/network.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Network utility functions: address validation and client IP resolution."""

from __future__ import annotations

import ipaddress
from collections.abc import Container, Mapping

__all__ = [
	"is_valid_ip",
	"normalize_ip",
	"resolve_client_ip",
]

UNKNOWN_IP = "unknown"


def is_valid_ip(value: str) -> bool:
	"""Return True for a syntactically valid IPv4 or IPv6 address."""
	try:
		ipaddress.ip_address(value)
	except ValueError:
		return False
	return True


def normalize_ip(value: str) -> str:
	"""Return the canonical text form of an address; unparseable input is returned stripped."""
	value = value.strip()
	try:
		return str(ipaddress.ip_address(value))
	except ValueError:
		return value


def resolve_client_ip(
	headers: Mapping[str, str],
	direct_ip: str | None,
	trusted_proxies: Container[str] | None = None,
) -> str:
	"""Resolve the caller's IP from the proxy chain.

	Precedence (first non-empty wins): ``CF-Connecting-IP``, first hop of
	``X-Forwarded-For``, ``X-Real-IP``, the socket address. When
	``trusted_proxies`` is non-empty the headers are only honoured for
	requests arriving from one of those addresses.
	"""
	direct_ip = (direct_ip or "").strip()
	honour_headers = not trusted_proxies or direct_ip in trusted_proxies

	if honour_headers:
		cf_ip = (headers.get("cf-connecting-ip") or "").strip()
		if cf_ip:
			return cf_ip

		forwarded_for = headers.get("x-forwarded-for") or ""
		first_hop = forwarded_for.split(",")[0].strip()
		if first_hop:
			return first_hop

		real_ip = (headers.get("x-real-ip") or "").strip()
		if real_ip:
			return real_ip

	return direct_ip or UNKNOWN_IP
