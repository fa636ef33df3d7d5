"""
tests/test_rate_limit.py
"""
from __future__ import annotations

from types import SimpleNamespace

from linkdesk.utils.rate_limit import client_ip_key


def _check_auth(client, ip: str):
	return client.post("/api/links", data={"action": "check_auth"}, headers={"X-Forwarded-For": ip})


def test_links_limit_is_per_forwarded_client(make_client):
	client = make_client(rate_limit_enabled=True)
	for _ in range(30):
		assert _check_auth(client, "203.0.113.61").status_code == 200

	resp = _check_auth(client, "203.0.113.61")
	assert resp.status_code == 429
	assert resp.json()["success"] is False
	assert resp.json()["error"].startswith("Rate limit exceeded")

	assert _check_auth(client, "203.0.113.62").status_code == 200


def test_key_ignores_headers_from_untrusted_peer():
	request = SimpleNamespace(
		app=SimpleNamespace(state=SimpleNamespace(cfg=SimpleNamespace(trusted_proxies=frozenset({"10.0.0.1"})))),
		client=SimpleNamespace(host="198.51.100.9"),
		headers={"x-forwarded-for": "203.0.113.70"},
	)
	assert client_ip_key(request) == "198.51.100.9"

	request.client.host = "10.0.0.1"
	assert client_ip_key(request) == "203.0.113.70"
