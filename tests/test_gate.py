"""
tests/test_gate.py
"""
from __future__ import annotations

from conftest import CLIENT_IP, links_action, login

from linkdesk.db import sqlite as sqlite_db


def _fail(client, times: int) -> None:
	for _ in range(times):
		assert login(client, "wrong").status_code == 401


def test_lockout_after_max_attempts(client, clock):
	_fail(client, 5)

	resp = login(client)
	assert resp.status_code == 429
	assert resp.json()["success"] is False
	assert "Too many login attempts" in resp.json()["error"]
	assert int(resp.headers["Retry-After"]) == 900


def test_lockout_window_slides_then_expires(client, clock):
	_fail(client, 5)
	clock.advance(600)
	resp = login(client)
	assert resp.status_code == 429
	assert int(resp.headers["Retry-After"]) == 300

	clock.advance(301)
	assert login(client).status_code == 200


def test_success_clears_attempt_counter(client, clock, conn):
	_fail(client, 4)
	assert login(client).status_code == 200
	row = conn.execute("SELECT 1 FROM login_attempts WHERE ip_address = ?", (CLIENT_IP,)).fetchone()
	assert row is None

	links_action(client, "logout")
	_fail(client, 4)
	assert login(client).status_code == 200


def test_lockout_is_per_ip(client, clock):
	_fail(client, 5)
	resp = client.post(
		"/api/links",
		data={"action": "login", "password": "correct horse battery staple"},
		headers={"X-Forwarded-For": "192.0.2.99"},
	)
	assert resp.status_code == 200


def test_session_sliding_timeout(client, clock):
	login(client)
	clock.advance(1700)
	assert links_action(client, "check_auth").json()["authenticated"] is True
	clock.advance(1700)
	assert links_action(client, "check_auth").json()["authenticated"] is True
	clock.advance(1800)
	assert links_action(client, "check_auth").json()["authenticated"] is False
	assert links_action(client, "get_links").status_code == 401


def test_expired_session_row_is_deleted(client, clock, conn):
	login(client)
	clock.advance(1800)
	links_action(client, "check_auth")
	assert conn.execute("SELECT COUNT(*) FROM sessions").fetchone()[0] == 0


def test_session_token_stored_hashed(client, conn):
	resp = login(client)
	token = resp.cookies.get("linkdesk_session")
	assert token
	rows = conn.execute("SELECT token_hash FROM sessions").fetchall()
	assert len(rows) == 1
	assert rows[0]["token_hash"] != token
	assert len(rows[0]["token_hash"]) == 64


def test_login_attempts_are_audited(client, conn):
	login(client, "wrong")
	login(client)
	logs, total = sqlite_db.list_logins(conn)
	assert total == 2
	newest, oldest = logs
	assert newest["success"] is True
	assert newest["auth_method"] == "password"
	assert newest["ip_address"] == CLIENT_IP
	assert oldest["success"] is False
	assert oldest["failure_reason"] == "invalid_password"


def test_locked_out_attempt_is_audited(client, clock, conn):
	_fail(client, 5)
	login(client)
	logs, _ = sqlite_db.list_logins(conn, limit=1)
	assert logs[0]["failure_reason"] == "locked_out"
