"""
tests/test_links.py
"""
from __future__ import annotations

import json

from conftest import PASSWORD, links_action, login

from linkdesk.db.json_links import LinkStore


def test_check_auth_without_session(client):
	resp = links_action(client, "check_auth")
	assert resp.status_code == 200
	assert resp.json() == {"success": True, "authenticated": False}


def test_login_wrong_password(client):
	resp = login(client, "nope")
	assert resp.status_code == 401
	assert resp.json() == {"success": False, "error": "Invalid password"}
	assert links_action(client, "check_auth").json()["authenticated"] is False


def test_login_sets_httponly_cookie(client):
	resp = login(client)
	assert resp.status_code == 200
	assert resp.json() == {"success": True}
	cookie = resp.headers["set-cookie"].lower()
	assert "linkdesk_session=" in cookie
	assert "httponly" in cookie
	assert "samesite=strict" in cookie

	assert links_action(client, "check_auth").json() == {"success": True, "authenticated": True}


def test_logout_ends_session(client):
	login(client)
	assert links_action(client, "logout").json() == {"success": True}
	assert links_action(client, "check_auth").json()["authenticated"] is False


def test_logout_without_session_succeeds(client):
	assert links_action(client, "logout").json() == {"success": True}


def test_link_actions_require_session(client):
	for action in ("get_links", "save_link", "delete_link", "export_links", "import_links"):
		resp = links_action(client, action)
		assert resp.status_code == 401, action
		assert resp.json() == {"success": False, "error": "Not authenticated"}


def test_unknown_action(client):
	resp = links_action(client, "launch_rockets")
	assert resp.status_code == 400
	assert resp.json() == {"success": False, "error": "Unknown action"}


def test_save_link_then_list(client):
	login(client)
	resp = links_action(
		client,
		"save_link",
		title="<b>Docs</b>",
		url="https://docs.example.org/start",
		description="Team <i>handbook</i>",
	)
	body = resp.json()
	assert body["success"] is True
	link_id = body["id"]
	assert link_id

	links = links_action(client, "get_links").json()["links"]
	assert len(links) == 1
	link = links[0]
	assert link["id"] == link_id
	assert link["title"] == "Docs"
	assert link["description"] == "Team handbook"
	assert link["category"] == "Uncategorized"
	assert link["url"] == "https://docs.example.org/start"
	assert len(link["updated"]) == len("2025-01-01 00:00:00")


def test_save_link_upsert_keeps_single_entry(client):
	login(client)
	links_action(client, "save_link", id="abc", title="First", url="https://a.example")
	links_action(client, "save_link", id="other", title="Other", url="https://b.example")
	links_action(client, "save_link", id="abc", title="Renamed", url="https://a.example/new")

	links = links_action(client, "get_links").json()["links"]
	assert [item["id"] for item in links] == ["abc", "other"]
	assert links[0]["title"] == "Renamed"
	assert links[0]["url"] == "https://a.example/new"


def test_save_link_accepts_json_body(client):
	login(client)
	resp = client.post(
		"/api/links",
		json={"action": "save_link", "title": "Json", "url": "http://json.example", "category": "Work"},
	)
	assert resp.json()["success"] is True
	links = links_action(client, "get_links").json()["links"]
	assert links[0]["category"] == "Work"


def test_save_link_invalid_url(client):
	login(client)
	for url in ("", "not a url", "example.com/path", "https://"):
		resp = links_action(client, "save_link", title="Bad", url=url)
		assert resp.status_code == 200
		assert resp.json() == {"success": False, "error": "Invalid URL"}, url
	assert links_action(client, "get_links").json()["links"] == []


def test_delete_link(client):
	login(client)
	link_id = links_action(client, "save_link", title="Gone", url="https://gone.example").json()["id"]
	assert links_action(client, "delete_link", id=link_id).json() == {"success": True}
	assert links_action(client, "get_links").json()["links"] == []


def test_delete_missing_link_is_noop(client):
	login(client)
	links_action(client, "save_link", id="keep", url="https://keep.example")
	assert links_action(client, "delete_link", id="missing").json() == {"success": True}
	assert [item["id"] for item in links_action(client, "get_links").json()["links"]] == ["keep"]


def test_export_import_roundtrip(client, cfg):
	login(client)
	links_action(client, "save_link", id="one", title="One", url="https://one.example")
	links_action(client, "save_link", id="two", title="Two", url="https://two.example")
	exported = links_action(client, "export_links").json()["links"]

	links_action(client, "delete_link", id="one")
	resp = links_action(client, "import_links", data=json.dumps(exported))
	assert resp.json() == {"success": True, "count": 2}
	assert links_action(client, "export_links").json()["links"] == exported
	assert LinkStore(cfg.links_file).load() == exported


def test_import_preserves_unknown_fields(client):
	login(client)
	payload = [{"id": "x", "url": "https://x.example", "pinned": True}]
	links_action(client, "import_links", data=json.dumps(payload))
	assert links_action(client, "export_links").json()["links"] == payload


def test_import_rejects_non_array(client):
	login(client)
	links_action(client, "save_link", id="stay", url="https://stay.example")
	for data in ('{"id": "x"}', "not json", "42"):
		resp = links_action(client, "import_links", data=data)
		assert resp.status_code == 200
		assert resp.json() == {"success": False, "error": "Invalid data format"}
	assert len(links_action(client, "get_links").json()["links"]) == 1


def test_corrupt_links_file_reads_empty(client, cfg):
	cfg.links_file.write_text("{broken", encoding="utf-8")
	login(client)
	assert links_action(client, "get_links").json() == {"success": True, "links": []}


def test_links_file_is_pretty_printed(client, cfg):
	login(client)
	links_action(client, "save_link", id="p", url="https://p.example")
	text = cfg.links_file.read_text(encoding="utf-8")
	assert text.startswith("[\n    {")
	assert not list(cfg.links_file.parent.glob(".links_data.json.*.tmp"))


def test_password_may_be_pbkdf2_hash(make_client):
	from linkdesk.utils.crypto import hash_password

	client = make_client(password=hash_password(PASSWORD))
	assert login(client, "wrong").status_code == 401
	assert login(client).json() == {"success": True}
