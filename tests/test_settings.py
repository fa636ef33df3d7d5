"""
tests/test_settings.py
"""
from __future__ import annotations

import pytest

from linkdesk.models.settings import DEFAULT_SETTINGS_SCHEMA, SettingRule


def _set(client, **values):
	return client.post("/api/settings", json={"action": "set", **values})


def test_defaults(client):
	resp = client.get("/api/settings")
	assert resp.status_code == 200
	assert resp.json() == {
		"ok": True,
		"settings": {"theme": "dark", "language": "en", "notifications_enabled": True},
	}


def test_set_all_valid(client):
	body = _set(client, theme="light", language="de", notifications_enabled=False).json()
	assert body == {
		"ok": True,
		"settings": {"theme": "light", "language": "de", "notifications_enabled": False},
	}
	assert client.get("/api/settings?action=get").json()["settings"]["notifications_enabled"] is False


def test_partial_update_keeps_valid_keys(client):
	body = _set(client, theme="neon", language="fr").json()
	assert body["ok"] is False
	assert body["settings"] == {"language": "fr"}
	assert body["errors"] == ["theme must be one of: light, dark, auto"]

	stored = client.get("/api/settings").json()["settings"]
	assert stored["theme"] == "dark"
	assert stored["language"] == "fr"


def test_unknown_key_rejected(client):
	body = _set(client, font_size="12").json()
	assert body == {"ok": False, "errors": ["Unknown setting: font_size"], "settings": {}}


def test_nothing_to_set(client):
	assert _set(client).json() == {"ok": False, "error": "No valid settings provided"}


def test_set_via_form_body(client):
	resp = client.post("/api/settings", data={"action": "set", "notifications_enabled": "0"})
	assert resp.json() == {"ok": True, "settings": {"notifications_enabled": False}}


def test_unknown_settings_action(client):
	resp = client.post("/api/settings", json={"action": "reset"})
	assert resp.status_code == 400
	assert resp.json() == {"ok": False, "error": "Unknown action"}


@pytest.mark.parametrize("value", [True, False, "true", "false", "1", "0"])
def test_boolean_rule_accepts(value):
	rule = SettingRule("flag", "boolean", True)
	assert rule.validate(value) is None


@pytest.mark.parametrize("value", ["yes", 2, None, "TRUE"])
def test_boolean_rule_rejects(value):
	rule = SettingRule("flag", "boolean", True)
	assert rule.validate(value) == "flag must be a boolean"


def test_integer_rule():
	rule = SettingRule("page_size", "integer", 20)
	assert rule.validate("15") is None
	assert rule.validate(15.0) is None
	assert rule.validate("abc") == "page_size must be an integer"
	assert rule.validate(True) == "page_size must be an integer"
	assert rule.encode("15") == "15"
	assert rule.decode("15") == 15
	assert rule.decode("junk") == 20


def test_string_rule_rejects_non_string():
	rule = next(r for r in DEFAULT_SETTINGS_SCHEMA if r.key == "language")
	assert rule.validate(["en"]) == "language must be a string"
