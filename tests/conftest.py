"""
tests/conftest.py
"""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from linkdesk import create_app
from linkdesk.db import sqlite as sqlite_db
from linkdesk.utils.config import Config

PASSWORD = "correct horse battery staple"
CLIENT_IP = "198.51.100.20"


class Clock:
	"""Mutable stand-in for ``utcnow`` so session and lockout windows can be stepped."""

	def __init__(self, start: datetime):
		self.now = start

	def __call__(self) -> datetime:
		return self.now

	def advance(self, seconds: float) -> None:
		self.now += timedelta(seconds=seconds)


@pytest.fixture
def cfg(tmp_path: Path) -> Config:
	"""Config rooted in a per-test data directory, rate limiter off."""
	return Config(
		data_dir=tmp_path,
		db_path=tmp_path / "app.db",
		links_file=tmp_path / "links_data.json",
		password=PASSWORD,
		session_timeout=1800,
		max_login_attempts=5,
		lockout_seconds=900,
		rate_limit_enabled=False,
		log_level="WARNING",
	)


@pytest.fixture
def make_client(cfg: Config):
	"""Build a client for ``cfg`` with optional field overrides."""
	clients: list[TestClient] = []

	def _make(**overrides) -> TestClient:
		app = create_app(replace(cfg, **overrides) if overrides else cfg)
		client = TestClient(app, headers={"X-Forwarded-For": CLIENT_IP})
		client.__enter__()
		clients.append(client)
		return client

	yield _make
	for client in clients:
		client.__exit__(None, None, None)


@pytest.fixture
def client(make_client) -> TestClient:
	return make_client()


@pytest.fixture
def conn(client: TestClient, cfg: Config) -> Generator:
	"""Direct connection to the test database (schema created by app startup)."""
	db = sqlite_db.connect(cfg.db_path)
	try:
		yield db
	finally:
		sqlite_db.close_connection(db)


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch) -> Clock:
	"""Freeze the credential gate's notion of now."""
	from linkdesk.utils import gate

	fake = Clock(datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc))
	monkeypatch.setattr(gate, "utcnow", fake)
	return fake


def links_action(client: TestClient, action: str, **fields):
	"""POST one link-manager action as a form body."""
	return client.post("/api/links", data={"action": action, **fields})


def login(client: TestClient, password: str = PASSWORD):
	return links_action(client, "login", password=password)
