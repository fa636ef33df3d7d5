#!/usr/bin/env python3
#
# linkdesk/db/json_links.py
# Copyright (C) 2025-2026 Gill-Bates http://github.com/Gill-Bates
#

"""Flat-file link store: one JSON array, insertion order is display order."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from ..models.links import Link

_log = logging.getLogger(__name__)


def _atomic_write_text(path: Path, content: str) -> None:
	"""Atomically write UTF-8 text to a file in the same directory."""
	path.parent.mkdir(parents=True, exist_ok=True)
	fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
	try:
		with os.fdopen(fd, "w", encoding="utf-8") as f:
			f.write(content)
			f.flush()
			os.fsync(f.fileno())
		os.replace(tmp_path, path)
	finally:
		if os.path.exists(tmp_path):
			os.unlink(tmp_path)


class LinkStore:
	"""Read and rewrite the links document.

	Records are kept as plain dicts so an imported collection is exported
	back verbatim, including fields this application does not know about.
	"""

	def __init__(self, path: Path):
		self.path = path

	def load(self) -> list[Any]:
		"""Return the stored collection; a missing or unreadable file is empty."""
		if not self.path.exists():
			return []
		raw = self.path.read_text(encoding="utf-8")
		if not raw.strip():
			return []
		try:
			data = json.loads(raw)
		except json.JSONDecodeError as exc:
			_log.warning("LINKS_CORRUPT path=%s error=%s - treating as empty", self.path, exc)
			return []
		if not isinstance(data, list):
			_log.warning("LINKS_CORRUPT path=%s error=not a list - treating as empty", self.path)
			return []
		return data

	def save(self, links: list[Any]) -> None:
		_atomic_write_text(self.path, json.dumps(links, indent=4, ensure_ascii=False))

	def upsert(self, link: Link) -> bool:
		"""Replace the record with the same id in place or append it. Returns True if new."""
		links = self.load()
		record = link.model_dump()
		for index, existing in enumerate(links):
			if isinstance(existing, dict) and existing.get("id") == link.id:
				links[index] = record
				self.save(links)
				return False
		links.append(record)
		self.save(links)
		return True

	def delete(self, link_id: str) -> bool:
		"""Remove every record with ``link_id``. Missing ids are a no-op."""
		links = self.load()
		kept = [item for item in links if not (isinstance(item, dict) and item.get("id") == link_id)]
		self.save(kept)
		return len(kept) != len(links)

	def replace_all(self, links: list[Any]) -> int:
		"""Replace the whole collection (bulk import). Returns the new record count."""
		self.save(list(links))
		return len(links)
