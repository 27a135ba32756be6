"""Persistent record of the files written by the previous generation pass."""

from __future__ import annotations

from datetime import UTC, datetime
import hashlib
import json
from pathlib import Path
from typing import Dict, Iterable, Optional

_MANIFEST_VERSION = 1

MANIFEST_DIRNAME = ".vtgen"
MANIFEST_FILENAME = "artifacts.json"


def content_hash(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class ArtifactManifest:
    """Maps relative artifact paths to the sha256 of their last written content."""

    def __init__(self, path: Path | None) -> None:
        self._path = path
        self._entries: Dict[str, Dict[str, str]] = {}
        self._dirty = False
        if self._path is not None:
            self._load(self._path)

    @classmethod
    def for_root(cls, root: Path) -> ArtifactManifest:
        return cls(root / MANIFEST_DIRNAME / MANIFEST_FILENAME)

    @property
    def paths(self) -> list[str]:
        return sorted(self._entries)

    def get(self, rel_path: str) -> Optional[str]:
        entry = self._entries.get(rel_path)
        if not entry:
            return None
        return entry.get("hash")

    def record(self, rel_path: str, *, digest: str, artifact: str) -> None:
        current = self._entries.get(rel_path)
        if current and current.get("hash") == digest and current.get("artifact") == artifact:
            return
        self._entries[rel_path] = {
            "hash": digest,
            "artifact": artifact,
            "updated_at": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        }
        self._dirty = True

    def prune(self, keys_to_keep: Iterable[str]) -> list[str]:
        keep = set(keys_to_keep)
        removed = sorted(key for key in self._entries if key not in keep)
        for key in removed:
            self._entries.pop(key, None)
        if removed:
            self._dirty = True
        return removed

    def persist(self) -> None:
        if not self._dirty or self._path is None:
            return
        payload = {
            "version": _MANIFEST_VERSION,
            "files": self._entries,
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        self._dirty = False

    # ------------------------------------------------------------------
    # Internal helpers

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError):
            return
        if not isinstance(data, dict) or data.get("version") != _MANIFEST_VERSION:
            return
        files = data.get("files")
        if not isinstance(files, dict):
            return
        valid: Dict[str, Dict[str, str]] = {}
        for rel_path, raw in files.items():
            if not isinstance(rel_path, str) or not isinstance(raw, dict):
                continue
            if not isinstance(raw.get("hash"), str):
                continue
            valid[rel_path] = {key: str(value) for key, value in raw.items()}
        self._entries = valid
        self._dirty = False


__all__ = ["ArtifactManifest", "MANIFEST_DIRNAME", "MANIFEST_FILENAME", "content_hash"]
