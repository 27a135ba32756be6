"""Writes a completed generation pass to disk, touching only what changed."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .discovery.scanner import is_generated
from .logging import get_logger
from .models import GenerationResult
from .stores import ArtifactManifest, content_hash


class ArtifactConflictError(RuntimeError):
    """Raised when an artifact would overwrite a file vtgen did not generate."""

    def __init__(self, paths: List[str]) -> None:
        self.paths = paths
        super().__init__(
            "Refusing to overwrite files not generated by vtgen: " + ", ".join(paths)
        )


@dataclass
class WriteOutcome:
    """Relative paths grouped by what the writer did with them.

    ``kept`` lists stale paths that were left alone because they no longer
    carry the generated header.
    """

    written: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    kept: List[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def up_to_date(self) -> bool:
        return not self.written and not self.removed and not self.kept


class ArtifactWriter:
    """Persists artifacts under ``output_dir`` and prunes stale ones.

    The manifest remembers which files the previous pass produced so that
    artifacts whose declaration disappeared are removed again. Files without
    the generated header are never overwritten or deleted.
    """

    def __init__(self, output_dir: Path, manifest: Optional[ArtifactManifest] = None) -> None:
        self.output_dir = Path(output_dir)
        self.manifest = manifest if manifest is not None else ArtifactManifest.for_root(self.output_dir)
        self.logger = get_logger("writer")

    def write(self, result: GenerationResult, *, dry_run: bool = False) -> WriteOutcome:
        outcome = WriteOutcome(dry_run=dry_run)
        produced = result.by_path()

        conflicts = [rel_path for rel_path in sorted(produced) if self._is_foreign(self.output_dir / rel_path)]
        if conflicts:
            raise ArtifactConflictError(conflicts)

        for rel_path in sorted(produced):
            artifact = produced[rel_path]
            digest = content_hash(artifact.text)
            target = self.output_dir / rel_path
            if self._matches(target, digest):
                outcome.unchanged.append(rel_path)
            else:
                outcome.written.append(rel_path)
                if not dry_run:
                    target.parent.mkdir(parents=True, exist_ok=True)
                    target.write_text(artifact.text, encoding="utf-8")
            if not dry_run:
                self.manifest.record(rel_path, digest=digest, artifact=artifact.name)

        for rel_path in self.manifest.paths:
            if rel_path in produced:
                continue
            target = self.output_dir / rel_path
            if self._is_foreign(target):
                outcome.kept.append(rel_path)
                self.logger.warning("Keeping %s: it no longer carries the generated header", rel_path)
                continue
            outcome.removed.append(rel_path)
            if not dry_run and target.exists():
                target.unlink()
                self.logger.info("Removed stale artifact %s", rel_path)

        if not dry_run:
            self.manifest.prune(produced)
            self.manifest.persist()

        self.logger.debug(
            "Write summary: %d written, %d unchanged, %d removed, %d kept%s",
            len(outcome.written),
            len(outcome.unchanged),
            len(outcome.removed),
            len(outcome.kept),
            " (dry-run)" if dry_run else "",
        )
        return outcome

    @staticmethod
    def _is_foreign(target: Path) -> bool:
        return target.exists() and not is_generated(target)

    @staticmethod
    def _matches(target: Path, digest: str) -> bool:
        try:
            current = target.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return False
        return content_hash(current) == digest


__all__ = ["ArtifactConflictError", "ArtifactWriter", "WriteOutcome"]
