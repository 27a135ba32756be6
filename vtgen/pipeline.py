"""One generation pass: extract, validate, emit, aggregate."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .aggregator import aggregate
from .emitter import Emitter, TemplateRenderer
from .extractor import extract_all
from .logging import get_logger
from .models import (
    Artifact,
    CapabilityRecord,
    Declaration,
    GenerationResult,
    OperatorVisibility,
    RawCandidate,
    RepresentationKind,
)
from .validator import find_conflicts, partition

_EmissionKey = Tuple[str, RepresentationKind, OperatorVisibility, CapabilityRecord]


class Generator:
    """Runs generation passes over collected candidates.

    Per-declaration emission results are memoized on the declaration's
    qualified name, kind, visibility and the capability record, so repeated
    passes only render what changed. With ``workers > 1`` emission runs on a
    thread pool; artifacts are still returned in input order.
    """

    def __init__(self, renderer: Optional[TemplateRenderer] = None, *, workers: int = 1) -> None:
        self.renderer = renderer or TemplateRenderer()
        self.emitter = Emitter(self.renderer)
        self.workers = max(1, workers)
        self.logger = get_logger("pipeline")
        self._memo: Dict[_EmissionKey, Tuple[Artifact, ...]] = {}
        self._lock = threading.Lock()

    def run(self, candidates: Iterable[RawCandidate], capabilities: CapabilityRecord) -> GenerationResult:
        declarations = extract_all(candidates)
        return self.run_declarations(declarations, capabilities)

    def run_declarations(
        self, declarations: Sequence[Declaration], capabilities: CapabilityRecord
    ) -> GenerationResult:
        outcome = partition(declarations)
        conflicts = find_conflicts(outcome.accepted)
        diagnostics = outcome.diagnostics + conflicts.diagnostics
        self.logger.debug(
            "Validated %d declarations (%d accepted)", len(declarations), len(conflicts.accepted)
        )

        artifacts: List[Artifact] = []
        for emitted in self._emit_all(conflicts.accepted, capabilities):
            artifacts.extend(emitted)

        # registration only covers a conflict-free set
        if not conflicts.diagnostics:
            registration = aggregate(declarations, capabilities, self.renderer)
            if registration is not None:
                artifacts.append(registration)

        self.logger.info("Generated %d artifacts with %d diagnostics", len(artifacts), len(diagnostics))
        return GenerationResult(artifacts=tuple(artifacts), diagnostics=diagnostics)

    def clear(self) -> None:
        with self._lock:
            self._memo.clear()

    def _emit_all(
        self, declarations: Sequence[Declaration], capabilities: CapabilityRecord
    ) -> List[Tuple[Artifact, ...]]:
        if self.workers == 1 or len(declarations) < 2:
            return [self._emit(declaration, capabilities) for declaration in declarations]
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            return list(executor.map(lambda item: self._emit(item, capabilities), declarations))

    def _emit(self, declaration: Declaration, capabilities: CapabilityRecord) -> Tuple[Artifact, ...]:
        key: _EmissionKey = (
            declaration.qualified_name,
            declaration.kind,
            declaration.visibility,
            capabilities,
        )
        with self._lock:
            cached = self._memo.get(key)
        if cached is not None:
            return cached
        emitted = tuple(self.emitter.emit(declaration, capabilities))
        with self._lock:
            self._memo[key] = emitted
        return emitted


def generate(
    candidates: Iterable[RawCandidate],
    capabilities: CapabilityRecord,
    *,
    templates_dir: Path | None = None,
    workers: int = 1,
) -> GenerationResult:
    """Run a single pass with a fresh generator."""
    renderer = TemplateRenderer(templates_dir) if templates_dir is not None else None
    return Generator(renderer, workers=workers).run(candidates, capabilities)


__all__ = ["Generator", "generate"]
