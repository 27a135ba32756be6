"""Project-level orchestration: config, discovery, generation, writing."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

from .capabilities import detect_project_capabilities
from .config import VtgenConfig, load_config
from .discovery import PythonSourceHost, SourceScanner
from .emitter import TemplateRenderer
from .logging import get_logger, log_diagnostics
from .models import CapabilityRecord, GenerationResult
from .pipeline import Generator
from .stores import ArtifactManifest
from .writer import ArtifactWriter, WriteOutcome


@dataclass
class RunOutcome:
    """Result of one project run."""

    result: GenerationResult
    write: WriteOutcome
    config: VtgenConfig
    capabilities: CapabilityRecord


class Orchestrator:
    """Runs the generation pipeline for a project directory.

    Generators are kept per (templates directory, workers) so repeated runs in
    one process reuse memoized emission results.
    """

    def __init__(self, generator: Generator | None = None) -> None:
        self.logger = get_logger("orchestrator")
        self._generator_override = generator
        self._generators: Dict[Tuple[Optional[str], int], Generator] = {}

    def run(self, path: str | Path, *, dry_run: bool = False) -> RunOutcome:
        """Generate and write every artifact for the project at ``path``."""
        project_path = Path(path).expanduser().resolve()
        if not project_path.exists():
            raise FileNotFoundError(f"Project path not found: {path}")
        self.logger.info("Starting generation run for %s", project_path)

        config = load_config(project_path)
        capabilities = detect_project_capabilities(
            config.root,
            project_root=config.project_root,
            serialization=config.integrations.serialization,
            persistence=config.integrations.persistence,
        )

        scanner = SourceScanner(config.exclude_paths)
        files = scanner.scan(config.source_root)
        host = PythonSourceHost(config.source_root)
        candidates = host.discover_all(files)
        self.logger.debug("Found %d candidates in %d files", len(candidates), len(files))

        generator = self._resolve_generator(config)
        result = generator.run(candidates, capabilities)
        log_diagnostics(result.diagnostics, self.logger)

        writer = ArtifactWriter(config.output_dir, ArtifactManifest.for_root(config.root))
        write = writer.write(result, dry_run=dry_run)
        self.logger.info(
            "Generation finished: %d written, %d unchanged, %d removed, %d kept",
            len(write.written),
            len(write.unchanged),
            len(write.removed),
            len(write.kept),
        )
        return RunOutcome(result=result, write=write, config=config, capabilities=capabilities)

    def _resolve_generator(self, config: VtgenConfig) -> Generator:
        if self._generator_override is not None:
            return self._generator_override
        templates_dir = config.templates_dir
        key = (str(templates_dir) if templates_dir else None, config.workers)
        generator = self._generators.get(key)
        if generator is None:
            generator = Generator(TemplateRenderer(templates_dir), workers=config.workers)
            self._generators[key] = generator
        return generator


__all__ = ["Orchestrator", "RunOutcome"]
