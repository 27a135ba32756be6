"""FastAPI application entrypoint for vtgen service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..models import (
    Artifact,
    CapabilityRecord,
    DeclarationShape,
    Diagnostic,
    GenerationResult,
    RawCandidate,
    SourceLocation,
)
from ..orchestrator import Orchestrator, RunOutcome
from ..pipeline import Generator
from ..writer import ArtifactConflictError


class ShapeModel(BaseModel):
    is_value_type: bool = True
    is_nested: bool = False
    in_namespace: bool = True
    is_partial: bool = True
    is_readonly: bool = True


class CandidateModel(BaseModel):
    name: str
    namespace: str = ""
    attributes: Dict[str, Any] = Field(default_factory=dict)
    path: str = "<request>"
    line: int = 0
    column: int = 0
    shape: ShapeModel = Field(default_factory=ShapeModel)

    def to_candidate(self) -> RawCandidate:
        return RawCandidate(
            name=self.name,
            namespace=self.namespace,
            attributes=dict(self.attributes),
            location=SourceLocation(path=self.path, line=self.line, column=self.column),
            shape=DeclarationShape(**self.shape.model_dump()),
        )


class CapabilitiesModel(BaseModel):
    serialization: bool = False
    persistence: bool = False
    project_root_name: str = ""

    def to_record(self) -> CapabilityRecord:
        return CapabilityRecord(
            has_serialization_integration=self.serialization,
            has_persistence_integration=self.persistence,
            project_root_name=self.project_root_name,
        )


class GenerateRequest(BaseModel):
    declarations: List[CandidateModel]
    capabilities: CapabilitiesModel = Field(default_factory=CapabilitiesModel)


class ArtifactModel(BaseModel):
    name: str
    module: str
    path: str
    text: str

    @classmethod
    def from_artifact(cls, artifact: Artifact) -> ArtifactModel:
        return cls(
            name=artifact.name,
            module=artifact.qualified_module,
            path=artifact.path,
            text=artifact.text,
        )


class DiagnosticModel(BaseModel):
    id: str
    title: str
    message: str
    severity: str
    path: str
    line: int
    column: int

    @classmethod
    def from_diagnostic(cls, diagnostic: Diagnostic) -> DiagnosticModel:
        return cls(
            id=diagnostic.id,
            title=diagnostic.title,
            message=diagnostic.message,
            severity=diagnostic.severity.value,
            path=diagnostic.location.path,
            line=diagnostic.location.line,
            column=diagnostic.location.column,
        )


class GenerateResponse(BaseModel):
    artifacts: List[ArtifactModel]
    diagnostics: List[DiagnosticModel]


class ProjectGenerateRequest(BaseModel):
    path: str
    dry_run: bool = False


class ProjectGenerateResponse(BaseModel):
    status: str
    written: List[str]
    unchanged: List[str]
    removed: List[str]
    kept: List[str]
    diagnostics: List[DiagnosticModel]
    dry_run: bool


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
    generator_factory: Callable[[], Generator] = Generator,
) -> FastAPI:
    """Create the FastAPI application exposing vtgen operations."""

    app = FastAPI(title="vtgen Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        return orchestrator_factory()

    async def get_generator() -> Generator:
        return generator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/generate", response_model=GenerateResponse)
    async def generate(
        payload: GenerateRequest,
        generator: Generator = Depends(get_generator),
    ) -> GenerateResponse:
        candidates = [item.to_candidate() for item in payload.declarations]
        capabilities = payload.capabilities.to_record()

        def _run() -> GenerationResult:
            return generator.run(candidates, capabilities)

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run)
        return GenerateResponse(
            artifacts=[ArtifactModel.from_artifact(item) for item in result.artifacts],
            diagnostics=[DiagnosticModel.from_diagnostic(item) for item in result.diagnostics],
        )

    @app.post("/projects/generate", response_model=ProjectGenerateResponse)
    async def generate_project(
        payload: ProjectGenerateRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> ProjectGenerateResponse:
        def _run() -> RunOutcome:
            return orchestrator.run(payload.path, dry_run=payload.dry_run)

        loop = asyncio.get_running_loop()
        outcome = await loop.run_in_executor(None, _run)
        status = "error" if outcome.result.has_errors else "ok"
        return ProjectGenerateResponse(
            status=status,
            written=outcome.write.written,
            unchanged=outcome.write.unchanged,
            removed=outcome.write.removed,
            kept=outcome.write.kept,
            diagnostics=[DiagnosticModel.from_diagnostic(item) for item in outcome.result.diagnostics],
            dry_run=outcome.write.dry_run,
        )

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NotADirectoryError)
    async def not_a_directory_handler(_: Any, exc: NotADirectoryError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ArtifactConflictError)
    async def artifact_conflict_handler(_: Any, exc: ArtifactConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc), "paths": exc.paths})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(_: Any, exc: RuntimeError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)


__all__ = ["create_app", "run_service"]
