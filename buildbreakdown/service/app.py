"""FastAPI application entrypoint for buildbreakdown service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..analyzer import analyze_project
from ..artifact import describe_artifact, measure_output_size
from ..config import ConfigError, load_config
from ..models import BuildArtifactLocation, CompositionBreakdown, Platform, StructuredMetadata
from ..report import breakdown_to_dict
from ..sources import build_exclude, parse_metadata

AnalysisRunner = Callable[..., CompositionBreakdown]


class AnalyzeRequest(BaseModel):
    path: str
    platform: str
    project_root: Optional[str] = None
    metadata: Optional[Any] = None
    use_cache: bool = True


class ArtifactResponse(BaseModel):
    path: str
    platform: str
    type: str
    extension: Optional[str] = None
    output_size: int


class AnalyzeResponse(BaseModel):
    artifact: ArtifactResponse
    breakdown: Dict[str, Any]


class HealthResponse(BaseModel):
    status: str


def create_app(runner: AnalysisRunner = analyze_project) -> FastAPI:
    """Create the FastAPI application exposing build composition analysis."""

    app = FastAPI(title="BuildBreakdown Service", version="1.0.0")

    async def get_runner() -> AnalysisRunner:
        return runner

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/analyze", response_model=AnalyzeResponse)
    async def analyze(
        payload: AnalyzeRequest,
        run: AnalysisRunner = Depends(get_runner),
    ) -> AnalyzeResponse:
        def _run_analysis() -> AnalyzeResponse:
            # Config loading and both tree walks touch the disk; keep them off the loop.
            config = load_config(Path(payload.project_root or "."))
            platform = Platform.parse(payload.platform)
            location = BuildArtifactLocation.from_path(payload.path, platform)
            metadata = (
                parse_metadata(
                    payload.metadata, exclude=build_exclude(config.analysis.exclude_paths)
                )
                if payload.metadata is not None
                else StructuredMetadata.empty()
            )
            breakdown = run(config, location, metadata=metadata, use_cache=payload.use_cache)
            artifact = describe_artifact(location)
            return AnalyzeResponse(
                artifact=ArtifactResponse(
                    path=str(location.path),
                    platform=platform.value,
                    type=artifact.type,
                    extension=artifact.extension,
                    output_size=measure_output_size(location),
                ),
                breakdown=breakdown_to_dict(breakdown),
            )

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _run_analysis)

    @app.exception_handler(ConfigError)
    async def config_error_handler(
        _: Any, exc: ConfigError
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)
