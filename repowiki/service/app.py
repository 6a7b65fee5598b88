"""FastAPI application entrypoint for repowiki service mode."""

from __future__ import annotations

import base64
import binascii
from typing import Any, AsyncIterator, Callable, Dict, Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..github import GitHubError, InvalidRepositoryError
from ..llm import LLMError
from ..logging import get_logger
from ..pipeline import InvalidTransitionError, ReportPipeline
from ..stages import StageError

logger = get_logger("service")


class AnalyzeRequest(BaseModel):
    url: str
    skip_cache: bool = False


class SandboxRequest(BaseModel):
    url: str
    command: Optional[str] = None


class ScreenshotRequest(BaseModel):
    image_base64: str
    mime_type: str = "image/jpeg"


class HealthResponse(BaseModel):
    status: str


def _default_pipeline() -> ReportPipeline:
    return ReportPipeline.from_config()


def create_app(
    pipeline_factory: Callable[[], ReportPipeline] = _default_pipeline,
) -> FastAPI:
    """Create the FastAPI application exposing repowiki operations."""

    app = FastAPI(title="RepoWiki Service", version="1.0.0")

    async def get_pipeline() -> AsyncIterator[ReportPipeline]:
        # One pipeline per request; the report store is what persists between them.
        pipeline = pipeline_factory()
        try:
            yield pipeline
        finally:
            await pipeline.aclose()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/analyze")
    async def analyze(
        payload: AnalyzeRequest,
        pipeline: ReportPipeline = Depends(get_pipeline),
    ) -> Dict[str, Any]:
        report = await pipeline.run(payload.url, skip_cache=payload.skip_cache)
        return report.to_dict()

    @app.get("/report")
    async def cached_report(
        url: str = Query(...),
        pipeline: ReportPipeline = Depends(get_pipeline),
    ) -> Dict[str, Any]:
        report = pipeline.cached_report(url)
        if report is None:
            raise HTTPException(status_code=404, detail=f"No cached report for {url}")
        return report.to_dict()

    @app.post("/sandbox")
    async def sandbox(
        payload: SandboxRequest,
        pipeline: ReportPipeline = Depends(get_pipeline),
    ) -> Dict[str, Any]:
        report = pipeline.cached_report(payload.url)
        if report is None:
            raise HTTPException(
                status_code=404,
                detail=f"No cached report for {payload.url}. Run /analyze first.",
            )
        result = await pipeline.run_sandbox(report, payload.command)
        return result.to_dict()

    @app.post("/screenshot")
    async def screenshot(
        payload: ScreenshotRequest,
        pipeline: ReportPipeline = Depends(get_pipeline),
    ) -> Dict[str, Any]:
        try:
            data = base64.b64decode(payload.image_base64, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise HTTPException(status_code=422, detail="image_base64 is not valid base64") from exc
        if not data:
            raise HTTPException(status_code=422, detail="image_base64 is empty")
        analysis = await pipeline.analyze_screenshot(data, payload.mime_type)
        return analysis.to_dict()

    @app.exception_handler(InvalidRepositoryError)
    async def invalid_repository_handler(_: Any, exc: InvalidRepositoryError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(GitHubError)
    async def github_error_handler(_: Any, exc: GitHubError) -> JSONResponse:
        status = exc.status_code if exc.status_code in (403, 404) else 502
        return JSONResponse(status_code=status, content={"detail": str(exc)})

    @app.exception_handler(StageError)
    async def stage_error_handler(_: Any, exc: StageError) -> JSONResponse:
        logger.error("Stage '%s' failed: %s", exc.stage, exc)
        return JSONResponse(status_code=502, content={"detail": str(exc), "stage": exc.stage})

    @app.exception_handler(LLMError)
    async def llm_error_handler(_: Any, exc: LLMError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(InvalidTransitionError)
    async def transition_error_handler(
        _: Any, exc: InvalidTransitionError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover
    app = create_app()
    uvicorn.run(app, host=host, port=port)


__all__ = ["create_app", "run_service"]
