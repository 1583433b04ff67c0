"""FastAPI application entrypoint for docmap service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, TypeVar

try:  # pragma: no cover - optional dependency
    from fastapi import Depends, FastAPI
    from fastapi.responses import JSONResponse
    from pydantic import BaseModel

    _FASTAPI_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - service mode optional
    FastAPI = None  # type: ignore[assignment]
    Depends = None  # type: ignore[assignment]
    JSONResponse = None  # type: ignore[assignment]
    BaseModel = object  # type: ignore[assignment]
    _FASTAPI_AVAILABLE = False

from ..analyzers.feature_graph import graph_to_dict
from ..config import ConfigError
from ..lint.formatters import report_to_dict
from ..orchestrator import Orchestrator
from ..parsers.function_body import extract_function_code

_T = TypeVar("_T")


class FeatureMapRequest(BaseModel):
    path: str
    format: str = "json"
    write: bool = False
    check_edges: bool = False


class FeatureMapResponse(BaseModel):
    graph: Dict[str, Any]
    markdown: Optional[str] = None
    output_path: Optional[str] = None
    edge_issues: List[str] = []


class LintRequest(BaseModel):
    path: str
    fix: bool = False
    dry_run: bool = True
    strict: Optional[bool] = None


class LintResponse(BaseModel):
    passed: bool
    exit_code: int
    report: Dict[str, Any]
    fixed: List[str] = []
    diff: Optional[str] = None


class ExtractRequest(BaseModel):
    name: str
    source: Optional[str] = None
    file: Optional[str] = None


class ExtractResponse(BaseModel):
    code: str
    found: bool


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


async def _in_executor(func: Callable[[], _T]) -> _T:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:  # pragma: no cover - fallback path when not in async context
        return func()
    return await loop.run_in_executor(None, func)


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing docmap operations."""

    if not _FASTAPI_AVAILABLE:  # pragma: no cover - validated via unit tests
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install docmap[service]`."
        )

    app = FastAPI(title="DocMap Service", version="0.1.0")

    async def get_orchestrator() -> Orchestrator:
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/feature-map", response_model=FeatureMapResponse)
    async def feature_map(
        payload: FeatureMapRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> FeatureMapResponse:
        outcome = await _in_executor(
            lambda: orchestrator.run_feature_map(
                payload.path,
                fmt=payload.format,
                write=payload.write,
                check_edges=payload.check_edges,
            )
        )
        return FeatureMapResponse(
            graph=graph_to_dict(outcome.graph),
            markdown=outcome.content if payload.format == "markdown" else None,
            output_path=str(outcome.path) if outcome.path else None,
            edge_issues=[issue.message for issue in outcome.edge_issues],
        )

    @app.post("/lint", response_model=LintResponse)
    async def lint(
        payload: LintRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> LintResponse:
        outcome = await _in_executor(
            lambda: orchestrator.run_lint(
                payload.path,
                fix=payload.fix,
                dry_run=payload.dry_run,
                strict=payload.strict,
            )
        )
        return LintResponse(
            passed=outcome.report.passed,
            exit_code=outcome.exit_code,
            report=report_to_dict(outcome.report),
            fixed=outcome.fixed,
            diff=outcome.diff or None,
        )

    @app.post("/extract", response_model=ExtractResponse)
    async def extract(
        payload: ExtractRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> ExtractResponse:
        if payload.source is not None:
            code = extract_function_code(payload.source, payload.name)
            return ExtractResponse(code=code, found=code != payload.source)
        if not payload.file:
            raise ValueError("Either `source` or `file` must be provided")
        file_path = payload.file
        code = await _in_executor(lambda: orchestrator.run_extract(file_path, payload.name))
        return ExtractResponse(code=code, found=True)

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(
        _: Any, exc: FileNotFoundError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(
        _: Any, exc: RuntimeError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    if not _FASTAPI_AVAILABLE:
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install docmap[service]`."
        )

    try:
        import uvicorn
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "uvicorn is required to run the service. Install it with `pip install docmap[service]`."
        ) from exc

    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["create_app", "run_service"]
