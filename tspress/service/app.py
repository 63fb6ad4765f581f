"""FastAPI application exposing type resolution over HTTP."""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..analyzers.decompose import decompose
from ..analyzers.resolver import CyclicDefaultExport, MissingDefaultExport, MissingNamedExport, TypeResolver
from ..analyzers.tree_sitter import SourceFile
from ..config import DEFAULT_LINE_SEPARATOR, DEFAULT_SERVICE_HOST, DEFAULT_SERVICE_PORT
from ..logging import get_logger
from ..models import type_item_to_dict, type_value_to_dict

_logger = get_logger("service")


class ResolveRequest(BaseModel):
    source: str
    name: str = "default"
    path: str = "module.ts"
    default: bool = False


class ResolveResponse(BaseModel):
    type: str
    value: Union[Dict[str, Any], str]
    docs: Optional[Dict[str, Any]] = None


class DecomposeRequest(BaseModel):
    text: str
    line_separator: str = DEFAULT_LINE_SEPARATOR


class DecomposeResponse(BaseModel):
    value: Union[Dict[str, Any], str]
    shape: str


class HealthResponse(BaseModel):
    status: str


def create_app(project_root: Optional[str] = None) -> FastAPI:
    """Create the FastAPI application exposing tspress operations."""

    app = FastAPI(title="tspress", version="1.0.0")
    resolver = TypeResolver(project_root=project_root)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/resolve", response_model=ResolveResponse)
    def resolve(payload: ResolveRequest) -> ResolveResponse:
        # sync handler: parsing is CPU bound and FastAPI runs it in a worker thread
        source = SourceFile(path=payload.path, text=payload.source)
        item = resolver.resolve(source, payload.name, payload.default)
        return ResolveResponse(**type_item_to_dict(item))

    @app.post("/decompose", response_model=DecomposeResponse)
    async def decompose_text(payload: DecomposeRequest) -> DecomposeResponse:
        value, shape = decompose(payload.text, payload.line_separator)
        return DecomposeResponse(value=type_value_to_dict(value), shape=shape.value)

    @app.exception_handler(MissingNamedExport)
    @app.exception_handler(MissingDefaultExport)
    async def missing_export_handler(_: Any, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(CyclicDefaultExport)
    async def cyclic_export_handler(_: Any, exc: CyclicDefaultExport) -> JSONResponse:
        _logger.warning("Rejected cyclic default export: %s", exc)
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = DEFAULT_SERVICE_HOST,
    port: int = DEFAULT_SERVICE_PORT,
    project_root: Optional[str] = None,
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app(project_root=project_root)
    _logger.info("Serving tspress on http://%s:%d", host, port)
    uvicorn.run(app, host=host, port=port)
