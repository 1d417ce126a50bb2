"""Audit endpoints."""
from __future__ import annotations

import asyncio
import json
import uuid

from fastapi import APIRouter, Depends
from sse_starlette.sse import EventSourceResponse

from app.api.exception_handlers import resolve_error
from app.api.models.errors import ErrorResponse
from app.api.models.requests import AuditRequest
from app.api.models.responses import DeepReportResponse, ReportResponse
from app.api.services.audit_service import run_all_audits, run_deep, run_single_audit
from app.api.services.response_cache import ResponseCache
from app.api.v1.deps import get_deep_analyst, get_registry, get_response_cache, get_settings
from site_audit.audit.registry import AuditRegistry
from site_audit.config.settings import Settings
from site_audit.deep.agent import DeepAnalyst
from site_audit.deep.progress import ProgressReporter

router = APIRouter(prefix="/audits", tags=["Audits"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid URL, request body or audit type"},
    502: {"model": ErrorResponse, "description": "Upstream request failed"},
    504: {"model": ErrorResponse, "description": "Upstream request timed out"},
}

SINGLE_AUDITS = {
    "perf": "Run the performance audit",
    "seo": "Run the SEO audit",
    "security": "Run the security headers audit",
}


def _single_audit_endpoint(audit_type: str):
    async def analyze(
        body: AuditRequest,
        registry: AuditRegistry = Depends(get_registry),
    ) -> dict:
        return await run_single_audit(audit_type, body, registry)

    analyze.__name__ = f"analyze_{audit_type}"
    return analyze


for _audit_type, _summary in SINGLE_AUDITS.items():
    router.add_api_route(
        f"/{_audit_type}",
        _single_audit_endpoint(_audit_type),
        methods=["POST"],
        response_model=ReportResponse,
        responses=ERROR_RESPONSES,
        summary=_summary,
    )


@router.post(
    "/all",
    response_model=ReportResponse,
    responses=ERROR_RESPONSES,
    summary="Run all or selected audits",
    description="""
Run the requested audits concurrently and return one report.

Omit `types` to run every audit. Responses are cached per request body
for `AUDIT_CACHE_TTL_MS` milliseconds.
""",
)
async def analyze_all(
    body: AuditRequest,
    registry: AuditRegistry = Depends(get_registry),
    cache: ResponseCache = Depends(get_response_cache),
) -> dict:
    return await run_all_audits(body, registry, cache)


@router.post(
    "/deep",
    response_model=DeepReportResponse,
    responses=ERROR_RESPONSES,
    summary="Run all audits plus deep analysis",
    description="""
Run the baseline audits, then ask the analysis model for a fix plan.

Healthy reports (overall score of 90 or more with no errors) skip the
model call and return a `SYSTEM_NOMINAL` plan. Responses are cached.
""",
)
async def analyze_deep(
    body: AuditRequest,
    registry: AuditRegistry = Depends(get_registry),
    analyst: DeepAnalyst = Depends(get_deep_analyst),
    cache: ResponseCache = Depends(get_response_cache),
    settings: Settings = Depends(get_settings),
) -> dict:
    return await run_deep(body, registry, analyst, cache, settings.deep)


@router.post(
    "/deep/stream",
    summary="Stream a deep audit as Server-Sent Events",
    description="""
Same flow as `/audits/deep`, streamed as Server-Sent Events.

Emits one `progress` event per stage, then a final `result` event with
the payload or an `error` event with the error body.
""",
)
async def stream_deep(
    body: AuditRequest,
    registry: AuditRegistry = Depends(get_registry),
    analyst: DeepAnalyst = Depends(get_deep_analyst),
    cache: ResponseCache = Depends(get_response_cache),
    settings: Settings = Depends(get_settings),
) -> EventSourceResponse:
    queue: asyncio.Queue[tuple[str, dict]] = asyncio.Queue()
    reporter = ProgressReporter(
        uuid.uuid4().hex,
        sink=lambda event: queue.put_nowait(("progress", event)),
    )

    async def produce() -> None:
        try:
            payload = await run_deep(body, registry, analyst, cache, settings.deep, reporter=reporter)
        except Exception as exc:
            status_code, error = resolve_error(exc)
            queue.put_nowait(("error", {**error, "status": status_code}))
        else:
            queue.put_nowait(("result", payload))

    async def event_generator():
        task = asyncio.ensure_future(produce())
        try:
            while True:
                kind, data = await queue.get()
                yield {"event": kind, "data": json.dumps(data)}
                if kind in ("result", "error"):
                    break
        finally:
            if not task.done():
                task.cancel()

    return EventSourceResponse(event_generator())
