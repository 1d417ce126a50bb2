"""Staged progress events for long-running deep audits."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TypeVar

from site_audit.audit.events import AuditEvent, AuditEventType

logger = logging.getLogger(__name__)

T = TypeVar("T")

HEARTBEAT_START = 65
HEARTBEAT_STEP = 3
HEARTBEAT_CAP = 94


class ProgressStage(str, Enum):
    REQUEST_RECEIVED = "request_received"
    BASELINE_STARTED = "baseline_started"
    AUDIT_STARTED = "audit_started"
    AUDIT_COMPLETED = "audit_completed"
    AUDIT_FAILED = "audit_failed"
    BASELINE_COMPLETED = "baseline_completed"
    DEEP_ANALYSIS_STARTED = "deep_analysis_started"
    DEEP_ANALYSIS_PROGRESS = "deep_analysis_progress"
    DEEP_ANALYSIS_COMPLETED = "deep_analysis_completed"
    DEEP_ANALYSIS_SKIPPED = "deep_analysis_skipped"
    RESPONSE_DISPATCHED = "response_dispatched"
    FAILED = "failed"


# stage -> (status, progress, message)
STAGE_TEMPLATES: dict[ProgressStage, tuple[str, int | None, str]] = {
    ProgressStage.REQUEST_RECEIVED: ("queued", 0, "Request received"),
    ProgressStage.BASELINE_STARTED: ("running", 5, "Running baseline audits"),
    ProgressStage.AUDIT_STARTED: ("running", 10, "Audit started"),
    ProgressStage.AUDIT_COMPLETED: ("running", 40, "Audit completed"),
    ProgressStage.AUDIT_FAILED: ("running", 40, "Audit failed"),
    ProgressStage.BASELINE_COMPLETED: ("running", 60, "Baseline audits completed"),
    ProgressStage.DEEP_ANALYSIS_STARTED: ("running", HEARTBEAT_START, "Deep analysis started"),
    ProgressStage.DEEP_ANALYSIS_PROGRESS: ("running", HEARTBEAT_START, "Deep analysis in progress"),
    ProgressStage.DEEP_ANALYSIS_COMPLETED: ("running", 95, "Deep analysis completed"),
    ProgressStage.DEEP_ANALYSIS_SKIPPED: ("running", 95, "Deep analysis skipped, baseline is healthy"),
    ProgressStage.RESPONSE_DISPATCHED: ("completed", 100, "Response dispatched"),
    ProgressStage.FAILED: ("failed", None, "Audit request failed"),
}

_AUDIT_STAGES = {
    AuditEventType.STARTED: (ProgressStage.AUDIT_STARTED, "started"),
    AuditEventType.COMPLETED: (ProgressStage.AUDIT_COMPLETED, "completed"),
    AuditEventType.FAILED: (ProgressStage.AUDIT_FAILED, "failed"),
}

ProgressSink = Callable[[dict], None]


def _timestamp() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ProgressReporter:
    """Builds progress events for one request and hands them to a sink.

    The sink is called synchronously from the event loop thread.
    """

    def __init__(self, request_id: str, sink: ProgressSink | None = None):
        self.request_id = request_id
        self._sink = sink
        self.events: list[dict] = []

    def emit(self, stage: ProgressStage | str, **fields: Any) -> dict:
        stage = ProgressStage(stage)
        status, progress, message = STAGE_TEMPLATES[stage]
        event = {
            "requestId": self.request_id,
            "stage": stage.value,
            "status": status,
            "progress": progress,
            "message": message,
            "timestamp": _timestamp(),
        }
        event.update(fields)
        logger.debug("[%s] %s %s", self.request_id, event["stage"], event["progress"])
        self.events.append(event)
        if self._sink is not None:
            self._sink(event)
        return event

    def audit_event_handler(self, total: int) -> Callable[[AuditEvent], None]:
        """Adapter from runner events to progress stages."""
        completed = 0

        def handle(event: AuditEvent) -> None:
            nonlocal completed
            if event.type != AuditEventType.STARTED:
                completed += 1
            stage, verb = _AUDIT_STAGES[event.type]
            status = event.result.status.value if event.result is not None else None
            self.emit(
                stage,
                message=f"{event.audit_name} {verb}",
                auditKey=event.audit_key,
                auditName=event.audit_name,
                auditStatus=status,
                completedAudits=completed,
                totalAudits=total,
            )

        return handle

    async def run_with_heartbeat(self, awaitable: Awaitable[T], interval: float) -> T:
        """Await ``awaitable``, emitting a progress estimate every ``interval`` seconds."""
        estimate = HEARTBEAT_START

        async def beat() -> None:
            nonlocal estimate
            while True:
                await asyncio.sleep(interval)
                estimate = min(estimate + HEARTBEAT_STEP, HEARTBEAT_CAP)
                self.emit(ProgressStage.DEEP_ANALYSIS_PROGRESS, progress=estimate)

        heartbeat = asyncio.ensure_future(beat())
        try:
            return await awaitable
        finally:
            heartbeat.cancel()
            try:
                await heartbeat
            except asyncio.CancelledError:
                pass
