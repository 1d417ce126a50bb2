"""Unit tests for the concurrent audit runner."""
from __future__ import annotations

import asyncio

import pytest

from site_audit.audit.base import AuditInput, AuditStatus, LogEntry, LogLevel
from site_audit.audit.errors import InvalidUrlError, UnknownAuditTypeError
from site_audit.audit.events import AuditEventType
from site_audit.audit.runner import run_audits


class TestOrdering:
    """Results follow the requested order, not completion order."""

    @pytest.mark.asyncio
    async def test_order_preserved_when_later_auditor_finishes_first(self, make_auditor, make_registry):
        registry = make_registry(
            make_auditor("slow", delay=0.05),
            make_auditor("fast"),
        )

        report = await run_audits(AuditInput(url="https://example.com"), registry)

        assert [a.key for a in report.audits] == ["slow", "fast"]

    @pytest.mark.asyncio
    async def test_requested_types_define_order(self, make_auditor, make_registry):
        registry = make_registry(make_auditor("a"), make_auditor("b"), make_auditor("c"))

        report = await run_audits(
            AuditInput(url="https://example.com", types=("c", "a")), registry
        )

        assert [a.key for a in report.audits] == ["c", "a"]
        assert report.summary.total_audits == 2

    @pytest.mark.asyncio
    async def test_no_types_runs_every_auditor(self, make_auditor, make_registry):
        registry = make_registry(make_auditor("a"), make_auditor("b"))

        report = await run_audits(AuditInput(url="https://example.com"), registry)

        assert [a.key for a in report.audits] == ["a", "b"]


class TestConcurrency:
    """Auditors run concurrently."""

    @pytest.mark.asyncio
    async def test_both_auditors_start_before_either_finishes(self, make_auditor, make_registry):
        trace: list[str] = []
        gate = asyncio.Event()
        registry = make_registry(
            make_auditor("a", gate=gate, trace=trace),
            make_auditor("b", gate=gate, trace=trace),
        )

        async def release():
            while len(trace) < 2:
                await asyncio.sleep(0)
            gate.set()

        report, _ = await asyncio.gather(
            run_audits(AuditInput(url="https://example.com"), registry),
            release(),
        )

        assert trace[:2] == ["a:start", "b:start"]
        assert len(report.audits) == 2


class TestFailureIsolation:
    """A raising auditor becomes a FAIL result and the others still run."""

    @pytest.mark.asyncio
    async def test_exception_becomes_fail_result(self, make_auditor, make_registry):
        registry = make_registry(
            make_auditor("ok", details={"score": 80}),
            make_auditor("broken", error=RuntimeError("404 Not Found")),
        )

        report = await run_audits(AuditInput(url="https://example.com"), registry)

        broken = report.get("broken")
        assert broken.status == AuditStatus.FAIL
        assert broken.details == {}
        assert broken.logs == [LogEntry(LogLevel.ERROR, "404 Not Found")]
        assert report.get("ok").status == AuditStatus.PASS

    @pytest.mark.asyncio
    async def test_exception_without_message(self, make_auditor, make_registry):
        registry = make_registry(make_auditor("broken", error=RuntimeError()))

        report = await run_audits(AuditInput(url="https://example.com"), registry)

        assert report.audits[0].logs[0].message == "Unknown auditor error"

    @pytest.mark.asyncio
    async def test_failed_audit_counted_in_summary(self, make_auditor, make_registry):
        registry = make_registry(
            make_auditor("ok", details={"score": 100}),
            make_auditor("broken", error=ValueError("boom")),
        )

        report = await run_audits(AuditInput(url="https://example.com"), registry)

        assert report.summary.error_count == 1
        assert report.summary.overall_score == 100
        assert report.summary.top_findings[0].audit_key == "broken"


class TestValidation:
    """Invalid input is rejected before any auditor runs."""

    @pytest.mark.asyncio
    async def test_unknown_type_rejected_without_running(self, make_auditor, make_registry):
        auditor = make_auditor("perf")
        registry = make_registry(auditor)

        with pytest.raises(UnknownAuditTypeError, match="Unknown audit type: nope"):
            await run_audits(
                AuditInput(url="https://example.com", types=("perf", "nope")), registry
            )

        assert auditor.calls == []

    @pytest.mark.asyncio
    async def test_invalid_url_rejected_without_running(self, make_auditor, make_registry):
        auditor = make_auditor("perf")
        registry = make_registry(auditor)

        with pytest.raises(InvalidUrlError):
            await run_audits(AuditInput(url="ftp://example.com"), registry)

        assert auditor.calls == []

    @pytest.mark.asyncio
    async def test_auditors_receive_normalized_url(self, make_auditor, make_registry):
        auditor = make_auditor("perf")
        registry = make_registry(auditor)

        report = await run_audits(AuditInput(url="  HTTPS://Example.COM#top "), registry)

        assert report.url == "https://example.com/"
        assert auditor.calls[0].url == "https://example.com/"


class TestScoring:
    """Overall score is the rounded mean of numeric scores."""

    @pytest.mark.asyncio
    async def test_mean_of_scores(self, make_auditor, make_registry):
        registry = make_registry(
            make_auditor("a", details={"score": 80}),
            make_auditor("b", details={"score": 100}),
        )

        report = await run_audits(AuditInput(url="https://example.com"), registry)

        assert report.summary.overall_score == 90
        assert report.summary.scoring == {"score": 90, "outOf": 100}

    @pytest.mark.asyncio
    async def test_no_numeric_scores(self, make_auditor, make_registry):
        registry = make_registry(make_auditor("a", details={"score": "high"}))

        report = await run_audits(AuditInput(url="https://example.com"), registry)

        assert report.summary.overall_score is None
        assert report.summary.scoring is None


class TestEvents:
    """Lifecycle events are emitted per auditor."""

    @pytest.mark.asyncio
    async def test_started_then_completed_or_failed(self, make_auditor, make_registry):
        events = []
        registry = make_registry(
            make_auditor("ok"),
            make_auditor("broken", error=RuntimeError("down")),
        )

        await run_audits(
            AuditInput(url="https://example.com"), registry, on_audit_event=events.append
        )

        started = [e.audit_key for e in events if e.type == AuditEventType.STARTED]
        assert started == ["ok", "broken"]
        assert all(e.result is None for e in events if e.type == AuditEventType.STARTED)

        settled = {e.audit_key: e for e in events if e.type != AuditEventType.STARTED}
        assert settled["ok"].type == AuditEventType.COMPLETED
        assert settled["broken"].type == AuditEventType.FAILED
        assert settled["broken"].result.status == AuditStatus.FAIL

    @pytest.mark.asyncio
    async def test_error_logs_emit_failed(self, make_auditor, make_registry):
        events = []
        registry = make_registry(
            make_auditor("bad", logs=[LogEntry(LogLevel.ERROR, "Missing header")]),
        )

        await run_audits(
            AuditInput(url="https://example.com"), registry, on_audit_event=events.append
        )

        assert [e.type for e in events] == [AuditEventType.STARTED, AuditEventType.FAILED]

    @pytest.mark.asyncio
    async def test_no_events_for_rejected_input(self, make_auditor, make_registry):
        events = []
        registry = make_registry(make_auditor("perf"))

        with pytest.raises(UnknownAuditTypeError):
            await run_audits(
                AuditInput(url="https://example.com", types=("x",)),
                registry,
                on_audit_event=events.append,
            )

        assert events == []

    @pytest.mark.asyncio
    async def test_event_to_dict(self, make_auditor, make_registry):
        events = []
        registry = make_registry(make_auditor("perf", name="Performance Auditor"))

        await run_audits(
            AuditInput(url="https://example.com"), registry, on_audit_event=events.append
        )

        assert events[0].to_dict() == {
            "type": "audit_started",
            "auditKey": "perf",
            "auditName": "Performance Auditor",
        }
        completed = events[1].to_dict()
        assert completed["type"] == "audit_completed"
        assert completed["result"]["status"] == "PASS"

    @pytest.mark.asyncio
    async def test_sink_error_settles_in_flight_auditors(self, make_auditor, make_registry):
        trace = []
        gate = asyncio.Event()
        registry = make_registry(
            make_auditor("fast"),
            make_auditor("slow", gate=gate, trace=trace),
        )

        def sink(event):
            if event.type == AuditEventType.COMPLETED:
                raise RuntimeError("sink down")

        with pytest.raises(RuntimeError, match="sink down"):
            await run_audits(AuditInput(url="https://example.com"), registry, on_audit_event=sink)

        assert trace == ["slow:start"]
        assert asyncio.all_tasks() == {asyncio.current_task()}
