"""Report formatting utilities."""
from __future__ import annotations

import json
from typing import Literal

OutputFormat = Literal["cli", "json", "markdown"]

OUTPUT_FORMATS = ("cli", "json", "markdown")

_STATUS_COLORS = {"PASS": "green", "WARN": "yellow", "FAIL": "red"}
_LEVEL_COLORS = {"INFO": "blue", "WARNING": "yellow", "ERROR": "red"}
_STATUS_EMOJI = {"PASS": "✅", "WARN": "⚠️", "FAIL": "❌"}
_LEVEL_EMOJI = {"INFO": "ℹ️", "WARNING": "⚠️", "ERROR": "❌"}


def format_report(report: dict, output: OutputFormat = "cli") -> str:
    """Format an audit report for output.

    Args:
        report: Report dict as produced by ``Report.to_dict()``, optionally
            carrying a ``deepAnalysis`` key
        output: Output format - 'cli', 'json', or 'markdown'

    Returns:
        Formatted string representation of the report
    """
    if output == "json":
        return _format_json(report)
    elif output == "markdown":
        return _format_markdown(report)
    else:
        return _format_cli(report)


def _format_json(report: dict) -> str:
    """Format report as JSON."""
    return json.dumps(report, ensure_ascii=False, indent=2)


def _score_color(score) -> str:
    if score is None:
        return "white"
    if score >= 90:
        return "green"
    if score >= 50:
        return "yellow"
    return "red"


def _score_bar(score, width: int = 20) -> str:
    filled = int(width * (score or 0) / 100)
    return "█" * filled + "░" * (width - filled)


def _format_cli(report: dict) -> str:
    """Format report for terminal display with Rich-compatible markup."""
    lines = []
    summary = report.get("summary", {})
    overall = summary.get("overallScore")

    lines.append("[bold cyan]Site Audit Report[/bold cyan]")
    lines.append(f"[dim]URL:[/dim] {report.get('url', '')}")
    lines.append("")

    color = _score_color(overall)
    score_text = f"{overall}/100" if overall is not None else "N/A"
    lines.append(f"[bold]Overall Score:[/bold] [{color}]{score_text}[/{color}]")
    lines.append(
        f"[dim]{summary.get('totalAudits', 0)} audit(s): "
        f"{summary.get('errorCount', 0)} error(s), "
        f"{summary.get('warningCount', 0)} warning(s), "
        f"{summary.get('infoCount', 0)} info[/dim]"
    )
    lines.append("")

    lines.append("[bold]Audits:[/bold]")
    for audit in report.get("audits", []):
        status = audit.get("status", "")
        status_color = _STATUS_COLORS.get(status, "white")
        score = (audit.get("details") or {}).get("score")
        if isinstance(score, (int, float)) and not isinstance(score, bool):
            bar_color = _score_color(score)
            score_display = f"[{bar_color}]{_score_bar(score)}[/{bar_color}] {score}/100"
        else:
            score_display = "[dim]no score[/dim]"
        lines.append(
            f"  {audit.get('name', audit.get('key', '')):22} "
            f"[{status_color}]{status:4}[/{status_color}] {score_display}"
        )
        for entry in audit.get("logs", []):
            level = entry.get("level", "INFO")
            level_color = _LEVEL_COLORS.get(level, "white")
            lines.append(f"      [{level_color}]{level:7}[/{level_color}] {entry.get('message', '')}")
    lines.append("")

    findings = summary.get("topFindings", [])
    if findings:
        lines.append("[bold red]Top Findings:[/bold red]")
        for i, finding in enumerate(findings, 1):
            level = finding.get("level", "")
            level_color = _LEVEL_COLORS.get(level, "white")
            lines.append(
                f"  {i}. [{level_color}][{level}][/{level_color}] "
                f"{finding.get('auditName', '')}: {finding.get('message', '')}"
            )
        lines.append("")

    recommendations = _collect_recommendations(report)
    if recommendations:
        lines.append("[bold]Recommended Fixes:[/bold]")
        for i, rec in enumerate(recommendations, 1):
            priority = rec.get("priority", "LOW")
            priority_color = {"HIGH": "red", "MEDIUM": "yellow", "LOW": "blue"}.get(priority, "white")
            lines.append(
                f"  {i}. [{priority_color}][{priority}][/{priority_color}] "
                f"{rec.get('area', '')}: {rec.get('action', '')}"
            )
        lines.append("")

    deep = report.get("deepAnalysis")
    if deep:
        lines.append(f"[bold]Deep Analysis:[/bold] {deep.get('agent_status', 'UNKNOWN')}")
        if deep.get("summary"):
            lines.append(f"  {deep['summary']}")
        for i, step in enumerate(deep.get("steps") or [], 1):
            lines.append(f"  {i}. {step.get('action', '')} [dim]({step.get('file', '')})[/dim]")

    return "\n".join(lines).rstrip("\n")


def _collect_recommendations(report: dict) -> list[dict]:
    """Recommendations from every audit, highest priority first."""
    order = {"HIGH": 0, "MEDIUM": 1, "LOW": 2}
    recommendations = [
        rec
        for audit in report.get("audits", [])
        for rec in (audit.get("details") or {}).get("recommendations", [])
    ]
    return sorted(recommendations, key=lambda rec: order.get(rec.get("priority"), 3))


def _format_markdown(report: dict) -> str:
    """Format report as Markdown."""
    lines = []
    summary = report.get("summary", {})
    overall = summary.get("overallScore")

    lines.append("# Site Audit Report")
    lines.append("")
    lines.append(f"**URL:** {report.get('url', '')}")
    if report.get("startedAt"):
        lines.append(f"**Started:** {report['startedAt']}")
    lines.append("")

    lines.append("## Overall Score")
    lines.append("")
    lines.append(f"**{overall}/100**" if overall is not None else "**N/A**")
    lines.append("")

    lines.append("### Audits")
    lines.append("")
    lines.append("| Audit | Status | Score |")
    lines.append("|-------|--------|-------|")
    for audit in report.get("audits", []):
        status = audit.get("status", "")
        score = (audit.get("details") or {}).get("score")
        score_text = score if isinstance(score, (int, float)) and not isinstance(score, bool) else "-"
        lines.append(f"| {audit.get('name', '')} | {_STATUS_EMOJI.get(status, '')} {status} | {score_text} |")
    lines.append("")

    findings = summary.get("topFindings", [])
    if findings:
        lines.append("## Top Findings")
        lines.append("")
        for finding in findings:
            emoji = _LEVEL_EMOJI.get(finding.get("level"), "")
            lines.append(f"- {emoji} **{finding.get('auditName', '')}:** {finding.get('message', '')}")
        lines.append("")

    for audit in report.get("audits", []):
        logs = audit.get("logs", [])
        if not logs:
            continue
        lines.append(f"### {audit.get('name', '')}")
        lines.append("")
        for entry in logs:
            lines.append(f"- {_LEVEL_EMOJI.get(entry.get('level'), '')} {entry.get('message', '')}")
        lines.append("")

    recommendations = _collect_recommendations(report)
    if recommendations:
        lines.append("## Recommended Fixes")
        lines.append("")
        for i, rec in enumerate(recommendations, 1):
            lines.append(
                f"{i}. **[{rec.get('priority', '')}]** {rec.get('action', '')} "
                f"_(impact: {rec.get('impact', '')})_"
            )
        lines.append("")

    deep = report.get("deepAnalysis")
    if deep:
        lines.append("## Deep Analysis")
        lines.append("")
        lines.append(f"**Status:** {deep.get('agent_status', 'UNKNOWN')}")
        lines.append("")
        if deep.get("summary"):
            lines.append(deep["summary"])
            lines.append("")
        for i, step in enumerate(deep.get("steps") or [], 1):
            lines.append(f"{i}. **{step.get('action', '')}** (`{step.get('file', '')}`)")
            if step.get("code_snippet"):
                lines.append("")
                lines.append("   ```")
                lines.append(f"   {step['code_snippet']}")
                lines.append("   ```")
        lines.append("")

    return "\n".join(lines).rstrip("\n") + "\n"
