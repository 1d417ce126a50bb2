"""Helpers shared by the built-in auditors."""
from __future__ import annotations

from enum import Enum

from site_audit.audit.base import LogEntry, LogLevel


class Priority(str, Enum):
    """Recommendation priority."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


def add_recommendation(
    recommendations: list[dict],
    priority: Priority,
    area: str,
    action: str,
    impact: str,
) -> None:
    recommendations.append({
        "priority": priority.value,
        "area": area,
        "action": action,
        "impact": impact,
    })


def info(message: str) -> LogEntry:
    return LogEntry(LogLevel.INFO, message)


def warning(message: str) -> LogEntry:
    return LogEntry(LogLevel.WARNING, message)


def error(message: str) -> LogEntry:
    return LogEntry(LogLevel.ERROR, message)


def scoring(score: int) -> dict:
    return {"score": score, "outOf": 100}
