"""Deep analysis: LLM fix plans and staged progress streaming."""
from site_audit.deep.agent import (
    CONNECTION_LOST,
    SYSTEM_NOMINAL,
    DeepAnalyst,
    build_context,
    detect_tech_stack,
    nominal_deep_analysis,
    should_skip_deep_analysis,
)
from site_audit.deep.pipeline import run_deep_audit
from site_audit.deep.progress import STAGE_TEMPLATES, ProgressReporter, ProgressStage

__all__ = [
    "CONNECTION_LOST",
    "STAGE_TEMPLATES",
    "SYSTEM_NOMINAL",
    "DeepAnalyst",
    "ProgressReporter",
    "ProgressStage",
    "build_context",
    "detect_tech_stack",
    "nominal_deep_analysis",
    "run_deep_audit",
    "should_skip_deep_analysis",
]
