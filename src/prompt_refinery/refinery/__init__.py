"""
规则精炼模块 — 六阶段流水线、评分与引擎入口。
"""

from prompt_refinery.refinery.base import (
    RefineContext,
    RefinementResult,
    RefineryPipeline,
    RefineryStage,
    RemovedSegment,
    Scores,
)
from prompt_refinery.refinery.engine import Refinery, refine
from prompt_refinery.refinery.rules import Rule
from prompt_refinery.refinery.scoring import (
    PromptAnalysis,
    analyze_prompt,
    calculate_complexity,
    calculate_scores,
    estimate_savings,
    generate_explanation,
)
from prompt_refinery.refinery.stages import create_default_pipeline, final_cleanup

__all__ = [
    "PromptAnalysis",
    "RefineContext",
    "RefinementResult",
    "Refinery",
    "RefineryPipeline",
    "RefineryStage",
    "RemovedSegment",
    "Rule",
    "Scores",
    "analyze_prompt",
    "calculate_complexity",
    "calculate_scores",
    "create_default_pipeline",
    "estimate_savings",
    "final_cleanup",
    "generate_explanation",
    "refine",
]
