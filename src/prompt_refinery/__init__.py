"""
Prompt Refinery — 基于规则的提示词精炼与重复诊断。

它不调用任何模型：冗余短语、填充词、冠词、重复标点都由确定性的规则删除，
每一处删除都记录原因，保留关键词命中的片段一律不动。

快速上手::

    from prompt_refinery import refine, diagnose

    result = refine(
        "It is important to note that you should just review the contract.",
        {"strategy": "legal", "level": "Balanced"},
    )
    result.refined_text          # 精炼后的文本
    result.removed_segments      # 按执行顺序排列的删除日志
    result.savings_percentage    # Token 节省百分比

    report = diagnose("The quick brown fox jumps. The quick brown fox runs.")
    report.repeated_phrases      # ("the quick brown", "quick brown fox")

批量处理::

    from prompt_refinery import refine_batch

    report = refine_batch(prompts, {"level": "Aggressive"})
    report.summary.estimated_dollar_savings
"""

from prompt_refinery.batch import BatchItem, BatchReport, BatchSummary, refine_batch
from prompt_refinery.config import (
    CompressionLevel,
    OutputFormat,
    RefineConfig,
    RefineryPolicy,
    Strategy,
    load_policy,
)
from prompt_refinery.diagnostic import DiagnosticResult, diagnose, highlight_phrases
from prompt_refinery.errors import (
    ConfigValidationError,
    PipelineStageError,
    PolicyLoadError,
    PromptRefineryError,
    TokenizerError,
)
from prompt_refinery.refinery import (
    RefinementResult,
    Refinery,
    RemovedSegment,
    Scores,
    refine,
)

__version__ = "0.1.0"

__all__ = [
    # 顶层入口
    "diagnose",
    "refine",
    "refine_batch",
    "Refinery",
    # 配置
    "CompressionLevel",
    "OutputFormat",
    "RefineConfig",
    "RefineryPolicy",
    "Strategy",
    "load_policy",
    # 结果
    "BatchItem",
    "BatchReport",
    "BatchSummary",
    "DiagnosticResult",
    "RefinementResult",
    "RemovedSegment",
    "Scores",
    "highlight_phrases",
    # 异常
    "ConfigValidationError",
    "PipelineStageError",
    "PolicyLoadError",
    "PromptRefineryError",
    "TokenizerError",
]
