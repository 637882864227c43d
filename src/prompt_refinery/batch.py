"""
批量精炼 — 用同一份配置逐条处理一组提示词，并汇总 Token 与成本节省。

单条失败不会中断整批：该条标记为 error，其余条目照常处理。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from prompt_refinery.config.defaults import DEFAULT_PRICE_PER_1K_TOKENS
from prompt_refinery.config.schema import RefineConfig
from prompt_refinery.errors import PromptRefineryError
from prompt_refinery.refinery.base import RefinementResult
from prompt_refinery.refinery.engine import Refinery
from prompt_refinery.refinery.scoring import estimate_savings
from prompt_refinery.tokenizer import TokenCounter

logger = logging.getLogger(__name__)

STATUS_COMPLETED = "completed"
STATUS_ERROR = "error"


@dataclass(frozen=True)
class BatchItem:
    """
    批处理中的一条记录。

    属性:
        id: 条目序号（从 1 开始，跳过的空白条目不占号）
        original: 输入文本
        status: "completed" 或 "error"
        result: 成功时的精炼结果
        error: 失败时的错误信息
    """

    id: int
    original: str
    status: str
    result: RefinementResult | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_COMPLETED

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "original": self.original,
            "status": self.status,
            "result": self.result.to_dict() if self.result else None,
            "error": self.error,
        }


@dataclass(frozen=True)
class BatchSummary:
    """只统计成功条目的汇总。"""

    total_prompts: int
    total_original_tokens: int
    total_refined_tokens: int
    total_savings_percent: float
    estimated_dollar_savings: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_prompts": self.total_prompts,
            "total_original_tokens": self.total_original_tokens,
            "total_refined_tokens": self.total_refined_tokens,
            "total_savings_percent": self.total_savings_percent,
            "estimated_dollar_savings": self.estimated_dollar_savings,
        }


@dataclass(frozen=True)
class BatchReport:
    items: tuple[BatchItem, ...]
    summary: BatchSummary

    @property
    def failed(self) -> tuple[BatchItem, ...]:
        return tuple(item for item in self.items if not item.ok)

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "summary": self.summary.to_dict(),
        }


def summarize(
    items: Iterable[BatchItem],
    price_per_1k_tokens: float = DEFAULT_PRICE_PER_1K_TOKENS,
) -> BatchSummary:
    """汇总成功条目的 Token 数，并按单价估算美元节省。"""
    completed = [item.result for item in items if item.ok and item.result is not None]
    original = sum(r.estimated_original_tokens for r in completed)
    refined = sum(r.estimated_refined_tokens for r in completed)
    return BatchSummary(
        total_prompts=len(completed),
        total_original_tokens=original,
        total_refined_tokens=refined,
        total_savings_percent=estimate_savings(original, refined),
        estimated_dollar_savings=(original - refined) / 1000 * price_per_1k_tokens,
    )


def refine_batch(
    prompts: Iterable[str],
    config: RefineConfig | Mapping[str, Any] | None = None,
    *,
    tokenizer: TokenCounter | None = None,
    price_per_1k_tokens: float = DEFAULT_PRICE_PER_1K_TOKENS,
) -> BatchReport:
    """
    批量精炼。

    参数:
        prompts: 提示词序列；空白条目会被跳过
        config: 所有条目共用的配置
        tokenizer: 自定义 Token 计数器
        price_per_1k_tokens: 估算美元节省用的单价

    返回:
        BatchReport

    异常:
        ConfigValidationError: 配置非法（整批无法开始）
    """
    refinery = Refinery(config, tokenizer=tokenizer)
    items: list[BatchItem] = []

    for prompt in prompts:
        if not isinstance(prompt, str) or not prompt.strip():
            continue
        item_id = len(items) + 1
        try:
            result = refinery.refine(prompt)
        except PromptRefineryError as e:
            logger.warning("批处理第 %d 条失败：%s", item_id, e.what)
            items.append(
                BatchItem(id=item_id, original=prompt, status=STATUS_ERROR, error=e.what)
            )
            continue
        items.append(
            BatchItem(id=item_id, original=prompt, status=STATUS_COMPLETED, result=result)
        )

    summary = summarize(items, price_per_1k_tokens)
    logger.info(
        "批处理完成：%d 条成功，%d 条失败，节省 %.1f%%",
        summary.total_prompts,
        len(items) - summary.total_prompts,
        summary.total_savings_percent,
    )
    return BatchReport(items=tuple(items), summary=summary)
