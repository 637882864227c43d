"""
Refinery 引擎 — 组装配置、Tokenizer 与流水线，执行一次完整的精炼。

使用示例::

    from prompt_refinery import refine

    result = refine(
        "Please ensure you kindly review the contract and/or each and every clause.",
        {"strategy": "legal"},
    )
    result.refined_text
    # "Please ensure you kindly review the contract or each clause"

需要复用配置时使用 Refinery 实例::

    refinery = Refinery({"level": "Aggressive", "preserve_keywords": ["the"]})
    for prompt in prompts:
        print(refinery.refine(prompt).refined_text)

# [DX Decision] 对任意字符串输入都不抛异常：空串、纯空白都返回合法结果。
# 配置错误在构造 Refinery 时就暴露，而不是等到第一次 refine。
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from prompt_refinery.config.loader import load_policy, parse_config
from prompt_refinery.config.schema import RefineConfig
from prompt_refinery.refinery.base import RefineContext, RefinementResult, RefineryPipeline
from prompt_refinery.refinery.scoring import (
    analyze_prompt,
    calculate_scores,
    estimate_savings,
    generate_explanation,
)
from prompt_refinery.refinery.stages import create_default_pipeline
from prompt_refinery.tokenizer import TokenCounter, ensure_token_counter, get_tokenizer

logger = logging.getLogger(__name__)


class Refinery:
    """
    可复用的精炼器。

    参数:
        config: RefineConfig、字典或 None（默认配置）
        tokenizer: 自定义 Token 计数器；None 时按 config.model 选择
        pipeline: 自定义流水线（高级用法）
        debug: 是否输出逐阶段的调试日志

    异常:
        ConfigValidationError: 配置取值非法
        TokenizerError: tokenizer 不满足 TokenCounter 协议
    """

    def __init__(
        self,
        config: RefineConfig | Mapping[str, Any] | None = None,
        *,
        tokenizer: TokenCounter | None = None,
        pipeline: RefineryPipeline | None = None,
        debug: bool = False,
    ) -> None:
        self._config = parse_config(config)
        self._tokenizer = (
            ensure_token_counter(tokenizer)
            if tokenizer is not None
            else get_tokenizer(self._config.model)
        )
        self._pipeline = pipeline or create_default_pipeline()
        self._debug = debug

    @classmethod
    def from_policy(
        cls,
        path: str | Path | None = None,
        *,
        tokenizer: TokenCounter | None = None,
        debug: bool = False,
    ) -> Refinery:
        """从 YAML 策略文件的 refine 段创建精炼器。"""
        policy = load_policy(path=path)
        return cls(policy.refine, tokenizer=tokenizer, debug=debug)

    @property
    def config(self) -> RefineConfig:
        return self._config

    @property
    def tokenizer(self) -> TokenCounter:
        return self._tokenizer

    @property
    def pipeline(self) -> RefineryPipeline:
        return self._pipeline

    def refine(self, text: str | None) -> RefinementResult:
        """
        精炼一段提示词。

        参数:
            text: 输入文本；None 视为空串

        返回:
            RefinementResult

        异常:
            TypeError: text 不是字符串
            PipelineStageError: 自定义阶段抛出了意外异常
        """
        if text is None:
            text = ""
        if not isinstance(text, str):
            raise TypeError(f"refine() 需要 str，实际为 {type(text).__name__}")

        config = self._config
        start_time = time.perf_counter()

        original_analysis = analyze_prompt(text)
        context = RefineContext(config=config, debug=self._debug)

        current = text
        iterations = 0
        while iterations < config.max_iterations:
            iterations += 1
            refined = self._pipeline.run(current, context)
            if refined == current:
                break
            current = refined

        original_tokens = self._tokenizer.count(text)
        refined_tokens = self._tokenizer.count(current)
        savings = estimate_savings(original_tokens, refined_tokens)
        scores = calculate_scores(original_analysis, current, savings, config.level)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        removed = tuple(context.removed_segments)

        logger.debug(
            "精炼完成：%d → %d tokens（节省 %.1f%%），%d 处删除，%d 轮，%.2fms",
            original_tokens,
            refined_tokens,
            savings,
            len(removed),
            iterations,
            elapsed_ms,
        )

        return RefinementResult(
            original_text=text,
            refined_text=current,
            removed_segments=removed,
            scores=scores,
            explanation=generate_explanation(
                config.strategy, config.level, savings, len(removed), elapsed_ms
            ),
            estimated_original_tokens=original_tokens,
            estimated_refined_tokens=refined_tokens,
            savings_percentage=savings,
            strategy=config.strategy.value,
            level=config.level.value,
            processing_time_ms=elapsed_ms,
            iterations=iterations,
        )


def refine(
    text: str | None,
    config: RefineConfig | Mapping[str, Any] | None = None,
    *,
    tokenizer: TokenCounter | None = None,
) -> RefinementResult:
    """一次性精炼：等价于 Refinery(config, tokenizer=tokenizer).refine(text)。"""
    return Refinery(config, tokenizer=tokenizer).refine(text)
