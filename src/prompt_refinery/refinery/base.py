"""
Refinery 基础结构 — 结果数据类、运行时上下文、阶段协议与编排器。

流水线顺序固定：冗余短语 → 填充词 → 压缩级别 → 策略改写 → 输出形态 → 收尾。
每个阶段只看到上一阶段的输出，删除日志在整个运行期间只追加、不重置。

# [Design Decision] 阶段接口使用 Protocol：任何带 name 和 process() 的对象
# 都可以作为阶段插入，便于在测试里替换或跳过单个阶段。
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from prompt_refinery.config.schema import RefineConfig

if TYPE_CHECKING:
    from prompt_refinery.refinery.rules import Rule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemovedSegment:
    """
    删除日志中的一条记录。

    属性:
        text: 被删除或改写的原始片段
        reason: 人类可读的删除原因
    """

    text: str
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {"text": self.text, "reason": self.reason}


@dataclass(frozen=True)
class Scores:
    """启发式评分，取值范围均为 [0, 100]。"""

    integrity: float
    efficiency: float
    complexity: float

    def to_dict(self) -> dict[str, float]:
        return {
            "integrity": self.integrity,
            "efficiency": self.efficiency,
            "complexity": self.complexity,
        }


@dataclass(frozen=True)
class RefinementResult:
    """
    一次 refine 调用的完整结果。

    属性:
        original_text: 输入文本
        refined_text: 精炼后的文本
        removed_segments: 按执行顺序排列的删除日志
        scores: 完整度 / 效率 / 复杂度评分
        explanation: 模板化的人类可读摘要
        estimated_original_tokens: 输入的估算 Token 数
        estimated_refined_tokens: 输出的估算 Token 数
        savings_percentage: 节省百分比，不小于 0
        strategy: 使用的策略显示名
        level: 使用的压缩级别显示名
        processing_time_ms: 处理耗时（毫秒）
        iterations: 实际执行的流水线轮数
    """

    original_text: str
    refined_text: str
    removed_segments: tuple[RemovedSegment, ...]
    scores: Scores
    explanation: str
    estimated_original_tokens: int
    estimated_refined_tokens: int
    savings_percentage: float
    strategy: str
    level: str
    processing_time_ms: float = 0.0
    iterations: int = 1

    @property
    def tokens_saved(self) -> int:
        return max(0, self.estimated_original_tokens - self.estimated_refined_tokens)

    def to_dict(self) -> dict[str, Any]:
        return {
            "original_text": self.original_text,
            "refined_text": self.refined_text,
            "estimated_original_tokens": self.estimated_original_tokens,
            "estimated_refined_tokens": self.estimated_refined_tokens,
            "savings_percentage": self.savings_percentage,
            "removed_segments": [seg.to_dict() for seg in self.removed_segments],
            "scores": self.scores.to_dict(),
            "explanation": self.explanation,
            "strategy": self.strategy,
            "level": self.level,
            "processing_time_ms": self.processing_time_ms,
            "iterations": self.iterations,
        }


@dataclass
class RefineContext:
    """
    单次运行的可变状态：配置、删除日志、受保护片段。

    每次 refine 调用新建一个实例，调用之间不共享任何状态。
    """

    config: RefineConfig = field(default_factory=RefineConfig)
    removed_segments: list[RemovedSegment] = field(default_factory=list)
    preserved_segments: list[str] = field(default_factory=list)
    """因包含保留关键词而被保留下来的片段，后续阶段不得改动"""

    debug: bool = False

    def contains_keyword(self, segment: str) -> bool:
        """片段是否包含任一保留关键词（大小写不敏感子串）。"""
        lowered = segment.lower()
        return any(kw.lower() in lowered for kw in self.config.preserve_keywords)

    def protected_spans(self, text: str) -> list[tuple[int, int]]:
        """当前文本中关键词与已保留片段的所有出现区间。"""
        spans: list[tuple[int, int]] = []
        for needle in (*self.config.preserve_keywords, *self.preserved_segments):
            spans.extend(
                m.span() for m in re.finditer(re.escape(needle), text, re.IGNORECASE)
            )
        return spans

    def apply(self, text: str, rule: Rule) -> str:
        """
        应用一条规则。

        带删除原因的规则受保留关键词约束：命中片段包含关键词，或与关键词 /
        已保留片段的出现区间重叠时，原样保留并登记为受保护片段；
        否则执行替换并追加删除日志。纯格式整理规则（reason 为 None）不受约束。
        """
        if rule.reason is None:
            return rule.pattern.sub(rule.replacement, text)

        spans = self.protected_spans(text)

        def _replace(match: re.Match[str]) -> str:
            segment = match.group(0)
            start, end = match.span()
            if self.contains_keyword(segment) or any(
                start < p_end and p_start < end for p_start, p_end in spans
            ):
                if segment not in self.preserved_segments:
                    self.preserved_segments.append(segment)
                return segment

            replacement = match.expand(rule.replacement)
            if replacement != segment:
                self.removed_segments.append(RemovedSegment(text=segment, reason=rule.reason))
            return replacement

        return rule.pattern.sub(_replace, text)

    def apply_all(self, text: str, rules: tuple[Rule, ...]) -> str:
        """按顺序应用一组规则，每条规则看到上一条的输出。"""
        for rule in rules:
            text = self.apply(text, rule)
        return text


@runtime_checkable
class RefineryStage(Protocol):
    """
    Refinery 阶段协议。

    最小实现示例::

        class ShoutStage:
            @property
            def name(self) -> str:
                return "shout"

            def process(self, text: str, context: RefineContext) -> str:
                return text.upper()
    """

    @property
    def name(self) -> str:
        """阶段名称，用于日志和错误信息。"""
        ...

    def process(self, text: str, context: RefineContext) -> str:
        """
        处理文本。

        参数:
            text: 上一阶段的输出
            context: 运行时上下文（配置、删除日志）

        返回:
            处理后的文本
        """
        ...


class RefineryPipeline:
    """
    流水线编排器 — 按顺序执行各阶段。

    基本用法::

        pipeline = create_default_pipeline()
        refined = pipeline.run(text, RefineContext(config=config))

    跳过特定阶段::

        pipeline = RefineryPipeline(stages=[...], skip_stages={"format_rewrite"})
    """

    def __init__(
        self,
        stages: list[RefineryStage] | None = None,
        skip_stages: set[str] | None = None,
    ) -> None:
        self._stages = list(stages or [])
        self._skip_stages = skip_stages or set()

    @property
    def stage_names(self) -> list[str]:
        """返回所有阶段的名称列表。"""
        return [s.name for s in self._stages]

    def run(self, text: str, context: RefineContext) -> str:
        """
        执行一轮完整的流水线。

        参数:
            text: 输入文本
            context: 运行时上下文

        返回:
            处理后的文本

        异常:
            PipelineStageError: 某个阶段抛出了意外异常
        """
        from prompt_refinery.errors import PipelineStageError

        current = text

        for stage in self._stages:
            if stage.name in self._skip_stages:
                if context.debug:
                    logger.debug("跳过阶段: %s", stage.name)
                continue

            start_time = time.perf_counter()
            input_length = len(current)

            try:
                current = stage.process(current, context)
            except PipelineStageError:
                raise
            except Exception as e:
                elapsed_ms = (time.perf_counter() - start_time) * 1000
                logger.error("阶段 %s 执行失败（%.1fms）：%s", stage.name, elapsed_ms, e)
                raise PipelineStageError(
                    what=f"Refinery 阶段 '{stage.name}' 执行失败。",
                    why=f"{type(e).__name__}: {e}",
                    how=f"检查 '{stage.name}' 阶段的规则与输入。"
                        f"也可以通过 skip_stages={{'{stage.name}'}} 临时跳过该阶段。",
                    stage_name=stage.name,
                ) from e

            if context.debug:
                logger.debug(
                    "阶段 %s 完成：%d → %d 字符（%.2fms）",
                    stage.name,
                    input_length,
                    len(current),
                    (time.perf_counter() - start_time) * 1000,
                )

        return current
