"""
Refinery 配置的 Schema 定义与校验。

所有可调项（策略、压缩级别、输出形态、保留关键词）都收敛到 RefineConfig，
YAML 策略文件的根结构为 RefineryPolicy。

# [Design Decision] strategy / level / format 建模为封闭枚举，
# 在配置构造时完成校验。未知取值是构造期错误，而不是运行期的静默回退。
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from prompt_refinery.config.defaults import (
    DEFAULT_PRICE_PER_1K_TOKENS,
    FORMAT_ALIASES,
    LEVEL_ALIASES,
    MIN_DIAGNOSTIC_CHARS,
    MIN_SENTENCE_CHARS,
    STRATEGY_ALIASES,
)


class Strategy(str, Enum):
    """改写策略：面向目标模型或领域的规则变体。"""

    UNIVERSAL = "Universal"
    GPT = "GPT-4 Optimized"
    CLAUDE = "Claude Optimized"
    DEEPSEEK = "DeepSeek Optimized"
    LEGAL = "Legal / Regulatory"


class CompressionLevel(str, Enum):
    """压缩力度。"""

    LIGHT = "Light"
    BALANCED = "Balanced"
    AGGRESSIVE = "Aggressive"


class OutputFormat(str, Enum):
    """输出形态。"""

    XML = "XML Tags"
    STRUCTURED = "Structured"
    MINIMALIST = "Minimalist"


def coerce_enum(enum_cls: type[Enum], value: Any, aliases: dict[str, str]) -> Enum:
    """
    将枚举值 / 枚举名 / 别名统一解析为枚举成员（大小写不敏感）。

    异常:
        ValueError: 取值不在封闭集合内
    """
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        raise ValueError(
            f"{enum_cls.__name__} 需要字符串，实际类型为 {type(value).__name__}"
        )

    key = value.strip().lower()
    for member in enum_cls:
        if key in (member.name.lower(), str(member.value).lower()):
            return member
    if key in aliases:
        return enum_cls[aliases[key]]

    allowed = ", ".join(m.name for m in enum_cls)
    raise ValueError(f"未知的 {enum_cls.__name__} 取值 '{value}'，可选：{allowed}")


class RefineConfig(BaseModel):
    """
    单次 refine 调用的配置。

    YAML 示例::

        refine:
          strategy: legal
          level: Aggressive
          format: Structured
          preserve_keywords: ["in order to", "shall"]
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    strategy: Strategy = Field(default=Strategy.UNIVERSAL, description="改写策略")
    level: CompressionLevel = Field(default=CompressionLevel.BALANCED, description="压缩力度")
    format: OutputFormat = Field(default=OutputFormat.XML, description="输出形态")
    preserve_keywords: tuple[str, ...] = Field(
        default=(),
        alias="preserveKeywords",
        description="命中片段包含任一关键词（大小写不敏感子串）时不删除",
    )
    max_iterations: int = Field(
        default=1,
        alias="maxIterations",
        ge=1,
        le=50,
        description="最多执行几轮流水线（文本不再变化时提前结束）",
    )
    model: str | None = Field(
        default=None,
        description="目标模型名，用于挑选 Tokenizer；为空时按 ceil(字符数/4) 估算",
    )

    @field_validator("strategy", mode="before")
    @classmethod
    def _parse_strategy(cls, value: Any) -> Strategy:
        return coerce_enum(Strategy, value, STRATEGY_ALIASES)

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level(cls, value: Any) -> CompressionLevel:
        return coerce_enum(CompressionLevel, value, LEVEL_ALIASES)

    @field_validator("format", mode="before")
    @classmethod
    def _parse_format(cls, value: Any) -> OutputFormat:
        return coerce_enum(OutputFormat, value, FORMAT_ALIASES)

    @field_validator("preserve_keywords", mode="before")
    @classmethod
    def _normalize_keywords(cls, value: Any) -> tuple[str, ...]:
        """去除首尾空白并丢弃空串。"""
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        keywords: list[str] = []
        for item in value:
            if not isinstance(item, str):
                raise ValueError(f"preserve_keywords 只能包含字符串，发现 {item!r}")
            stripped = item.strip()
            if stripped and stripped not in keywords:
                keywords.append(stripped)
        return tuple(keywords)


class DiagnosticConfig(BaseModel):
    """重复诊断阈值。"""

    min_text_chars: int = Field(default=MIN_DIAGNOSTIC_CHARS, ge=0)
    min_sentence_chars: int = Field(default=MIN_SENTENCE_CHARS, ge=0)


class BatchConfig(BaseModel):
    """批处理汇总配置。"""

    price_per_1k_tokens: float = Field(
        default=DEFAULT_PRICE_PER_1K_TOKENS,
        ge=0.0,
        description="估算美元节省时使用的单价",
    )


class RefineryPolicy(BaseModel):
    """
    完整的策略配置 — 对应 YAML 策略文件的根结构。

    每个字段都有合理的默认值，空文件即等价于默认配置。
    """

    version: str = Field(default="1.0", description="策略版本")
    name: str = Field(default="default", description="策略名称")
    description: str = Field(default="", description="策略描述")

    refine: RefineConfig = Field(default_factory=RefineConfig)
    diagnostic: DiagnosticConfig = Field(default_factory=DiagnosticConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
