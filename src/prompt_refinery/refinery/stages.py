"""
Refinery 内置阶段。

1. RedundantPhraseStage — 删除冗余的多词结构
2. FillerWordStage — 删除填充词与含糊限定语
3. CompressionLevelStage — 按 level 做空白 / 标点 / 冠词压缩
4. StrategyRewriteStage — 按 strategy 选择唯一一个改写分支
5. FormatRewriteStage — 按 format 选择唯一一个形态分支
6. FinalCleanupStage — 折叠空白、去掉结尾句末标点、首字母大写

阶段顺序不可调换：后面的阶段依赖前面阶段已完成的归一化。
"""

from __future__ import annotations

import re
import string

from prompt_refinery.refinery.base import RefineContext, RefineryPipeline
from prompt_refinery.refinery.rules import (
    FILLER_WORD_RULES,
    FORMAT_RULES,
    LEVEL_RULES,
    REDUNDANT_PHRASE_RULES,
    SENTENCE_TERMINATORS,
    STRATEGY_RULES,
)

_WHITESPACE_RUN = re.compile(r"\s+")


def _collapse_run(match: re.Match[str]) -> str:
    return "\n" if "\n" in match.group(0) else " "


def final_cleanup(text: str) -> str:
    """
    收尾整理，幂等：final_cleanup(final_cleanup(s)) == final_cleanup(s)。

    - 空白串折叠为单个空格；含换行的空白串折叠为单个换行（保留 Structured 的分行）
    - 去掉结尾的句末标点
    - 首字母大写（仅当大写形式仍是单个字符）
    """
    result = _WHITESPACE_RUN.sub(_collapse_run, text).strip()
    result = result.rstrip(SENTENCE_TERMINATORS + string.whitespace)
    if result:
        first = result[0].upper()
        if len(first) == 1:
            result = first + result[1:]
    return result


class RedundantPhraseStage:
    """删除 "in order to"、"first of all"、"in my opinion" 一类冗余结构。"""

    @property
    def name(self) -> str:
        return "redundant_phrases"

    def process(self, text: str, context: RefineContext) -> str:
        return context.apply_all(text, REDUNDANT_PHRASE_RULES).strip()


class FillerWordStage:
    """删除 "just"、"kind of"、"there is"、"maybe" 一类填充词。"""

    @property
    def name(self) -> str:
        return "filler_words"

    def process(self, text: str, context: RefineContext) -> str:
        return context.apply_all(text, FILLER_WORD_RULES).strip()


class CompressionLevelStage:
    """
    压缩级别阶段。

    - Light: 原样通过
    - Balanced: 折叠空白、折叠重复句末标点
    - Aggressive: Balanced + 收缩冗长结构 + 删除冠词 a / an / the
    """

    @property
    def name(self) -> str:
        return "compression_level"

    def process(self, text: str, context: RefineContext) -> str:
        rules = LEVEL_RULES[context.config.level]
        if not rules:
            return text
        return context.apply_all(text, rules).strip()


class StrategyRewriteStage:
    """按 strategy 选择唯一一个改写分支；Legal 分支只动明确冗余的双联词。"""

    @property
    def name(self) -> str:
        return "strategy_rewrite"

    def process(self, text: str, context: RefineContext) -> str:
        return context.apply_all(text, STRATEGY_RULES[context.config.strategy]).strip()


class FormatRewriteStage:
    """按 format 选择唯一一个形态分支；XML 形态的结构由调用方添加，这里不做处理。"""

    @property
    def name(self) -> str:
        return "format_rewrite"

    def process(self, text: str, context: RefineContext) -> str:
        rules = FORMAT_RULES[context.config.format]
        if not rules:
            return text
        return context.apply_all(text, rules).strip()


class FinalCleanupStage:
    @property
    def name(self) -> str:
        return "final_cleanup"

    def process(self, text: str, context: RefineContext) -> str:
        return final_cleanup(text)


def create_default_pipeline(skip_stages: set[str] | None = None) -> RefineryPipeline:
    """创建包含六个标准阶段的流水线。"""
    return RefineryPipeline(
        stages=[
            RedundantPhraseStage(),
            FillerWordStage(),
            CompressionLevelStage(),
            StrategyRewriteStage(),
            FormatRewriteStage(),
            FinalCleanupStage(),
        ],
        skip_stages=skip_stages,
    )
