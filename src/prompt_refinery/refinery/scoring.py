"""
启发式评分 — 文本分析、复杂度、节省率与说明文本。

这些分数是粗略的规则估算，不是语义度量：
- integrity 以 80 为基线，按压缩级别和复杂度变化加减
- efficiency 是节省率的两倍，封顶 100
- complexity 由长度、平均句长、词汇多样性三项累加
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from prompt_refinery.config.defaults import (
    COMPLEXITY_DROP_TOLERANCE,
    INTEGRITY_AGGRESSIVE_PENALTY,
    INTEGRITY_BASELINE,
    INTEGRITY_COMPLEXITY_PENALTY,
    INTEGRITY_LIGHT_BONUS,
    SCORE_MAX,
    SCORE_MIN,
)
from prompt_refinery.config.schema import CompressionLevel, Strategy
from prompt_refinery.refinery.base import Scores

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_WHITESPACE = re.compile(r"\s+")
_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")

# (阈值, 加分)，按从高到低检查，命中第一档即停止
_LENGTH_TIERS = ((2000, 20), (1000, 10), (500, 5))
_SENTENCE_LENGTH_TIERS = ((25, 15), (15, 10), (10, 5))
_VOCABULARY_TIERS = ((0.6, 10), (0.4, 5))


@dataclass(frozen=True)
class PromptAnalysis:
    """
    一段提示词的结构统计。

    属性:
        sentences: 去空白后非空的句子
        words: 非空的词
        paragraphs: 以空行分隔的非空段落
        avg_words_per_sentence: 平均每句词数
        complexity: 复杂度评分 [0, 100]
    """

    sentences: tuple[str, ...]
    words: tuple[str, ...]
    paragraphs: tuple[str, ...]
    avg_words_per_sentence: float
    complexity: float

    @property
    def total_sentences(self) -> int:
        return len(self.sentences)

    @property
    def total_words(self) -> int:
        return len(self.words)

    @property
    def total_paragraphs(self) -> int:
        return len(self.paragraphs)


def clamp(value: float, low: float = SCORE_MIN, high: float = SCORE_MAX) -> float:
    return max(low, min(high, value))


def _tier_score(value: float, tiers: tuple[tuple[float, int], ...]) -> int:
    for threshold, points in tiers:
        if value > threshold:
            return points
    return 0


def calculate_complexity(text: str) -> float:
    """
    复杂度评分，封顶 100。

    空文本和纯空白文本记 0 分。
    """
    if not text.strip():
        return 0

    # 词数按原样切分统计（首尾空白会产生空串），与句数的切分口径保持一致
    tokens = _WHITESPACE.split(text)
    sentence_count = max(1, len(_SENTENCE_SPLIT.split(text)))
    vocabulary_ratio = len({t.lower() for t in tokens}) / max(1, len(tokens))

    score = (
        _tier_score(len(text), _LENGTH_TIERS)
        + _tier_score(len(tokens) / sentence_count, _SENTENCE_LENGTH_TIERS)
        + _tier_score(vocabulary_ratio, _VOCABULARY_TIERS)
    )
    return min(SCORE_MAX, score)


def analyze_prompt(text: str) -> PromptAnalysis:
    """统计句子、词、段落，并计算复杂度。"""
    sentences = tuple(s.strip() for s in _SENTENCE_SPLIT.split(text) if s.strip())
    words = tuple(w for w in _WHITESPACE.split(text) if w)
    paragraphs = tuple(p for p in _PARAGRAPH_SPLIT.split(text) if p.strip())
    return PromptAnalysis(
        sentences=sentences,
        words=words,
        paragraphs=paragraphs,
        avg_words_per_sentence=len(words) / max(1, len(sentences)),
        complexity=calculate_complexity(text),
    )


def estimate_savings(original_tokens: int, refined_tokens: int) -> float:
    """节省百分比，不小于 0；原文为 0 个 Token 时返回 0。"""
    if original_tokens <= 0:
        return 0.0
    return max(0.0, (original_tokens - refined_tokens) / original_tokens * 100)


def calculate_scores(
    original: PromptAnalysis,
    refined_text: str,
    savings_percentage: float,
    level: CompressionLevel,
) -> Scores:
    """
    计算三项评分，均截断到 [0, 100]。

    参数:
        original: 原文的分析结果
        refined_text: 精炼后的文本
        savings_percentage: 节省百分比
        level: 压缩级别

    返回:
        Scores
    """
    refined_complexity = calculate_complexity(refined_text)

    integrity = INTEGRITY_BASELINE
    if level is CompressionLevel.AGGRESSIVE:
        integrity -= INTEGRITY_AGGRESSIVE_PENALTY
    elif level is CompressionLevel.LIGHT:
        integrity += INTEGRITY_LIGHT_BONUS

    if refined_complexity - original.complexity < -COMPLEXITY_DROP_TOLERANCE:
        integrity -= INTEGRITY_COMPLEXITY_PENALTY

    return Scores(
        integrity=clamp(integrity),
        efficiency=clamp(savings_percentage * 2),
        complexity=clamp(refined_complexity),
    )


def generate_explanation(
    strategy: Strategy,
    level: CompressionLevel,
    savings_percentage: float,
    removed_count: int,
    processing_time_ms: float,
) -> str:
    return (
        f"Local optimization completed in {processing_time_ms:.0f}ms.\n"
        f"Strategy: {strategy.value}, Level: {level.value}\n"
        f"Token savings: {savings_percentage:.1f}%\n"
        f"Removed segments: {removed_count}\n"
        "Integrity preserved through rule-based analysis."
    )
