"""
重复诊断（"semantic leak"）— 找出在文档中重复出现的三词短语。

流程:
1. 按 `.` / `!` / `?`（连续出现视为一个分隔符）切句，去掉首尾空白，丢弃过短的句子
2. 每个句子小写后按空白切词，用长度为 3 的滑动窗口生成 trigram
3. 统计 trigram 在整篇小写文本中的整词出现次数（不限于当前句子）
4. 次数 > 1 的窗口记一次 leak，短语去重后收集

这是纯函数：不修改输入，没有副作用，可并发调用。
"""

from __future__ import annotations

import html
import logging
import re
from collections.abc import Iterator

from prompt_refinery.config.defaults import (
    MIN_DIAGNOSTIC_CHARS,
    MIN_SENTENCE_CHARS,
    NGRAM_SIZE,
)
from prompt_refinery.diagnostic.base import DiagnosticResult
from prompt_refinery.diagnostic.index import TrigramIndex, phrase_pattern

logger = logging.getLogger(__name__)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def split_sentences(text: str, min_chars: int = MIN_SENTENCE_CHARS) -> list[str]:
    """切句并丢弃长度不超过 min_chars 的句子。"""
    sentences = (s.strip() for s in _SENTENCE_SPLIT.split(text))
    return [s for s in sentences if len(s) > min_chars]


def iter_ngrams(sentence: str, size: int = NGRAM_SIZE) -> Iterator[str]:
    """按小写词序列生成 n-gram，词之间以单个空格连接。"""
    words = sentence.lower().split()
    for i in range(len(words) - size + 1):
        yield " ".join(words[i : i + size])


def diagnose(
    text: str,
    *,
    min_text_chars: int = MIN_DIAGNOSTIC_CHARS,
    min_sentence_chars: int = MIN_SENTENCE_CHARS,
    highlight: bool = False,
) -> DiagnosticResult:
    """
    扫描文本中的重复 trigram。

    参数:
        text: 待诊断文本
        min_text_chars: 短于此长度的文本直接返回零结果
        min_sentence_chars: 长度不超过此值的句子不参与扫描
        highlight: 为 True 时 html 字段返回带 <mark> 标注的转义文本

    返回:
        DiagnosticResult

    示例::

        result = diagnose("The quick brown fox jumps. The quick brown fox runs.")
        result.leaks             # 4
        result.repeated_phrases  # ("the quick brown", "quick brown fox")
    """
    if not text or len(text) < min_text_chars:
        return DiagnosticResult(html=text or "")

    index = TrigramIndex(text)
    leaks = 0
    phrases: dict[str, None] = {}

    for sentence in split_sentences(text, min_sentence_chars):
        for phrase in iter_ngrams(sentence):
            if index.count(phrase) > 1:
                leaks += 1
                phrases.setdefault(phrase, None)

    repeated = tuple(phrases)
    logger.debug("重复诊断完成：%d 个 leak，%d 个不同短语", leaks, len(repeated))

    rendered = highlight_phrases(text, repeated) if highlight else text
    return DiagnosticResult(html=rendered, leaks=leaks, repeated_phrases=repeated)


def highlight_phrases(
    text: str,
    phrases: tuple[str, ...] | list[str],
    css_class: str = "semantic-leak",
) -> str:
    """
    将短语的所有整词出现位置包进 <mark>，其余内容做 HTML 转义。

    重叠或相邻的命中区间先合并，保证输出中的标签不会交叉嵌套。
    """
    spans: list[tuple[int, int]] = []
    for phrase in phrases:
        pattern = re.compile(phrase_pattern(phrase).pattern, re.IGNORECASE)
        spans.extend(m.span() for m in pattern.finditer(text))

    if not spans:
        return html.escape(text)

    merged: list[list[int]] = []
    for start, end in sorted(spans):
        if merged and start <= merged[-1][1]:
            merged[-1][1] = max(merged[-1][1], end)
        else:
            merged.append([start, end])

    parts: list[str] = []
    cursor = 0
    for start, end in merged:
        parts.append(html.escape(text[cursor:start]))
        parts.append(f'<mark class="{css_class}">{html.escape(text[start:end])}</mark>')
        cursor = end
    parts.append(html.escape(text[cursor:]))
    return "".join(parts)
