"""
Trigram 出现次数索引。

朴素做法是对每个 trigram 用 `\\b<短语>\\b` 正则重扫整篇文本，
复杂度为 O(句子数 × 词数 × 文本长度)。本索引只扫描文档一次：

1. 将小写文本按空白切分为带位置的 token
2. 以"中间词"为键，记录左右两侧分隔符恰好为一个空格的 token 位置
3. 查询 "w1 w2 w3" 时只遍历中间词为 w2 的位置：
   左 token 以 w1 结尾、右 token 以 w3 开头、两端满足单词边界，
   再按从左到右、互不重叠的规则计数

这与 `re.finditer(r"\\bw1 w2 w3\\b", text.lower())` 的计数完全一致：
短语中的两个字面空格迫使 w2 恰好是一个完整 token，
而 w1 / w3 只能是相邻 token 的后缀 / 前缀。
"""

from __future__ import annotations

import re
from collections import defaultdict

_TOKEN_PATTERN = re.compile(r"\S+")
_WORD_CHAR = re.compile(r"\w")


def phrase_pattern(phrase: str) -> re.Pattern[str]:
    """
    构造整词匹配短语的正则。

    短语中的 `. * + ? ^ $ { } ( ) | [ ] \\` 等特殊字符全部转义，
    确保短语按字面匹配而不会被当作通配模式。
    """
    return re.compile(r"\b" + re.escape(phrase) + r"\b")


def count_phrase_occurrences(text: str, phrase: str) -> int:
    """在小写化的全文中统计短语的整词、非重叠出现次数（直接正则扫描）。"""
    if not phrase:
        return 0
    return sum(1 for _ in phrase_pattern(phrase.lower()).finditer(text.lower()))


class TrigramIndex:
    """
    针对单篇文档的 trigram 计数索引（构建一次，多次查询）。

    用法::

        index = TrigramIndex("The quick brown fox. The quick brown cat.")
        index.count("the quick brown")  # 2
    """

    def __init__(self, text: str) -> None:
        self._text = text.lower()
        self._spans: list[tuple[int, int]] = [
            m.span() for m in _TOKEN_PATTERN.finditer(self._text)
        ]
        self._tokens = [self._text[start:end] for start, end in self._spans]
        self._by_middle: dict[str, list[int]] = defaultdict(list)
        self._cache: dict[str, int] = {}

        for k in range(1, len(self._tokens) - 1):
            if self._separator(k - 1) == " " and self._separator(k) == " ":
                self._by_middle[self._tokens[k]].append(k)

    @property
    def text(self) -> str:
        """索引所基于的小写文本。"""
        return self._text

    def count(self, phrase: str) -> int:
        """
        统计短语在文档中的整词、非重叠出现次数。

        参数:
            phrase: 以单个空格连接的三个词（小写）

        返回:
            出现次数
        """
        phrase = phrase.lower()
        if phrase in self._cache:
            return self._cache[phrase]

        words = phrase.split(" ")
        if len(words) != 3 or not all(_TOKEN_PATTERN.fullmatch(w) for w in words):
            # 非标准 trigram 不走索引
            result = count_phrase_occurrences(self._text, phrase)
        else:
            result = self._count_trigram(*words)

        self._cache[phrase] = result
        return result

    def _count_trigram(self, first: str, middle: str, last: str) -> int:
        occurrences = 0
        last_end = -1
        for k in self._by_middle.get(middle, ()):
            left, right = self._tokens[k - 1], self._tokens[k + 1]
            if not left.endswith(first) or not right.startswith(last):
                continue
            start = self._spans[k - 1][1] - len(first)
            end = self._spans[k + 1][0] + len(last)
            if start < last_end:
                continue
            if self._is_boundary(start) and self._is_boundary(end):
                occurrences += 1
                last_end = end
        return occurrences

    def _separator(self, k: int) -> str:
        """token k 与 token k+1 之间的空白。"""
        return self._text[self._spans[k][1]:self._spans[k + 1][0]]

    def _is_word(self, pos: int) -> bool:
        if pos < 0 or pos >= len(self._text):
            return False
        return _WORD_CHAR.match(self._text[pos]) is not None

    def _is_boundary(self, pos: int) -> bool:
        """与正则 `\\b` 相同的判定：两侧字符的"单词字符"属性不同。"""
        return self._is_word(pos - 1) != self._is_word(pos)
