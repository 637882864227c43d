"""
基于字符数的 Token 粗估计数器（默认计数器）。

估算公式为 `ceil(字符数 / 4)`，这是英文文本的经验值，
也是 Refinery 在没有外部 Tokenizer 时报告节省率所用的口径。
"""

from __future__ import annotations

import math

from prompt_refinery.config.defaults import CHARS_PER_TOKEN


class CharBasedCounter:
    """
    基于字符数的 Token 粗估计数器。

    用法::

        counter = CharBasedCounter()
        counter.count("Hello, world!")  # 13 字符 → 4 tokens

        counter = CharBasedCounter(chars_per_token=2)
    """

    def __init__(self, chars_per_token: float = CHARS_PER_TOKEN) -> None:
        if chars_per_token <= 0:
            raise ValueError(f"chars_per_token 必须为正数，实际为 {chars_per_token}")
        self._ratio = chars_per_token

    def count(self, text: str) -> int:
        """估算文本的 Token 数量；空文本为 0。"""
        if not text:
            return 0
        return math.ceil(len(text) / self._ratio)

    @property
    def name(self) -> str:
        """Tokenizer 名称标识。"""
        return f"char_based:{self._ratio:g}"
