"""
基于 tiktoken 的 Token 计数器。

对 OpenAI 系列模型给出精确计数；对 Claude、Gemini、DeepSeek 等
非 OpenAI 模型，cl100k_base 的计数是近似值，用于估算节省率足够。
"""

from __future__ import annotations

import logging

import tiktoken

logger = logging.getLogger(__name__)


class TiktokenCounter:
    """
    基于 tiktoken 的 Token 计数器。

    用法::

        counter = TiktokenCounter()  # 默认使用 cl100k_base
        count = counter.count("Hello, world!")

        counter = TiktokenCounter(encoding_name="o200k_base")  # GPT-4o
    """

    def __init__(self, encoding_name: str = "cl100k_base") -> None:
        """
        初始化 TiktokenCounter。

        参数:
            encoding_name: tiktoken 编码方案名称，加载失败时回退到 cl100k_base
        """
        self._encoding_name = encoding_name
        try:
            self._encoding = tiktoken.get_encoding(encoding_name)
        except (KeyError, ValueError) as e:
            logger.warning(
                "tiktoken 编码方案 '%s' 加载失败，回退到 cl100k_base。错误：%s",
                encoding_name,
                e,
            )
            self._encoding_name = "cl100k_base"
            self._encoding = tiktoken.get_encoding("cl100k_base")

    def count(self, text: str) -> int:
        """计算文本的 Token 数量。"""
        if not text:
            return 0
        return len(self._encoding.encode(text))

    @property
    def name(self) -> str:
        """Tokenizer 名称标识。"""
        return f"tiktoken:{self._encoding_name}"
