"""
TokenCounter 协议定义。

Refinery 的节省率、效率分都依赖 Token 估算。没有外部 Tokenizer 时
使用 ceil(字符数 / 4) 粗估；调用方也可以注入任何满足本协议的计数器。

# [Design Decision] 使用 Protocol（结构化子类型）而非 ABC（名义子类型），
# 让任何实现了 count() 和 name 的对象都可以作为 TokenCounter 使用，
# 无需显式继承。
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TokenCounter(Protocol):
    """
    Token 计数器协议。

    内置实现：
    - CharBasedCounter：ceil(字符数 / 4) 粗估（默认，零依赖）
    - TiktokenCounter：基于 tiktoken 的精确计数

    最小实现示例::

        class MyTokenizer:
            def count(self, text: str) -> int:
                return len(my_custom_tokenize(text))

            @property
            def name(self) -> str:
                return "my_tokenizer"
    """

    def count(self, text: str) -> int:
        """
        计算文本的 Token 数量。

        参数:
            text: 待计数的文本

        返回:
            Token 数量
        """
        ...

    @property
    def name(self) -> str:
        """Tokenizer 名称标识。"""
        ...
