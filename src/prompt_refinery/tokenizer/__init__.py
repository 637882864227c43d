"""
Prompt Refinery Token 计数模块。

默认按 ceil(字符数 / 4) 估算，可按模型名切换到 tiktoken，或注入自定义计数器。
"""

from prompt_refinery.tokenizer.fallback import CharBasedCounter
from prompt_refinery.tokenizer.protocol import TokenCounter
from prompt_refinery.tokenizer.registry import (
    clear_cache,
    ensure_token_counter,
    get_tokenizer,
    register_tokenizer,
)
from prompt_refinery.tokenizer.tiktoken_counter import TiktokenCounter

__all__ = [
    "CharBasedCounter",
    "TiktokenCounter",
    "TokenCounter",
    "clear_cache",
    "ensure_token_counter",
    "get_tokenizer",
    "register_tokenizer",
]
