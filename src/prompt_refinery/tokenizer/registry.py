"""
Tokenizer 注册表 — 根据模型名选择 Token 计数器。

调用方只需在配置里写 `model: gpt-4o`，注册表自动选择 o200k_base 编码；
不认识的模型回退到 ceil(字符数 / 4) 粗估。
"""

from __future__ import annotations

import logging

from prompt_refinery.errors import TokenizerError
from prompt_refinery.tokenizer.fallback import CharBasedCounter
from prompt_refinery.tokenizer.protocol import TokenCounter
from prompt_refinery.tokenizer.tiktoken_counter import TiktokenCounter

logger = logging.getLogger(__name__)

# 模型名前缀到 tiktoken 编码方案的映射
# [Design Decision] 前缀匹配而非精确匹配，模型名常带日期后缀。
_MODEL_TO_ENCODING: dict[str, str] = {
    "gpt-4o": "o200k_base",
    "gpt-4o-mini": "o200k_base",
    "gpt-4.1": "o200k_base",
    "gpt-4": "cl100k_base",
    "gpt-3.5": "cl100k_base",
    "o1": "o200k_base",
    "o3": "o200k_base",
    # 以下均为 cl100k_base 近似
    "claude": "cl100k_base",
    "gemini": "cl100k_base",
    "deepseek": "cl100k_base",
}

_counter_cache: dict[str, TokenCounter] = {}

_custom_counters: dict[str, TokenCounter] = {}


def get_tokenizer(model: str | None) -> TokenCounter:
    """
    根据模型名获取 Token 计数器。

    查找优先级：
    1. 用户注册的自定义 Tokenizer
    2. 基于模型名前缀匹配的 tiktoken 编码方案
    3. CharBasedCounter fallback

    参数:
        model: 模型名称（如 "gpt-4o"）；None 或空串直接返回字符计数器

    返回:
        TokenCounter 实例
    """
    if not model:
        return CharBasedCounter()

    if model in _custom_counters:
        return _custom_counters[model]

    if model in _counter_cache:
        return _counter_cache[model]

    encoding_name = _find_encoding(model)

    if encoding_name:
        try:
            counter: TokenCounter = TiktokenCounter(encoding_name)
            _counter_cache[model] = counter
            return counter
        except Exception as e:
            # tiktoken 首次使用需要下载编码文件，离线环境下会失败
            logger.warning(
                "为模型 '%s' 创建 tiktoken 计数器失败（编码：%s），"
                "回退到字符计数器。错误：%s",
                model,
                encoding_name,
                e,
            )

    logger.info("模型 '%s' 未找到专用 Tokenizer，使用字符计数器（近似值）。", model)
    counter = CharBasedCounter()
    _counter_cache[model] = counter
    return counter


def _find_encoding(model: str) -> str | None:
    """通过前缀匹配找到编码方案，优先匹配更长的前缀。"""
    model_lower = model.lower()
    for prefix in sorted(_MODEL_TO_ENCODING, key=len, reverse=True):
        if model_lower.startswith(prefix):
            return _MODEL_TO_ENCODING[prefix]
    return None


def register_tokenizer(model: str, counter: TokenCounter) -> None:
    """
    注册自定义 Token 计数器，之后该模型名优先使用它。

    异常:
        TokenizerError: counter 不满足 TokenCounter 协议
    """
    ensure_token_counter(counter)
    _custom_counters[model] = counter
    logger.info("已为模型 '%s' 注册自定义 Tokenizer: %s", model, counter.name)


def ensure_token_counter(counter: object) -> TokenCounter:
    """校验对象满足 TokenCounter 协议并原样返回。"""
    if not isinstance(counter, TokenCounter):
        raise TokenizerError(
            what=f"{type(counter).__name__} 不是合法的 TokenCounter。",
            why="对象缺少 count(text) -> int 方法或 name 属性。",
            how="实现 count() 与 name，或直接使用 CharBasedCounter / TiktokenCounter。",
        )
    return counter


def clear_cache() -> None:
    """清除 Tokenizer 缓存与自定义注册。通常仅在测试中使用。"""
    _counter_cache.clear()
    _custom_counters.clear()
