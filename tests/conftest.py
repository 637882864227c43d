"""
测试套件共享 Fixtures 和配置。

本文件定义了所有测试中可复用的 fixtures 和辅助对象。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from prompt_refinery.config.schema import RefineConfig
from prompt_refinery.refinery.base import RefineContext
from prompt_refinery.tokenizer import clear_cache


# === 文本 Fixtures ===


@pytest.fixture
def legal_prompt() -> str:
    """带法律双联词的提示词。"""
    return "Please ensure you kindly review the contract and/or each and every clause."


@pytest.fixture
def repeated_text() -> str:
    """同一个三词短语在两个句子中重复出现。"""
    return "The quick brown fox jumps. The quick brown fox runs."


@pytest.fixture
def verbose_prompt() -> str:
    """包含冗余短语、填充词和重复标点的长提示词。"""
    return (
        "It is important to note that you should just review the document!!! "
        "In my opinion, the summary is basically a little bit too long. "
        "Maybe you could   shorten it in order to   make the key points clear..."
    )


# === 配置 / 上下文 Fixtures ===


@pytest.fixture
def default_config() -> RefineConfig:
    return RefineConfig()


@pytest.fixture
def make_context():
    """按关键字参数构造 RefineContext 的工厂。"""

    def _make(**config_kwargs) -> RefineContext:
        return RefineContext(config=RefineConfig(**config_kwargs))

    return _make


class FixedCounter:
    """每个字符计 1 个 Token 的计数器，便于断言精确数值。"""

    def count(self, text: str) -> int:
        return len(text)

    @property
    def name(self) -> str:
        return "fixed"


@pytest.fixture
def fixed_counter() -> FixedCounter:
    return FixedCounter()


# === 策略文件 Fixtures ===


@pytest.fixture
def policy_file(tmp_path: Path) -> Path:
    """一份合法的 YAML 策略文件。"""
    path = tmp_path / "prompt_refinery.yaml"
    path.write_text(
        "version: '1.0'\n"
        "name: legal-team\n"
        "refine:\n"
        "  strategy: legal\n"
        "  level: Aggressive\n"
        "  format: Structured\n"
        "  preserve_keywords: ['shall']\n"
        "diagnostic:\n"
        "  min_text_chars: 30\n"
        "batch:\n"
        "  price_per_1k_tokens: 0.01\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture(autouse=True)
def _reset_tokenizer_registry():
    """每个测试前后清空 Tokenizer 缓存与自定义注册。"""
    clear_cache()
    yield
    clear_cache()


# === Pytest 配置 ===


def pytest_configure(config: Any) -> None:
    """Pytest 配置钩子。"""
    config.addinivalue_line(
        "markers", "integration: 标记集成测试（需要多个模块协作）"
    )
