"""
Prompt Refinery 配置模块。

提供 RefineConfig、封闭枚举与 YAML 策略加载。
"""

from prompt_refinery.config.loader import load_policy, parse_config, validate_policy_file
from prompt_refinery.config.schema import (
    BatchConfig,
    CompressionLevel,
    DiagnosticConfig,
    OutputFormat,
    RefineConfig,
    RefineryPolicy,
    Strategy,
)

__all__ = [
    "BatchConfig",
    "CompressionLevel",
    "DiagnosticConfig",
    "OutputFormat",
    "RefineConfig",
    "RefineryPolicy",
    "Strategy",
    "load_policy",
    "parse_config",
    "validate_policy_file",
]
