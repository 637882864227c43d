"""
Prompt Refinery 结构化异常体系。

所有异常遵循"三段式"规范：What / Why / How to fix。
"""

from prompt_refinery.errors.exceptions import (
    ConfigValidationError,
    PipelineError,
    PipelineStageError,
    PolicyLoadError,
    PromptRefineryError,
    TokenizerError,
)

__all__ = [
    "ConfigValidationError",
    "PipelineError",
    "PipelineStageError",
    "PolicyLoadError",
    "PromptRefineryError",
    "TokenizerError",
]
