"""
结构化异常体系 — 错误信息即文档。

每条异常遵循"三段式"规范：
1. What went wrong（发生了什么）
2. Why it happened（为什么发生）
3. How to fix it（怎么修）

Refinery 核心本身几乎不抛异常：空文本、过短文本都按"零结果"处理。
真正需要报告给调用方的只有两类问题——配置不合法、插件（阶段 / Tokenizer）不守约定。

示例::

    ConfigValidationError(
        what="未知的 strategy 取值 'gpt5'。",
        why="strategy 必须是 Universal / GPT / Claude / DeepSeek / Legal 之一。",
        how="检查拼写，或使用枚举名（如 'GPT'）代替显示名。",
        field_path="strategy",
    )
"""

from __future__ import annotations

from typing import Any


class PromptRefineryError(Exception):
    """
    Prompt Refinery 异常基类。

    属性:
        what: 发生了什么
        why: 为什么发生
        how: 怎么修复
        details: 额外的上下文信息（用于调试）
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.what = what
        self.why = why
        self.how = how
        self.details = details or {}

        parts = [what]
        if why:
            parts.append(f"→ 原因：{why}")
        if how:
            parts.append(f"→ 修复建议：{how}")

        self.full_message = "\n".join(parts)
        super().__init__(self.full_message)

    def __str__(self) -> str:
        return self.full_message

    def to_dict(self) -> dict[str, Any]:
        """转换为字典格式，用于 CLI 的 JSON 输出。"""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "what": self.what,
        }
        if self.why:
            result["why"] = self.why
        if self.how:
            result["how"] = self.how
        if self.details:
            result["details"] = self.details
        return result


# === 配置相关异常 ===


class ConfigValidationError(PromptRefineryError):
    """
    配置校验异常。

    当 strategy / level / format 取值不在枚举集合内，
    或 YAML 策略文件字段不合法时抛出。

    # [Design Decision] 未知枚举值在构造配置时即失败，
    # 不再静默回退到 Universal / 无操作分支，避免掩盖调用方的 bug。
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        config_path: str = "",
        field_path: str = "",
        **kwargs: Any,
    ) -> None:
        details = {
            "config_path": config_path,
            "field_path": field_path,
        }
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.config_path = config_path
        self.field_path = field_path


class PolicyLoadError(PromptRefineryError):
    """
    策略加载异常。

    当策略文件不存在、格式错误或无法解析时抛出。
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        file_path: str = "",
        **kwargs: Any,
    ) -> None:
        details = {"file_path": file_path}
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.file_path = file_path


# === 流水线相关异常 ===


class PipelineError(PromptRefineryError):
    """流水线异常基类。"""

    pass


class PipelineStageError(PipelineError):
    """
    流水线阶段异常。

    内置阶段都是纯正则变换，正常情况下不会失败；
    此异常主要用于包装自定义阶段抛出的意外错误。

    示例::

        raise PipelineStageError(
            what="Refinery 阶段 'strategy_rewrite' 执行失败。",
            why="re.error: unbalanced parenthesis",
            how="检查该阶段的自定义规则是否为合法的正则表达式。",
            stage_name="strategy_rewrite",
        )
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        stage_name: str = "",
        **kwargs: Any,
    ) -> None:
        details = {"stage_name": stage_name}
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.stage_name = stage_name


# === Tokenizer 相关异常 ===


class TokenizerError(PromptRefineryError):
    """
    Tokenizer 异常。

    当调用方注入的计数器不满足 TokenCounter 协议时抛出。
    """

    pass
