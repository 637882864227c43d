"""
重复诊断的结果数据结构。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class DiagnosticResult:
    """
    重复诊断结果。

    属性:
        html: 原文；开启高亮时为转义后带 <mark> 标注的 HTML
        leaks: 触发重复的 trigram 窗口数（同一短语在不同窗口各计一次）
        repeated_phrases: 去重后的重复 trigram（小写，按发现顺序）
    """

    html: str
    leaks: int = 0
    repeated_phrases: tuple[str, ...] = ()

    @property
    def has_leaks(self) -> bool:
        return self.leaks > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "html": self.html,
            "leaks": self.leaks,
            "repeated_phrases": list(self.repeated_phrases),
        }
