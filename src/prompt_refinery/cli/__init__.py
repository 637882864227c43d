"""
Prompt Refinery CLI — 命令行工具。

- refine: 精炼单条提示词
- diagnose: 重复短语诊断
- batch: 批量精炼与成本汇总
- validate: 校验策略文件
"""

from prompt_refinery.cli.app import app, main

__all__ = ["app", "main"]
