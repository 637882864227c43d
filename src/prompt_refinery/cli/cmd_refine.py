"""
refine 命令 — 精炼单条提示词。

配置优先级：默认值 → 策略文件的 refine 段 → 命令行选项。
"""

from __future__ import annotations

from typing import Any

import typer
from rich.panel import Panel
from rich.text import Text

from prompt_refinery.cli.utils import (
    build_config_overrides,
    create_console,
    create_removed_table,
    create_scores_table,
    create_summary_panel,
    echo_json,
    handle_refinery_error,
    print_error,
    read_text_input,
)
from prompt_refinery.errors import PromptRefineryError

console = create_console()


def refine_command(
    text: str | None = None,
    input_file: str | None = None,
    strategy: str | None = None,
    level: str | None = None,
    fmt: str | None = None,
    keep: list[str] | None = None,
    max_iterations: int | None = None,
    model: str | None = None,
    policy: str | None = None,
    output_format: str = "rich",
    verbose: bool = False,
) -> None:
    """精炼 TEXT 或 --input 文件中的提示词并输出结果。"""
    from prompt_refinery.config import load_policy
    from prompt_refinery.refinery import Refinery

    if output_format not in ("rich", "json", "text"):
        print_error(f"不支持的输出格式：{output_format}（可选 rich / json / text）")

    try:
        prompt = read_text_input(text, input_file)
    except ValueError as e:
        print_error(f"加载输入失败：{e}")

    overrides = build_config_overrides(strategy, level, fmt, keep, max_iterations, model)

    try:
        loaded = load_policy(path=policy, overrides={"refine": overrides} if overrides else None)
        refinery = Refinery(loaded.refine, debug=verbose)
        result = refinery.refine(prompt)
    except PromptRefineryError as e:
        handle_refinery_error(e)

    if output_format == "json":
        echo_json(result.to_dict())
    elif output_format == "text":
        typer.echo(result.refined_text)
    else:
        _render_rich(result.to_dict())


def _render_rich(data: dict[str, Any]) -> None:
    """渲染 Rich 输出：摘要、精炼文本、评分、删除记录。"""
    summary = create_summary_panel(
        "精炼摘要",
        {
            "策略": data["strategy"],
            "压缩级别": data["level"],
            "原始 Token": data["estimated_original_tokens"],
            "精炼后 Token": data["estimated_refined_tokens"],
            "节省": f"{data['savings_percentage']:.1f}%",
            "轮数": data["iterations"],
            "耗时": f"{data['processing_time_ms']:.1f} ms",
        },
        border_style="green",
    )

    console.print(summary)
    console.print(Panel(Text(data["refined_text"]), title="精炼结果", border_style="blue"))
    console.print(create_scores_table(data["scores"]))

    removed = data["removed_segments"]
    if removed:
        console.print(create_removed_table(removed))
    else:
        console.print("[dim]没有删除任何片段。[/dim]")
