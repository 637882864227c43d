"""
batch 命令 — 用同一份配置批量精炼一组提示词。

输入文件可以是：
- JSON / YAML 字符串列表
- 包含 "prompts" 列表的 JSON / YAML 对象
"""

from __future__ import annotations

from rich.table import Table
from rich.text import Text

from prompt_refinery.cli.utils import (
    build_config_overrides,
    create_console,
    create_summary_panel,
    echo_json,
    extract_prompts,
    handle_refinery_error,
    load_json_or_yaml,
    print_error,
    print_warning,
)
from prompt_refinery.errors import PromptRefineryError

console = create_console()

_PREVIEW_CHARS = 48


def batch_command(
    input_file: str,
    strategy: str | None = None,
    level: str | None = None,
    fmt: str | None = None,
    keep: list[str] | None = None,
    policy: str | None = None,
    price: float | None = None,
    as_json: bool = False,
) -> None:
    """批量精炼 input_file 中的提示词，输出逐条状态和汇总。"""
    from prompt_refinery.batch import refine_batch
    from prompt_refinery.config import load_policy

    try:
        prompts = extract_prompts(load_json_or_yaml(input_file))
    except (FileNotFoundError, ValueError) as e:
        print_error(f"加载批处理文件失败：{e}")

    overrides = build_config_overrides(strategy, level, fmt, keep)

    try:
        loaded = load_policy(path=policy, overrides={"refine": overrides} if overrides else None)
        report = refine_batch(
            prompts,
            loaded.refine,
            price_per_1k_tokens=price if price is not None else loaded.batch.price_per_1k_tokens,
        )
    except PromptRefineryError as e:
        handle_refinery_error(e)

    if as_json:
        echo_json(report.to_dict())
        return

    table = Table(title="批处理结果", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("状态", style="cyan")
    table.add_column("原文预览", style="white", max_width=50)
    table.add_column("节省", justify="right", style="yellow")

    for item in report.items:
        preview = item.original.strip().replace("\n", " ")
        if len(preview) > _PREVIEW_CHARS:
            preview = preview[:_PREVIEW_CHARS] + "..."
        savings = f"{item.result.savings_percentage:.1f}%" if item.result else "-"
        table.add_row(str(item.id), item.status, Text(preview), savings)

    summary = report.summary
    console.print(table)
    console.print(create_summary_panel(
        "批处理汇总",
        {
            "成功条数": summary.total_prompts,
            "原始 Token": summary.total_original_tokens,
            "精炼后 Token": summary.total_refined_tokens,
            "总节省": f"{summary.total_savings_percent:.1f}%",
            "预计节省": f"${summary.estimated_dollar_savings:.4f}",
        },
        border_style="green",
    ))

    if report.failed:
        print_warning(f"{len(report.failed)} 条处理失败")
