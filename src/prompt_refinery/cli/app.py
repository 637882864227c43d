"""
Prompt Refinery CLI — 命令行工具入口。

提供 refine / diagnose / batch / validate / version 子命令。

用法::

    prompt-refinery --help
    prompt-refinery refine "It is important to note that you should just review the contract."
    prompt-refinery refine --input prompt.txt --strategy legal --level Aggressive
    prompt-refinery diagnose --input prompt.txt --json
    prompt-refinery batch prompts.json --price 0.01
    prompt-refinery validate prompt_refinery.yaml
"""

from __future__ import annotations

import typer

from prompt_refinery.cli.utils import create_console

# 创建主应用
app = typer.Typer(
    name="prompt-refinery",
    help="Prompt Refinery — 基于规则的提示词精炼与重复诊断 CLI",
    add_completion=False,
    no_args_is_help=True,
)

console = create_console()


# ============================================================
# 子命令注册
# ============================================================

@app.command(name="refine")
def refine(
    text: str | None = typer.Argument(
        None,
        help="待精炼的提示词（与 --input 二选一）",
    ),
    input_file: str | None = typer.Option(
        None,
        "--input",
        "-i",
        help="从文件读取提示词（UTF-8 文本）",
    ),
    strategy: str | None = typer.Option(
        None,
        "--strategy",
        "-s",
        help="改写策略：Universal / GPT / Claude / DeepSeek / Legal",
    ),
    level: str | None = typer.Option(
        None,
        "--level",
        "-l",
        help="压缩级别：Light / Balanced / Aggressive",
    ),
    fmt: str | None = typer.Option(
        None,
        "--format",
        help="输出形态：XML / Structured / Minimalist",
    ),
    keep: list[str] | None = typer.Option(
        None,
        "--keep",
        "-k",
        help="保留关键词（可重复指定），包含它的片段不会被删除",
    ),
    max_iterations: int | None = typer.Option(
        None,
        "--max-iterations",
        help="最多执行几轮流水线（1-50）",
    ),
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="目标模型名，用于选择 Tokenizer",
    ),
    policy: str | None = typer.Option(
        None,
        "--policy",
        "-p",
        help="策略文件路径（默认自动搜索）",
    ),
    output_format: str = typer.Option(
        "rich",
        "--format-out",
        "-f",
        help="输出格式：rich（Rich 面板）/ json（完整结果）/ text（仅精炼文本）",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="详细输出（逐阶段调试日志）",
    ),
) -> None:
    """精炼一条提示词。"""
    from prompt_refinery.cli.cmd_refine import refine_command
    refine_command(
        text=text,
        input_file=input_file,
        strategy=strategy,
        level=level,
        fmt=fmt,
        keep=keep,
        max_iterations=max_iterations,
        model=model,
        policy=policy,
        output_format=output_format,
        verbose=verbose,
    )


@app.command(name="diagnose")
def diagnose(
    text: str | None = typer.Argument(
        None,
        help="待诊断的文本（与 --input 二选一）",
    ),
    input_file: str | None = typer.Option(
        None,
        "--input",
        "-i",
        help="从文件读取文本（UTF-8）",
    ),
    policy: str | None = typer.Option(
        None,
        "--policy",
        "-p",
        help="策略文件路径（读取 diagnostic 段阈值）",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="以 JSON 输出诊断结果",
    ),
    html_output: str | None = typer.Option(
        None,
        "--html",
        help="把高亮后的 HTML 写入该文件",
    ),
) -> None:
    """找出在文档中重复出现的三词短语。"""
    from prompt_refinery.cli.cmd_diagnose import diagnose_command
    diagnose_command(
        text=text,
        input_file=input_file,
        policy=policy,
        as_json=as_json,
        html_output=html_output,
    )


@app.command(name="batch")
def batch(
    input_file: str = typer.Argument(
        ...,
        help='批处理文件：字符串列表或 {"prompts": [...]}（JSON / YAML）',
    ),
    strategy: str | None = typer.Option(None, "--strategy", "-s", help="改写策略"),
    level: str | None = typer.Option(None, "--level", "-l", help="压缩级别"),
    fmt: str | None = typer.Option(None, "--format", help="输出形态"),
    keep: list[str] | None = typer.Option(None, "--keep", "-k", help="保留关键词（可重复指定）"),
    policy: str | None = typer.Option(None, "--policy", "-p", help="策略文件路径"),
    price: float | None = typer.Option(
        None,
        "--price",
        help="每 1k Token 的美元单价（默认取策略文件的 batch.price_per_1k_tokens）",
    ),
    as_json: bool = typer.Option(False, "--json", help="以 JSON 输出完整报告"),
) -> None:
    """用同一份配置批量精炼一组提示词。"""
    from prompt_refinery.cli.cmd_batch import batch_command
    batch_command(
        input_file=input_file,
        strategy=strategy,
        level=level,
        fmt=fmt,
        keep=keep,
        policy=policy,
        price=price,
        as_json=as_json,
    )


@app.command(name="validate")
def validate(
    path: str = typer.Argument(
        "prompt_refinery.yaml",
        help="YAML 策略文件路径",
    ),
) -> None:
    """校验 YAML 策略文件。"""
    from prompt_refinery.cli.cmd_validate import validate_command
    validate_command(path=path)


@app.command(name="version")
def version() -> None:
    """显示版本信息。"""
    from prompt_refinery import __version__
    console.print(f"Prompt Refinery v{__version__}")


# ============================================================
# CLI 入口点
# ============================================================

def main() -> None:
    """CLI 入口点。"""
    app()


if __name__ == "__main__":
    main()
