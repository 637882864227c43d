"""
diagnose 命令 — 找出在文档中重复出现的三词短语。
"""

from __future__ import annotations

from pathlib import Path

from rich.table import Table
from rich.text import Text

from prompt_refinery.cli.utils import (
    create_console,
    echo_json,
    handle_refinery_error,
    print_error,
    print_success,
    print_warning,
    read_text_input,
)
from prompt_refinery.errors import PromptRefineryError

console = create_console()


def diagnose_command(
    text: str | None = None,
    input_file: str | None = None,
    policy: str | None = None,
    as_json: bool = False,
    html_output: str | None = None,
) -> None:
    """
    诊断 TEXT 或 --input 文件中的重复短语。

    --html 会把高亮后的 HTML 片段写到指定文件，重复短语包在 <mark> 中。
    """
    from prompt_refinery.config import load_policy
    from prompt_refinery.diagnostic import diagnose

    try:
        document = read_text_input(text, input_file)
    except ValueError as e:
        print_error(f"加载输入失败：{e}")

    try:
        thresholds = load_policy(path=policy).diagnostic
    except PromptRefineryError as e:
        handle_refinery_error(e)

    result = diagnose(
        document,
        min_text_chars=thresholds.min_text_chars,
        min_sentence_chars=thresholds.min_sentence_chars,
        highlight=html_output is not None,
    )

    if html_output is not None:
        Path(html_output).write_text(result.html, encoding="utf-8")

    if as_json:
        echo_json(result.to_dict())
        return

    if not result.has_leaks:
        print_success("未发现重复短语")
    else:
        table = Table(title=f"重复短语（{result.leaks} 处）", header_style="bold magenta")
        table.add_column("#", style="dim", justify="right")
        table.add_column("短语", style="yellow")
        for i, phrase in enumerate(result.repeated_phrases, start=1):
            table.add_row(str(i), Text(phrase))
        console.print(table)
        print_warning(f"{len(result.repeated_phrases)} 个短语在文档中重复出现")

    if html_output is not None:
        print_success(f"高亮结果已保存到 {html_output}")
