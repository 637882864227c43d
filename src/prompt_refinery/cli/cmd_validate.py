"""
validate 命令 — 校验 YAML 策略文件。

适合放进 CI：校验失败时以退出码 1 结束。
"""

from __future__ import annotations

import sys
from pathlib import Path

from rich.panel import Panel
from rich.text import Text

from prompt_refinery.cli.utils import create_console, print_error, print_success
from prompt_refinery.config.loader import validate_policy_file

console = create_console()


def validate_command(path: str = "prompt_refinery.yaml") -> None:
    """校验策略文件的语法与取值。"""
    path_obj = Path(path)

    if not path_obj.exists():
        print_error(f"文件不存在：{path}")

    suffix = path_obj.suffix.lower()
    if suffix not in (".yaml", ".yml"):
        console.print(f"[yellow]未知文件类型 {suffix}，尝试按策略文件校验...[/yellow]")

    console.print(f"[bold]校验策略文件：[/bold] {path}\n")

    errors = validate_policy_file(path)
    if errors:
        console.print(Panel(
            Text("\n\n".join(errors)),
            title=f"[bold red]校验失败（{len(errors)} 个错误）[/bold red]",
            border_style="red",
        ))
        sys.exit(1)

    print_success(f"{path} 校验通过")
