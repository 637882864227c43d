"""
CLI 工具函数 — Rich 美化、输入加载、通用辅助。

提供 CLI 各子命令共用的实用函数，包括：
- Rich Console 美化输出
- 文本 / JSON / YAML 输入加载
- 错误/成功信息统一格式
- 精炼结果的表格与面板
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, NoReturn

import typer
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from prompt_refinery.errors import PromptRefineryError

# 全局 Console 实例
_console: Console | None = None


def create_console() -> Console:
    """
    创建或获取全局 Rich Console 实例。

    # [DX Decision] 全局单例 Console，确保所有 CLI 输出格式一致。
    """
    global _console
    if _console is None:
        _console = Console()
    return _console


def print_error(message: str, exit_code: int = 1) -> NoReturn:
    """
    打印错误信息并退出程序。

    参数:
        message: 错误信息
        exit_code: 退出码（默认 1）
    """
    console = create_console()
    # [DX Decision] 使用 X 而非 ✗，避免 Windows 终端编码问题
    console.print("[bold red]X 错误：[/bold red]", Text(message), sep="")
    sys.exit(exit_code)


def print_success(message: str) -> None:
    console = create_console()
    console.print(f"[bold green]OK[/bold green] {message}")


def print_warning(message: str) -> None:
    console = create_console()
    console.print(f"[bold yellow]![/bold yellow] {message}")


def echo_json(data: Any) -> None:
    """输出机器可读的 JSON（不经过 Rich 的换行与标记解析）。"""
    typer.echo(json.dumps(data, ensure_ascii=False, indent=2))


def format_token_count(count: int) -> str:
    """
    格式化 Token 数字为带千分位分隔符的字符串。

    示例::

        >>> format_token_count(128000)
        "128,000"
    """
    return f"{count:,}"


def read_text_input(text: str | None, input_file: str | None) -> str:
    """
    从位置参数或 --input 文件读取待处理文本，两者必须且只能给一个。

    异常:
        typer.BadParameter: 两者都缺或都给
        ValueError: 文件不存在或无法读取
    """
    if text is not None and input_file is not None:
        raise typer.BadParameter("TEXT 参数与 --input 只能二选一。")
    if input_file is None:
        if text is None:
            raise typer.BadParameter("需要提供 TEXT 参数或 --input 文件。")
        return text

    path = Path(input_file)
    if not path.exists():
        raise ValueError(f"文件不存在：{path}")
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ValueError(f"无法读取文件 {path}: {e}") from e


def load_json_or_yaml(file_path: str | Path) -> Any:
    """
    从文件加载 JSON 或 YAML 数据。

    根据文件扩展名自动判断格式；未知扩展名先尝试 JSON，再尝试 YAML。

    异常:
        FileNotFoundError: 文件不存在
        ValueError: 文件格式无效
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"文件不存在：{path}")

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ValueError(f"无法读取文件 {path}: {e}") from e

    suffix = path.suffix.lower()

    try:
        if suffix == ".json":
            return json.loads(content)
        if suffix in (".yaml", ".yml"):
            return yaml.safe_load(content)
        try:
            return json.loads(content)
        except json.JSONDecodeError:
            return yaml.safe_load(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"JSON 格式错误：{e}") from e
    except yaml.YAMLError as e:
        raise ValueError(f"YAML 格式错误：{e}") from e


def extract_prompts(data: Any) -> list[str]:
    """
    从批处理输入中取出提示词列表。

    支持两种结构：字符串列表，或 {"prompts": [...]}。

    异常:
        ValueError: 结构不符合上述任一形式
    """
    if isinstance(data, dict):
        data = data.get("prompts")
    if not isinstance(data, list):
        raise ValueError('批处理文件必须是字符串列表，或包含 "prompts" 列表的对象。')
    prompts: list[str] = []
    for i, item in enumerate(data):
        if not isinstance(item, str):
            raise ValueError(f"prompts[{i}] 不是字符串（实际为 {type(item).__name__}）。")
        prompts.append(item)
    return prompts


def build_config_overrides(
    strategy: str | None = None,
    level: str | None = None,
    fmt: str | None = None,
    keep: list[str] | None = None,
    max_iterations: int | None = None,
    model: str | None = None,
) -> dict[str, Any]:
    """把命令行选项整理为 refine 配置的覆盖字典，未指定的项不出现。"""
    overrides: dict[str, Any] = {}
    if strategy is not None:
        overrides["strategy"] = strategy
    if level is not None:
        overrides["level"] = level
    if fmt is not None:
        overrides["format"] = fmt
    if keep:
        overrides["preserve_keywords"] = list(keep)
    if max_iterations is not None:
        overrides["max_iterations"] = max_iterations
    if model is not None:
        overrides["model"] = model
    return overrides


def create_summary_panel(
    title: str,
    content: dict[str, Any],
    border_style: str = "blue",
) -> Panel:
    """创建键值摘要面板；键名含 "Token" 的整数按千分位格式化。"""
    lines = []
    for key, value in content.items():
        if isinstance(value, int) and "token" in key.lower():
            value = format_token_count(value)
        lines.append(f"[bold]{key}:[/bold] {value}")

    return Panel(
        "\n".join(lines),
        title=title,
        border_style=border_style,
        expand=False,
    )


def create_removed_table(removed: list[dict[str, str]], limit: int = 20) -> Table:
    """删除日志表格，最多显示 limit 条。"""
    table = Table(title="删除记录", show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", justify="right")
    table.add_column("片段", style="red", max_width=40)
    table.add_column("原因", style="cyan")

    for i, seg in enumerate(removed[:limit], start=1):
        table.add_row(str(i), Text(seg["text"]), seg["reason"])
    if len(removed) > limit:
        table.add_row("...", f"还有 {len(removed) - limit} 条", "")

    return table


def create_scores_table(scores: dict[str, float]) -> Table:
    table = Table(title="评分", show_header=True, header_style="bold cyan")
    table.add_column("指标", style="white")
    table.add_column("分数", justify="right", style="yellow")
    for name, value in scores.items():
        table.add_row(name, f"{value:.0f}")
    return table


def handle_refinery_error(error: PromptRefineryError) -> NoReturn:
    """
    统一处理 PromptRefineryError：红色面板显示三段式错误并以退出码 1 结束。
    """
    console = create_console()
    console.print(Panel(
        Text(error.full_message),
        title="[bold red]X 错误[/bold red]",
        border_style="red",
    ))
    sys.exit(1)
