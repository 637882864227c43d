"""
YAML 策略文件加载与校验。

本模块负责：
1. 从文件路径加载 YAML 策略，或在当前目录自动搜索
2. 使用 Pydantic Schema 校验策略内容
3. 合并运行时覆盖（默认 → 文件 → 覆盖）
4. 把 Pydantic 的校验错误翻译成精确到字段的三段式错误

# [DX Decision] 策略加载失败时的错误信息必须精确到字段级别，
# 告诉用户哪个文件、哪个字段、什么值有问题、应该改成什么。
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from prompt_refinery.config.schema import RefineConfig, RefineryPolicy
from prompt_refinery.errors import ConfigValidationError, PolicyLoadError

logger = logging.getLogger(__name__)

# 默认策略文件搜索路径
_SEARCH_PATHS = [
    Path("prompt_refinery.yaml"),
    Path("prompt_refinery.yml"),
    Path(".prompt_refinery/policy.yaml"),
]


def load_policy(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> RefineryPolicy:
    """
    加载并校验策略配置。

    参数:
        path: YAML 文件路径。None 时自动搜索默认路径，找不到则全部使用默认值。
        overrides: 运行时覆盖的配置项（深度合并到 YAML 配置之上）

    返回:
        RefineryPolicy 实例

    异常:
        PolicyLoadError: 文件不存在或格式错误
        ConfigValidationError: 配置校验失败
    """
    raw_config: dict[str, Any] = {}
    source = str(path) if path is not None else "<default>"

    if path is not None:
        raw_config = _load_yaml_file(Path(path))
    else:
        for search_path in _SEARCH_PATHS:
            if search_path.exists():
                logger.info("自动发现策略文件：%s", search_path)
                raw_config = _load_yaml_file(search_path)
                source = str(search_path)
                break
        else:
            logger.info("未找到策略文件，使用默认配置。")

    if overrides:
        raw_config = _deep_merge(raw_config, overrides)

    return _validate_policy(raw_config, source)


def parse_config(
    raw: RefineConfig | Mapping[str, Any] | None,
    source: str = "<runtime>",
) -> RefineConfig:
    """
    将调用方传入的配置统一为 RefineConfig。

    dict 形式的配置在这里校验；非法取值转换为 ConfigValidationError。

    参数:
        raw: RefineConfig 实例、字典或 None（使用默认配置）
        source: 配置来源描述，写入错误信息

    返回:
        RefineConfig 实例
    """
    if raw is None:
        return RefineConfig()
    if isinstance(raw, RefineConfig):
        return raw
    if not isinstance(raw, Mapping):
        raise ConfigValidationError(
            what=f"配置 '{source}' 的类型不受支持。",
            why=f"需要 RefineConfig 或 dict，实际为 {type(raw).__name__}。",
            how="传入 RefineConfig(...) 或形如 {'strategy': 'Legal'} 的字典。",
            config_path=source,
        )
    try:
        return RefineConfig.model_validate(dict(raw))
    except ValidationError as e:
        raise _to_config_error(e, source) from e


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """加载并解析 YAML 文件。"""
    if not path.exists():
        raise PolicyLoadError(
            what=f"策略文件 '{path}' 不存在。",
            why=f"在路径 '{path.absolute()}' 下未找到该文件。",
            how="请检查文件路径是否正确，或省略 --policy 使用默认配置。",
            file_path=str(path),
        )

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise PolicyLoadError(
            what=f"无法读取策略文件 '{path}'。",
            why=str(e),
            how="请检查文件权限和编码（需要 UTF-8）。",
            file_path=str(path),
        ) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise PolicyLoadError(
            what=f"策略文件 '{path}' 的 YAML 格式无效。",
            why=str(e),
            how="请使用 YAML 格式校验工具检查文件语法。",
            file_path=str(path),
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PolicyLoadError(
            what=f"策略文件 '{path}' 的根元素必须是字典（mapping）。",
            why=f"实际类型为 {type(data).__name__}。",
            how="请确保 YAML 文件的根元素是键值对形式，例如：\n"
                "  version: '1.0'\n"
                "  refine:\n"
                "    strategy: Legal",
            file_path=str(path),
        )

    return data


def _validate_policy(raw: dict[str, Any], source: str) -> RefineryPolicy:
    """使用 Pydantic 校验策略字典。"""
    try:
        return RefineryPolicy(**raw)
    except ValidationError as e:
        raise _to_config_error(e, source) from e


def _to_config_error(
    error: ValidationError,
    source: str,
) -> ConfigValidationError:
    """将 Pydantic 校验错误转换为用户友好的三段式错误。"""
    error_details = []
    field_paths = []
    for err in error.errors():
        loc = tuple(str(part) for part in err["loc"])
        field_path = " → ".join(loc)
        field_paths.append(".".join(loc))
        error_details.append(f"  字段 '{field_path}': {err['msg']}")

    return ConfigValidationError(
        what=f"配置 '{source}' 校验失败（{error.error_count()} 个错误）。",
        why="\n".join(error_details),
        how="strategy 可选 Universal / GPT / Claude / DeepSeek / Legal，"
            "level 可选 Light / Balanced / Aggressive，"
            "format 可选 XML / Structured / Minimalist。"
            "可以使用 'prompt-refinery validate <path>' 预校验策略文件。",
        config_path=source,
        field_path=field_paths[0] if field_paths else "",
    )


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """深度合并两个字典，override 中的值优先。"""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def validate_policy_file(path: str | Path) -> list[str]:
    """
    校验策略文件，返回错误列表。

    不抛出异常，而是收集错误并返回，用于 CLI 的 validate 命令和 CI 流程。

    参数:
        path: YAML 文件路径

    返回:
        错误信息列表（空列表表示校验通过）
    """
    errors: list[str] = []

    try:
        load_policy(path=path)
    except (PolicyLoadError, ConfigValidationError) as e:
        errors.append(e.full_message)

    return errors
