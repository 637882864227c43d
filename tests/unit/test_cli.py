"""
CLI 命令单元测试。

测试所有 CLI 子命令：refine, diagnose, batch, validate, version。
使用 typer.testing.CliRunner 进行测试。
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from prompt_refinery import __version__
from prompt_refinery.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """在空目录中运行，避免自动发现仓库里的策略文件。"""
    monkeypatch.chdir(tmp_path)


# ============================================================
# refine 命令测试
# ============================================================


class TestRefineCommand:
    """refine 命令测试。"""

    def test_text_output(self, legal_prompt: str) -> None:
        result = runner.invoke(app, ["refine", legal_prompt, "--strategy", "legal", "-f", "text"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "Please ensure you kindly review the contract or each clause"

    def test_json_output(self) -> None:
        result = runner.invoke(
            app, ["refine", "The cat sat on the mat.", "--level", "Aggressive", "-f", "json"]
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["refined_text"] == "Cat sat on mat"
        assert data["level"] == "Aggressive"
        assert len(data["removed_segments"]) == 2

    def test_rich_output(self) -> None:
        result = runner.invoke(app, ["refine", "It is important to note that tests matter."])
        assert result.exit_code == 0
        assert "精炼摘要" in result.stdout
        assert "Tests matter" in result.stdout

    def test_keep_option(self) -> None:
        result = runner.invoke(
            app,
            ["refine", "The cat sat on the mat.", "-l", "Aggressive", "-k", "the mat", "-f", "text"],
        )
        assert result.exit_code == 0
        assert result.stdout.strip() == "Cat sat on the mat"

    def test_input_file(self, tmp_path: Path) -> None:
        prompt = tmp_path / "prompt.txt"
        prompt.write_text("The cat sat on the mat.", encoding="utf-8")
        result = runner.invoke(app, ["refine", "--input", str(prompt), "-l", "Aggressive", "-f", "text"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "Cat sat on mat"

    def test_policy_file(self, policy_file: Path) -> None:
        result = runner.invoke(
            app, ["refine", "The cat sat on the mat.", "--policy", str(policy_file), "-f", "json"]
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["strategy"] == "Legal / Regulatory"
        assert data["level"] == "Aggressive"

    def test_cli_option_overrides_policy(self, policy_file: Path) -> None:
        result = runner.invoke(
            app,
            ["refine", "The cat sat.", "--policy", str(policy_file), "-l", "Light", "-f", "json"],
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout)["level"] == "Light"

    def test_unknown_strategy_fails(self) -> None:
        """测试未知策略输出错误并以退出码 1 结束。"""
        result = runner.invoke(app, ["refine", "text", "--strategy", "gpt5"])
        assert result.exit_code == 1
        assert "gpt5" in result.stdout

    def test_missing_input(self) -> None:
        result = runner.invoke(app, ["refine"])
        assert result.exit_code == 2

    def test_missing_input_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["refine", "--input", str(tmp_path / "nope.txt")])
        assert result.exit_code == 1

    def test_bad_output_format(self) -> None:
        result = runner.invoke(app, ["refine", "text", "-f", "xml"])
        assert result.exit_code == 1


# ============================================================
# diagnose 命令测试
# ============================================================


class TestDiagnoseCommand:
    """diagnose 命令测试。"""

    def test_json_output(self, repeated_text: str) -> None:
        result = runner.invoke(app, ["diagnose", repeated_text, "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["leaks"] == 4
        assert data["repeated_phrases"] == ["the quick brown", "quick brown fox"]

    def test_table_output(self, repeated_text: str) -> None:
        result = runner.invoke(app, ["diagnose", repeated_text])
        assert result.exit_code == 0
        assert "quick brown fox" in result.stdout

    def test_no_leaks(self) -> None:
        result = runner.invoke(app, ["diagnose", "Nothing repeats in this sentence at all."])
        assert result.exit_code == 0
        assert "未发现重复短语" in result.stdout

    def test_html_output(self, repeated_text: str, tmp_path: Path) -> None:
        out = tmp_path / "leaks.html"
        result = runner.invoke(app, ["diagnose", repeated_text, "--html", str(out)])
        assert result.exit_code == 0
        assert '<mark class="semantic-leak">The quick brown fox</mark>' in out.read_text(
            encoding="utf-8"
        )

    def test_policy_thresholds(self, repeated_text: str, tmp_path: Path) -> None:
        policy = tmp_path / "strict.yaml"
        policy.write_text("diagnostic:\n  min_text_chars: 100\n", encoding="utf-8")
        result = runner.invoke(app, ["diagnose", repeated_text, "--policy", str(policy), "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["leaks"] == 0


# ============================================================
# batch 命令测试
# ============================================================


class TestBatchCommand:
    """batch 命令测试。"""

    def test_json_list(self, tmp_path: Path) -> None:
        batch_file = tmp_path / "prompts.json"
        batch_file.write_text(
            json.dumps(["The cat sat on the mat.", "", "The dog sat on the rug."]),
            encoding="utf-8",
        )
        result = runner.invoke(app, ["batch", str(batch_file), "-l", "Aggressive", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert len(data["items"]) == 2
        assert data["summary"]["total_prompts"] == 2

    def test_yaml_prompts_object(self, tmp_path: Path) -> None:
        batch_file = tmp_path / "prompts.yaml"
        batch_file.write_text(
            "prompts:\n  - The cat sat on the mat.\n  - Please just review it.\n",
            encoding="utf-8",
        )
        result = runner.invoke(app, ["batch", str(batch_file)])
        assert result.exit_code == 0
        assert "批处理汇总" in result.stdout

    def test_price_option(self, tmp_path: Path) -> None:
        batch_file = tmp_path / "prompts.json"
        batch_file.write_text(json.dumps({"prompts": ["The cat sat on the mat."]}), encoding="utf-8")
        result = runner.invoke(
            app, ["batch", str(batch_file), "-l", "Aggressive", "--price", "1.0", "--json"]
        )
        assert result.exit_code == 0
        summary = json.loads(result.stdout)["summary"]
        assert summary["estimated_dollar_savings"] == pytest.approx(2 / 1000)

    def test_invalid_structure(self, tmp_path: Path) -> None:
        batch_file = tmp_path / "bad.json"
        batch_file.write_text(json.dumps({"items": [1, 2]}), encoding="utf-8")
        result = runner.invoke(app, ["batch", str(batch_file)])
        assert result.exit_code == 1

    def test_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["batch", str(tmp_path / "missing.json")])
        assert result.exit_code == 1


# ============================================================
# validate / version 命令测试
# ============================================================


class TestValidateCommand:
    """validate 命令测试。"""

    def test_valid_policy(self, policy_file: Path) -> None:
        result = runner.invoke(app, ["validate", str(policy_file)])
        assert result.exit_code == 0
        assert "校验通过" in result.stdout

    def test_invalid_policy(self, tmp_path: Path) -> None:
        policy = tmp_path / "bad.yaml"
        policy.write_text("refine:\n  level: extreme\n", encoding="utf-8")
        result = runner.invoke(app, ["validate", str(policy)])
        assert result.exit_code == 1
        assert "校验失败" in result.stdout

    def test_missing_policy(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["validate", str(tmp_path / "missing.yaml")])
        assert result.exit_code == 1


def test_version() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert f"Prompt Refinery v{__version__}" in result.stdout


def test_no_args_shows_help() -> None:
    result = runner.invoke(app, [])
    assert "refine" in result.stdout
