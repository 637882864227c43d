"""
Refinery 阶段与规则单元测试。

覆盖范围:
- refinery/stages.py: 六个内置阶段、final_cleanup()
- refinery/base.py: RefineContext 的保留关键词约束、RefineryPipeline 编排与异常包装
"""

from __future__ import annotations

import pytest

from prompt_refinery.config.schema import RefineConfig
from prompt_refinery.errors import PipelineStageError
from prompt_refinery.refinery.base import RefineContext, RefineryPipeline, RefineryStage
from prompt_refinery.refinery.rules import DETERMINER, FILLER_WORD, REDUNDANT_PHRASE, _rule
from prompt_refinery.refinery.stages import (
    CompressionLevelStage,
    FillerWordStage,
    FinalCleanupStage,
    FormatRewriteStage,
    RedundantPhraseStage,
    StrategyRewriteStage,
    create_default_pipeline,
    final_cleanup,
)


class TestFinalCleanup:
    """final_cleanup 测试。"""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("  hello   world.  ", "Hello world"),
            ("done!?!", "Done"),
            ("first.\n\n  second.", "First.\nsecond"),
            ("", ""),
            ("   ", ""),
            ("...", ""),
            ("ßtraße", "ßtraße"),
            ("1 thing.", "1 thing"),
        ],
    )
    def test_cleanup(self, text: str, expected: str) -> None:
        assert final_cleanup(text) == expected

    @pytest.mark.parametrize(
        "text",
        [
            "a . ! ?",
            "tail.  ",
            "x\n \n y. ",
            "  lower case start!!",
            "ǆemal text.",
            "Multi\tspace\r\nlines ?",
        ],
    )
    def test_idempotent(self, text: str) -> None:
        """测试 final_cleanup(final_cleanup(s)) == final_cleanup(s)。"""
        once = final_cleanup(text)
        assert final_cleanup(once) == once


class TestRedundantAndFillerStages:
    """阶段 1、2 测试。"""

    def test_redundant_phrase_logged(self, make_context) -> None:
        context = make_context()
        result = RedundantPhraseStage().process(
            "It is important to note that tests matter.", context
        )
        assert result == "tests matter."
        assert [(s.text, s.reason) for s in context.removed_segments] == [
            ("It is important to note that", REDUNDANT_PHRASE),
        ]

    def test_filler_words_logged_in_order(self, make_context) -> None:
        context = make_context()
        result = FillerWordStage().process("Just check, maybe twice.", context)
        assert result == "check,  twice."
        assert [s.text for s in context.removed_segments] == ["Just", "maybe"]
        assert all(s.reason == FILLER_WORD for s in context.removed_segments)

    def test_whole_words_only(self, make_context) -> None:
        """测试只删除整词，"justice" 中的 "just" 不受影响。"""
        context = make_context()
        assert FillerWordStage().process("justice prevails", context) == "justice prevails"
        assert context.removed_segments == []


class TestCompressionLevelStage:
    """阶段 3 测试。"""

    def test_light_is_passthrough(self, make_context) -> None:
        context = make_context(level="Light")
        text = "a  b!!!  the end"
        assert CompressionLevelStage().process(text, context) == text
        assert context.removed_segments == []

    def test_balanced_collapses(self, make_context) -> None:
        context = make_context(level="Balanced")
        result = CompressionLevelStage().process("Review  the draft!!!   Send it...", context)
        assert result == "Review the draft! Send it."
        assert [s.text for s in context.removed_segments] == ["!!!", "..."]

    def test_aggressive_strips_determiners(self, make_context) -> None:
        context = make_context(level="Aggressive")
        result = CompressionLevelStage().process("The cat sat on the mat.", context)
        assert result == "cat sat on mat."
        assert [(s.text, s.reason) for s in context.removed_segments] == [
            ("The ", DETERMINER),
            ("the ", DETERMINER),
        ]

    def test_aggressive_contracts_before_determiners(self, make_context) -> None:
        """测试冗长结构先于冠词删除处理。"""
        context = make_context(level="Aggressive")
        result = CompressionLevelStage().process(
            "I left because of the fact that it rained.", context
        )
        assert result == "I left because it rained."

    def test_determiner_inside_word_untouched(self, make_context) -> None:
        context = make_context(level="Aggressive")
        assert CompressionLevelStage().process("theme and banana", context) == "theme and banana"


class TestStrategyRewriteStage:
    """阶段 4：每种策略只走自己的分支。"""

    def test_legal_doublets(self, make_context) -> None:
        context = make_context(strategy="legal")
        result = StrategyRewriteStage().process(
            "Please review each and every full and complete term and/or annex.", context
        )
        assert result == "Please review each full term or annex."

    def test_gpt_politeness(self, make_context) -> None:
        context = make_context(strategy="gpt")
        result = StrategyRewriteStage().process("Please make sure to check the code.", context)
        assert result == "ensure check the code."
        assert [s.text for s in context.removed_segments] == ["Please", "make sure to"]

    def test_claude_connectives(self, make_context) -> None:
        context = make_context(strategy="claude")
        result = StrategyRewriteStage().process(
            "Read the file and also the notes in addition to the log.", context
        )
        assert result == "Read the file and the notes plus the log."

    @pytest.mark.parametrize("strategy", ["universal", "deepseek"])
    def test_universal_intensifiers(self, make_context, strategy: str) -> None:
        context = make_context(strategy=strategy)
        assert StrategyRewriteStage().process("It was very big", context) == "It was big"

    def test_legal_leaves_politeness(self, make_context) -> None:
        context = make_context(strategy="legal")
        text = "Please kindly make sure to sign."
        assert StrategyRewriteStage().process(text, context) == text


class TestFormatRewriteStage:
    """阶段 5 测试。"""

    def test_xml_is_noop(self, make_context) -> None:
        context = make_context(format="XML")
        assert FormatRewriteStage().process("A. B.", context) == "A. B."

    def test_structured_breaks_lines(self, make_context) -> None:
        context = make_context(format="Structured")
        result = FormatRewriteStage().process("First step. Second step! third step.", context)
        assert result == "First step.\nSecond step! third step."

    def test_minimalist(self, make_context) -> None:
        context = make_context(format="Minimalist")
        result = FormatRewriteStage().process("Please review the report, thank you.", context)
        assert result == "review report, ."


class TestPreserveKeywords:
    """保留关键词约束测试。"""

    def test_keyword_inside_match_preserved(self, make_context) -> None:
        context = make_context(preserve_keywords=["order"])
        result = RedundantPhraseStage().process("Act in order to win.", context)
        assert result == "Act in order to win."
        assert context.removed_segments == []
        assert context.preserved_segments == ["in order to"]

    def test_match_overlapping_keyword_preserved(self, make_context) -> None:
        """测试与关键词出现区间重叠的命中也会保留。"""
        context = make_context(level="Aggressive", preserve_keywords=["the contract"])
        result = CompressionLevelStage().process("Sign the contract and the annex.", context)
        assert result == "Sign the contract and annex."

    def test_keyword_case_insensitive(self, make_context) -> None:
        context = make_context(preserve_keywords=["JUST"])
        assert FillerWordStage().process("just do it", context) == "just do it"

    def test_formatting_rules_unguarded(self, make_context) -> None:
        context = make_context(preserve_keywords=["a  b"])
        assert CompressionLevelStage().process("a  b", context) == "a b"

    def test_apply_logs_only_changes(self) -> None:
        context = RefineContext()
        rule = _rule(r"x", "x", "noop")
        assert context.apply("xx", rule) == "xx"
        assert context.removed_segments == []


class _ExplodingStage:
    @property
    def name(self) -> str:
        return "explode"

    def process(self, text: str, context: RefineContext) -> str:
        raise ValueError("boom")


class _UpperStage:
    @property
    def name(self) -> str:
        return "upper"

    def process(self, text: str, context: RefineContext) -> str:
        return text.upper()


class TestRefineryPipeline:
    """RefineryPipeline 编排测试。"""

    def test_default_stage_order(self) -> None:
        assert create_default_pipeline().stage_names == [
            "redundant_phrases",
            "filler_words",
            "compression_level",
            "strategy_rewrite",
            "format_rewrite",
            "final_cleanup",
        ]

    def test_stages_satisfy_protocol(self) -> None:
        for stage in (RedundantPhraseStage(), FinalCleanupStage(), _UpperStage()):
            assert isinstance(stage, RefineryStage)

    def test_skip_stages(self) -> None:
        pipeline = create_default_pipeline(skip_stages={"final_cleanup"})
        assert pipeline.run("hello.", RefineContext()) == "hello."

    def test_stage_error_wrapped(self) -> None:
        """测试阶段的意外异常被包装为 PipelineStageError。"""
        pipeline = RefineryPipeline(stages=[_UpperStage(), _ExplodingStage()])
        with pytest.raises(PipelineStageError) as exc_info:
            pipeline.run("text", RefineContext())
        assert exc_info.value.stage_name == "explode"
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_debug_logging(self, caplog: pytest.LogCaptureFixture) -> None:
        pipeline = RefineryPipeline(stages=[_UpperStage()], skip_stages=set())
        with caplog.at_level("DEBUG", logger="prompt_refinery.refinery.base"):
            result = pipeline.run("abc", RefineContext(config=RefineConfig(), debug=True))
        assert result == "ABC"
        assert "upper" in caplog.text
