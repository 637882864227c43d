"""
重复诊断单元测试。

覆盖范围:
- diagnostic/repetition.py: diagnose()、split_sentences()、iter_ngrams()、highlight_phrases()
- diagnostic/index.py: TrigramIndex 与直接正则计数的一致性、特殊字符转义
"""

from __future__ import annotations

import pytest

from prompt_refinery.diagnostic import (
    DiagnosticResult,
    TrigramIndex,
    count_phrase_occurrences,
    diagnose,
    highlight_phrases,
    iter_ngrams,
    split_sentences,
)

MARK = '<mark class="semantic-leak">'


class TestDiagnose:
    """diagnose() 测试。"""

    def test_repeated_trigrams(self, repeated_text: str) -> None:
        """测试 "the quick brown" 跨句重复的经典用例。"""
        result = diagnose(repeated_text)
        assert result.leaks == 4
        assert result.repeated_phrases == ("the quick brown", "quick brown fox")
        assert result.html == repeated_text
        assert result.has_leaks

    @pytest.mark.parametrize("text", ["", "short"])
    def test_short_text_is_zero_result(self, text: str) -> None:
        """测试空文本和过短文本都返回零结果，不抛异常。"""
        result = diagnose(text)
        assert result == DiagnosticResult(html=text)
        assert not result.has_leaks

    def test_none_text(self) -> None:
        assert diagnose(None) == DiagnosticResult(html="")  # type: ignore[arg-type]

    def test_no_repetition(self) -> None:
        result = diagnose("Every sentence here is unique. Nothing repeats in this one at all.")
        assert result.leaks == 0
        assert result.repeated_phrases == ()

    def test_case_insensitive(self) -> None:
        result = diagnose("THE QUICK BROWN fox jumps. the quick brown dog sleeps.")
        assert result.repeated_phrases == ("the quick brown",)
        assert result.leaks == 2

    def test_counts_across_whole_document(self) -> None:
        """测试短句虽不参与扫描，但其中的出现仍计入全文次数。"""
        text = "You must do it all before noon. Do it all."
        result = diagnose(text)
        # "Do it all" 只有 9 个字符，不参与扫描
        assert result.repeated_phrases == ("do it all",)
        assert result.leaks == 1

    def test_custom_thresholds(self, repeated_text: str) -> None:
        assert diagnose(repeated_text, min_text_chars=100).leaks == 0
        assert diagnose(repeated_text, min_sentence_chars=30).leaks == 0

    def test_highlight(self, repeated_text: str) -> None:
        result = diagnose(repeated_text, highlight=True)
        assert result.html == (
            f"{MARK}The quick brown fox</mark> jumps. "
            f"{MARK}The quick brown fox</mark> runs."
        )

    def test_input_not_modified(self, repeated_text: str) -> None:
        original = str(repeated_text)
        diagnose(repeated_text, highlight=True)
        assert repeated_text == original

    def test_to_dict(self, repeated_text: str) -> None:
        data = diagnose(repeated_text).to_dict()
        assert data["leaks"] == 4
        assert data["repeated_phrases"] == ["the quick brown", "quick brown fox"]


class TestSentencesAndNgrams:
    """split_sentences / iter_ngrams 测试。"""

    def test_split_drops_short_sentences(self) -> None:
        assert split_sentences("Hi. This is long enough!!! ok?") == ["This is long enough"]

    def test_split_keeps_exactly_eleven_chars(self) -> None:
        assert split_sentences("abcdefghijk. abcdefghij.") == ["abcdefghijk"]

    def test_ngrams(self) -> None:
        assert list(iter_ngrams("A B  C D")) == ["a b c", "b c d"]

    def test_ngrams_too_few_words(self) -> None:
        assert list(iter_ngrams("only two")) == []


class TestTrigramIndex:
    """TrigramIndex 与直接正则计数的一致性测试。"""

    @pytest.mark.parametrize(
        ("text", "phrase", "expected"),
        [
            ("the cat sat the cat sat the cat sat", "the cat sat", 3),
            ("a a a a a", "a a a", 1),
            ("xthe cat sat", "the cat sat", 0),
            ("the\tcat sat", "the cat sat", 0),
            ("the  cat sat", "the cat sat", 0),
            ("(the cat sat)", "the cat sat", 1),
            ("THE Cat sat. the cat SAT", "the cat sat", 2),
            ("the cat sats", "the cat sat", 0),
            ("a+b c d and a+b c d", "a+b c d", 2),
            ("cost $5 (usd) total", "$5 (usd) total", 0),
        ],
    )
    def test_matches_regex_route(self, text: str, phrase: str, expected: int) -> None:
        """测试索引计数与 \\b 正则计数完全一致。"""
        assert count_phrase_occurrences(text, phrase) == expected
        assert TrigramIndex(text).count(phrase) == expected

    def test_parity_on_document(self, verbose_prompt: str) -> None:
        index = TrigramIndex(verbose_prompt)
        for sentence in split_sentences(verbose_prompt):
            for phrase in iter_ngrams(sentence):
                assert index.count(phrase) == count_phrase_occurrences(verbose_prompt, phrase)

    def test_non_trigram_uses_regex(self) -> None:
        index = TrigramIndex("one two one two")
        assert index.count("one two") == 2

    def test_special_characters_are_literal(self) -> None:
        """测试正则特殊字符按字面匹配，不会被当作通配符。"""
        assert count_phrase_occurrences("axb c d", "a.b c d") == 0
        assert count_phrase_occurrences("a.b c d", "a.b c d") == 1
        assert count_phrase_occurrences("x [y] z", "[y] z") == 0

    def test_empty_phrase(self) -> None:
        assert count_phrase_occurrences("anything", "") == 0

    def test_memoised(self) -> None:
        index = TrigramIndex("the cat sat")
        assert index.count("The Cat Sat") == 1
        assert index.count("the cat sat") == 1
        assert index.text == "the cat sat"


class TestHighlightPhrases:
    """highlight_phrases 测试。"""

    def test_escapes_html(self) -> None:
        text = "a <b> quick brown fox & Quick Brown Fox"
        assert highlight_phrases(text, ["quick brown fox"]) == (
            f"a &lt;b&gt; {MARK}quick brown fox</mark> &amp; {MARK}Quick Brown Fox</mark>"
        )

    def test_overlapping_spans_merged(self) -> None:
        html = highlight_phrases("The quick brown fox", ("the quick brown", "quick brown fox"))
        assert html == f"{MARK}The quick brown fox</mark>"

    def test_no_phrases(self) -> None:
        assert highlight_phrases("<i>", []) == "&lt;i&gt;"

    def test_custom_css_class(self) -> None:
        html = highlight_phrases("one two three", ["one two three"], css_class="leak")
        assert html == '<mark class="leak">one two three</mark>'
