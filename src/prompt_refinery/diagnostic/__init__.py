"""
重复诊断模块 — 检测跨句子重复出现的三词短语（semantic leak）。
"""

from prompt_refinery.diagnostic.base import DiagnosticResult
from prompt_refinery.diagnostic.index import (
    TrigramIndex,
    count_phrase_occurrences,
    phrase_pattern,
)
from prompt_refinery.diagnostic.repetition import (
    diagnose,
    highlight_phrases,
    iter_ngrams,
    split_sentences,
)

__all__ = [
    "DiagnosticResult",
    "TrigramIndex",
    "count_phrase_occurrences",
    "diagnose",
    "highlight_phrases",
    "iter_ngrams",
    "phrase_pattern",
    "split_sentences",
]
