"""
Refinery 规则目录。

每条规则是"正则 + 替换串 + 删除原因"三元组。原因为 None 的规则只做格式整理
（空白折叠、换行插入），不写入删除日志。

# [Design Decision] 规则集中在数据表里而不是散落在各阶段的函数体中，
# 阶段只负责"按顺序选表、逐条应用"。新增一条冗余短语只需改这里。

所有替换串都不长于它替换的内容（Structured 的换行替换的是至少一个空白），
因此 Balanced / Aggressive 下输出长度不会超过输入长度。
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from prompt_refinery.config.schema import CompressionLevel, OutputFormat, Strategy

REDUNDANT_PHRASE = "Redundant phrase removed"
FILLER_WORD = "Filler word removed"
REPEATED_PUNCTUATION = "Repeated punctuation collapsed"
DETERMINER = "Determiner removed"
VERBOSE_CONSTRUCTION = "Verbose construction contracted"
LEGAL_DOUBLET = "Legal doublet collapsed"
POLITENESS_MARKER = "Politeness marker removed"
INSTRUCTION_NORMALIZED = "Instruction normalized"
CONNECTIVE_NORMALIZED = "Connective normalized"
INTENSIFIER = "Intensifier removed"
PLEASANTRY = "Pleasantry removed"


@dataclass(frozen=True)
class Rule:
    """
    一条文本改写规则。

    属性:
        pattern: 已编译的正则
        replacement: 替换模板（支持 \\1 等反向引用）
        reason: 写入删除日志的原因；None 表示纯格式整理
    """

    pattern: re.Pattern[str]
    replacement: str = ""
    reason: str | None = None


def _rule(
    pattern: str,
    replacement: str = "",
    reason: str | None = None,
    *,
    ignore_case: bool = True,
) -> Rule:
    flags = re.IGNORECASE if ignore_case else 0
    return Rule(pattern=re.compile(pattern, flags), replacement=replacement, reason=reason)


# === 阶段 1：冗余短语 ===

REDUNDANT_PHRASE_RULES: tuple[Rule, ...] = (
    _rule(r"\b(?:in order to|in order for)\b", reason=REDUNDANT_PHRASE),
    _rule(r"\b(?:very (?:very|extremely|really)|really (?:really|very))\b", reason=REDUNDANT_PHRASE),
    _rule(r"\b(?:completely|totally|absolutely) (?:unnecessary|useless|pointless)\b", reason=REDUNDANT_PHRASE),
    _rule(r"\b(?:start by|begin by|first of all)\b", reason=REDUNDANT_PHRASE),
    _rule(r"\b(?:as mentioned above|as stated earlier|as previously mentioned)\b", reason=REDUNDANT_PHRASE),
    _rule(
        r"\b(?:it is important to note that|it should be noted that|it is worth mentioning that)\b",
        reason=REDUNDANT_PHRASE,
    ),
    _rule(r"\b(?:in my opinion|in my view|from my perspective)\b", reason=REDUNDANT_PHRASE),
    _rule(r"\b(?:personally speaking|from my experience)\b", reason=REDUNDANT_PHRASE),
)

# === 阶段 2：填充词 ===

FILLER_WORD_RULES: tuple[Rule, ...] = (
    _rule(
        r"\b(?:just|simply|basically|essentially|literally|actually|really|very|quite|rather|pretty|so)\b",
        reason=FILLER_WORD,
    ),
    _rule(r"\b(?:a little bit|kind of|sort of|somewhat|rather|fairly|quite)\b", reason=FILLER_WORD),
    _rule(r"\b(?:that is|this is|it is|there is|here is)\b", reason=FILLER_WORD),
    _rule(r"\b(?:in terms of|with regard to|in relation to|as far as)\b", reason=FILLER_WORD),
    _rule(r"\b(?:maybe|perhaps|possibly|probably|likely)\b", reason=FILLER_WORD),
    _rule(r"\b(?:well|now|then|so|okay|alright)\b", reason=FILLER_WORD),
)

# === 阶段 3：压缩级别 ===

COLLAPSE_WHITESPACE = _rule(r"\s+", " ")

_BALANCED_RULES: tuple[Rule, ...] = (
    COLLAPSE_WHITESPACE,
    _rule(r"([.!?])\s*\1+", r"\1", REPEATED_PUNCTUATION),
)

# 先收缩冗长结构再删冠词，否则 "because of the fact that" 会先失去 "the" 而无法匹配
_AGGRESSIVE_RULES: tuple[Rule, ...] = _BALANCED_RULES + (
    _rule(r"\bin order to\b", "to", VERBOSE_CONSTRUCTION),
    _rule(r"\bbecause of the fact that\b", "because", VERBOSE_CONSTRUCTION),
    _rule(r"\bin the event that\b", "if", VERBOSE_CONSTRUCTION),
    _rule(r"\b(?:a|an|the)\s+", reason=DETERMINER),
)

LEVEL_RULES: dict[CompressionLevel, tuple[Rule, ...]] = {
    CompressionLevel.LIGHT: (),
    CompressionLevel.BALANCED: _BALANCED_RULES,
    CompressionLevel.AGGRESSIVE: _AGGRESSIVE_RULES,
}

# === 阶段 4：策略改写 ===

_UNIVERSAL_RULES: tuple[Rule, ...] = (
    _rule(r"\b(?:very|really|quite)\b\s*", reason=INTENSIFIER),
    _rule(r"\b(?:so|very|really) (much|many|big|small)\b", r"\1", INTENSIFIER),
)

# 法律文本只收敛明确冗余的双联词，其余措辞一概不动
STRATEGY_RULES: dict[Strategy, tuple[Rule, ...]] = {
    Strategy.LEGAL: (
        _rule(r"\band/or\b", "or", LEGAL_DOUBLET),
        _rule(r"\beach and every\b", "each", LEGAL_DOUBLET),
        _rule(r"\bfull and complete\b", "full", LEGAL_DOUBLET),
    ),
    Strategy.GPT: (
        _rule(r"\b(?:please|could you|would you)\b", reason=POLITENESS_MARKER),
        _rule(r"\b(?:be sure to|make sure to)\b", "ensure", INSTRUCTION_NORMALIZED),
    ),
    Strategy.CLAUDE: (
        _rule(r"\band also\b", "and", CONNECTIVE_NORMALIZED),
        _rule(r"\bin addition to\b", "plus", CONNECTIVE_NORMALIZED),
    ),
    Strategy.DEEPSEEK: _UNIVERSAL_RULES,
    Strategy.UNIVERSAL: _UNIVERSAL_RULES,
}

# === 阶段 5：输出形态 ===

FORMAT_RULES: dict[OutputFormat, tuple[Rule, ...]] = {
    OutputFormat.XML: (),
    OutputFormat.STRUCTURED: (
        _rule(r"([.!?])\s+([A-Z])", "\\1\n\\2", ignore_case=False),
    ),
    OutputFormat.MINIMALIST: (
        _rule(r"\b(?:please|kindly|thank you|regards)\b", reason=PLEASANTRY),
        _rule(r"\b(?:the|a|an)\s+", reason=DETERMINER),
        COLLAPSE_WHITESPACE,
    ),
}

# === 阶段 6：收尾 ===

SENTENCE_TERMINATORS = ".!?"
