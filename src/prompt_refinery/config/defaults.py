"""
默认常量与枚举别名表。

# [DX Decision] 枚举既接受显示名（"Legal / Regulatory"），也接受枚举名（"LEGAL"）
# 和常用简写（"legal"、"medium"），CLI 与 YAML 中都不必记住完整显示名。
# 但别名表是封闭的：表外的值一律视为配置错误。
"""

from __future__ import annotations

# ============================================================
# 诊断阈值
# ============================================================

MIN_DIAGNOSTIC_CHARS = 20
"""短于此长度的文本不做重复诊断"""

MIN_SENTENCE_CHARS = 10
"""长度不超过此值的句子不参与 trigram 扫描"""

NGRAM_SIZE = 3

# ============================================================
# 评分与估算
# ============================================================

CHARS_PER_TOKEN = 4
"""无 Tokenizer 时的粗估比例：ceil(字符数 / 4)"""

INTEGRITY_BASELINE = 80
INTEGRITY_AGGRESSIVE_PENALTY = 10
INTEGRITY_LIGHT_BONUS = 5
INTEGRITY_COMPLEXITY_PENALTY = 5
COMPLEXITY_DROP_TOLERANCE = 10

SCORE_MIN = 0
SCORE_MAX = 100

DEFAULT_PRICE_PER_1K_TOKENS = 0.03
"""批处理美元节省估算的基准单价（$/1k tokens）"""

# ============================================================
# 枚举别名（键统一为小写）
# ============================================================

STRATEGY_ALIASES: dict[str, str] = {
    "gpt-4": "GPT",
    "gpt4": "GPT",
    "openai": "GPT",
    "anthropic": "CLAUDE",
    "regulatory": "LEGAL",
    "default": "UNIVERSAL",
}

LEVEL_ALIASES: dict[str, str] = {
    "medium": "BALANCED",
    "default": "BALANCED",
}

FORMAT_ALIASES: dict[str, str] = {
    "xml-tagged": "XML",
    "xml_tags": "XML",
    "minimal": "MINIMALIST",
}
