"""Neutralize user text before it is embedded into a judge prompt

Nothing is deleted except formatting. Spans that look like instructions to
the judge are wrapped as ``[発言: ...]`` so the model reads them as debate
content. Running ``sanitize_content`` on its own output changes nothing.
"""

import re

QUOTE_PREFIX = "[発言: "
QUOTE_SUFFIX = "]"

_EMPHASIS_RE = re.compile(r"[*_]{2,}|\*")
_DECORATION_RE = re.compile(r"[■【】]")
_HEADING_RE = re.compile(r"^[ \t]*(?:#{1,6}[ \t]*)+", re.MULTILINE)
_NEWLINE_RE = re.compile(r"[\r\n]+")

# A quoted span never contains brackets, see _quote()
_QUOTED_RE = re.compile(r"(\[発言: [^\[\]]*\])")

_INJECTION_PATTERNS = [
    # transcript speaker markers: "3. [Player1]"
    r"(?:\d+\.\s*)?\[(?:Player|プレイヤー)\s*[12]\]",
    # chat role prefixes
    r"(?:system|assistant)\s*:",
    r"システム(?:指示|命令|メッセージ|プロンプト)",
    r"system\s*(?:instruction|message|prompt|command)s?",
    r"ignore\s*(?:all\s+)?(?:previous|above|all|prior)(?:\s+instructions?)?",
    r"(?:無視|忘れ|リセット).{0,5}(?:してください|しろ|せよ)",
    # attempts to make the judge drop findings it already confirmed
    r"(?:詭弁|判定|検出結果|評価)を?(?:取り消|撤回|削除|破棄|リセット)",
    r"(?:discard|forget|reset|remove|clear)\s+(?:all\s+)?(?:the\s+)?"
    r"(?:previous\s+|prior\s+|earlier\s+)?(?:findings|fallacies|flaws|scores?|evaluations?)",
]
_INJECTION_RE = re.compile("|".join(_INJECTION_PATTERNS), re.IGNORECASE)


def _quote(match: re.Match) -> str:
    span = match.group(0).replace("[", "(").replace("]", ")")
    return f"{QUOTE_PREFIX}{span}{QUOTE_SUFFIX}"


def _normalize(text: str) -> str:
    text = _DECORATION_RE.sub("", text)
    text = _EMPHASIS_RE.sub("", text)
    text = _HEADING_RE.sub("", text)
    return _NEWLINE_RE.sub(" ", text)


def sanitize_content(text: str) -> str:
    """Strip formatting and quote injection-like spans in `text`"""
    parts = _QUOTED_RE.split(_normalize(text))
    # odd indices are spans quoted by an earlier pass
    return "".join(
        part if i % 2 else _INJECTION_RE.sub(_quote, part)
        for i, part in enumerate(parts)
    )
