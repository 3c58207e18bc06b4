"""Feature vectors fed to the sequence-labelling models.

One line per non-whitespace token, space-separated columns:

    token lowercase prefix1..4 suffix1..4 line-status capitalisation digit
    single-char <lexicon flags...> punct-type shape

The lexicon flag columns depend on the model (see ``LEXICON_FEATURES``).
"""
from __future__ import annotations

import re
from typing import Sequence

from medreport.core.lexicon import Lexicon, OffsetPosition
from medreport.core.tokens import LayoutToken

LINESTART, LINEIN, LINEEND = "LINESTART", "LINEIN", "LINEEND"

# lexicon name -> Lexicon method returning token positions
LEXICON_FEATURES = {
    "location": "token_positions_location_names",
    "city": "token_positions_city_names",
    "title": "token_positions_person_title",
    "suffix": "token_positions_person_suffix",
    "email": "token_positions_email_pattern",
    "url": "token_positions_url_pattern",
}

_PUNCT = {
    "(": "OPENBRACKET", "[": "OPENBRACKET",
    ")": "ENDBRACKET", "]": "ENDBRACKET",
    ".": "DOT", ",": "COMMA",
    "-": "HYPHEN", "–": "HYPHEN", "‐": "HYPHEN",
    '"': "QUOTE", "'": "QUOTE", "«": "QUOTE", "»": "QUOTE", "“": "QUOTE", "”": "QUOTE",
}
_PUNCT_RE = re.compile(r"^[^\w\s]+$")


def capitalisation(token: str) -> str:
    if token.isupper():
        return "ALLCAP"
    if token[:1].isupper():
        return "INITCAP"
    return "NOCAPS"


def digit_class(token: str) -> str:
    if token.isdigit():
        return "ALLDIGIT"
    if any(ch.isdigit() for ch in token):
        return "CONTAINDIGIT"
    return "NODIGIT"


def punct_type(token: str) -> str:
    if token in _PUNCT:
        return _PUNCT[token]
    if _PUNCT_RE.match(token):
        return "PUNCT"
    return "NOPUNCT"


def word_shape(token: str) -> str:
    """Character classes with repeated classes collapsed, e.g. ``Paris`` -> ``Xx``."""
    shape = []
    for ch in token:
        if ch.isupper():
            c = "X"
        elif ch.islower():
            c = "x"
        elif ch.isdigit():
            c = "d"
        else:
            c = ch
        if not shape or shape[-1] != c:
            shape.append(c)
    return "".join(shape)


def _affixes(token: str) -> list[str]:
    prefixes = [token[:n] for n in range(1, 5)]
    suffixes = [token[-n:] for n in range(1, 5)]
    return prefixes + suffixes


def _flags(positions: list[OffsetPosition], size: int) -> list[bool]:
    flags = [False] * size
    for pos in positions:
        for i in range(pos.start, min(pos.end, size - 1) + 1):
            flags[i] = True
    return flags


def line_status(tokens: list[LayoutToken], index: int) -> str:
    prev = index - 1
    while prev >= 0 and tokens[prev].is_space and not tokens[prev].is_newline:
        prev -= 1
    nxt = index + 1
    while nxt < len(tokens) and tokens[nxt].is_space and not tokens[nxt].is_newline:
        nxt += 1
    if prev < 0 or tokens[prev].is_newline:
        return LINESTART
    if nxt >= len(tokens) or tokens[nxt].is_newline:
        return LINEEND
    return LINEIN


def add_features(tokens: list[LayoutToken], lexicon: Lexicon,
                 lexicon_features: Sequence[str] = ()) -> str:
    """Build the feature matrix of a token list, one line per content token."""
    flag_columns = [
        _flags(getattr(lexicon, LEXICON_FEATURES[name])(tokens), len(tokens))
        for name in lexicon_features
    ]
    lines = []
    for i, tok in enumerate(tokens):
        if tok.is_space:
            continue
        text = tok.text
        cols = [text, text.lower()]
        cols.extend(_affixes(text))
        cols.append(line_status(tokens, i))
        cols.append(capitalisation(text))
        cols.append(digit_class(text))
        cols.append("1" if len(text) == 1 else "0")
        cols.extend("1" if flags[i] else "0" for flags in flag_columns)
        cols.append(punct_type(text))
        cols.append(word_shape(text))
        lines.append(" ".join(cols))
    return "\n".join(lines) + ("\n" if lines else "")
