"""Layout tokens and the text helpers shared by every parser."""
from __future__ import annotations

import html
import re
import unicodedata
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

# One token per word run, per whitespace char and per punctuation char
_TOKEN_RE = re.compile(r"[^\W_]+|\s|_|[^\w\s]", re.UNICODE)
_SPACE_RUN_RE = re.compile(r"[ \t\u00a0\f\r\n]+")
_HYPHEN_BREAK_RE = re.compile(r"(\w)[-\u00ad]\s*\n\s*(\w)")


class LayoutToken(BaseModel):
    """A token of the document, with pass-through layout coordinates."""
    model_config = ConfigDict(frozen=True)

    text: str
    offset: int = 0
    page: Optional[int] = None
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None

    @property
    def is_space(self) -> bool:
        return self.text.isspace()

    @property
    def is_newline(self) -> bool:
        return self.text in ("\n", "\r")


def tokenize(text: Optional[str], offset: int = 0) -> list[LayoutToken]:
    """Split text into tokens, keeping every whitespace character as its own token."""
    if not text:
        return []
    return [
        LayoutToken(text=m.group(0), offset=offset + m.start())
        for m in _TOKEN_RE.finditer(text)
    ]


def to_text(tokens: Iterable[LayoutToken]) -> str:
    return "".join(tok.text for tok in tokens)


def normalize_space(text: Optional[str]) -> str:
    """Collapse whitespace runs (newlines included) into single spaces and trim."""
    if not text:
        return ""
    return _SPACE_RUN_RE.sub(" ", text).strip()


def dehyphenize(text: Optional[str]) -> str:
    """Join words broken by an end-of-line hyphen."""
    if not text:
        return ""
    return _HYPHEN_BREAK_RE.sub(r"\1\2", text)


def normalise_text(text: Optional[str]) -> str:
    """NFKC normalisation, with no-break and exotic spaces mapped to plain spaces."""
    if not text:
        return ""
    text = unicodedata.normalize("NFKC", text)
    return "".join(" " if ch != "\n" and ch.isspace() else ch for ch in text)


def html_encode(text: Optional[str]) -> str:
    if text is None:
        return ""
    return html.escape(text, quote=True).replace("&#x27;", "'")


def is_blank(text: Optional[str]) -> bool:
    return text is None or text.strip() == ""
