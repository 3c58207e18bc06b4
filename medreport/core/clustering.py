"""Group a labelled token stream into clusters of contiguous same-field tokens."""
from __future__ import annotations

import logging
from typing import Optional

from medreport.core.labels import DEFAULT_PREFIXES, OTHER_LABEL, is_begin, strip_prefix
from medreport.core.tokens import LayoutToken, normalize_space, to_text

log = logging.getLogger(__name__)


class TaggingTokenCluster:
    """A run of tokens sharing one (prefix-stripped) label."""

    def __init__(self, label: str):
        self.label = label
        self.tokens: list[LayoutToken] = []
        # label lines backing the content tokens of the cluster
        self.labeled_lines: list[str] = []

    def add_token(self, token: LayoutToken) -> None:
        self.tokens.append(token)

    def text(self) -> str:
        return to_text(self.tokens)

    def content(self) -> str:
        return normalize_space(self.text())

    def __repr__(self) -> str:
        return f"TaggingTokenCluster({self.label!r}, {self.text()!r})"


def parse_result_line(line: str) -> tuple[str, Optional[str]]:
    """Return (token, raw label) of one tagger output line."""
    cols = line.split()
    if not cols:
        return "", None
    if len(cols) < 2:
        return cols[0], None
    return cols[0], cols[-1]


class TaggingTokenClusteror:
    """Pairs tagger output lines with layout tokens and groups them by label.

    The tagger emits one line per non-whitespace token. Whitespace tokens are
    attached to the cluster of the preceding content token (leading whitespace
    to the first cluster), so the clusters always cover the token list.
    """

    def __init__(self, model: str, result: Optional[str], tokens: list[LayoutToken],
                 prefixes: tuple[str, ...] = DEFAULT_PREFIXES):
        self.model = model
        self.result = result or ""
        self.tokens = tokens
        self.prefixes = prefixes

    def _label_lines(self) -> list[str]:
        return [line for line in self.result.split("\n") if line.strip()]

    def cluster(self) -> list[TaggingTokenCluster]:
        lines = self._label_lines()
        clusters: list[TaggingTokenCluster] = []
        current: Optional[TaggingTokenCluster] = None
        leading: list[LayoutToken] = []
        pos = 0
        last_label: Optional[str] = None

        for line in lines:
            token_text, raw_label = parse_result_line(line)
            if raw_label is None:
                raw_label = last_label or OTHER_LABEL
            last_label = raw_label

            # whitespace before the next content token stays with the current cluster
            while pos < len(self.tokens) and self.tokens[pos].is_space:
                if current is None:
                    leading.append(self.tokens[pos])
                else:
                    current.add_token(self.tokens[pos])
                pos += 1
            if pos >= len(self.tokens):
                log.debug("[%s] label line %r has no token left", self.model, token_text)
                break

            label = strip_prefix(raw_label, self.prefixes)
            if current is None or current.label != label or is_begin(raw_label, self.prefixes):
                current = TaggingTokenCluster(label)
                clusters.append(current)
                if leading:
                    current.tokens.extend(leading)
                    leading = []
            current.add_token(self.tokens[pos])
            current.labeled_lines.append(line)
            pos += 1

        rest = self.tokens[pos:]
        if rest or leading:
            if current is None:
                current = TaggingTokenCluster(OTHER_LABEL)
                clusters.append(current)
            current.tokens.extend(leading + rest)
        return clusters
