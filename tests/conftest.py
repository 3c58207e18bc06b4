"""Shared fixtures: a tagger that replays scripted labels."""
from __future__ import annotations

from typing import Optional

import pytest

from medreport.core.tagger import BaseTagger


class ScriptedTagger(BaseTagger):
    """Labels tokens from a fixed list (in order) or from a token -> label map."""

    def __init__(self, labels: Optional[list[str]] = None,
                 by_token: Optional[dict[str, str]] = None,
                 default: str = "<other>"):
        self.labels = labels
        self.by_token = by_token or {}
        self.default = default
        self.calls: list[str] = []

    def label(self, features: str) -> str:
        self.calls.append(features)
        out = []
        i = 0
        for line in features.split("\n"):
            if not line.strip():
                continue
            token = line.split()[0]
            if self.labels is not None:
                lab = self.labels[i]
            else:
                lab = self.by_token.get(token, self.default)
            out.append(f"{token}\t{lab}")
            i += 1
        return "\n".join(out) + "\n"


class FailingTagger(BaseTagger):
    def label(self, features: str) -> str:
        raise RuntimeError("tagger crashed")


@pytest.fixture
def scripted():
    """Factory for scripted taggers."""
    def _make(labels=None, **by_token):
        return ScriptedTagger(labels=labels, by_token=by_token or None)
    return _make
