"""Per-label counters collected while extracting records."""
from __future__ import annotations

from collections import Counter
from typing import Optional


class LabelCounter:
    """Counts accepted clusters per (model, label)."""

    def __init__(self):
        self._counts: Counter = Counter()

    def increment(self, model: str, label: str, n: int = 1) -> None:
        self._counts[(model, label)] += n

    def get(self, model: str, label: str) -> int:
        return self._counts[(model, label)]

    def for_model(self, model: str) -> dict[str, int]:
        return {label: n for (m, label), n in self._counts.items() if m == model}

    def total(self, model: Optional[str] = None) -> int:
        if model is None:
            return sum(self._counts.values())
        return sum(self.for_model(model).values())

    def to_dict(self) -> dict[str, dict[str, int]]:
        out: dict[str, dict[str, int]] = {}
        for (model, label), n in sorted(self._counts.items()):
            out.setdefault(model, {})[label] = n
        return out
