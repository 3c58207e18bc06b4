"""Sequence-labelling backends turning feature matrices into label streams."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

log = logging.getLogger(__name__)


class BaseTagger(ABC):
    """Abstract base for taggers.

    ``label`` receives the feature matrix (one line per token, blank lines between
    sequences) and returns the same lines with the predicted label appended as the
    last tab-separated column.
    """

    @abstractmethod
    def label(self, features: str) -> str:
        ...


def split_sequences(features: str) -> list[list[list[str]]]:
    """Feature matrix -> sequences of per-token feature columns."""
    sequences: list[list[list[str]]] = [[]]
    for line in features.split("\n"):
        if not line.strip():
            if sequences[-1]:
                sequences.append([])
            continue
        sequences[-1].append(line.split())
    return [seq for seq in sequences if seq]


def columns_to_features(columns: list[str]) -> dict:
    return {f"f{i}": col for i, col in enumerate(columns)}


def add_neighboring_features(sequence: list[dict]) -> list[dict]:
    """Copy the token and shape of the previous/next token into each feature dict."""
    out = []
    for i, feats in enumerate(sequence):
        feats = dict(feats)
        if i > 0:
            feats["-1:f1"] = sequence[i - 1]["f1"]
        else:
            feats["BOS"] = True
        if i < len(sequence) - 1:
            feats["+1:f1"] = sequence[i + 1]["f1"]
        else:
            feats["EOS"] = True
        out.append(feats)
    return out


class CrfTagger(BaseTagger):
    """Linear-chain CRF (sklearn-crfsuite) loaded from a joblib dump."""

    def __init__(self, model_name: str, model_path: Path, crf=None):
        self.model_name = model_name
        self.model_path = Path(model_path)
        self._crf = crf

    @property
    def crf(self):
        if self._crf is None:
            import joblib
            try:
                import sklearn_crfsuite  # noqa: F401  (needed to unpickle the model)
            except ImportError:
                raise ImportError(
                    "sklearn-crfsuite is required for the CRF tagger. "
                    "Install it with: pip install sklearn-crfsuite"
                )
            log.info("Loading CRF model %s from %s", self.model_name, self.model_path)
            self._crf = joblib.load(self.model_path)
        return self._crf

    def label(self, features: str) -> str:
        sequences = split_sequences(features)
        if not sequences:
            return ""
        x = [add_neighboring_features([columns_to_features(cols) for cols in seq])
             for seq in sequences]
        predicted = self.crf.predict(x)
        blocks = []
        for seq, labels in zip(sequences, predicted):
            blocks.append("\n".join("\t".join(cols + [lab]) for cols, lab in zip(seq, labels)))
        return "\n\n".join(blocks) + "\n"


def load_tagger(model_name: str, settings=None) -> BaseTagger:
    """Build the tagger configured for a model."""
    from medreport.config import get_settings
    settings = settings or get_settings()
    path: Optional[Path] = settings.model_path(model_name)
    return CrfTagger(model_name, path)
