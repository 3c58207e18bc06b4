"""Shared machinery of the medical-report field parsers.

Every parser turns a text unit into records in the same three steps: build the
feature matrix, label it with the model's tagger, then walk the label clusters and
fill the record fields. Two filling policies exist:

* append: a field seen again is extended with ``"\\t" + value``; one record per unit.
* split-on-repeat: a field seen again with non-blank content closes the current
  record and starts a new one.

The training serializer walks the label stream and the original tokenization in
lockstep and writes the text back with inline field tags, keeping the original
spacing.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterator, NamedTuple, Optional, Sequence

from medreport.core.clustering import TaggingTokenCluster, TaggingTokenClusteror
from medreport.core.counters import LabelCounter
from medreport.core.features import add_features
from medreport.core.labels import DEFAULT_PREFIXES, OTHER_LABEL, strip_prefix
from medreport.core.lexicon import Lexicon
from medreport.core.tagger import BaseTagger
from medreport.core.tokens import LayoutToken, html_encode, is_blank, normalize_space, tokenize
from medreport.exceptions import MedicalReportException
from medreport.models import Record

log = logging.getLogger(__name__)

# whitespace tokens that mark a space to restore in training output
_SPACE_TOKENS = (" ", "\u00a0")


class FieldTag(NamedTuple):
    """Training-output tags of one label: ``open`` is "" for bare text."""
    label: str
    open: str
    close: str


def simple_tag(label: str, element: Optional[str] = None) -> FieldTag:
    """``<city>`` -> ``<city>``/``</city>``; ``element`` renames the XML element."""
    name = element or label.strip("<>")
    return FieldTag(label, f"<{name}>", f"</{name}>")


OTHER_TAG = FieldTag(OTHER_LABEL, "", "")


# ---- field policies ----

def append_field(record: Record, field: str, value: str) -> None:
    old = getattr(record, field)
    setattr(record, field, value if old is None else old + "\t" + value)


def split_on_repeat(records: list, record: Record, field: str, value: str) -> Record:
    """Set ``field``; a non-blank previous value first closes ``record``."""
    if not is_blank(getattr(record, field)):
        if record.is_not_null():
            records.append(record)
        record = type(record)()
    setattr(record, field, value)
    return record


def anonymizer(data_original: Sequence[str], data_anonymized: Sequence[str]) -> Callable[[str], str]:
    """Ordered substring replacement ``data_original[i]`` -> ``data_anonymized[i]``."""
    if len(data_original) != len(data_anonymized):
        raise ValueError(
            f"{len(data_original)} original values for {len(data_anonymized)} anonymized values"
        )
    pairs = [(o, a) for o, a in zip(data_original, data_anonymized) if o]

    def replace(text: str) -> str:
        for original, anonymized in pairs:
            text = text.replace(original, anonymized)
        return text

    return replace


class AbstractParser:
    """Base class of the per-entity parsers.

    Subclasses declare their model name, record class, label -> field table and the
    ordered training tags (first match wins), and pick an ``extract`` policy.
    """

    model: str = ""
    record_cls: type[Record] = Record
    # model label -> record field
    fields: dict[str, str] = {}
    training_tags: tuple[FieldTag, ...] = ()
    # opening/closing element wrapping each unit in training output
    boundary: Optional[tuple[str, str]] = None
    # a blank label line closes the current unit in training output
    blank_line_closes_unit: bool = False
    # lexicon flag columns of the feature matrix
    lexicon_features: tuple[str, ...] = ()

    def __init__(self, tagger: BaseTagger, lexicon: Optional[Lexicon] = None,
                 counter: Optional[LabelCounter] = None,
                 prefixes: tuple[str, ...] = DEFAULT_PREFIXES):
        self.tagger = tagger
        self.lexicon = lexicon or Lexicon()
        self.counter = counter
        self.prefixes = tuple(prefixes)
        self._closing = {tag.label: tag.close for tag in self.training_tags}
        self._closing[OTHER_LABEL] = ""

    # ---- tagging ----

    def tokenize(self, text: str) -> list[LayoutToken]:
        return tokenize(text)

    def features(self, tokens: list[LayoutToken]) -> str:
        return add_features(tokens, self.lexicon, self.lexicon_features)

    def label(self, tokens: list[LayoutToken]) -> str:
        return self.tagger.label(self.features(tokens))

    def strip(self, label: Optional[str]) -> Optional[str]:
        return strip_prefix(label, self.prefixes)

    # ---- record extraction ----

    def process(self, text: Optional[str]):
        """Tag a raw text unit and extract its records; None for empty input."""
        if is_blank(text):
            return None
        return self.process_tokens(self.tokenize(text))

    def process_tokens(self, tokens: Optional[list[LayoutToken]]):
        return self._run(tokens, self.extract)

    def _run(self, tokens: Optional[list[LayoutToken]], extractor):
        if not tokens or all(tok.is_space for tok in tokens):
            return None
        try:
            result = self.label(tokens)
            return extractor(result, tokens)
        except MedicalReportException:
            raise
        except Exception as e:
            raise MedicalReportException(cause=e) from e

    def extract(self, result: str, tokens: list[LayoutToken]):
        raise NotImplementedError

    def clusters(self, result: str, tokens: list[LayoutToken]) -> list[TaggingTokenCluster]:
        return TaggingTokenClusteror(self.model, result, tokens, self.prefixes).cluster()

    def cluster_content(self, cluster: TaggingTokenCluster) -> str:
        return normalize_space(cluster.text())

    def accepted_clusters(self, result: str, tokens: list[LayoutToken]
                          ) -> Iterator[tuple[str, str, TaggingTokenCluster]]:
        """Yield (label, content, cluster) for every cluster with non-blank content."""
        for cluster in self.clusters(result, tokens):
            if cluster is None:
                continue
            content = self.cluster_content(cluster)
            if not content.strip():
                continue
            if self.counter is not None:
                self.counter.increment(self.model, cluster.label)
            yield cluster.label, content, cluster

    def extract_appending(self, result: str, tokens: list[LayoutToken]) -> Record:
        record = self.record_cls()
        for label, content, cluster in self.accepted_clusters(result, tokens):
            field = self.fields.get(label)
            if field is None:
                continue
            append_field(record, field, content)
            record.add_layout_tokens(cluster.tokens)
        return record

    def extract_splitting(self, result: str, tokens: list[LayoutToken]) -> list:
        records: list = []
        record = self.record_cls()
        for label, content, cluster in self.accepted_clusters(result, tokens):
            field = self.fields.get(label)
            if field is None:
                continue
            record = split_on_repeat(records, record, field, content)
            record.add_layout_tokens(cluster.tokens)
        if record.is_not_null():
            records.append(record)
        return records

    # ---- training data ----

    def training_extraction(self, inputs: Optional[Sequence[Optional[str]]]) -> Optional[str]:
        """Inline-tagged training text of the given units, None when nothing is produced."""
        return self._training_extraction(inputs, None)

    def training_extraction_anonym(self, inputs: Optional[Sequence[Optional[str]]],
                                   data_original: Sequence[str],
                                   data_anonymized: Sequence[str]) -> Optional[str]:
        """Same as ``training_extraction`` with the original values replaced."""
        return self._training_extraction(inputs, anonymizer(data_original, data_anonymized))

    def _training_extraction(self, inputs, replace: Optional[Callable[[str], str]]) -> Optional[str]:
        if not inputs:
            return None
        buffer: list[str] = []
        try:
            for text in inputs:
                if text is None:
                    continue
                tokens = tokenize(text)
                if not tokens or all(tok.is_space for tok in tokens):
                    log.debug("[%s] skipping empty training unit", self.model)
                    continue
                buffer.append(self.serialize_training(self.label(tokens), tokens, replace))
        except Exception as e:
            raise MedicalReportException(cause=e) from e
        out = "".join(buffer)
        return out or None

    def _open(self, label: str, last_tag0: Optional[str], text: str, add_space: bool) -> str:
        space = " " if add_space else ""
        if label == last_tag0:
            return space + text
        for tag in self.training_tags:
            if tag.label == label:
                return space + tag.open + text
        # unknown label: raw text only
        return space + text

    def _close(self, last_tag0: Optional[str], current_tag0: Optional[str]) -> str:
        if last_tag0 is None or current_tag0 == last_tag0:
            return ""
        return self._closing.get(last_tag0, "")

    def serialize_training(self, result: str, tokens: list[LayoutToken],
                           replace: Optional[Callable[[str], str]] = None) -> str:
        originals = [replace(tok.text) if replace else tok.text for tok in tokens]
        buffer: list[str] = []
        p = 0
        start = True
        last_tag: Optional[str] = None
        s1: Optional[str] = None

        for line in result.splitlines():
            if not line.strip():
                if self.blank_line_closes_unit and last_tag is not None:
                    buffer.append(self._close(self.strip(last_tag), None))
                    if self.boundary:
                        buffer.append(self.boundary[1])
                    last_tag = None
                    start = True
                continue

            cols = line.split()
            s = replace(cols[0]) if replace else cols[0]
            if len(cols) > 1:
                s1 = cols[-1]
            if s1 is None:
                continue

            # move the cursor past the token, remembering skipped spaces
            add_space = False
            while p < len(originals):
                tok = originals[p]
                p += 1
                if tok in _SPACE_TOKENS:
                    add_space = True
                elif tok == s:
                    break

            if start:
                if self.boundary:
                    buffer.append(self.boundary[0])
                start = False

            last_tag0 = self.strip(last_tag)
            current_tag0 = self.strip(s1)
            buffer.append(self._close(last_tag0, current_tag0))
            buffer.append(self._open(current_tag0, last_tag0, html_encode(s), add_space))
            last_tag = s1

        if last_tag is not None:
            buffer.append(self._close(self.strip(last_tag), None))
            if self.boundary:
                buffer.append(self.boundary[1])
        return "".join(buffer)
