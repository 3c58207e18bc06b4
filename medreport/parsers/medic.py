"""Medic parser: identity and affiliation of the physicians named in a report."""
from __future__ import annotations

from typing import Optional

from medreport.core import labels
from medreport.core.tokens import LayoutToken, is_blank
from medreport.models import Medic
from medreport.parsers.base import OTHER_TAG, AbstractParser, FieldTag, simple_tag


class MedicParser(AbstractParser):
    """``process`` merges the whole unit into one medic (tab-joined repeats);
    ``process_list`` starts a new medic whenever a field repeats."""

    model = labels.MEDIC
    record_cls = Medic
    lexicon_features = ("location", "title", "suffix", "email", "url")
    boundary = ("\t<medic>", "</medic>\n")
    blank_line_closes_unit = True

    fields = {
        "<roleName>": "role",
        "<persName>": "pers_name",
        "<affiliation>": "affiliation",
        "<orgName>": "organisation",
        "<institution>": "institution",
        "<address>": "address",
        "<country>": "country",
        "<settlement>": "town",
        "<email>": "email",
        "<phone>": "phone",
        "<fax>": "fax",
        "<web>": "web",
        "<note>": "note",
    }

    training_tags = (
        simple_tag("<roleName>"),
        OTHER_TAG,
        simple_tag("<persName>"),
        simple_tag("<affiliation>"),
        simple_tag("<orgName>"),
        FieldTag("<institution>", '<orgName type="institution">', "</orgName>"),
        simple_tag("<address>"),
        simple_tag("<country>"),
        simple_tag("<settlement>"),
        simple_tag("<email>"),
        simple_tag("<phone>"),
        simple_tag("<fax>"),
        FieldTag("<web>", '<ptr type="web">', "</ptr>"),
        FieldTag("<note>", '<note type="medic">', "</note>"),
    )

    def extract(self, result: str, tokens: list[LayoutToken]) -> Medic:
        return self.extract_appending(result, tokens)

    def process_list(self, text: Optional[str]) -> Optional[list[Medic]]:
        if is_blank(text):
            return None
        return self.process_tokens_list(self.tokenize(text))

    def process_tokens_list(self, tokens: Optional[list[LayoutToken]]) -> Optional[list[Medic]]:
        return self._run(tokens, self.extract_list)

    def extract_list(self, result: str, tokens: list[LayoutToken]) -> list[Medic]:
        return self.extract_splitting(result, tokens)
