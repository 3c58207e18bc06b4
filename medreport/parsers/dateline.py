"""Dateline parser: place, date and time of writing of a report."""
from __future__ import annotations

from medreport.core import labels
from medreport.core.tokens import LayoutToken
from medreport.models import Dateline
from medreport.parsers.base import OTHER_TAG, AbstractParser, FieldTag, simple_tag


class DatelineParser(AbstractParser):
    """Several datelines per unit: a repeated field starts a new dateline."""

    model = labels.DATELINE
    record_cls = Dateline
    lexicon_features = ("location", "city")
    boundary = ("\t<dateline>", "</dateline>\n")
    blank_line_closes_unit = True

    fields = {
        "<place>": "place_name",
        "<date>": "date",
        "<time>": "time",
        "<note>": "note",
    }

    training_tags = (
        simple_tag("<place>", "placeName"),
        OTHER_TAG,
        simple_tag("<date>"),
        simple_tag("<time>"),
        FieldTag("<note>", '<note type="dateline">', "</note>"),
    )

    def extract(self, result: str, tokens: list[LayoutToken]) -> list[Dateline]:
        return self.extract_splitting(result, tokens)
