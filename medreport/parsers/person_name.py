"""Person-name parser: title, forenames, surname and suffix of one name."""
from __future__ import annotations

from typing import Optional

from medreport.core import labels
from medreport.core.tokens import LayoutToken, normalize_space, to_text
from medreport.models import PersonName
from medreport.parsers.base import OTHER_TAG, AbstractParser, simple_tag


class PersonNameParser(AbstractParser):

    model = labels.PERSON_NAME
    record_cls = PersonName
    lexicon_features = ("title", "suffix")
    boundary = ("<name>", "</name>\n")

    fields = {
        "<title>": "title",
        "<forename>": "forename",
        "<middlename>": "middlename",
        "<surname>": "surname",
        "<suffix>": "suffix",
    }

    training_tags = (
        simple_tag("<forename>"),
        OTHER_TAG,
        simple_tag("<middlename>"),
        simple_tag("<surname>"),
        simple_tag("<title>"),
        simple_tag("<suffix>"),
    )

    def process_tokens(self, tokens: Optional[list[LayoutToken]]) -> Optional[PersonName]:
        name = super().process_tokens(tokens)
        if name is None:
            return None
        name.raw_name = normalize_space(to_text(tokens))
        return name

    def extract(self, result: str, tokens: list[LayoutToken]) -> PersonName:
        return self.extract_appending(result, tokens)
