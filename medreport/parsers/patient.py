"""Patient parser: identification block of the patient."""
from __future__ import annotations

from medreport.core import labels
from medreport.core.tokens import LayoutToken
from medreport.models import Patient
from medreport.parsers.base import OTHER_TAG, AbstractParser, FieldTag, simple_tag


class PatientParser(AbstractParser):
    """Several patients per unit: a repeated field starts a new patient."""

    model = labels.PATIENT
    record_cls = Patient
    lexicon_features = ("location", "title", "suffix", "email")
    boundary = ("\t<patient>", "</patient>\n")

    fields = {
        "<idno>": "id",
        "<idtype>": "id_type",
        "<persname>": "pers_name",
        "<sex>": "sex",
        "<birthdate>": "date_birth",
        "<birthplace>": "place_birth",
        "<age>": "age",
        "<death>": "date_death",
        "<address>": "address",
        # earlier releases stored the country in ``address``; it now has its own field
        "<country>": "country",
        "<settlement>": "town",
        "<phone>": "phone",
        "<email>": "email",
        "<note>": "note",
    }

    training_tags = (
        simple_tag("<idno>"),
        OTHER_TAG,
        simple_tag("<idtype>", "idType"),
        simple_tag("<sex>"),
        simple_tag("<persname>", "persName"),
        simple_tag("<birthdate>", "birthDate"),
        simple_tag("<birthplace>", "birthPlace"),
        simple_tag("<age>"),
        simple_tag("<death>"),
        simple_tag("<address>"),
        simple_tag("<country>"),
        simple_tag("<settlement>"),
        simple_tag("<phone>"),
        simple_tag("<email>"),
        FieldTag("<note>", '<note type="patient">', "</note>"),
    )

    def extract(self, result: str, tokens: list[LayoutToken]) -> list[Patient]:
        return self.extract_splitting(result, tokens)
