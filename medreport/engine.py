"""Lazily built parsers sharing one lexicon and one label counter."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from medreport.config import Settings, get_settings
from medreport.core import labels
from medreport.core.counters import LabelCounter
from medreport.core.lexicon import Lexicon
from medreport.core.tagger import BaseTagger, load_tagger
from medreport.parsers.address import AddressParser
from medreport.parsers.base import AbstractParser
from medreport.parsers.dateline import DatelineParser
from medreport.parsers.medic import MedicParser
from medreport.parsers.organization import OrganizationParser
from medreport.parsers.patient import PatientParser
from medreport.parsers.person_name import PersonNameParser

log = logging.getLogger(__name__)

PARSER_CLASSES: dict[str, type[AbstractParser]] = {
    labels.ADDRESS: AddressParser,
    labels.DATELINE: DatelineParser,
    labels.MEDIC: MedicParser,
    labels.PATIENT: PatientParser,
    labels.ORGANIZATION: OrganizationParser,
    labels.PERSON_NAME: PersonNameParser,
}


class MedicalParsers:
    """Holds one parser per model, created on first use."""

    def __init__(self, settings: Optional[Settings] = None,
                 tagger_factory: Optional[Callable[[str], BaseTagger]] = None,
                 lexicon: Optional[Lexicon] = None,
                 counter: Optional[LabelCounter] = None):
        self.settings = settings or get_settings()
        self.tagger_factory = tagger_factory or (lambda name: load_tagger(name, self.settings))
        self._lexicon = lexicon
        self.counter = counter if counter is not None else LabelCounter()
        self._parsers: dict[str, AbstractParser] = {}

    @property
    def lexicon(self) -> Lexicon:
        if self._lexicon is None:
            self._lexicon = Lexicon.from_settings(self.settings)
        return self._lexicon

    def get(self, model: str) -> AbstractParser:
        if model not in PARSER_CLASSES:
            raise KeyError(f"Unknown model: {model}")
        if model not in self._parsers:
            log.info("Initialising %s parser", model)
            self._parsers[model] = PARSER_CLASSES[model](
                self.tagger_factory(model),
                lexicon=self.lexicon,
                counter=self.counter,
                prefixes=tuple(self.settings.label_prefixes),
            )
        return self._parsers[model]

    @property
    def address_parser(self) -> AddressParser:
        return self.get(labels.ADDRESS)

    @property
    def dateline_parser(self) -> DatelineParser:
        return self.get(labels.DATELINE)

    @property
    def medic_parser(self) -> MedicParser:
        return self.get(labels.MEDIC)

    @property
    def patient_parser(self) -> PatientParser:
        return self.get(labels.PATIENT)

    @property
    def organization_parser(self) -> OrganizationParser:
        return self.get(labels.ORGANIZATION)

    @property
    def person_name_parser(self) -> PersonNameParser:
        return self.get(labels.PERSON_NAME)
