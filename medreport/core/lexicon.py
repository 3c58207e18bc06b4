"""Gazetteer lookups used as features by the taggers."""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, NamedTuple, Optional

from medreport.core.tokens import LayoutToken, tokenize

log = logging.getLogger(__name__)

DEFAULT_PERSON_TITLES = [
    "dr", "docteur", "pr", "professeur", "m", "mr", "mme", "mlle", "monsieur",
    "madame", "mademoiselle", "interne", "externe", "prof",
]
DEFAULT_PERSON_SUFFIXES = ["jr", "sr", "ii", "iii", "iv", "fils", "père"]
DEFAULT_LOCATIONS = [
    "france", "paris", "lyon", "marseille", "toulouse", "bordeaux", "lille",
    "nantes", "strasbourg", "île-de-france", "bretagne", "normandie",
]
DEFAULT_CITIES = [
    "paris", "lyon", "marseille", "toulouse", "nice", "nantes", "strasbourg",
    "montpellier", "bordeaux", "lille", "rennes", "reims", "grenoble", "créteil",
]

EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+(\.[\w-]+)+")
URL_RE = re.compile(r"(https?://|www\.)\S+", re.IGNORECASE)


class OffsetPosition(NamedTuple):
    """Inclusive token index range of a lexicon match."""
    start: int
    end: int


def _phrase_key(text: str) -> tuple[str, ...]:
    return tuple(t.text.lower() for t in tokenize(text) if not t.is_space)


class Gazetteer:
    """Multi-token phrase list matched case-insensitively against token lists."""

    def __init__(self, name: str, phrases: Iterable[str] = ()):
        self.name = name
        self._phrases: dict[str, list[tuple[str, ...]]] = {}
        self.add_all(phrases)

    def add_all(self, phrases: Iterable[str]) -> None:
        for phrase in phrases:
            key = _phrase_key(phrase)
            if key:
                self._phrases.setdefault(key[0], []).append(key)
        for variants in self._phrases.values():
            variants.sort(key=len, reverse=True)

    def __len__(self) -> int:
        return sum(len(v) for v in self._phrases.values())

    def positions(self, tokens: list[LayoutToken]) -> list[OffsetPosition]:
        """Longest-match positions, as indices into ``tokens`` (whitespace included)."""
        content = [i for i, tok in enumerate(tokens) if not tok.is_space]
        words = [tokens[i].text.lower() for i in content]
        out: list[OffsetPosition] = []
        k = 0
        while k < len(words):
            match = None
            for variant in self._phrases.get(words[k], []):
                if tuple(words[k:k + len(variant)]) == variant:
                    match = variant
                    break
            if match:
                out.append(OffsetPosition(content[k], content[k + len(match) - 1]))
                k += len(match)
            else:
                k += 1
        return out

    @classmethod
    def from_file(cls, name: str, path: Path) -> "Gazetteer":
        lines = path.read_text(encoding="utf-8").splitlines()
        entries = [l.strip() for l in lines if l.strip() and not l.startswith("#")]
        log.info("Loaded %d %s entries from %s", len(entries), name, path)
        return cls(name, entries)


def _pattern_positions(pattern: re.Pattern, tokens: list[LayoutToken]) -> list[OffsetPosition]:
    """Positions of the tokens covered by regex matches over the joined text."""
    text = "".join(t.text for t in tokens)
    starts = []
    acc = 0
    for tok in tokens:
        starts.append(acc)
        acc += len(tok.text)
    out = []
    for m in pattern.finditer(text):
        idx = [i for i, s in enumerate(starts)
               if s < m.end() and s + len(tokens[i].text) > m.start()]
        if idx:
            out.append(OffsetPosition(idx[0], idx[-1]))
    return out


class Lexicon:
    """Bundle of gazetteers queried by the feature builders."""

    def __init__(self, locations: Optional[Gazetteer] = None, cities: Optional[Gazetteer] = None,
                 person_titles: Optional[Gazetteer] = None,
                 person_suffixes: Optional[Gazetteer] = None):
        self.locations = locations if locations is not None else Gazetteer("location", DEFAULT_LOCATIONS)
        self.cities = cities if cities is not None else Gazetteer("city", DEFAULT_CITIES)
        self.person_titles = (person_titles if person_titles is not None
                              else Gazetteer("person_title", DEFAULT_PERSON_TITLES))
        self.person_suffixes = (person_suffixes if person_suffixes is not None
                                else Gazetteer("person_suffix", DEFAULT_PERSON_SUFFIXES))

    def token_positions_location_names(self, tokens: list[LayoutToken]) -> list[OffsetPosition]:
        return self.locations.positions(tokens)

    def token_positions_city_names(self, tokens: list[LayoutToken]) -> list[OffsetPosition]:
        return self.cities.positions(tokens)

    def token_positions_person_title(self, tokens: list[LayoutToken]) -> list[OffsetPosition]:
        return self.person_titles.positions(tokens)

    def token_positions_person_suffix(self, tokens: list[LayoutToken]) -> list[OffsetPosition]:
        return self.person_suffixes.positions(tokens)

    def token_positions_email_pattern(self, tokens: list[LayoutToken]) -> list[OffsetPosition]:
        return _pattern_positions(EMAIL_RE, tokens)

    def token_positions_url_pattern(self, tokens: list[LayoutToken]) -> list[OffsetPosition]:
        return _pattern_positions(URL_RE, tokens)

    @classmethod
    def from_settings(cls, settings) -> "Lexicon":
        """Build a lexicon from the ``lexicon`` section of the settings."""
        def _load(name: str, path: Optional[Path]) -> Optional[Gazetteer]:
            if path is None:
                return None
            if not path.exists():
                log.warning("Lexicon file %s not found, using built-in %s list", path, name)
                return None
            return Gazetteer.from_file(name, path)

        lex = settings.lexicon
        return cls(
            locations=_load("location", lex.locations),
            cities=_load("city", lex.cities),
            person_titles=_load("person_title", lex.person_titles),
            person_suffixes=_load("person_suffix", lex.person_suffixes),
        )
