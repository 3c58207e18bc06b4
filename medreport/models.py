"""Pydantic records produced by the medical-report parsers."""
from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from medreport.core.tokens import LayoutToken, html_encode


class Record(BaseModel):
    """Mutable accumulator with optional string fields.

    ``layout_tokens`` collects the tokens that fed the record; it is never serialized.
    """
    model_config = ConfigDict(validate_assignment=True)

    layout_tokens: list[LayoutToken] = Field(default_factory=list, exclude=True, repr=False)

    @classmethod
    def field_names(cls) -> list[str]:
        return [name for name in cls.model_fields if name not in ("layout_tokens", "labeled_tokens")]

    def is_not_null(self) -> bool:
        return any(getattr(self, name) is not None for name in self.field_names())

    def add_layout_tokens(self, tokens: list[LayoutToken]) -> None:
        self.layout_tokens.extend(tokens)

    def to_dict(self) -> dict:
        return self.model_dump(exclude_none=True)


class Address(Record):
    street_number: Optional[str] = None
    street_name: Optional[str] = None
    building_number: Optional[str] = None
    building_name: Optional[str] = None
    city: Optional[str] = None
    post_code: Optional[str] = None
    po_box: Optional[str] = None
    community: Optional[str] = None
    district: Optional[str] = None
    department_number: Optional[str] = None
    department_name: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    note: Optional[str] = None


class Dateline(Record):
    place_name: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    note: Optional[str] = None

    @staticmethod
    def sanity_check(datelines: Optional[list["Dateline"]]) -> Optional[list["Dateline"]]:
        """Drop datelines without a date, rewrite kept dates as ``dd/mm/yyyy``."""
        if not datelines:
            return datelines
        result = []
        for dateline in datelines:
            if dateline.date is None or not dateline.date.strip():
                continue
            date = re.sub(r"\s+", "/", dateline.date.replace(".", " ").strip())
            dateline.date = date
            result.append(dateline)
        return result


class Medic(Record):
    role: Optional[str] = None
    pers_name: Optional[str] = None
    affiliation: Optional[str] = None
    organisation: Optional[str] = None
    institution: Optional[str] = None
    address: Optional[str] = None
    country: Optional[str] = None
    town: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    fax: Optional[str] = None
    web: Optional[str] = None
    note: Optional[str] = None


# field -> TEI element, in serialization order
_PATIENT_TEI = (
    ("id", "idno"), ("id_type", "idType"), ("pers_name", "persName"), ("sex", "sex"),
    ("date_birth", "birthDate"), ("place_birth", "birthPlace"), ("age", "age"),
    ("date_death", "death"), ("address", "address"), ("country", "country"),
    ("town", "settlement"), ("phone", "phone"), ("email", "email"), ("note", "note"),
)


class Patient(Record):
    id: Optional[str] = None
    id_type: Optional[str] = None
    pers_name: Optional[str] = None
    sex: Optional[str] = None
    date_birth: Optional[str] = None
    place_birth: Optional[str] = None
    age: Optional[str] = None
    date_death: Optional[str] = None
    address: Optional[str] = None
    country: Optional[str] = None
    town: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    note: Optional[str] = None

    def to_tei(self) -> str:
        parts = []
        for name, element in _PATIENT_TEI:
            value = getattr(self, name)
            if value is not None:
                parts.append(f"\t<{element}>{html_encode(value)}</{element}>")
        return "".join(parts)


class Organization(Record):
    org_name: Optional[str] = None
    address: Optional[str] = None
    country: Optional[str] = None
    town: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    fax: Optional[str] = None
    web: Optional[str] = None
    note: Optional[str] = None
    # label -> tokens of every cluster carrying it
    labeled_tokens: dict[str, list[LayoutToken]] = Field(default_factory=dict, exclude=True, repr=False)

    def add_labeled_tokens(self, label: str, tokens: list[LayoutToken]) -> None:
        self.labeled_tokens.setdefault(label, []).extend(tokens)


# characters after which a name component is capitalised
NAME_DELIMITERS = "-.,;:/_ "


def capitalize_fully(text: Optional[str], delimiters: str = NAME_DELIMITERS) -> Optional[str]:
    """``jean-PIERRE`` -> ``Jean-Pierre``."""
    if not text:
        return text
    out = []
    capitalize_next = True
    for ch in text.lower():
        out.append(ch.upper() if capitalize_next else ch)
        capitalize_next = ch in delimiters
    return "".join(out)


def _name_key(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return re.sub(r"[-.]", "", value.lower())


def _names_clash(a: Optional[str], b: Optional[str]) -> bool:
    if a is None or b is None:
        return False
    if len(a) == 1 and len(b) == 1:
        return a != b
    return a != b and not a.startswith(b) and not b.startswith(a)


def _longer(current: Optional[str], other: Optional[str]) -> bool:
    if other is None:
        return False
    return current is None or len(other) > len(current)


class PersonName(Record):
    title: Optional[str] = None
    forename: Optional[str] = None
    middlename: Optional[str] = None
    surname: Optional[str] = None
    suffix: Optional[str] = None
    raw_name: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _strip_parentheses(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.lstrip("(").rstrip(")").strip()

    @classmethod
    def field_names(cls) -> list[str]:
        return ["title", "forename", "middlename", "surname", "suffix"]

    def __str__(self) -> str:
        parts = [self.title, self.forename, self.middlename, self.surname, self.suffix]
        return " ".join(p for p in parts if p is not None).strip()

    def is_valid(self) -> bool:
        return self.surname is not None or self.raw_name is not None

    def normalize_name(self) -> None:
        """Uniform case, and ``JM Smith`` -> forename ``J``, middlename ``M``."""
        if not self.middlename and self.forename and len(self.forename) == 2 \
                and self.forename.isupper():
            self.middlename = self.forename[1]
            self.forename = self.forename[0]
        self.forename = capitalize_fully(self.forename)
        self.middlename = capitalize_fully(self.middlename)
        self.surname = capitalize_fully(self.surname)

    def to_tei(self, indent: int = 0) -> Optional[str]:
        if self.forename is None and self.middlename is None and self.surname is None:
            return None
        pad = "\t" * indent
        inner = "\t" * (indent + 1)
        lines = [f"{pad}<persName>"]
        if self.title:
            lines.append(f"{inner}<roleName>{html_encode(self.title)}</roleName>")
        if self.forename:
            lines.append(f'{inner}<forename type="first">{html_encode(self.forename)}</forename>')
        if self.middlename:
            lines.append(f'{inner}<forename type="middle">{html_encode(self.middlename)}</forename>')
        if self.surname:
            lines.append(f"{inner}<surname>{html_encode(self.surname)}</surname>")
        if self.suffix:
            lines.append(f"{inner}<genName>{html_encode(self.suffix)}</genName>")
        lines.append(f"{pad}</persName>")
        return "\n".join(lines)

    @staticmethod
    def sanity_check(persons: Optional[list["PersonName"]]) -> Optional[list["PersonName"]]:
        """Keep only names with a surname."""
        if not persons:
            return persons
        return [p for p in persons if p.surname is not None and p.surname.strip()]

    @staticmethod
    def deduplicate(persons: Optional[list["PersonName"]]) -> Optional[list["PersonName"]]:
        """Merge names sharing a surname and forename initial, unless the forenames clash.

        The most complete form of each component is kept on the first occurrence.
        """
        if not persons:
            return persons

        signatures: dict[str, list[PersonName]] = {}
        for person in persons:
            if person.surname is None or not person.surname.strip():
                continue
            signature = person.surname.lower()
            if person.forename and person.forename.strip():
                signature += "_" + person.forename[0]
            signatures.setdefault(signature, []).append(person)

        removed: set[int] = set()
        for group in signatures.values():
            if len(group) < 2:
                continue
            kept = []
            for j, local in enumerate(group):
                clashes = 0
                for k, other in enumerate(group):
                    if k == j:
                        continue
                    clash = _names_clash(_name_key(local.forename), _name_key(other.forename))
                    if not clash:
                        clash = _names_clash(_name_key(local.middlename), _name_key(other.middlename))
                    if clash:
                        clashes += 1
                if clashes == 0:
                    kept.append(local)
            if len(kept) < 2:
                continue

            first = kept[0]
            for other in kept[1:]:
                for name in ("forename", "middlename", "title", "suffix"):
                    current = getattr(first, name)
                    candidate = getattr(other, name)
                    if _longer(current and current.lower(), candidate and candidate.lower()):
                        setattr(first, name, candidate)
                removed.add(id(other))

        return [p for p in persons if id(p) not in removed]
