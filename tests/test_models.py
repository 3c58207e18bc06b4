"""Tests for the record models and their post-processing helpers."""
from __future__ import annotations

from medreport.models import (
    Address, Dateline, Organization, Patient, PersonName, capitalize_fully,
)


class TestRecord:
    """Test the shared record helpers."""

    def test_is_not_null(self):
        assert not Address().is_not_null()
        assert Address(city="Paris").is_not_null()

    def test_to_dict_skips_empty_fields(self):
        assert Address(city="Paris").to_dict() == {"city": "Paris"}

    def test_organization_labeled_tokens_not_a_field(self):
        assert "labeled_tokens" not in Organization.field_names()
        assert not Organization().is_not_null()


class TestDateline:
    """Test dateline sanity checks."""

    def test_sanity_check(self):
        datelines = [
            Dateline(date="12.03.2020"),
            Dateline(place_name="Paris"),
            Dateline(date="12 mars  2020"),
        ]
        checked = Dateline.sanity_check(datelines)
        assert [d.date for d in checked] == ["12/03/2020", "12/mars/2020"]

    def test_sanity_check_empty(self):
        assert Dateline.sanity_check([]) == []
        assert Dateline.sanity_check(None) is None


class TestPatient:
    """Test patient TEI output."""

    def test_to_tei(self):
        patient = Patient(id="123", pers_name="Dupont & fils", town="Paris")
        assert patient.to_tei() == (
            "\t<idno>123</idno>\t<persName>Dupont &amp; fils</persName>"
            "\t<settlement>Paris</settlement>"
        )


class TestPersonName:
    """Test person name normalization and deduplication."""

    def test_capitalize_fully(self):
        assert capitalize_fully("jean-PIERRE") == "Jean-Pierre"
        assert capitalize_fully("o'neil") == "O'neil"
        assert capitalize_fully(None) is None

    def test_normalize_initials(self):
        name = PersonName(forename="JM", surname="SMITH")
        name.normalize_name()
        assert (name.forename, name.middlename, name.surname) == ("J", "M", "Smith")

    def test_normalize_keeps_middlename(self):
        name = PersonName(forename="JM", middlename="K", surname="smith")
        name.normalize_name()
        assert (name.forename, name.middlename) == ("Jm", "K")

    def test_str(self):
        assert str(PersonName(title="Dr", forename="Jean", surname="Dupont")) == "Dr Jean Dupont"

    def test_to_tei(self):
        name = PersonName(title="Dr", forename="Jean", surname="Dupont")
        assert name.to_tei(indent=1) == (
            "\t<persName>\n"
            "\t\t<roleName>Dr</roleName>\n"
            '\t\t<forename type="first">Jean</forename>\n'
            "\t\t<surname>Dupont</surname>\n"
            "\t</persName>"
        )

    def test_to_tei_without_name(self):
        assert PersonName(title="Dr").to_tei() is None

    def test_sanity_check(self):
        names = [PersonName(forename="Jean"), PersonName(surname="Dupont"), PersonName(surname=" ")]
        assert [n.surname for n in PersonName.sanity_check(names)] == ["Dupont"]

    def test_deduplicate_merges_compatible_forms(self):
        short = PersonName(forename="J.", surname="Dupont")
        full = PersonName(title="Dr", forename="Jean", surname="Dupont")
        other = PersonName(forename="Marc", surname="Durand")
        result = PersonName.deduplicate([short, full, other])
        assert len(result) == 2
        assert result[0] is short
        assert (short.forename, short.title) == ("Jean", "Dr")

    def test_deduplicate_keeps_clashing_forenames(self):
        names = [PersonName(forename="Jean", surname="Dupont"),
                 PersonName(forename="Jacques", surname="Dupont")]
        assert len(PersonName.deduplicate(names)) == 2

    def test_title_parentheses(self):
        assert PersonName(title="((Pr))").title == "Pr"
