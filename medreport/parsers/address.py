"""Address parser: postal address fields of a medical-report zone."""
from __future__ import annotations

import logging
from typing import Optional

from medreport.core import labels
from medreport.core.tokens import LayoutToken, dehyphenize, normalise_text, normalize_space, tokenize
from medreport.models import Address
from medreport.parsers.base import OTHER_TAG, AbstractParser, FieldTag, simple_tag

log = logging.getLogger(__name__)


class AddressParser(AbstractParser):
    """One address per unit; repeated fields are tab-joined."""

    model = labels.ADDRESS
    record_cls = Address
    lexicon_features = ("location", "city")
    boundary = ("<address>", "</address>\n")

    fields = {
        "<streetnumber>": "street_number",
        "<streetname>": "street_name",
        "<buildingnumber>": "building_number",
        "<buildingname>": "building_name",
        "<city>": "city",
        "<postcode>": "post_code",
        "<pobox>": "po_box",
        "<community>": "community",
        "<district>": "district",
        "<departmentnumber>": "department_number",
        "<departmentname>": "department_name",
        "<region>": "region",
        "<country>": "country",
        "<note>": "note",
    }

    training_tags = (
        simple_tag("<streetnumber>", "streetNumber"),
        OTHER_TAG,
        simple_tag("<streetname>", "streetName"),
        simple_tag("<buildingnumber>", "buildingNumber"),
        simple_tag("<buildingname>", "buildingName"),
        simple_tag("<city>"),
        simple_tag("<postcode>", "postCode"),
        simple_tag("<pobox>", "poBox"),
        simple_tag("<community>"),
        simple_tag("<district>"),
        simple_tag("<departmentnumber>", "departmentNumber"),
        simple_tag("<departmentname>", "departmentName"),
        simple_tag("<region>"),
        simple_tag("<country>"),
        FieldTag("<note>", '<note type="address">', "</note>"),
    )

    def __init__(self, *args, dehyphenize_clusters: bool = False, **kwargs):
        super().__init__(*args, **kwargs)
        self.dehyphenize_clusters = dehyphenize_clusters

    def tokenize(self, text: str) -> list[LayoutToken]:
        return tokenize(dehyphenize(normalise_text(text)))

    def cluster_content(self, cluster) -> str:
        if self.dehyphenize_clusters:
            return normalize_space(dehyphenize(cluster.text()))
        return super().cluster_content(cluster)

    def process_tokens(self, tokens: Optional[list[LayoutToken]]) -> Optional[Address]:
        address = super().process_tokens(tokens)
        if address is not None and not address.is_not_null():
            log.debug("No address field found in %d tokens", len(tokens))
        return address

    def extract(self, result: str, tokens: list[LayoutToken]) -> Address:
        return self.extract_appending(result, tokens)
