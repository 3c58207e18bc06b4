"""Organization parser: hospital, department and unit names with their contacts."""
from __future__ import annotations

import logging

from medreport.core import labels
from medreport.core.tokens import LayoutToken
from medreport.models import Organization
from medreport.parsers.base import OTHER_TAG, AbstractParser, FieldTag, append_field, simple_tag

log = logging.getLogger(__name__)

_ORG_FIELDS = {f"<{t}>": "org_name" for t in labels.ORGANIZATION_TYPES}
_ORG_FIELDS["<organization>"] = "org_name"


class OrganizationParser(AbstractParser):
    """Every organization sub-type label feeds ``org_name``."""

    model = labels.ORGANIZATION
    record_cls = Organization
    lexicon_features = ("location", "title", "suffix", "email", "url")

    fields = {
        **_ORG_FIELDS,
        "<address>": "address",
        "<country>": "country",
        "<settlement>": "town",
        "<email>": "email",
        "<phone>": "phone",
        "<fax>": "fax",
        "<web>": "web",
        "<note>": "note",
    }

    training_tags = tuple(
        FieldTag(f"<{t}>", f'<orgName type="{t}">', "</orgName>")
        for t in labels.ORGANIZATION_TYPES
    ) + (
        FieldTag("<organization>", '<orgName type="other">', "</orgName>"),
        OTHER_TAG,
        simple_tag("<address>"),
        simple_tag("<country>"),
        simple_tag("<settlement>"),
        simple_tag("<email>"),
        simple_tag("<phone>"),
        simple_tag("<fax>"),
        FieldTag("<web>", '<ptr type="web">', "</ptr>"),
        FieldTag("<note>", '<note type="organization">', "</note>"),
    )

    def extract(self, result: str, tokens: list[LayoutToken]) -> list[Organization]:
        """Accumulate one organization over the unit.

        The returned list holds that same object once per accepted non-``<other>``
        cluster; callers wanting distinct organizations must deduplicate by identity.
        ``<other>`` clusters add no entry, unlike earlier releases which appended the
        record for every accepted cluster.
        """
        organizations: list[Organization] = []
        organization = Organization()
        for label, content, cluster in self.accepted_clusters(result, tokens):
            organization.add_labeled_tokens(label, cluster.tokens)
            field = self.fields.get(label)
            if field is not None:
                append_field(organization, field, content)
                organization.add_layout_tokens(cluster.tokens)
            if label != labels.OTHER_LABEL:
                organizations.append(organization)
        log.debug("%d organization clusters", len(organizations))
        return organizations
