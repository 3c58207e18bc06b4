"""Tagging labels of the medical-report models and prefix handling."""
from __future__ import annotations

from typing import Optional

# Begin-of-field marker of the legacy labelling scheme
BEGIN_PREFIX = "I-"
DEFAULT_PREFIXES = (BEGIN_PREFIX,)

OTHER_LABEL = "<other>"

# Model names, used for counters, configuration and the REST/CLI entity names
ADDRESS = "address"
DATELINE = "dateline"
MEDIC = "medic"
PATIENT = "patient"
ORGANIZATION = "organization"
PERSON_NAME = "name"

MODELS = (ADDRESS, DATELINE, MEDIC, PATIENT, ORGANIZATION, PERSON_NAME)

# organization sub-type labels, each serialized as <orgName type="...">
ORGANIZATION_TYPES = (
    "ghu", "chu", "dmu", "pole", "site", "institution", "university",
    "hospital", "center", "service", "department", "unit",
)


def strip_prefix(label: Optional[str], prefixes: tuple[str, ...] = DEFAULT_PREFIXES) -> Optional[str]:
    """Remove a begin-of-field prefix, if any, from a raw label."""
    if label is None:
        return None
    for prefix in prefixes:
        if label.startswith(prefix):
            return label[len(prefix):]
    return label


def is_begin(label: Optional[str], prefixes: tuple[str, ...] = DEFAULT_PREFIXES) -> bool:
    return label is not None and label.startswith(prefixes)

