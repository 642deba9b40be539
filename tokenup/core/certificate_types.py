"""
Certificate type table.

Every certificate type maps to a display label and the number of tokens a
verified certificate of that type awards. The table is fixed at build time;
services receive it as a mapping so it is never inlined at a call site.
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional


@dataclass(frozen=True)
class CertificateTypeInfo:
    key: str
    label: str
    token_value: int


CERTIFICATE_TYPES: Dict[str, CertificateTypeInfo] = {
    info.key: info
    for info in (
        CertificateTypeInfo("NPTEL", "NPTEL Course", 2),
        CertificateTypeInfo("STATE_COMPETITION", "State Level Competition", 3),
        CertificateTypeInfo("NATIONAL_COMPETITION", "National Level Competition", 4),
        CertificateTypeInfo("INTERNATIONAL_COMPETITION", "International Competition", 5),
        CertificateTypeInfo("COURSERA", "Coursera Course", 2),
        CertificateTypeInfo("UDEMY", "Udemy Course", 1),
        CertificateTypeInfo("INTERNSHIP", "Internship Completion", 3),
        CertificateTypeInfo("WORKSHOP", "Workshop Participation", 1),
        CertificateTypeInfo("HACKATHON", "Hackathon Achievement", 2),
        CertificateTypeInfo("RESEARCH_PAPER", "Research Paper Publication", 4),
    )
}


def get_certificate_type(
    key: str, table: Mapping[str, CertificateTypeInfo] = CERTIFICATE_TYPES
) -> Optional[CertificateTypeInfo]:
    """Look up a type by key; None for unknown keys."""
    return table.get(key)


def list_certificate_types(
    table: Mapping[str, CertificateTypeInfo] = CERTIFICATE_TYPES,
) -> List[CertificateTypeInfo]:
    return list(table.values())
