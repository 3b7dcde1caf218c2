"""Deterministic Study/Series/SOP Instance UIDs for cases.

UIDs are derived only from the case identifier and the instance ordinal, so the
same case and storage state always yield the same identifiers. The series
level has a fixed cardinality of one because the case model carries no series
information.
"""

from __future__ import annotations

from dataclasses import dataclass

UID_ROOT = "1.2.826.0.1.3680043.8.498"
SERIES_SUFFIX = "1"


def study_uid_for_case(case_id: str) -> str:
    """Study Instance UID for a case: the UID root plus the case id without dashes."""
    return f"{UID_ROOT}.{case_id.replace('-', '')}"


def ordinal_from_instance_uid(instance_uid: str) -> int | None:
    """Parse the 1-based ordinal from the last component of a SOP Instance UID.

    Args:
        instance_uid: SOP Instance UID as received in a request path

    Returns:
        The ordinal, or None when the last component is not a decimal number
    """
    last = instance_uid.rsplit(".", 1)[-1]
    if not last.isdecimal():
        return None
    return int(last)


@dataclass(frozen=True, slots=True)
class CaseIdentity:
    """The synthetic UID hierarchy of one case."""

    case_id: str
    study_uid: str
    series_uid: str

    @classmethod
    def for_case(cls, case_id: str) -> CaseIdentity:
        study_uid = study_uid_for_case(case_id)
        return cls(case_id=case_id, study_uid=study_uid, series_uid=f"{study_uid}.{SERIES_SUFFIX}")

    def instance_uid(self, ordinal: int) -> str:
        """SOP Instance UID for the file at 1-based ``ordinal``."""
        return f"{self.series_uid}.{ordinal}"
