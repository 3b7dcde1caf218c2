"""DICOM JSON attribute builder.

Builds objects in the DICOM JSON model (PS3.18 Annex F): each attribute is
keyed by its eight-digit hex tag and carries ``vr`` and ``Value``. Tags and VRs
are resolved from the pydicom data dictionary by keyword.
"""

from __future__ import annotations

from typing import Any, Self

from pydicom.datadict import dictionary_VR, tag_for_keyword


class DicomAttributes:
    """Accumulates attributes by DICOM keyword and serializes them as DICOM JSON.

    ``None`` values are skipped, so optional case fields can be passed directly.

    Example:
        >>> DicomAttributes().add("Modality", "CT").to_json()
        {'00080060': {'vr': 'CS', 'Value': ['CT']}}
    """

    def __init__(self) -> None:
        self._elements: dict[str, dict[str, Any]] = {}

    def add(self, keyword: str, value: Any, vr: str | None = None) -> Self:
        """Set an attribute.

        Args:
            keyword: DICOM keyword (e.g. ``StudyInstanceUID``)
            value: A single value or a list of values; ``None`` is ignored
            vr: Explicit VR, for keywords whose dictionary VR is ambiguous

        Returns:
            Self, for chaining

        Raises:
            KeyError: If the keyword is not in the data dictionary
        """
        tag = tag_for_keyword(keyword)
        if tag is None:
            raise KeyError(f"Unknown DICOM keyword: {keyword}")
        if value is None:
            return self

        vr = vr or dictionary_VR(tag).split(" or ")[0]
        values = value if isinstance(value, list) else [value]
        if vr == "PN":
            values = [{"Alphabetic": str(v)} for v in values]

        self._elements[f"{tag:08X}"] = {"vr": vr, "Value": values}
        return self

    def update(self, other: DicomAttributes) -> Self:
        """Copy every attribute of ``other`` into this builder."""
        self._elements.update(other._elements)
        return self

    def to_json(self) -> dict[str, Any]:
        """Serialize to a DICOM JSON object with tags in ascending order."""
        return {tag: dict(self._elements[tag]) for tag in sorted(self._elements)}
