"""caseweb: a read-only DICOMweb gateway over case records and stored case files."""

__version__ = "0.1.0"
