class RosterImportError(Exception):
    """Base error for a roster file that could not be imported."""


class UnsupportedFileType(RosterImportError, ValueError):
    """Raised when the file extension has no import path."""


class DocumentDecodeError(RosterImportError):
    """Raised when a Word/PDF/spreadsheet file cannot be decoded."""
