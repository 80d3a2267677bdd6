"""
Data import/export error taxonomy.

Every failure of a backup, restore or bulk delete is converted into one of
these before it reaches the API layer. Messages are user-facing.
"""
from typing import Optional


class DataIOError(Exception):
    """Base class for export/import failures."""

    code: str = "data_io_error"
    status_code: int = 400
    default_message: str = "Der Datenaustausch ist fehlgeschlagen."

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        self.user_message = message or self.default_message
        self.cause = cause
        super().__init__(self.user_message)

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {"detail": self.user_message, "code": self.code}


class NoDataToExportError(DataIOError):
    code = "no_data_to_export"
    default_message = "Es sind keine Workouts zum Exportieren vorhanden."


class AccessDeniedError(DataIOError):
    code = "access_denied"
    default_message = "Zugriff auf die ausgewählte Datei verweigert."


class UnsupportedVersionError(DataIOError):
    code = "unsupported_version"
    default_message = "Das Format der Datei wird von dieser App-Version nicht unterstützt."

    def __init__(self, version: object, supported: int):
        self.version = version
        self.supported = supported
        super().__init__()


class DecodingError(DataIOError):
    code = "decoding_error"
    default_message = "Die Datei konnte nicht gelesen werden (ungültiges Format)."


class DeleteError(DataIOError):
    code = "delete_error"
    status_code = 500

    def __init__(self, cause: BaseException):
        super().__init__(f"Löschen fehlgeschlagen: {cause}", cause=cause)


class GeneralDataIOError(DataIOError):
    code = "general_error"
    status_code = 500

    def __init__(self, cause: BaseException):
        super().__init__(f"Ein allgemeiner Fehler ist aufgetreten: {cause}", cause=cause)
