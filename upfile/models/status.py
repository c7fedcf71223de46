"""Upload status codes reported by the hosting upload mechanism."""

from enum import IntEnum
from types import MappingProxyType

INVALID_STATUS_MESSAGE = "Error status for UploadedFile must be an UPLOAD_ERR_* constant"


class UploadStatus(IntEnum):
    """Closed set of upload error codes (UPLOAD_ERR_* values)."""

    OK = 0
    EXCEEDS_INI_SIZE_LIMIT = 1
    EXCEEDS_FORM_SIZE_LIMIT = 2
    PARTIAL_UPLOAD = 3
    NO_FILE = 4
    NO_TMP_DIR = 6
    CANT_WRITE = 7
    EXTENSION_BLOCKED = 8

    @property
    def message(self) -> str | None:
        """Fixed human-readable message, None for OK."""
        return STATUS_MESSAGES.get(self)

    @classmethod
    def from_code(cls, code: "UploadStatus | int") -> "UploadStatus":
        """Validate a raw status code and return its enum member."""
        if isinstance(code, bool) or not isinstance(code, int):
            raise TypeError(f"Upload status must be an int, got {type(code).__name__}")
        try:
            return cls(code)
        except ValueError:
            raise ValueError(INVALID_STATUS_MESSAGE) from None


STATUS_MESSAGES: MappingProxyType[UploadStatus, str] = MappingProxyType(
    {
        UploadStatus.EXCEEDS_INI_SIZE_LIMIT: "The uploaded file exceeds the upload_max_filesize directive in php.ini",
        UploadStatus.EXCEEDS_FORM_SIZE_LIMIT: (
            "The uploaded file exceeds the MAX_FILE_SIZE directive that was specified in the HTML form"
        ),
        UploadStatus.PARTIAL_UPLOAD: "The uploaded file was only partially uploaded",
        UploadStatus.NO_FILE: "No file was uploaded",
        UploadStatus.NO_TMP_DIR: "Missing a temporary folder",
        UploadStatus.CANT_WRITE: "Failed to write file to disk.",
        UploadStatus.EXTENSION_BLOCKED: "A PHP extension stopped the file upload.",
    }
)
