"""Core models for request handling."""

import mimetypes
from collections.abc import Iterator

from upfile.models.uploaded_file import UploadedFile


def guess_media_type(filename: str) -> str | None:
    """Guess a media type from the client filename extension."""
    media_type, _ = mimetypes.guess_type(filename, strict=False)
    return media_type


class UploadedFiles:
    """Container for uploaded files from multipart/form-data requests."""

    __slots__ = ("files",)

    def __init__(self, files: dict[str, UploadedFile] | None = None) -> None:
        self.files = files or {}

    def __bool__(self) -> bool:
        return bool(self.files)

    def __len__(self) -> int:
        return len(self.files)

    def __iter__(self) -> Iterator[tuple[str, UploadedFile]]:
        return iter(self.files.items())

    def get(self, name: str) -> UploadedFile | None:
        """Get an uploaded file by its client filename."""
        return self.files.get(name)

    def keys(self) -> list[str]:
        """Get all client filenames."""
        return list(self.files.keys())
