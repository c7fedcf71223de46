"""Uploaded file value object, backed by a temporary path or a Stream."""

import os
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from upfile.core.errors import InvalidArgumentError, StreamError, UploadedFileError
from upfile.core.logger import LogIcon, logger
from upfile.core.settings import settings
from upfile.models.status import UploadStatus
from upfile.models.stream import Stream, file_uri_to_path, uri_scheme

NOT_UPLOADED_MESSAGE = "It is not a valid uploaded file"
INVALID_STREAM_MESSAGE = "Invalid filename. Unable to open the stream."
ALREADY_MOVED_MESSAGE = "Cannot move file; already moved"
STREAM_AFTER_MOVE_MESSAGE = "Cannot retrieve stream after it has already been moved"
SAME_TARGET_MESSAGE = "Cannot move uploaded file onto its own source"

UploadCheck = Callable[[str], bool]


@dataclass(frozen=True, slots=True)
class PathSource:
    """Upload held as a file in the upload temp directory."""

    path: str


@dataclass(frozen=True, slots=True)
class StreamSource:
    """Upload held by an owned Stream."""

    stream: Stream


type UploadSource = PathSource | StreamSource


def is_uploaded_file(path: str) -> bool:
    """Default upload check: a regular file whose real location is inside UPLOAD_TMP_DIR."""
    candidate = Path(path)
    if not candidate.is_file():
        return False
    root = Path(settings.UPLOAD_TMP_DIR).resolve()
    return candidate.resolve().is_relative_to(root)


def _require_optional_str(value: object, argument: str) -> str | None:
    if value is not None and not isinstance(value, str):
        raise TypeError(f"{argument} must be a string or None, got {type(value).__name__}")
    return value


def _require_size(value: object) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Upload size must be an int or None, got {type(value).__name__}")
    if value < 0:
        raise InvalidArgumentError("Upload size cannot be negative")
    return value


def _require_target(target_path: object) -> Path:
    if isinstance(target_path, (str, os.PathLike)):
        raw = os.fspath(target_path)
        if raw:
            target = Path(os.fsdecode(raw))
            if target.is_dir():
                raise InvalidArgumentError(f"Move target {target} is a directory; a file path is required")
            return target
    raise InvalidArgumentError("Invalid path provided for move operation; must be a non-empty string")


def _is_same_file(source: str | None, target: Path) -> bool:
    return bool(source) and target.exists() and Path(source).exists() and os.path.samefile(source, target)


class UploadedFile:
    """One uploaded file that can be read through ``get_stream()`` or moved exactly once."""

    __slots__ = ("_source", "_status", "_size", "_client_filename", "_client_media_type", "_stream", "_moved")

    def __init__(
        self,
        file: str | os.PathLike | Stream,
        status: UploadStatus | int = UploadStatus.OK,
        size: int | None = None,
        client_filename: str | None = None,
        client_media_type: str | None = None,
        *,
        upload_check: UploadCheck | None = None,
    ) -> None:
        if not isinstance(file, (str, os.PathLike, Stream)):
            raise TypeError(f"UploadedFile requires a path or a Stream, got {type(file).__name__}")

        self._status = UploadStatus.from_code(status)
        self._size = _require_size(size)
        self._client_filename = _require_optional_str(client_filename, "Client filename")
        self._client_media_type = _require_optional_str(client_media_type, "Client media type")
        self._stream: Stream | None = None
        self._moved = False

        if self._status is not UploadStatus.OK:
            logger.warning("Upload rejected", icon=LogIcon.ERROR, status=self._status.name)
            raise UploadedFileError(self._status.message)

        self._source = self._resolve_source(file, upload_check or is_uploaded_file)
        if isinstance(self._source, StreamSource):
            self._stream = self._source.stream

    @staticmethod
    def _resolve_source(file: str | os.PathLike | Stream, check: UploadCheck) -> UploadSource:
        if isinstance(file, Stream):
            return StreamSource(file)

        raw = os.fspath(file)
        path = os.fsdecode(raw) if isinstance(raw, bytes) else raw
        if not path:
            raise InvalidArgumentError("Uploaded file path cannot be empty")

        match uri_scheme(path):
            case None:
                pass
            case "file":
                try:
                    path = str(file_uri_to_path(path))
                except StreamError as err:
                    raise UploadedFileError(INVALID_STREAM_MESSAGE) from err
            case _:
                try:
                    return StreamSource(Stream(path, "r+b"))
                except StreamError as err:
                    raise UploadedFileError(INVALID_STREAM_MESSAGE) from err

        if not check(path):
            logger.warning("Upload path rejected", icon=LogIcon.FORBIDDEN, path=path)
            raise UploadedFileError(NOT_UPLOADED_MESSAGE)
        return PathSource(path)

    @property
    def moved(self) -> bool:
        return self._moved

    def get_stream(self) -> Stream:
        """Stream over the upload, opened once on first access for path-backed files."""
        if self._moved:
            raise UploadedFileError(STREAM_AFTER_MOVE_MESSAGE)
        if self._stream is not None:
            return self._stream

        match self._source:
            case StreamSource(stream):
                self._stream = stream
            case PathSource(path):
                try:
                    self._stream = Stream(path, "rb")
                except StreamError as err:
                    raise UploadedFileError(INVALID_STREAM_MESSAGE) from err
        return self._stream

    def move_to(self, target_path: str | os.PathLike) -> None:
        """Relocate the upload to ``target_path``; allowed once per instance."""
        target = _require_target(target_path)
        if self._moved:
            raise UploadedFileError(ALREADY_MOVED_MESSAGE)
        if _is_same_file(self._source_location(), target):
            raise UploadedFileError(SAME_TARGET_MESSAGE)

        try:
            match self._source:
                case PathSource(path):
                    self._move_path(path, target)
                case StreamSource(stream):
                    self._move_stream(stream, target)
        except (OSError, StreamError) as err:
            logger.warning("Uploaded file move failed", icon=LogIcon.ERROR, target=target, error=str(err))
            raise UploadedFileError(f"Uploaded file could not be moved to {target}") from err

        self._moved = True
        self._stream = None
        logger.info("Uploaded file moved", icon=LogIcon.UPLOAD, target=target)

    def _source_location(self) -> str | None:
        match self._source:
            case PathSource(path):
                return path
            case StreamSource(stream):
                return stream.get_metadata("uri")
        return None

    def _move_path(self, path: str, target: Path) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None
        shutil.move(path, target)

    @staticmethod
    def _move_stream(stream: Stream, target: Path) -> None:
        source_uri = stream.get_metadata("uri")
        start = stream.tell() if stream.seekable else None
        destination = Stream(target, "wb")
        try:
            with destination:
                for chunk in stream.iter_chunks():
                    destination.write(chunk)
        except (OSError, StreamError):
            # restore the cursor and drop the partial copy
            if start is not None:
                stream.seek(start)
            if target.is_file():
                target.unlink()
            raise
        stream.close()
        if source_uri and Path(source_uri).is_file():
            Path(source_uri).unlink()

    def get_size(self) -> int | None:
        return self._size

    def get_error(self) -> UploadStatus:
        return self._status

    def get_client_filename(self) -> str | None:
        return self._client_filename

    def get_client_media_type(self) -> str | None:
        return self._client_media_type

    def __repr__(self) -> str:
        return (
            f"UploadedFile(client_filename={self._client_filename!r}, "
            f"status={self._status.name}, moved={self._moved})"
        )
