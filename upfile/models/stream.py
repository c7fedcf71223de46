"""Byte stream wrapper over a file handle, memory buffer or spooled temp file."""

import io
import os
import re
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import IO, Any
from urllib.parse import unquote, urlsplit

from upfile.core.errors import InvalidArgumentError, InvalidStreamError, StreamError
from upfile.core.settings import settings

MEMORY_URI = "memory://"
TEMP_URI = "temp://"

DETACHED_MESSAGE = "Stream is detached"

_MODE_PATTERN = re.compile(r"^(?=[^rwax]*[rwax][^rwax]*$)[rwax+bt]+$")
_SCHEME_PATTERN = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*)://")


def normalize_mode(mode: str) -> str:
    """Convert an fopen-style mode ('rt', 'w+', 'r+b') into a binary Python mode."""
    if not isinstance(mode, str) or not _MODE_PATTERN.match(mode) or mode.count("+") > 1:
        raise InvalidArgumentError(f"Invalid stream mode: {mode!r}")
    base = next(char for char in mode if char in "rwax")
    return f"{base}{'+' if '+' in mode else ''}b"


def uri_scheme(value: str) -> str | None:
    """Return the lower-cased scheme of a 'scheme://...' string, None for plain paths."""
    match = _SCHEME_PATTERN.match(value)
    return match.group(1).lower() if match else None


def file_uri_to_path(uri: str) -> Path:
    """Reduce a local file:// URI to its path; anything remote or relative is rejected."""
    parts = urlsplit(uri)
    if parts.netloc not in ("", "localhost") or not parts.path.startswith("/"):
        raise InvalidStreamError()
    return Path(unquote(parts.path))


class Stream:
    """Uniform byte access to a single owned resource.

    The resource is owned until ``detach()`` hands it back or ``close()``
    releases it. From then on every operation raises ``StreamError``.
    """

    __slots__ = ("_resource", "_mode", "_uri")

    def __init__(self, resource: str | os.PathLike | IO[bytes] | None = None, mode: str = "r+b") -> None:
        self._resource: IO[bytes] | None = None
        self._uri: str | None = None

        match resource:
            case None:
                self._resource = self._spooled()
            case str() | os.PathLike():
                self._resource = self._open(resource, normalize_mode(mode))
            case io.TextIOBase():
                raise TypeError("Stream requires a binary resource, got a text stream")
            case io.IOBase() | tempfile.SpooledTemporaryFile():
                self._resource = resource
                name = getattr(resource, "name", None)
                self._uri = os.fsdecode(name) if isinstance(name, (str, bytes)) else None
            case _:
                raise TypeError(f"Stream resource must be a path or a binary file object, got {type(resource).__name__}")

        self._mode = getattr(self._resource, "mode", None) or ("r+b" if resource is None else mode)

    @staticmethod
    def _spooled() -> IO[bytes]:
        return tempfile.SpooledTemporaryFile(max_size=settings.SPOOL_MAX_SIZE, mode="w+b")

    def _open(self, target: str | os.PathLike, mode: str) -> IO[bytes]:
        raw = os.fspath(target)
        if isinstance(raw, bytes):
            raw = os.fsdecode(raw)
        if not raw:
            raise InvalidStreamError()

        match uri_scheme(raw):
            case None:
                path = Path(raw)
            case "file":
                path = file_uri_to_path(raw)
            case "memory" if raw == MEMORY_URI:
                return io.BytesIO()
            case "temp" if raw == TEMP_URI:
                return self._spooled()
            case _:
                raise InvalidStreamError()

        try:
            handle = open(path, mode)  # noqa: SIM115
        except OSError as err:
            raise InvalidStreamError() from err
        self._uri = str(path)
        return handle

    def _require(self) -> IO[bytes]:
        if self._resource is None:
            raise StreamError(DETACHED_MESSAGE)
        return self._resource

    # -- capabilities -------------------------------------------------------

    @property
    def detached(self) -> bool:
        return self._resource is None

    @property
    def readable(self) -> bool:
        return self._resource is not None and self._resource.readable()

    @property
    def writable(self) -> bool:
        return self._resource is not None and self._resource.writable()

    @property
    def seekable(self) -> bool:
        return self._resource is not None and self._resource.seekable()

    # -- cursor -------------------------------------------------------------

    def tell(self) -> int:
        return self._require().tell()

    def eof(self) -> bool:
        """True when no bytes remain after the cursor; non-seekable streams never report it."""
        resource = self._require()
        if not resource.seekable():
            return False
        size = self.get_size()
        return size is not None and resource.tell() >= size

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        resource = self._require()
        if not resource.seekable():
            raise StreamError("Stream is not seekable")
        try:
            return resource.seek(offset, whence)
        except (OSError, ValueError) as err:
            raise StreamError(f"Unable to seek to stream position {offset} with whence {whence}") from err

    def rewind(self) -> None:
        self.seek(0)

    # -- data ---------------------------------------------------------------

    def read(self, length: int) -> bytes:
        resource = self._require()
        if not resource.readable():
            raise StreamError("Cannot read from non-readable stream")
        if length < 0:
            raise InvalidArgumentError("Length parameter cannot be negative")
        return resource.read(length)

    def write(self, data: bytes | bytearray | memoryview) -> int:
        resource = self._require()
        if not resource.writable():
            raise StreamError("Cannot write to a non-writable stream")
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"Stream accepts bytes-like data only, got {type(data).__name__}")
        return resource.write(data)

    def get_contents(self) -> bytes:
        """Read everything left after the cursor."""
        resource = self._require()
        if not resource.readable():
            raise StreamError("Cannot read from non-readable stream")
        return resource.read()

    def iter_chunks(self, chunk_size: int | None = None) -> Iterator[bytes]:
        """Yield the remaining bytes from the cursor in chunks."""
        size = chunk_size or settings.CHUNK_SIZE
        while chunk := self.read(size):
            yield chunk

    # -- metadata -----------------------------------------------------------

    def get_size(self) -> int | None:
        """Byte length of the resource, None when it cannot be determined."""
        resource = self._resource
        if resource is None:
            return None
        if resource.seekable():
            position = resource.tell()
            try:
                return resource.seek(0, os.SEEK_END)
            finally:
                resource.seek(position)
        try:
            return os.fstat(resource.fileno()).st_size
        except (OSError, AttributeError, io.UnsupportedOperation):
            return None

    def get_metadata(self, key: str | None = None) -> Any:
        if self._resource is None:
            return None if key is not None else {}

        metadata = {
            "uri": self._uri,
            "mode": self._mode,
            "readable": self.readable,
            "writable": self.writable,
            "seekable": self.seekable,
            "eof": self.eof(),
            "stream_type": type(self._resource).__name__,
        }
        return metadata if key is None else metadata.get(key)

    # -- ownership ----------------------------------------------------------

    def detach(self) -> IO[bytes] | None:
        """Give the resource back to the caller; the stream is unusable afterwards."""
        resource, self._resource = self._resource, None
        return resource

    def close(self) -> None:
        resource = self.detach()
        if resource is not None:
            resource.close()

    def __bytes__(self) -> bytes:
        """Full contents from offset zero; empty when unreadable."""
        if not self.readable:
            return b""
        try:
            if self.seekable:
                self.rewind()
            return self.get_contents()
        except (StreamError, OSError):
            return b""

    def __enter__(self) -> "Stream":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_resource", None) is not None:
            self.close()

    def __repr__(self) -> str:
        state = "detached" if self.detached else self._mode
        return f"Stream(uri={self._uri!r}, {state})"
