"""Error taxonomy for uploaded files and streams."""


class InvalidArgumentError(ValueError):
    """Argument has the right type but an unusable value."""


class StreamError(RuntimeError):
    """Operation not permitted on the stream in its current state."""


class InvalidStreamError(StreamError):
    """Underlying resource could not be opened."""

    def __init__(self, message: str = "Invalid filename. Unable to open the stream.") -> None:
        super().__init__(message)


class UploadedFileError(RuntimeError):
    """Upload failed, was rejected, or its file can no longer be used."""
