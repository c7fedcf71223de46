"""File upload endpoint."""

from pathlib import Path

import orjson
from robyn import Response, status_codes

from upfile.core.errors import InvalidArgumentError, UploadedFileError
from upfile.core.logger import LogIcon, logger
from upfile.core.settings import settings as st
from upfile.models.core import UploadedFiles


def safe_target(directory: Path, filename: str) -> Path:
    """Join a client filename to directory, keeping only its base name."""
    name = Path(filename.replace("\\", "/")).name
    if name in ("", ".", ".."):
        raise InvalidArgumentError(f"Unusable client filename: {filename!r}")
    return directory / name


async def store_uploads(files: UploadedFiles) -> dict | Response:
    """Move every uploaded file into the configured upload directory."""
    destination = Path(st.UPLOAD_PATH)
    destination.mkdir(parents=True, exist_ok=True)

    stored = []
    for name, upload in files:
        try:
            upload.move_to(safe_target(destination, name))
        except (InvalidArgumentError, UploadedFileError) as ex:
            logger.warning("Upload not stored", icon=LogIcon.ERROR, name=name, error=str(ex))
            return Response(
                status_code=status_codes.HTTP_422_UNPROCESSABLE_ENTITY,
                headers={"content-type": "application/json"},
                description=orjson.dumps({"error": "upload_not_stored", "name": name, "detail": str(ex)}).decode(),
            )
        stored.append({"name": name, "size": upload.get_size(), "media_type": upload.get_client_media_type()})

    logger.info("Uploads stored", icon=LogIcon.SUCCESS, count=len(stored))
    return {"files": stored}
