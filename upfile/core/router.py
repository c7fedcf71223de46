"""Router that hands multipart uploads to handlers as UploadedFile objects."""

import inspect
from collections.abc import Callable
from functools import wraps
from typing import Any

import orjson
from pydantic import BaseModel
from robyn import Request, Response, SubRouter, status_codes
from robyn.robyn import HttpMethod

from upfile.core.logger import LogIcon, logger
from upfile.models.core import UploadedFiles, guess_media_type
from upfile.models.status import UploadStatus
from upfile.models.stream import Stream
from upfile.models.uploaded_file import UploadedFile

FILE_UPLOAD_ENDPOINTS: set[str] = set()


def parse_endpoint_signature(sig: inspect.Signature) -> set[str]:
    """Collect parameters annotated with UploadedFiles."""
    return {name for name, param in sig.parameters.items() if param.annotation is UploadedFiles}


def build_uploaded_file(name: str, data: bytes) -> UploadedFile:
    """Spool raw request bytes into a stream-backed UploadedFile."""
    stream = Stream()
    stream.write(data)
    stream.rewind()
    return UploadedFile(
        stream,
        UploadStatus.OK,
        size=len(data),
        client_filename=name,
        client_media_type=guess_media_type(name),
    )


def parse_request_files(
    file_params: set[str],
    request: Request,
    kwargs: dict[str, Any],
) -> Response | None:
    """Transfer request.files to UploadedFiles kwargs."""
    if not file_params:
        return None

    files = getattr(request, "files", None)
    if not files:
        return Response(
            status_code=status_codes.HTTP_422_UNPROCESSABLE_ENTITY,
            headers={"content-type": "application/json"},
            description=orjson.dumps({"error": "missing_files", "required": sorted(file_params)}).decode(),
        )

    uploads = UploadedFiles(files={name: build_uploaded_file(name, data) for name, data in files.items()})
    logger.info("Request files received", icon=LogIcon.UPLOAD, count=len(uploads))
    for param_name in file_params:
        kwargs[param_name] = uploads

    return None


def parse_response(result: Any) -> Response:
    """Convert handler result to Response."""
    match result:
        case Response():
            return result
        case BaseModel():
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={"content-type": "application/json"},
                description=result.model_dump_json(indent=4),
            )
        case dict():
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={"content-type": "application/json"},
                description=orjson.dumps(result).decode(),
            )
        case _:
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={},
                description=str(result),
            )


HTTP_METHODS = (
    HttpMethod.GET,
    HttpMethod.POST,
    HttpMethod.PUT,
    HttpMethod.DELETE,
    HttpMethod.PATCH,
)


def _create_method_wrapper(original_method: Callable, router_prefix: str = "") -> Callable:
    @wraps(original_method)
    def method_wrapper(*args, **kwargs) -> Callable:
        endpoint = args[0] if args else kwargs.get("endpoint", "")
        decorator = original_method(*args, **kwargs)

        def handler_decorator(handler: Callable) -> Callable:
            sig = inspect.signature(handler)
            file_params = parse_endpoint_signature(sig)
            has_request_param = "request" in sig.parameters

            if file_params:
                full_path = f"{router_prefix}{endpoint}".replace("//", "/")
                FILE_UPLOAD_ENDPOINTS.add(full_path)

            @wraps(handler)
            async def wrapped_handler(request: Request, **h_kwargs):
                if file_params and (error := parse_request_files(file_params, request, h_kwargs)):
                    return error

                # Pass request to handler only if it declared it
                if has_request_param:
                    h_kwargs["request"] = request

                result = await handler(**h_kwargs)
                return parse_response(result)

            # Build signature: always include request for Robyn injection
            new_params = [inspect.Parameter("request", inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=Request)]
            new_params.extend(
                param for name, param in sig.parameters.items() if name != "request" and name not in file_params
            )

            wrapped_handler.__signature__ = sig.replace(parameters=new_params)  # type: ignore[attr-defined]
            return decorator(wrapped_handler)

        return handler_decorator

    return method_wrapper


class Router(SubRouter):
    """SubRouter with UploadedFiles injection and response handling."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._prefix = kwargs.get("prefix", "")
        self._wrap_methods()

    def _wrap_methods(self) -> None:
        """Wrap HTTP methods with parsing logic."""
        for method in HTTP_METHODS:
            method_name = str(method).split(".")[-1].lower()
            if hasattr(self, method_name):
                original_method = getattr(self, method_name)
                wrapped_method = _create_method_wrapper(original_method, self._prefix)
                setattr(self, method_name, wrapped_method)
