"""Build a Validation from an incoming starlette/FastAPI request."""

import logging

from starlette.datastructures import UploadFile
from starlette.requests import Request

from validata.api.jsonbody import JSON_MIME, JSONBodyError, has_content_type, read_json
from validata.factory import from_form, from_map, from_query
from validata.validation import Validation

logger = logging.getLogger(__name__)

_QUERY_METHODS = {"GET", "HEAD", "DELETE", "OPTIONS"}
_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def from_request(request: Request, scene: str = "", *, max_bytes: int | None = None) -> Validation:
    """
    Pick a data source from the request method and content type.

    GET-like requests validate the query string, JSON bodies become map
    data, and form bodies become form data with uploads as files.

    Raises:
        JSONBodyError: For undecodable JSON or an unsupported content type
    """
    if request.method in _QUERY_METHODS:
        return from_query(request.query_params, scene)

    if has_content_type(request.headers, JSON_MIME):
        data = await read_json(request, model=dict, max_bytes=max_bytes)
        return from_map(data, scene)

    if any(has_content_type(request.headers, mime) for mime in _FORM_TYPES):
        form = await request.form()
        values: dict[str, list] = {}
        files = {}
        for key, item in form.multi_items():
            if isinstance(item, UploadFile):
                files[key] = item
            else:
                values.setdefault(key, []).append(item)
        return from_form(values, files, scene)

    logger.debug("Unsupported content type: %s", request.headers.get("content-type"))
    raise JSONBodyError(415, f"unsupported content type {request.headers.get('content-type', '')!r}")
