"""HTTP input adapters.

validata.api.jsonbody decodes JSON bodies; validata.api.request builds a
Validation from a starlette request.
"""

from validata.api.jsonbody import JSONBodyError, decode_json, has_content_type, read_json

__all__ = ["JSONBodyError", "decode_json", "has_content_type", "read_json"]
