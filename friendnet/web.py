"""Request parsing and error rendering shared by the service apps."""

import json
from typing import Any, Dict, List, Tuple
from urllib.parse import quote, unquote, urlsplit

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException, BadRequest, Forbidden, \
    InternalServerError, MethodNotAllowed, NotFound, ServiceUnavailable

ResponseData = Tuple[Any, int, dict]


def split_path(path: str) -> List[str]:
    """Split a request path into its non-empty segments."""
    return [segment for segment in path.split('/') if segment]


def get_path_segments(path: str) -> List[str]:
    """
    Get the segments of the current request path, each one unquoted.

    The path is split before it is unquoted, so a segment may contain a
    quoted ``/`` (``%2F``). This needs the undecoded request URI, which most
    servers put in ``RAW_URI`` or ``REQUEST_URI``. Without it, ``path`` (as
    routed, already unquoted) is split instead.
    """
    raw_uri = request.environ.get('RAW_URI') \
        or request.environ.get('REQUEST_URI')
    if not raw_uri:
        return split_path(path)
    if raw_uri.startswith('/'):
        raw_path = raw_uri.partition('?')[0]
    else:
        raw_path = urlsplit(raw_uri).path
    # WSGI environ strings carry the raw bytes as latin-1.
    raw_path = raw_path.encode('latin-1').decode('utf-8', 'replace')
    script_root = quote(request.script_root)
    if script_root and raw_path.startswith(script_root):
        raw_path = raw_path[len(script_root):]
    return [unquote(segment) for segment in split_path(raw_path)]


def get_json_body() -> Dict[str, str]:
    """
    Get the JSON body of the current request as a map of strings to strings.

    Only a JSON object sent with ``Content-Type: application/json`` counts;
    anything else is treated as an empty body. Values that are not strings
    are returned as their JSON serialization.
    """
    if request.mimetype != 'application/json':
        return {}
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return {}
    return {key: value if isinstance(value, str) else json.dumps(value)
            for key, value in data.items()}


def is_ascii(value: str) -> bool:
    """Determine whether every character of ``value`` is 7-bit ASCII."""
    return all(ord(c) < 128 for c in value)


def register_error_handlers(app: Flask) -> None:
    """Register error handlers for the Flask app."""
    app.errorhandler(BadRequest)(jsonify_exception)
    app.errorhandler(Forbidden)(jsonify_exception)
    app.errorhandler(NotFound)(jsonify_exception)
    app.errorhandler(MethodNotAllowed)(jsonify_exception)
    app.errorhandler(InternalServerError)(jsonify_exception)
    app.errorhandler(ServiceUnavailable)(jsonify_exception)


def jsonify_exception(error: HTTPException) -> Response:
    """Render exceptions as JSON."""
    exc_resp = error.get_response()
    response: Response = jsonify(reason=error.description)
    response.status_code = exc_resp.status_code
    return response
