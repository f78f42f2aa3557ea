"""
Routes for the Data Gateway.

Every request path is ``/<operation>/<table>[/...]``. Dispatch on the
operation happens in :mod:`.controllers`, one handler per HTTP method.
"""

from flask import Blueprint, Response, jsonify

from ..web import get_json_body, get_path_segments
from . import controllers

blueprint = Blueprint('gateway', __name__, url_prefix='')


@blueprint.route('/', defaults={'path': ''}, methods=['GET'])
@blueprint.route('/<path:path>', methods=['GET'])
def read(path: str) -> Response:
    """Read one entity, or list entities."""
    data, code, headers = controllers.read(get_path_segments(path),
                                           get_json_body())
    return jsonify(data), code, headers


@blueprint.route('/', defaults={'path': ''}, methods=['POST'])
@blueprint.route('/<path:path>', methods=['POST'])
def create(path: str) -> Response:
    """Create a table."""
    data, code, headers = controllers.create(get_path_segments(path))
    return jsonify(data), code, headers


@blueprint.route('/', defaults={'path': ''}, methods=['PUT'])
@blueprint.route('/<path:path>', methods=['PUT'])
def update(path: str) -> Response:
    """Update one entity, or a property across a table."""
    data, code, headers = controllers.update(get_path_segments(path),
                                             get_json_body())
    return jsonify(data), code, headers


@blueprint.route('/', defaults={'path': ''}, methods=['DELETE'])
@blueprint.route('/<path:path>', methods=['DELETE'])
def delete(path: str) -> Response:
    """Delete a table or an entity."""
    data, code, headers = controllers.delete(get_path_segments(path))
    return jsonify(data), code, headers
