"""
Routes for the Session Manager.

Request paths are ``/<operation>/<userid>[/...]``; which operations are
accepted depends on the HTTP method.
"""

from flask import Blueprint, Response, jsonify

from ..web import get_json_body, get_path_segments
from . import controllers
from .sessions import current_store

blueprint = Blueprint('users', __name__, url_prefix='')


@blueprint.route('/ActiveUsers', methods=['GET'])
def active_users() -> Response:
    """List the users that are signed on."""
    data, code, headers = controllers.active_users(current_store())
    return jsonify(data), code, headers


@blueprint.route('/', defaults={'path': ''}, methods=['GET'])
@blueprint.route('/<path:path>', methods=['GET'])
def read(path: str) -> Response:
    """Read a user's friend list."""
    data, code, headers = controllers.get(current_store(),
                                          get_path_segments(path))
    return jsonify(data), code, headers


@blueprint.route('/', defaults={'path': ''}, methods=['POST'])
@blueprint.route('/<path:path>', methods=['POST'])
def sign(path: str) -> Response:
    """Sign a user on or off."""
    data, code, headers = controllers.post(current_store(),
                                           get_path_segments(path),
                                           get_json_body())
    return jsonify(data), code, headers


@blueprint.route('/', defaults={'path': ''}, methods=['PUT'])
@blueprint.route('/<path:path>', methods=['PUT'])
def update(path: str) -> Response:
    """Change a user's friend list or status."""
    data, code, headers = controllers.put(current_store(),
                                          get_path_segments(path))
    return jsonify(data), code, headers
