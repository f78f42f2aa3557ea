"""Routes for the Fanout Dispatcher."""

from flask import Blueprint, Response, jsonify

from ..web import get_json_body, get_path_segments
from . import controllers

blueprint = Blueprint('push', __name__, url_prefix='')


@blueprint.route('/', defaults={'path': ''}, methods=['POST'])
@blueprint.route('/<path:path>', methods=['POST'])
def push(path: str) -> Response:
    """Push a status to a friend list."""
    data, code, headers = controllers.push(get_path_segments(path),
                                           get_json_body())
    return jsonify(data), code, headers
