"""Routes for the Token Issuer."""

from flask import Blueprint, Response, jsonify

from ..web import get_json_body, get_path_segments
from . import controllers

blueprint = Blueprint('issuer', __name__, url_prefix='')


@blueprint.route('/', defaults={'path': ''}, methods=['GET'])
@blueprint.route('/<path:path>', methods=['GET'])
def issue(path: str) -> Response:
    """Issue a token in exchange for a userid and password."""
    data, code, headers = controllers.issue(get_path_segments(path),
                                            get_json_body())
    return jsonify(data), code, headers
