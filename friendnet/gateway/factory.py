"""Provides an app factory for the Data Gateway."""

from flask import Flask

from .. import storage
from ..web import register_error_handlers
from . import routes


def create_app() -> Flask:
    """Initialize an instance of the Data Gateway."""
    app = Flask('friendnet.gateway')
    app.config.from_pyfile('config.py')
    app.url_map.merge_slashes = False

    storage.init_app(app)

    app.register_blueprint(routes.blueprint)
    register_error_handlers(app)

    if app.config['CREATE_DB']:
        with app.app_context():
            storage.create_all()
    return app
