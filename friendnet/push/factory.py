"""Provides an app factory for the Fanout Dispatcher."""

from flask import Flask

from ..services import gateway
from ..web import register_error_handlers
from . import routes


def create_app() -> Flask:
    """Initialize an instance of the Fanout Dispatcher."""
    app = Flask('friendnet.push')
    app.config.from_pyfile('config.py')
    app.url_map.merge_slashes = False

    gateway.init_app(app)

    app.register_blueprint(routes.blueprint)
    register_error_handlers(app)
    return app
