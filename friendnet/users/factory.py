"""Provides an app factory for the Session Manager."""

from flask import Flask

from ..services import gateway, issuer, push
from ..web import register_error_handlers
from . import routes, sessions


def create_app() -> Flask:
    """Initialize an instance of the Session Manager."""
    app = Flask('friendnet.users')
    app.config.from_pyfile('config.py')
    app.url_map.merge_slashes = False

    sessions.init_app(app)
    gateway.init_app(app)
    issuer.init_app(app)
    push.init_app(app)

    app.register_blueprint(routes.blueprint)
    register_error_handlers(app)
    return app
