import sqlite3

from flask import Flask, jsonify, request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from config import Config
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_babel import Babel

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
babel = Babel()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite leaves foreign keys unchecked unless asked on every connection."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.update(config_class().model_dump())

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    def get_locale():
        return request.accept_languages.best_match(app.config["LANGUAGES"])

    babel.init_app(app, locale_selector=get_locale)

    from kaleereads.routes import register_blueprints
    register_blueprints(app)

    from kaleereads.cli import register_commands
    register_commands(app)

    from kaleereads.utils.audit_log import init_audit_logger
    init_audit_logger(app)

    from kaleereads import models  # noqa: F401

    if app.config.get('SCHEDULER_ENABLED') and not app.config.get('TESTING'):
        from kaleereads.utils.scheduler import init_scheduler
        init_scheduler(app)

    return app


@login_manager.request_loader
def load_user_from_request(req):
    """Resolve the principal from an ``Authorization: Bearer`` header."""
    from kaleereads.utils.auth_tokens import load_bearer_user
    return load_bearer_user(req)


@login_manager.unauthorized_handler
def unauthorized():
    from kaleereads.utils.messages import AUTH_REQUIRED
    return jsonify({'error': str(AUTH_REQUIRED)}), 401
