import logging
import os

import click
from flask import Flask

from .extensions import db, login_manager, migrate, csrf


def _configure_logging(app):
    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))


def init_upload_dirs(app):
    """Create the upload directories once, before the first request.

    Both are pinned to absolute paths so stored paths and
    ``send_from_directory`` agree regardless of ``app.root_path``.
    """
    from .services.storage import ensure_dir, resolve_path
    for key in ('UPLOAD_DIR', 'FILE_UPLOAD_DIR'):
        app.config[key] = ensure_dir(resolve_path(app.config[key]))


def create_app(config_object='config.Config'):
    app = Flask(__name__)
    app.config.from_object(config_object)

    _configure_logging(app)
    init_upload_dirs(app)

    db.init_app(app)
    migrate.init_app(app, db, directory=os.path.join(os.path.dirname(app.root_path), 'alembic'))
    csrf.init_app(app)
    login_manager.init_app(app)
    login_manager.login_view = 'main.login'
    login_manager.login_message = None

    # session payload is only the user id; a miss means anonymous
    @login_manager.user_loader
    def load_user(user_id):
        from .services import directory
        from .exceptions import DirectoryError
        try:
            return directory.find_by_id(user_id)
        except DirectoryError:
            app.logger.warning('Session user %s could not be resolved, treating as anonymous', user_id)
            return None

    from .blueprints.main import bp as main_bp
    from .blueprints.auth import bp as auth_bp
    from .blueprints.profile import bp as profile_bp
    from .blueprints.files import bp as files_bp
    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(profile_bp, url_prefix='/profile')
    app.register_blueprint(files_bp, url_prefix='/files')

    app.add_template_filter(os.path.basename, 'basename')

    from .exceptions import NotFoundError

    @app.errorhandler(NotFoundError)
    def not_found(e):
        return e.message, 404, {'Content-Type': 'text/plain; charset=utf-8'}

    @app.cli.command('init-db')
    def init_db():
        """Create tables directly from the models (development shortcut)."""
        from . import models  # noqa: F401
        db.create_all()
        click.echo('Database tables created.')

    return app
