import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
from flask_login import FlaskLoginClient

from config import TestConfig
from portal import create_app
from portal.extensions import db
from portal.models import File, User


@pytest.fixture
def app_factory(tmp_path):
    """Build apps over a sqlite file in ``tmp_path``; config overrides as kwargs."""
    built = []

    def _build(**overrides):
        settings = {
            'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'portal.db'}",
            'UPLOAD_DIR': str(tmp_path / 'uploads'),
            'FILE_UPLOAD_DIR': str(tmp_path / 'uploads' / 'files'),
        }
        settings.update(overrides)
        app = create_app(type('_Config', (TestConfig,), settings))
        app.test_client_class = FlaskLoginClient
        with app.app_context():
            db.create_all()
        built.append(app)
        return app

    yield _build
    for app in built:
        with app.app_context():
            db.drop_all()


@pytest.fixture
def app(app_factory):
    return app_factory()


@pytest.fixture
def make_user(app):
    def _make(email='jane.doe@asoiu.edu.az', name='Jane', surname='Doe', bio=''):
        with app.app_context():
            user = User(email=email, microsoft_id=f'sub-{email}', name=name, surname=surname, bio=bio)
            db.session.add(user)
            db.session.commit()
            user.id  # load before the session goes away
            return user
    return _make


@pytest.fixture
def make_file(app):
    def _make(owner, file_name='notes.pdf', tags=(), content=b'%PDF-1.4 test', description=''):
        with app.app_context():
            directory = app.config['FILE_UPLOAD_DIR']
            path = os.path.join(directory, f'{owner.id}-{file_name}')
            with open(path, 'wb') as fh:
                fh.write(content)
            f = File(file_name=file_name, file_path=path, uploader_id=owner.id, description=description)
            f.tags = list(tags)
            db.session.add(f)
            db.session.commit()
            f.file_id
            return f
    return _make


@pytest.fixture
def anon(app):
    return app.test_client()
