import io
import os

import pytest
from sqlalchemy.exc import SQLAlchemyError

from portal.extensions import db
from portal.models import File, User


@pytest.mark.parametrize('path', [
    '/profile', '/profile/edit', '/files', '/files/upload', '/files/download/1',
])
def test_gated_routes_redirect_to_login(anon, path):
    res = anon.get(path)
    assert res.status_code == 302
    assert '/login' in res.headers['Location']


def test_gated_posts_redirect_to_login(anon):
    res = anon.post('/files/delete/1')
    assert res.status_code == 302
    assert '/login' in res.headers['Location']


@pytest.mark.parametrize('path', ['/', '/login', '/register'])
def test_public_pages(anon, path):
    assert anon.get(path).status_code == 200


def test_session_for_deleted_user_is_anonymous(app, make_user):
    user = make_user()
    client = app.test_client(user=user)
    assert client.get('/profile').status_code == 200
    with app.app_context():
        db.session.delete(db.session.get(User, user.id))
        db.session.commit()
    res = client.get('/profile')
    assert res.status_code == 302
    assert '/login' in res.headers['Location']


def test_logout(app, make_user):
    client = app.test_client(user=make_user())
    res = client.get('/logout')
    assert res.status_code == 302
    assert client.get('/profile').status_code == 302


def test_edit_profile(app, make_user):
    user = make_user(bio='old')
    client = app.test_client(user=user)
    res = client.post('/profile/edit', data={'name': 'Janet', 'surname': 'Roe', 'bio': 'Physics'})
    assert res.status_code == 302
    assert res.headers['Location'].endswith('/profile')
    with app.app_context():
        fresh = db.session.get(User, user.id)
        assert (fresh.name, fresh.surname, fresh.bio) == ('Janet', 'Roe', 'Physics')


def test_profile_picture_upload(app, make_user):
    user = make_user()
    client = app.test_client(user=user)
    res = client.post('/profile/edit/upload', data={
        'profilePicture': (io.BytesIO(b'\x89PNG'), 'me.png', 'image/png'),
    }, content_type='multipart/form-data')
    assert res.status_code == 302
    assert res.headers['Location'].endswith('/profile')
    with app.app_context():
        path = db.session.get(User, user.id).profile_picture
    assert os.path.dirname(path) == app.config['UPLOAD_DIR']
    assert os.path.isfile(path)
    assert client.get('/uploads/' + os.path.basename(path)).data == b'\x89PNG'


def test_profile_picture_upload_without_file(app, make_user):
    client = app.test_client(user=make_user())
    res = client.post('/profile/edit/upload', data={}, content_type='multipart/form-data')
    assert res.status_code == 302
    assert res.headers['Location'].endswith('/profile/edit')


def test_profile_picture_unsupported_type_is_rejected(app, make_user):
    user = make_user()
    client = app.test_client(user=user)
    res = client.post('/profile/edit/upload', data={
        'profilePicture': (io.BytesIO(b'MZ'), 'me.exe', 'application/x-msdownload'),
    }, content_type='multipart/form-data')
    assert res.status_code == 302
    assert res.headers['Location'].endswith('/profile/edit')
    with app.app_context():
        assert db.session.get(User, user.id).profile_picture is None
    assert [n for n in os.listdir(app.config['UPLOAD_DIR']) if n != 'files'] == []


def test_profile_picture_served_with_relative_upload_dir(app_factory, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    app = app_factory(UPLOAD_DIR='uploads', FILE_UPLOAD_DIR=os.path.join('uploads', 'files'))
    assert app.config['UPLOAD_DIR'] == str(tmp_path / 'uploads')
    with app.app_context():
        user = User(email='jane.doe@asoiu.edu.az', microsoft_id='sub-jane', name='Jane', surname='Doe', bio='')
        db.session.add(user)
        db.session.commit()
        user.id
    client = app.test_client(user=user)
    res = client.post('/profile/edit/upload', data={
        'profilePicture': (io.BytesIO(b'\x89PNG'), 'me.png', 'image/png'),
    }, content_type='multipart/form-data')
    assert res.status_code == 302
    with app.app_context():
        path = db.session.get(User, user.id).profile_picture
    assert os.path.dirname(path) == str(tmp_path / 'uploads')
    res = client.get('/uploads/' + os.path.basename(path))
    assert res.status_code == 200
    assert res.data == b'\x89PNG'


def test_profile_picture_store_failure_redirects_to_edit(app, make_user, monkeypatch):
    client = app.test_client(user=make_user())

    def boom(self):
        raise SQLAlchemyError('store down')

    monkeypatch.setattr(type(db.session), 'commit', boom)
    res = client.post('/profile/edit/upload', data={
        'profilePicture': (io.BytesIO(b'\x89PNG'), 'me.png', 'image/png'),
    }, content_type='multipart/form-data')
    assert res.status_code == 302
    assert res.headers['Location'].endswith('/profile/edit')


def test_upload_file_stores_trimmed_tags(app, make_user):
    user = make_user()
    client = app.test_client(user=user)
    res = client.post('/files/upload', data={
        'file': (io.BytesIO(b'lecture notes'), 'notes.txt', 'text/plain'),
        'file_description': 'Week 1',
        'file_tags': 'alpha, beta ,gamma',
    }, content_type='multipart/form-data')
    assert res.status_code == 302
    assert res.headers['Location'].endswith('/files')
    with app.app_context():
        f = File.query.one()
        assert f.tags == ['alpha', 'beta', 'gamma']
        assert f.uploader_id == user.id
        assert f.description == 'Week 1'
    listing = client.get('/files')
    assert b'notes.txt' in listing.data


def test_upload_file_store_failure_redirects_to_form(app, make_user, monkeypatch):
    client = app.test_client(user=make_user())

    def boom(self):
        raise SQLAlchemyError('store down')

    monkeypatch.setattr(type(db.session), 'commit', boom)
    res = client.post('/files/upload', data={
        'file': (io.BytesIO(b'lecture notes'), 'notes.txt', 'text/plain'),
        'file_description': 'Week 1',
        'file_tags': 'alpha',
    }, content_type='multipart/form-data')
    assert res.status_code == 302
    assert res.headers['Location'].endswith('/files/upload')
    monkeypatch.undo()
    assert os.listdir(app.config['FILE_UPLOAD_DIR']) == []
    with app.app_context():
        assert File.query.count() == 0


def test_upload_without_file_is_400(app, make_user):
    client = app.test_client(user=make_user())
    res = client.post('/files/upload', data={'file_description': 'x', 'file_tags': ''},
                      content_type='multipart/form-data')
    assert res.status_code == 400
    assert res.data == b'No file uploaded.'


def test_upload_exe_is_rejected_before_storage(app, make_user):
    client = app.test_client(user=make_user())
    res = client.post('/files/upload', data={
        'file': (io.BytesIO(b'MZ'), 'tool.exe', 'application/x-msdownload'),
        'file_tags': 'tools',
    }, content_type='multipart/form-data')
    assert res.status_code == 302
    assert res.headers['Location'].endswith('/files/upload')
    with app.app_context():
        assert File.query.count() == 0
    assert os.listdir(app.config['FILE_UPLOAD_DIR']) == []


def test_delete_foreign_file_is_404(app, make_user, make_file):
    owner = make_user()
    other = make_user(email='john@asoiu.edu.az', name='John')
    f = make_file(owner, 'a.pdf')
    res = app.test_client(user=other).post(f'/files/delete/{f.file_id}')
    assert res.status_code == 404
    assert res.data == b'File not found.'
    with app.app_context():
        assert db.session.get(File, f.file_id) is not None
    assert os.path.exists(f.file_path)


def test_delete_own_file(app, make_user, make_file):
    owner = make_user()
    f = make_file(owner, 'a.pdf')
    res = app.test_client(user=owner).post(f'/files/delete/{f.file_id}')
    assert res.status_code == 302
    assert res.headers['Location'].endswith('/files')
    assert not os.path.exists(f.file_path)


def test_any_signed_in_user_can_download(app, make_user, make_file):
    owner = make_user()
    other = make_user(email='john@asoiu.edu.az', name='John')
    f = make_file(owner, 'Lecture 1.pdf', content=b'%PDF-1.4 body')
    res = app.test_client(user=other).get(f'/files/download/{f.file_id}')
    assert res.status_code == 200
    assert res.data == b'%PDF-1.4 body'
    assert 'attachment' in res.headers['Content-Disposition']
    assert 'Lecture 1.pdf' in res.headers['Content-Disposition']


def test_download_unknown_file_is_404(app, make_user):
    res = app.test_client(user=make_user()).get('/files/download/999')
    assert res.status_code == 404
    assert res.data == b'File not found.'


def test_search_route(app, anon, make_user, make_file):
    jane = make_user()
    make_file(jane, 'misc.pdf', tags=['Jane Doe'])
    res = anon.get('/search?query=Jane%20Doe')
    assert res.status_code == 200
    assert b'jane.doe@asoiu.edu.az' in res.data
    assert b'misc.pdf' in res.data


def test_search_route_users_only_is_200(anon, make_user):
    make_user()
    assert anon.get('/search?query=Doe').status_code == 200


def test_search_route_nothing_found(anon, make_user):
    make_user()
    res = anon.get('/search?query=Nobody%20Here')
    assert res.status_code == 404
    assert res.data == b'No users or files found'


def test_sweep_orphans_command(app, make_user, make_file):
    make_file(make_user(), 'kept.pdf')
    orphan = os.path.join(app.config['FILE_UPLOAD_DIR'], 'orphan.pdf')
    with open(orphan, 'wb') as fh:
        fh.write(b'x')
    runner = app.test_cli_runner()
    result = runner.invoke(args=['files', 'sweep-orphans'])
    assert result.exit_code == 0
    assert '1 orphaned file(s) removed.' in result.output
    assert not os.path.exists(orphan)
