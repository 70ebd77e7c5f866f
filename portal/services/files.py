"""File repository: stored bytes on disk, metadata in ``files`` / ``file_tags``."""
import logging
import os

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..exceptions import NoFileProvidedError, NotFoundError, UnsupportedFileTypeError
from ..models.file import File
from . import storage

logger = logging.getLogger(__name__)


def parse_tags(raw):
    """``"alpha, beta ,gamma"`` -> ``["alpha", "beta", "gamma"]``; blanks are dropped."""
    if not raw:
        return []
    return [t.strip() for t in raw.split(',') if t.strip()]


def validate_upload(file_storage):
    if file_storage is None or not getattr(file_storage, 'filename', ''):
        raise NoFileProvidedError()
    if not storage.allowed_file(file_storage.filename, file_storage.mimetype):
        raise UnsupportedFileTypeError(file_storage.filename, file_storage.mimetype)


def upload(owner_id, file_storage, description='', raw_tags=''):
    validate_upload(file_storage)
    path = storage.save_upload(file_storage, current_app.config['FILE_UPLOAD_DIR'])

    f = File(
        file_name=file_storage.filename,
        file_path=path,
        uploader_id=owner_id,
        description=description or '',
    )
    f.tags = parse_tags(raw_tags)
    try:
        db.session.add(f)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception('Error uploading file %r for user %s', file_storage.filename, owner_id)
        try:
            storage.remove_stored(path)
        except OSError:
            logger.exception('Could not remove %s after failed insert', path)
        raise
    logger.info('File uploaded: %s (id=%s, owner=%s)', f.file_name, f.file_id, owner_id)
    return f


def list_for_owner(owner_id):
    return File.query.filter_by(uploader_id=owner_id).all()


def delete(owner_id, file_id):
    """Delete a file owned by ``owner_id``.

    Byte removal is best effort: a failure is logged and the metadata row is
    still deleted. ``sweep_orphans`` reclaims whatever is left on disk.
    """
    f = File.query.filter_by(file_id=file_id, uploader_id=owner_id).first()
    if f is None:
        raise NotFoundError('File not found.')

    try:
        storage.remove_stored(f.file_path)
    except OSError:
        logger.exception('Error deleting file from file system: %s', f.file_path)

    try:
        db.session.delete(f)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception('Error deleting file %s', file_id)
        raise
    logger.info('File deleted: %s', file_id)


def get_for_download(file_id):
    # any signed-in user may download any file: the repository is shared campus-wide
    f = db.session.get(File, file_id)
    if f is None:
        raise NotFoundError('File not found.')
    if not os.path.isfile(storage.resolve_path(f.file_path)):
        logger.warning('File %s has metadata but no bytes at %s', file_id, f.file_path)
        raise NotFoundError('File not found.')
    return f


def sweep_orphans(dry_run=False):
    directory = current_app.config['FILE_UPLOAD_DIR']
    known = [p for (p,) in db.session.query(File.file_path).all()]
    orphans = storage.find_orphans(directory, known)
    removed = []
    for path in orphans:
        if dry_run:
            removed.append(path)
            continue
        try:
            os.remove(path)
            removed.append(path)
        except OSError:
            logger.exception('Failed to remove orphaned file %s', path)
    logger.info('Orphan sweep in %s: %d %s', directory, len(removed), 'found' if dry_run else 'removed')
    return removed
