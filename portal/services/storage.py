import os
import secrets
import time
from werkzeug.utils import secure_filename
from flask import current_app

from ..exceptions import StorageError

# declared MIME types accepted for each allowed extension
MIME_TYPES = {
    'jpeg': {'image/jpeg', 'image/pjpeg'},
    'jpg': {'image/jpeg', 'image/pjpeg'},
    'png': {'image/png'},
    'gif': {'image/gif'},
    'pdf': {'application/pdf'},
    'doc': {'application/msword'},
    'docx': {'application/vnd.openxmlformats-officedocument.wordprocessingml.document'},
    'txt': {'text/plain'},
    'ppt': {'application/vnd.ms-powerpoint'},
    'pptx': {'application/vnd.openxmlformats-officedocument.presentationml.presentation'},
}


def _extension(filename):
    _, ext = os.path.splitext(filename or '')
    return ext.lower().lstrip('.')


def allowed_file(filename, mimetype, allowed=None):
    """Extension and declared MIME type must both belong to an allowed type."""
    if allowed is None:
        allowed = current_app.config['ALLOWED_UPLOAD_EXTENSIONS']
    ext = _extension(filename)
    if ext not in allowed:
        return False
    mimetype = (mimetype or '').split(';')[0].strip().lower()
    return mimetype in MIME_TYPES.get(ext, set())


def generate_stored_name(original_name):
    ext = _extension(secure_filename(original_name or ''))
    name = f"{int(time.time() * 1000)}-{secrets.token_hex(4)}"
    return f"{name}.{ext}" if ext else name


def ensure_dir(d):
    os.makedirs(d, exist_ok=True)
    return d


def save_upload(file_storage, directory):
    """Write an uploaded ``FileStorage`` under ``directory``; return its storage path."""
    ensure_dir(directory)
    path = os.path.join(directory, generate_stored_name(file_storage.filename))
    try:
        file_storage.save(path)
    except OSError as e:
        current_app.logger.exception('Writing upload to %s failed', path)
        raise StorageError() from e
    return path


def resolve_path(path):
    return os.path.abspath(path)


def remove_stored(path):
    os.remove(resolve_path(path))


def find_orphans(directory, known_paths):
    """Stored files in ``directory`` that no metadata row points at."""
    if not os.path.isdir(directory):
        return []
    known = {resolve_path(p) for p in known_paths}
    orphans = []
    for entry in sorted(os.listdir(directory)):
        full = resolve_path(os.path.join(directory, entry))
        if os.path.isfile(full) and full not in known:
            orphans.append(full)
    return orphans
