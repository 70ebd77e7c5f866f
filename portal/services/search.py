"""Request-time search over users and files. There is no persistent index."""
import re
from dataclasses import dataclass, field

from ..models.file import File, FileTag
from ..models.user import User

_WS = re.compile(r'\s+')


@dataclass
class SearchResults:
    users: list = field(default_factory=list)
    files: list = field(default_factory=list)

    @property
    def empty(self):
        return not self.users and not self.files


def split_query(query):
    """Split on the first whitespace run into ``(name, surname)``.

    A lone token is taken as a surname. Tokens after the second are ignored;
    a missing token is ``''``.
    """
    parts = [p for p in _WS.split((query or '').strip()) if p]
    if not parts:
        return '', ''
    if len(parts) == 1:
        return '', parts[0]
    return parts[0], parts[1]


def search_users(name, surname):
    q = User.query
    if name and surname:
        q = q.filter(User.name.ilike(f'%{name}%'), User.surname.ilike(f'%{surname}%'))
    elif name:
        q = q.filter(User.name.ilike(f'%{name}%'))
    elif surname:
        q = q.filter(User.surname.ilike(f'%{surname}%'))
    else:
        return []
    return q.all()


def search_files(query):
    query = (query or '').strip()
    return File.query.filter(
        File.file_name.ilike(f'%{query}%') | File.tag_rows.any(FileTag.name == query)
    ).all()


def search(query):
    query = (query or '').strip()
    name, surname = split_query(query)
    return SearchResults(users=search_users(name, surname), files=search_files(query))
