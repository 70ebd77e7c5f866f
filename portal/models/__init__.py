from .user import User
from .file import File, FileTag
