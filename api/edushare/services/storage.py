"""Local file storage for uploaded resources."""
import logging
import re
import secrets
import unicodedata
from pathlib import Path

from edushare.config import settings

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r'[^\w.\- ()\[\]]+')
_MAX_NAME_LEN = 150
# Escapes HTML5 multipart encoders apply to filename parameters
_FORM_ESCAPES = {'%22': '"', '%0A': '\n', '%0D': '\r'}


class StorageError(Exception):
    """Stored object could not be written, read or removed."""
    pass


def sanitize_filename(name: str | None, default: str = 'file') -> str:
    """Reduce a client-supplied file name to a safe basename.

    Drops directory components, quotes and control characters and collapses
    anything else outside a conservative character set to `_`.
    """
    if not name:
        return default
    for escape, ch in _FORM_ESCAPES.items():
        name = name.replace(escape, ch).replace(escape.lower(), ch)
    name = unicodedata.normalize('NFKC', name)
    name = name.replace('\\', '/').split('/')[-1]
    name = ''.join(ch for ch in name if ch.isprintable()).replace('"', '').replace("'", '')
    name = _UNSAFE_CHARS.sub('_', name).strip(' .')
    if not name:
        return default
    if len(name) > _MAX_NAME_LEN:
        stem, dot, ext = name.rpartition('.')
        if dot and len(ext) <= 10:
            name = stem[:_MAX_NAME_LEN - len(ext) - 1] + '.' + ext
        else:
            name = name[:_MAX_NAME_LEN]
    return name


def file_extension(name: str | None) -> str:
    if not name or '.' not in name:
        return ''
    return name.rsplit('.', 1)[-1].lower()


class LocalStorage:
    """Stores objects under a root directory, addressed by relative keys."""

    def __init__(self, root: str | Path | None = None):
        self.root = Path(root or settings.upload_dir).resolve()

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise StorageError(f'Invalid storage key: {key}')
        return path

    def save(self, owner_id: int, filename: str, data: bytes) -> str:
        """Write `data` and return its storage key."""
        safe_name = sanitize_filename(filename)
        key = f'resources/{owner_id}/{secrets.token_urlsafe(12)}_{safe_name}'
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise StorageError(f'Could not store {safe_name}: {e}') from e
        return key

    def resolve(self, key: str | None) -> Path | None:
        """Filesystem path for `key`, or None when the object is missing."""
        if not key:
            return None
        try:
            path = self._path(key)
        except StorageError:
            logger.warning('Rejected storage key %s', key)
            return None
        return path if path.is_file() else None

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f'Could not delete {key}: {e}') from e


def get_storage() -> LocalStorage:
    return LocalStorage()
