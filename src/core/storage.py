"""
Local File Storage
Uploaded files live under settings.upload_dir; database rows keep the
path relative to that root (e.g. "edas-documents/tapu-<uuid>.pdf").
"""
from pathlib import Path
from uuid import uuid4

from werkzeug.utils import secure_filename

from src.core.config import settings
from src.core.exceptions import StorageError
from src.core.logging import get_logger

logger = get_logger(__name__)


def safe_filename(original_name: str) -> str:
    """
    Build a unique on-disk name from the client-supplied file name.

    werkzeug strips directories and non-ASCII characters; a random UUID is
    appended to the stem so concurrent uploads never collide.
    """
    name = Path(secure_filename(original_name))
    return f"{name.stem or 'file'}-{uuid4()}{name.suffix}"


class LocalStorage:
    """Filesystem storage rooted at a single upload directory."""

    def __init__(self, root: str | Path | None = None):
        self.root = Path(root or settings.upload_dir).resolve()

    def resolve(self, key: str) -> Path:
        """Absolute path for a stored key; refuses keys escaping the root."""
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root):
            raise StorageError("Invalid storage path", details={"key": key})
        return path

    def save_bytes(self, data: bytes, filename: str, folder: str) -> str:
        """
        Write bytes under folder and return the storage key.

        Args:
            data: File content
            filename: Original client file name
            folder: Sub-directory below the upload root

        Returns:
            Key relative to the upload root
        """
        key = f"{folder}/{safe_filename(filename)}"
        path = self.resolve(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.error("File write failed", key=key, error=str(e))
            raise StorageError("File could not be stored", details={"key": key}) from e

        logger.info("File stored", key=key, size=len(data))
        return key

    def exists(self, key: str) -> bool:
        return self.resolve(key).is_file()

    def delete(self, key: str) -> bool:
        """
        Best-effort delete. Returns False (and logs) instead of raising when
        the file is missing or cannot be removed.
        """
        try:
            path = self.resolve(key)
            path.unlink()
        except FileNotFoundError:
            logger.warning("File already missing, nothing to delete", key=key)
            return False
        except (OSError, StorageError) as e:
            logger.error("File delete failed", key=key, error=str(e))
            return False

        logger.info("File deleted", key=key)
        return True


def get_storage() -> LocalStorage:
    """Storage dependency; tests override it with a tmp_path rooted instance."""
    return LocalStorage()
