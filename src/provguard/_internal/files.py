"""Filesystem helpers: atomic writes, staging directories, hashing.

Every file that lands at a final path gets there through ``os.replace`` from a
temporary location in the same directory tree, so a killed process never
leaves a partial file behind.
"""

import hashlib
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from provguard.errors import WriteError
from provguard.kernel.hash_utils import SHA256_PREFIX
from provguard.kernel.layout import STAGING_PREFIX
from provguard._internal.logging_config import get_logger


logger = get_logger(__name__)

_CHUNK_SIZE = 1024 * 1024


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp() -> str:
    """Current UTC time in ISO 8601."""
    return utc_now().isoformat()


def sha256_file(path: Path) -> str:
    """SHA256 of a file's bytes, prefixed with ``sha256:``."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return SHA256_PREFIX + digest.hexdigest()


def ensure_writable_dir(path: Path, create: bool = False) -> Path:
    """
    Check that ``path`` is a writable directory.

    Args:
        path: Directory to check
        create: Create the directory (and parents) first if missing

    Returns:
        The path (for chaining)

    Raises:
        WriteError: If the directory is missing, not a directory, or not writable
    """
    if create:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteError(
                f"Cannot create output directory {path}: {e}",
                "check the processed_path/data_path setting and directory permissions",
            ) from e
    if not path.exists():
        raise WriteError(
            f"Output directory does not exist: {path}",
            "create the directory or point the configuration at an existing one",
        )
    if not path.is_dir():
        raise WriteError(
            f"Output path is not a directory: {path}",
            "remove the file or choose another output directory",
        )
    if not os.access(path, os.W_OK | os.X_OK):
        raise WriteError(
            f"Output directory is not writable: {path}",
            f"grant write permission on {path} (e.g. chmod u+w) or choose another directory",
        )
    return path


def atomic_write_text(path: Path, text: str) -> Path:
    """
    Write text to ``path`` via a temporary file and ``os.replace``.

    Raises:
        WriteError: If the temporary file cannot be written or moved into place
    """
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_name = f.name
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise WriteError(
            f"Failed to write {path}: {e}",
            f"check free space and permissions in {path.parent}",
        ) from e
    return path


def make_staging_dir(parent: Path) -> Path:
    """Create a hidden staging directory under ``parent`` (same filesystem)."""
    try:
        return Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=parent))
    except OSError as e:
        raise WriteError(
            f"Cannot create staging directory in {parent}: {e}",
            f"check permissions on {parent}",
        ) from e


def promote(staged: Path, final: Path) -> Path:
    """
    Move a staged file to its final path, replacing any previous version.

    Raises:
        WriteError: If the move fails
    """
    try:
        final.parent.mkdir(parents=True, exist_ok=True)
        os.replace(staged, final)
    except OSError as e:
        raise WriteError(
            f"Failed to move {staged} to {final}: {e}",
            f"check permissions on {final.parent}",
        ) from e
    return final


def remove_tree(path: Path) -> None:
    """Remove a staging directory; failures are logged, not raised."""
    if not path.exists():
        return
    try:
        shutil.rmtree(path)
    except OSError as e:
        logger.warning(f"Could not remove staging directory {path}: {e}")
