"""Local storage for uploaded media and documents.

Files live under the configured uploads directory as
{uploads_dir}/{bucket}/{user_id}/{entity_id}.{ext}.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from summaryr.config.app_config import load_app_config

logger = structlog.get_logger(__name__)


def _uploads_dir(base_dir: Path | None) -> Path:
    return base_dir if base_dir is not None else load_app_config().uploads_dir


def save_upload(
    bucket: str,
    user_id: str,
    entity_id: str,
    extension: str,
    data: bytes,
    base_dir: Path | None = None,
) -> Path:
    """Write uploaded bytes and return the stored path.

    Raises:
        ValueError: If the path would land outside the uploads directory
    """
    root = _uploads_dir(base_dir).resolve()
    path = (root / bucket / user_id / f"{entity_id}.{extension.lstrip('.').lower()}").resolve()
    if not path.is_relative_to(root):
        raise ValueError(f"Upload path escapes the uploads directory: {path}")

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)

    logger.info("file_store.saved", bucket=bucket, path=str(path), size_bytes=len(data))
    return path


def read_file(path: str | Path) -> bytes:
    """Read a stored file.

    Raises:
        FileNotFoundError: If the file is missing
    """
    return Path(path).read_bytes()


def delete_file(path: str | Path | None) -> bool:
    """Remove a stored file if present. Returns True if a file was removed."""
    if not path:
        return False

    file_path = Path(path)
    if not file_path.exists():
        return False

    file_path.unlink()
    logger.info("file_store.deleted", path=str(file_path))
    return True
