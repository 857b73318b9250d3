import re
import uuid
from datetime import datetime
from pathlib import Path


def _sanitize_filename(filename: str) -> str:
    """Return filename with spaces replaced by underscores and special chars removed."""
    name = filename.replace(" ", "_")
    name = re.sub(r"[^\w.\-]", "", name)
    return name or "upload"


def save_upload(raw_bytes: bytes, filename: str, uploads_dir: Path) -> Path:
    """Save raw bytes to a month-partitioned subdirectory of *uploads_dir*.

    The destination path follows the pattern::

        uploads_dir/{year}/{month:02d}/{uuid4}_{sanitized_filename}

    Returns:
        Path to the saved file.
    """
    now = datetime.now()
    dest_dir = uploads_dir / str(now.year) / f"{now.month:02d}"
    dest_dir.mkdir(parents=True, exist_ok=True)

    dest_path = dest_dir / f"{uuid.uuid4()}_{_sanitize_filename(filename)}"
    dest_path.write_bytes(raw_bytes)
    return dest_path


def public_url(full_path: Path, uploads_dir: Path, url_prefix: str) -> str:
    """Return the URL the saved file is served under, e.g. ``/uploads/2026/02/abc_file.pdf``."""
    relative = full_path.relative_to(uploads_dir).as_posix()
    return f"{url_prefix.rstrip('/')}/{relative}"
