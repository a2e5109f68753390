"""File reading and atomic writing for patched source files."""

import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


def read_text(file_path: Path) -> str:
    """Read a UTF-8 text file.

    Raises:
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not valid UTF-8.
    """
    with open(file_path, encoding="utf-8") as f:
        return f.read()


def atomic_write(
    file_path: Path,
    content: str,
    *,
    keep_backup: bool = False,
    mode_source: Path | None = None,
) -> Path | None:
    """Write a patched file so readers never see a partial result.

    Content is written and flushed to a hidden sibling file, which then replaces
    ``file_path`` in one rename. A failed write leaves ``file_path`` as it was
    and removes every file this call created.

    The new file takes its permission bits from ``mode_source`` when given,
    otherwise from the file it replaces, so an executable script stays
    executable after patching.

    Args:
        file_path: Path to the file to write.
        content: Full new file content.
        keep_backup: Keep a ``<name>.bak`` copy of the replaced file.
        mode_source: File whose permission bits the new file should carry.

    Returns:
        The backup path when one was kept, else ``None``.

    Raises:
        OSError: If the file operation fails.

    Example:
        >>> atomic_write(Path("app.py"), "print('patched')\\n", keep_backup=True)
        PosixPath('app.py.bak')
    """
    temp_file = file_path.with_name(f".{file_path.name}.tmp")
    backup_path = file_path.with_name(f"{file_path.name}.bak")
    permission_source = mode_source if mode_source is not None else file_path
    made_backup = False

    try:
        with open(temp_file, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        if permission_source.exists():
            shutil.copymode(permission_source, temp_file)

        if keep_backup and file_path.exists():
            shutil.copy2(file_path, backup_path)
            made_backup = True

        temp_file.replace(file_path)

    except OSError as e:
        temp_file.unlink(missing_ok=True)
        if made_backup:
            backup_path.unlink(missing_ok=True)
        raise OSError(f"Atomic write failed for {file_path}: {e}") from e

    logger.debug(f"Wrote {len(content)} chars to {file_path}")
    if made_backup:
        logger.info(f"Kept backup of previous content at {backup_path}")
        return backup_path
    return None
