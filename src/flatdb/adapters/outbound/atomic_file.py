"""Atomic publish of text artifacts.

An artifact is written in full to a hidden temporary file in the same
directory, fsynced, given its final mode and renamed over the target.
Rename is the only visible state transition, so readers see either the
old artifact or the new one, never a partial write. If anything fails
before the rename, the temporary file is removed. Leftovers of a process that
died before its rename are removed by sweep_temp_artifacts.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import Iterable

from flatdb.domain.errors import StorageIOError
from flatdb.infrastructure.logging import get_logger


logger = get_logger(__name__)


def atomic_write_lines(
    path: Path,
    lines: Iterable[str],
    *,
    temp_prefix: str = ".temp_",
    file_mode: int = 0o644,
    fsync: bool = True,
) -> None:
    """Replace ``path`` with the given lines, one per line.

    Args:
        path: Final artifact path.
        lines: Lines without trailing newlines.
        temp_prefix: Prefix for the temporary file name.
        file_mode: Mode applied before the rename.
        fsync: Whether to fsync the temporary file before renaming.

    Raises:
        StorageIOError: If writing or renaming fails.
    """
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f"{temp_prefix}{path.name}_", dir=path.parent)
    except OSError as exc:
        raise _publish_error(path, exc) from exc

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
            for line in lines:
                handle.write(line)
                handle.write("\n")
            handle.flush()
            if fsync:
                os.fsync(handle.fileno())
        os.chmod(tmp_path, file_mode)
        os.replace(tmp_path, path)
    except BaseException as exc:
        discard(tmp_path)
        if isinstance(exc, OSError):
            raise _publish_error(path, exc) from exc
        if isinstance(exc, UnicodeEncodeError):
            raise StorageIOError(
                f"Cannot encode {path.name} as UTF-8: {exc.reason}",
                field=path.name,
                rule="encoding",
            ) from exc
        raise


def discard(path: Path) -> bool:
    """Best-effort removal of a leftover artifact; False if it stayed."""
    try:
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("temp_artifact_cleanup_failed", path=str(path), error=str(exc))
        return False
    return True


def sweep_temp_artifacts(directory: Path, temp_prefix: str) -> list[Path]:
    """Remove leftovers of publishes that never reached their rename.

    Returns:
        The entries removed, sorted by name.

    Raises:
        StorageIOError: If the directory cannot be listed.
    """
    try:
        leftovers = sorted(
            entry for entry in directory.iterdir() if entry.name.startswith(temp_prefix)
        )
    except OSError as exc:
        raise StorageIOError(
            f"Cannot list {directory}: {exc}", field=directory.name, rule="io"
        ) from exc

    removed = [entry for entry in leftovers if discard(entry)]
    for entry in removed:
        logger.info("temp_artifact_removed", path=str(entry))
    return removed


def _publish_error(path: Path, exc: OSError) -> StorageIOError:
    return StorageIOError(f"Failed to publish {path.name}: {exc}", field=path.name, rule="io")
