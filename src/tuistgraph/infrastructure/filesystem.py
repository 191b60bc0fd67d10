"""Scratch directories and output-file access for a single graph load.

INVARIANT: a scratch directory belongs to exactly one call. It is
created with a fresh ``uuid4`` name and removed once when the call ends.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)


def create_scratch_directory(root: Path | None = None) -> Path:
    """Create a uniquely named directory under *root* (default: system temp)."""
    base = Path(root) if root is not None else Path(tempfile.gettempdir())
    directory = base / uuid.uuid4().hex
    directory.mkdir(parents=True, exist_ok=False)
    return directory


def remove_scratch_directory(directory: Path) -> None:
    """Remove *directory* and everything in it."""
    shutil.rmtree(directory)


@contextmanager
def scratch_directory(
    root: Path | None = None,
    *,
    cleanup_on_success: bool = True,
) -> Generator[Path]:
    """Yield a fresh scratch directory, removing it when the block exits.

    On an exception the directory is always removed; a removal failure
    there is logged and the original exception propagates. On a normal
    exit the directory is removed only when *cleanup_on_success* is set,
    and a removal failure raises :class:`OSError`.
    """
    directory = create_scratch_directory(root)
    logger.debug("Created scratch directory %s", directory)
    try:
        yield directory
    except BaseException:
        try:
            remove_scratch_directory(directory)
        except OSError:
            logger.warning("Could not remove scratch directory %s", directory, exc_info=True)
        else:
            logger.debug("Removed scratch directory %s", directory)
        raise
    if cleanup_on_success:
        remove_scratch_directory(directory)
        logger.debug("Removed scratch directory %s", directory)
    else:
        logger.debug("Kept scratch directory %s", directory)


def read_output_file(path: Path) -> bytes:
    """Read the tool's output file as raw bytes."""
    return path.read_bytes()
