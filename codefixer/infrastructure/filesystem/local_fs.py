"""Concrete implementation of the FileSystem interface for the local disk.

Uses `aiofiles` for async reads and writes and runs directory walks in a
worker thread so the event loop is never blocked.
"""

import asyncio
import fnmatch
import logging
import os
import stat
import tempfile
from typing import List

import aiofiles
import aiofiles.os

from codefixer.domain.interfaces.filesystem import FileSystem
from codefixer.domain.models.common import FilePath

logger = logging.getLogger(__name__)

# utf-8-sig drops a leading BOM; undecodable bytes become U+FFFD instead of failing.
READ_ENCODING = "utf-8-sig"
WRITE_ENCODING = "utf-8"


def _raise_walk_error(error: OSError) -> None:
    raise error


def _create_temp_file(file_path: str) -> str:
    # Same directory as the target so the final rename stays on one filesystem.
    fd, temp_path = tempfile.mkstemp(
        prefix=f".{os.path.basename(file_path)}.",
        suffix=".tmp",
        dir=os.path.dirname(os.path.abspath(file_path)),
    )
    os.close(fd)
    return temp_path


class LocalFileSystem(FileSystem):
    """Implementation of FileSystem for the local disk."""

    def __init__(self):
        """Initializes the LocalFileSystem adapter."""
        logger.debug("LocalFileSystem initialized.")

    async def read_file(self, file_path: FilePath) -> str:
        """Reads file content asynchronously, keeping line endings as they are."""
        logger.debug(f"Attempting to read file: {file_path}")
        if not await aiofiles.os.path.isfile(file_path):
            raise FileNotFoundError(f"File not found: {file_path}")

        try:
            async with aiofiles.open(
                file_path, mode="r", encoding=READ_ENCODING, errors="replace", newline=""
            ) as f:
                content = await f.read()
            logger.debug(f"Successfully read {len(content)} characters from {file_path}")
            return content
        except PermissionError as e:
            logger.error(f"Permission denied reading file: {file_path}")
            raise PermissionError(f"Permission denied: {file_path}") from e
        except OSError as e:
            logger.error(f"Error reading file {file_path}: {e}")
            raise IOError(f"Failed to read file {file_path}: {e}") from e

    async def write_file(self, file_path: FilePath, content: str) -> None:
        """Writes content to a file asynchronously, creating parent directories."""
        logger.debug(f"Attempting to write {len(content)} characters to file: {file_path}")
        try:
            parent = os.path.dirname(os.path.abspath(file_path))
            await aiofiles.os.makedirs(parent, exist_ok=True)
            async with aiofiles.open(file_path, mode="w", encoding=WRITE_ENCODING, newline="") as f:
                await f.write(content)
            logger.debug(f"Successfully wrote to {file_path}")
        except PermissionError as e:
            logger.error(f"Permission denied writing file: {file_path}")
            raise PermissionError(f"Permission denied: {file_path}") from e
        except OSError as e:
            logger.error(f"Error writing file {file_path}: {e}")
            raise IOError(f"Failed to write file {file_path}: {e}") from e

    async def replace_file(self, file_path: FilePath, content: str) -> None:
        """Writes to a sibling temporary file, then renames it over `file_path`.

        The permission bits of an existing `file_path` are carried over to the
        replacement.
        """
        try:
            temp_path = await asyncio.to_thread(_create_temp_file, file_path)
        except OSError as e:
            logger.error(f"Could not create a temporary file next to {file_path}: {e}")
            raise IOError(f"Failed to replace file {file_path}: {e}") from e

        logger.debug(f"Replacing {file_path} via temporary file {temp_path}")
        try:
            async with aiofiles.open(temp_path, mode="w", encoding=WRITE_ENCODING, newline="") as f:
                await f.write(content)
            if await aiofiles.os.path.exists(file_path):
                mode = stat.S_IMODE((await aiofiles.os.stat(file_path)).st_mode)
                await asyncio.to_thread(os.chmod, temp_path, mode)
            await aiofiles.os.replace(temp_path, file_path)
        except OSError as e:
            logger.error(f"Error replacing file {file_path}: {e}")
            if await aiofiles.os.path.exists(temp_path):
                await aiofiles.os.remove(temp_path)
            raise IOError(f"Failed to replace file {file_path}: {e}") from e
        logger.debug(f"Successfully replaced {file_path}")

    async def file_exists(self, file_path: FilePath) -> bool:
        """Checks if a file exists asynchronously."""
        exists = await aiofiles.os.path.isfile(file_path)
        logger.debug(f"Checked existence for {file_path}: {exists}")
        return exists

    async def list_directories(self, root: FilePath) -> List[FilePath]:
        """Walks `root` top-down (sorted) in a worker thread."""
        return await asyncio.to_thread(self._walk_directories, root)

    def _walk_directories(self, root: FilePath) -> List[FilePath]:
        if not os.path.isdir(root):
            raise FileNotFoundError(f"Directory not found: {root}")
        directories: List[FilePath] = []
        for current, dirnames, _ in os.walk(root, onerror=_raise_walk_error):
            dirnames.sort()
            directories.extend(FilePath(os.path.join(current, name)) for name in dirnames)
        logger.debug(f"Found {len(directories)} directories below {root}")
        return directories

    async def list_files(self, directory: FilePath, pattern: str) -> List[FilePath]:
        """Lists matching files directly inside `directory` in name order."""
        entries = await aiofiles.os.scandir(directory)
        with entries:
            names = sorted(
                entry.name
                for entry in entries
                if entry.is_file() and fnmatch.fnmatch(entry.name, pattern)
            )
        return [FilePath(os.path.join(directory, name)) for name in names]
