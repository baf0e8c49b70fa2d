"""Interface for interacting with the file system.

Defines the contract for reading, writing, replacing and enumerating files,
allowing the core services to be independent of the specific file system
implementation.
"""

import abc
from typing import List

from ..models.common import FilePath


class FileSystem(abc.ABC):
    """Abstract Base Class for file system operations."""

    @abc.abstractmethod
    async def read_file(self, file_path: FilePath) -> str:
        """Reads the entire content of a file asynchronously.

        Args:
            file_path: The path to the file to read.

        Returns:
            The content of the file as a string.

        Raises:
            FileNotFoundError: If the file does not exist.
            PermissionError: If read permissions are denied.
            OSError: For other file system errors.
        """
        pass

    @abc.abstractmethod
    async def write_file(self, file_path: FilePath, content: str) -> None:
        """Writes content to a file asynchronously, overwriting if it exists.

        Parent directories are created as needed.

        Args:
            file_path: The path to the file to write.
            content: The string content to write, written verbatim.

        Raises:
            PermissionError: If write permissions are denied.
            OSError: For other file system errors.
        """
        pass

    @abc.abstractmethod
    async def replace_file(self, file_path: FilePath, content: str) -> None:
        """Atomically replaces the content of an existing file.

        The content is written to a temporary file next to the target which is
        then renamed over it, so a failed write never leaves a partial file.

        Raises:
            OSError: If the temporary file cannot be written or renamed.
        """
        pass

    @abc.abstractmethod
    async def file_exists(self, file_path: FilePath) -> bool:
        """Checks if a regular file exists asynchronously."""
        pass

    @abc.abstractmethod
    async def list_directories(self, root: FilePath) -> List[FilePath]:
        """Lists every directory below `root`, recursively, excluding `root` itself.

        Raises:
            OSError: If the tree cannot be walked (missing root, permissions).
        """
        pass

    @abc.abstractmethod
    async def list_files(self, directory: FilePath, pattern: str) -> List[FilePath]:
        """Lists files directly inside `directory` whose name matches a glob pattern.

        Raises:
            OSError: If the directory cannot be listed.
        """
        pass
