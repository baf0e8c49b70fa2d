"""Core service for collecting the source files to review.

Walks a root directory through the FileSystem interface, drops every
directory that sits inside an excluded folder, and lists the files matching
the requested extensions directory by directory.
"""

import logging
import os
from typing import Iterable, List, Optional, Sequence

from codefixer.domain.errors import InvalidArgumentError
from codefixer.domain.interfaces.filesystem import FileSystem
from codefixer.domain.interfaces.user_interface import UserInterface
from codefixer.domain.models.common import FilePath

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDED_FOLDERS = ("bin", "obj")


class CollectorService:
    """Finds source files under a root directory."""

    def __init__(self, file_system: FileSystem, ui: UserInterface):
        """Initializes the CollectorService with its dependencies."""
        self.file_system = file_system
        self.ui = ui

    @staticmethod
    def is_excluded(directory: str, root: str, excluded_folders: Iterable[str]) -> bool:
        """True when any path segment of `directory` below `root` is an excluded name.

        Segments are compared case-insensitively and must match in full, so
        "objects" is not excluded by "obj".
        """
        relative = os.path.relpath(directory, root)
        segments = {segment.lower() for segment in relative.split(os.sep)}
        return any(name.lower() in segments for name in excluded_folders)

    async def collect(
        self,
        root: FilePath,
        extensions: Sequence[str],
        excluded_folders: Optional[Sequence[str]] = None,
    ) -> List[FilePath]:
        """Returns the files under `root` whose names end with one of `extensions`.

        The root directory comes first, followed by its subdirectories in walk
        order; inside a directory, files are grouped per extension in the order
        the extensions were given. Duplicates (e.g. a repeated extension) are
        kept.

        Args:
            root: Directory to scan.
            extensions: Extensions including the dot, e.g. [".cs"]. Must not be empty.
            excluded_folders: Folder names to skip; defaults to bin and obj.

        Returns:
            The matching paths. If the file system fails midway, the paths
            collected up to that point.

        Raises:
            InvalidArgumentError: If `extensions` is empty.
        """
        if not extensions:
            raise InvalidArgumentError("You must provide at least one file extension.")
        if excluded_folders is None:
            excluded_folders = DEFAULT_EXCLUDED_FOLDERS

        matching_files: List[FilePath] = []
        try:
            subdirectories = await self.file_system.list_directories(root)
            directories = [root] + [
                directory
                for directory in subdirectories
                if not self.is_excluded(directory, root, excluded_folders)
            ]
            logger.debug(
                f"Scanning {len(directories)} of {len(subdirectories) + 1} directories under {root}"
            )
            for directory in directories:
                for extension in extensions:
                    matching_files.extend(
                        await self.file_system.list_files(directory, f"*{extension}")
                    )
        except OSError as e:
            logger.error(f"Error while scanning files under {root}: {e}")
            self.ui.display_error(f"Error while scanning files: {e}")

        logger.info(f"Collected {len(matching_files)} file(s) under {root}")
        return matching_files
