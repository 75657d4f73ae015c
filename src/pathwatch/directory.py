"""Minimal directory handle used to materialize a file's missing ancestors."""

from __future__ import annotations

import asyncio
import os


class Directory:
    """A directory path on disk; no watching."""

    def __init__(self, path: str) -> None:
        self.path = os.path.abspath(path)

    def __repr__(self) -> str:
        return f"Directory({self.path!r})"

    def get_path(self) -> str:
        return self.path

    def get_base_name(self) -> str:
        return os.path.basename(self.path)

    def is_file(self) -> bool:
        return False

    def is_directory(self) -> bool:
        return True

    def is_root(self) -> bool:
        return os.path.dirname(self.path) == self.path

    def get_parent(self) -> Directory:
        return Directory(os.path.dirname(self.path))

    def exists_sync(self) -> bool:
        return os.path.isdir(self.path)

    async def exists(self) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, os.path.isdir, self.path)

    async def create(self, mode: int = 0o777) -> bool:
        """Create this directory and any missing ancestors.

        Returns:
            True if the directory was created, False if it already existed.

        Raises:
            OSError: If the path exists as a non-directory or cannot be created.
        """
        if await self.exists():
            return False
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, lambda: os.makedirs(self.path, mode, exist_ok=True))
        return True
