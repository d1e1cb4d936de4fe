"""Git subprocess wrapper: clone, pull and checkout of the rules repository."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional, Sequence

from rules_mirror.mirror.errors import FetchError, GitNotFoundError

logger = logging.getLogger(__name__)


class GitFetcher:
    def __init__(
        self,
        *,
        repository_url: str,
        mirror_path: Path,
        git_executable: str = "git",
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self._repository_url = repository_url
        self._mirror_path = Path(mirror_path)
        self._git = git_executable
        self._timeout_seconds = timeout_seconds

    @property
    def mirror_path(self) -> Path:
        return self._mirror_path

    @property
    def repository_url(self) -> str:
        return self._repository_url

    def mirror_exists(self) -> bool:
        return (self._mirror_path / ".git").exists()

    async def clone(self) -> None:
        logger.info("Cloning rules repository. url=%s path=%s", self._repository_url, self._mirror_path)
        self._mirror_path.parent.mkdir(parents=True, exist_ok=True)
        await self._run_git(
            ["clone", self._repository_url, str(self._mirror_path)],
            cwd=self._mirror_path.parent,
            operation="clone",
        )

    async def update(self) -> None:
        logger.info("Updating rules repository. path=%s", self._mirror_path)
        await self._run_git(["pull"], cwd=self._mirror_path, operation="pull")

    async def checkout(self, ref: str) -> None:
        logger.info("Checking out rules repository ref. ref=%s", ref)
        await self._run_git(["checkout", ref], cwd=self._mirror_path, operation=f"checkout {ref}")

    async def _run_git(self, args: Sequence[str], *, cwd: Path, operation: str) -> str:
        """Run git without a shell and return stdout. Raises FetchError on a non-zero exit."""
        # A credential prompt would wait forever on a headless server.
        env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}
        try:
            process = await asyncio.create_subprocess_exec(
                self._git,
                *args,
                cwd=str(cwd),
                env=env,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, PermissionError) as e:
            if not cwd.is_dir():
                raise FetchError(operation, f"working directory does not exist: {cwd}") from e
            raise GitNotFoundError(self._git) from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self._timeout_seconds)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise FetchError(operation, f"git {operation} timed out after {self._timeout_seconds}s")

        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            raise FetchError(operation, detail or f"git exited with code {process.returncode}")
        return stdout.decode("utf-8", errors="replace")
