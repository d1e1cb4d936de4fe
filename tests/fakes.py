from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Mapping, Optional

from rules_mirror.mirror.cache_state import CacheState
from rules_mirror.mirror.catalog import RuleCatalog
from rules_mirror.mirror.layout import RepositoryLayout
from rules_mirror.mirror.locator import RuleLocator
from rules_mirror.service.facade import RulesService


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def write_files(root: Path, files: Mapping[str, str | bytes]) -> None:
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")


class FakeFetcher:
    """
    Stands in for GitFetcher. "Fetching" writes `files` into the mirror.

    When `gate` is set, every clone/update blocks until the event fires, which lets a
    test hold a fetch in flight while it schedules other callers.
    """

    def __init__(
        self,
        mirror_path: Path,
        *,
        files: Optional[Mapping[str, str | bytes]] = None,
        gate: Optional[asyncio.Event] = None,
        fail_with: Optional[Exception] = None,
    ) -> None:
        self._mirror_path = mirror_path
        self.files = dict(files or {})
        self.gate = gate
        self.fail_with = fail_with
        self.calls: list[str] = []

    @property
    def mirror_path(self) -> Path:
        return self._mirror_path

    def mirror_exists(self) -> bool:
        return (self._mirror_path / ".git").exists()

    async def clone(self) -> None:
        self.calls.append("clone")
        await self._fetch()

    async def update(self) -> None:
        self.calls.append("update")
        await self._fetch()

    async def checkout(self, ref: str) -> None:
        self.calls.append(f"checkout {ref}")

    async def _fetch(self) -> None:
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        (self._mirror_path / ".git").mkdir(parents=True, exist_ok=True)
        write_files(self._mirror_path, self.files)


def build_service(
    fetcher: FakeFetcher,
    *,
    ttl_seconds: float = 3600.0,
    clock: Optional[FakeClock] = None,
) -> RulesService:
    cache = CacheState(fetcher=fetcher, ttl_seconds=ttl_seconds, clock=clock or FakeClock())
    catalog = RuleCatalog(mirror_path=fetcher.mirror_path, layout=RepositoryLayout())
    return RulesService(cache=cache, catalog=catalog, locator=RuleLocator(catalog=catalog))
