from __future__ import annotations

import logging
from pathlib import Path
from typing import Awaitable, Callable

from rules_mirror.config.models import AppConfig
from rules_mirror.mirror.cache_state import CacheState
from rules_mirror.mirror.catalog import RuleCatalog
from rules_mirror.mirror.errors import RulesMirrorError
from rules_mirror.mirror.git_fetcher import GitFetcher
from rules_mirror.mirror.layout import RepositoryLayout, read_exact_text
from rules_mirror.mirror.locator import RuleLocator
from rules_mirror.mirror.models import ResourceDescriptor, RuleMatch
from rules_mirror.service.models import ServiceResult

logger = logging.getLogger(__name__)

README_FILENAME = "README.md"


def _format_rule(match: RuleMatch) -> str:
    return f"# Rule: {match.name}\n\nSource: {match.path}\n\n---\n\n{match.content}"


class RulesService:
    """
    The operations the protocol layer may call.

    Every operation first brings the mirror up to date, then reads from it. No
    exception escapes: failures come back as error results.
    """

    def __init__(self, *, cache: CacheState, catalog: RuleCatalog, locator: RuleLocator) -> None:
        self._cache = cache
        self._catalog = catalog
        self._locator = locator

    @property
    def cache(self) -> CacheState:
        return self._cache

    @property
    def mirror_path(self) -> Path:
        return self._cache.repository_path

    async def get_rule(self, name: str, *, force_refresh: bool = False) -> ServiceResult:
        async def action() -> ServiceResult:
            await self._cache.ensure_fresh(force_refresh=force_refresh)
            outcome = self._locator.resolve(name)
            if isinstance(outcome, RuleMatch):
                return ServiceResult(text=_format_rule(outcome), source=str(outcome.path))
            listing = "\n".join(f"- {alternative}" for alternative in outcome.available)
            return ServiceResult.error(
                f'Rule "{name}" not found.\n\nAvailable rules:\n{listing}\n\nSearched in: {outcome.searched_root}',
                alternatives=outcome.available,
            )

        return await self._run("get_rule", action)

    async def list_rules(self, *, force_refresh: bool = False) -> ServiceResult:
        async def action() -> ServiceResult:
            await self._cache.ensure_fresh(force_refresh=force_refresh)
            entries = tuple(self._catalog.list_entries())
            listing = "\n".join(f"- {entry.name} ({entry.file})" for entry in entries)
            return ServiceResult(
                text=(
                    f"Available rules ({len(entries)}):\n\n{listing}\n\n"
                    "Use get_rule with the rule name (without extension) to retrieve a specific rule."
                ),
                rules=entries,
            )

        return await self._run("list_rules", action)

    async def get_all_rules(self, *, force_refresh: bool = False) -> ServiceResult:
        async def action() -> ServiceResult:
            await self._cache.ensure_fresh(force_refresh=force_refresh)
            return ServiceResult(text=self._catalog.read_all())

        return await self._run("get_all_rules", action)

    async def get_readme(self, *, force_refresh: bool = False) -> ServiceResult:
        async def action() -> ServiceResult:
            await self._cache.ensure_fresh(force_refresh=force_refresh)
            root = self._catalog.resolve_root()
            candidates = [self.mirror_path / README_FILENAME]
            if not root.is_file:
                candidates.insert(0, root.path / README_FILENAME)
            for path in candidates:
                if not path.is_file():
                    continue
                try:
                    return ServiceResult(text=read_exact_text(path), source=str(path))
                except (OSError, UnicodeDecodeError) as e:
                    logger.warning("Failed to read readme. path=%s error=%s", path, e)
            return ServiceResult.error(f"{README_FILENAME} not found in the rules repository")

        return await self._run("get_readme", action)

    async def refresh(self) -> ServiceResult:
        async def action() -> ServiceResult:
            await self._cache.ensure_fresh(force_refresh=True)
            return ServiceResult(text="Rules refreshed successfully from Git repository")

        return await self._run("refresh", action)

    async def list_resources(self) -> list[ResourceDescriptor]:
        """Resource descriptors for every rule plus the readme; empty when the mirror is unavailable."""
        try:
            await self._cache.ensure_fresh()
            resources = self._catalog.resources()
        except Exception:
            logger.exception("Failed to list rule resources.")
            return []
        logger.debug("Listing rule resources. count=%d", len(resources))
        return resources

    async def _run(self, operation: str, action: Callable[[], Awaitable[ServiceResult]]) -> ServiceResult:
        try:
            return await action()
        except RulesMirrorError as e:
            logger.warning("Rules operation failed. operation=%s error=%s", operation, e)
            return ServiceResult.error(str(e))
        except Exception as e:
            logger.exception("Unexpected error in rules operation. operation=%s", operation)
            return ServiceResult.error(f"Unexpected error during {operation}: {e}")


def build_rules_service(config: AppConfig) -> RulesService:
    repository = config.repository
    fetcher = GitFetcher(
        repository_url=repository.url,
        mirror_path=Path(repository.cache_dir),
        git_executable=repository.git_executable,
        timeout_seconds=repository.fetch_timeout_seconds,
    )
    cache = CacheState(fetcher=fetcher, ttl_seconds=repository.cache_ttl_seconds, ref=repository.ref)
    layout = RepositoryLayout(
        root_candidates=config.rules.root_candidates,
        extensions=config.rules.extensions,
    )
    catalog = RuleCatalog(mirror_path=fetcher.mirror_path, layout=layout)
    return RulesService(cache=cache, catalog=catalog, locator=RuleLocator(catalog=catalog))
