"""Local mirror of the rules repository: fetching, freshness and rule lookup."""

from rules_mirror.mirror.cache_state import CacheState, RepositoryFetcher
from rules_mirror.mirror.catalog import RuleCatalog, split_combined
from rules_mirror.mirror.errors import (
    ConfigurationError,
    FetchError,
    GitNotFoundError,
    RulesMirrorError,
    RulesRootNotFoundError,
)
from rules_mirror.mirror.git_fetcher import GitFetcher
from rules_mirror.mirror.layout import RepositoryLayout
from rules_mirror.mirror.locator import RuleLocator
from rules_mirror.mirror.models import (
    ResourceDescriptor,
    RuleDescriptor,
    RuleEntry,
    RuleMatch,
    RuleNotFound,
    RulesRoot,
)

__all__ = [
    "CacheState",
    "ConfigurationError",
    "FetchError",
    "GitFetcher",
    "GitNotFoundError",
    "RepositoryFetcher",
    "RepositoryLayout",
    "ResourceDescriptor",
    "RuleCatalog",
    "RuleDescriptor",
    "RuleEntry",
    "RuleLocator",
    "RuleMatch",
    "RuleNotFound",
    "RulesMirrorError",
    "RulesRoot",
    "RulesRootNotFoundError",
    "split_combined",
]
