from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from rules_mirror.mirror.catalog import RuleCatalog
from rules_mirror.mirror.layout import read_exact_text
from rules_mirror.mirror.models import RuleDescriptor, RuleMatch, RuleNotFound, RulesRoot

logger = logging.getLogger(__name__)


class CandidateTemplate(Protocol):
    def expand(self, root: Path, name: str, ext: str) -> list[Path]:
        ...


@dataclass(frozen=True, slots=True)
class PathTemplate:
    """A fixed relative path such as "{name}{ext}" or "{name}/README{ext}"."""

    pattern: str

    def expand(self, root: Path, name: str, ext: str) -> list[Path]:
        return [root / self.pattern.format(name=name, ext=ext)]


@dataclass(frozen=True, slots=True)
class OrderPrefixTemplate:
    """Files named "<digits>-{name}{ext}" directly under the root, lowest prefix first."""

    def expand(self, root: Path, name: str, ext: str) -> list[Path]:
        pattern = re.compile(rf"^(\d+)-{re.escape(name)}{re.escape(ext)}$")
        matches = []
        try:
            for path in root.iterdir():
                match = pattern.match(path.name)
                if match:
                    matches.append((int(match.group(1)), path.name, path))
        except OSError as e:
            logger.warning("Failed to scan rules root. path=%s error=%s", root, e)
            return []
        return [path for _, _, path in sorted(matches)]


# Tried for each extension in order; the first existing file wins.
DEFAULT_TEMPLATES: tuple[CandidateTemplate, ...] = (
    PathTemplate("{name}{ext}"),
    PathTemplate("{name}/README{ext}"),
    OrderPrefixTemplate(),
)


class RuleLocator:
    def __init__(self, *, catalog: RuleCatalog, templates: Sequence[CandidateTemplate] = DEFAULT_TEMPLATES) -> None:
        self._catalog = catalog
        self._layout = catalog.layout
        self._templates = tuple(templates)

    def describe(self, name: str, root: RulesRoot) -> RuleDescriptor:
        if root.is_file:
            candidates = (root.path,) if name == self._layout.single_file_rule_name(root.path) else ()
            return RuleDescriptor(logical_name=name, candidate_paths=candidates)

        candidates = []
        for ext in self._layout.extensions:
            for template in self._templates:
                candidates.extend(template.expand(root.path, name, ext))
        return RuleDescriptor(logical_name=name, candidate_paths=tuple(candidates))

    def resolve(self, name: str) -> RuleMatch | RuleNotFound:
        root = self._catalog.resolve_root()
        descriptor = self.describe(name, root) if name.strip() else RuleDescriptor(name, ())

        for path in descriptor.candidate_paths:
            if not path.is_file():
                continue
            try:
                content = read_exact_text(path)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Failed to read rule candidate. name=%s path=%s error=%s", name, path, e)
                continue
            logger.debug("Resolved rule. name=%s path=%s", name, path)
            return RuleMatch(name=name, path=path, content=content)

        available = tuple(entry.name for entry in self._catalog.list_entries(root) if entry.name != name)
        logger.info("Rule not found. name=%s root=%s available=%d", name, root.path, len(available))
        return RuleNotFound(name=name, searched_root=root.path, available=available)
