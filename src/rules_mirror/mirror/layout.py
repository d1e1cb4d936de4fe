from __future__ import annotations

import re
from pathlib import Path
from typing import Optional, Sequence

from rules_mirror.mirror.errors import RulesRootNotFoundError
from rules_mirror.mirror.models import RulesRoot

DEFAULT_ROOT_CANDIDATES = (".cursor/rules", "rules", ".cursorrules", ".")
DEFAULT_EXTENSIONS = (".mdc", ".md", ".txt")
README_STEM = "README"

# Repositories often order rules as "10-code-style.mdc"; the prefix is not part of the name.
ORDER_PREFIX_RE = re.compile(r"^\d+-")


def read_exact_text(path: Path) -> str:
    """Read a file as UTF-8 without newline translation."""
    return path.read_bytes().decode("utf-8")


class RepositoryLayout:
    """Where rules live inside a mirror and which file names count as rules."""

    def __init__(
        self,
        *,
        root_candidates: Sequence[str] = DEFAULT_ROOT_CANDIDATES,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    ) -> None:
        self.root_candidates = tuple(root_candidates)
        self.extensions = tuple(extensions)

    def resolve_root(self, mirror_path: Path) -> RulesRoot:
        checked = []
        for candidate in self.root_candidates:
            path = mirror_path / candidate if candidate not in ("", ".") else mirror_path
            checked.append(path)
            if path.is_dir():
                return RulesRoot(path=path, kind="directory")
            if path.is_file():
                return RulesRoot(path=path, kind="file")
        raise RulesRootNotFoundError(checked)

    def match_extension(self, filename: str) -> Optional[str]:
        matches = [ext for ext in self.extensions if filename.endswith(ext) and len(filename) > len(ext)]
        if not matches:
            return None
        return max(matches, key=len)

    def is_readme(self, filename: str) -> bool:
        ext = self.match_extension(filename)
        stem = filename[: -len(ext)] if ext else filename
        return stem.upper() == README_STEM

    def rule_name(self, filename: str) -> Optional[str]:
        """Logical rule name for a file in the rules root, or None if it is not a rule."""
        ext = self.match_extension(filename)
        if ext is None or self.is_readme(filename):
            return None
        stem = filename[: -len(ext)]
        unprefixed = ORDER_PREFIX_RE.sub("", stem, count=1)
        return unprefixed or stem

    def single_file_rule_name(self, path: Path) -> str:
        """Name of the one rule held by a single-file root such as ".cursorrules"."""
        filename = path.name
        ext = self.match_extension(filename)
        if ext is not None:
            filename = filename[: -len(ext)]
        return filename.lstrip(".") or path.name
