from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional

from rules_mirror.mirror.layout import RepositoryLayout, read_exact_text
from rules_mirror.mirror.models import ResourceDescriptor, RuleEntry, RulesRoot

logger = logging.getLogger(__name__)

COMBINED_TITLE = "# All Rules"
RULE_FILE_MARKER = "<!-- rule-file: {file} length={length} -->"
_RULE_FILE_MARKER_RE = re.compile(r"^<!-- rule-file: (?P<file>.+?) length=(?P<length>\d+) -->\n", re.MULTILINE)

RULE_URI_SCHEME = "rule://"
README_RESOURCE_NAME = "README"


def _format_section(filename: str, content: str) -> str:
    marker = RULE_FILE_MARKER.format(file=filename, length=len(content))
    return f"{marker}\n# {filename}\n\n{content}"


def split_combined(text: str) -> list[tuple[str, str]]:
    """
    Split read_all() output back into (file, content) pairs.

    Each marker carries the content length, so marker-like lines inside a rule
    are consumed as content rather than starting a new segment.
    """
    segments = []
    pos = 0
    while True:
        marker = _RULE_FILE_MARKER_RE.search(text, pos)
        if marker is None:
            return segments
        filename = marker.group("file")
        start = marker.end() + len(f"# {filename}\n\n")
        end = start + int(marker.group("length"))
        segments.append((filename, text[start:end]))
        pos = end


class RuleCatalog:
    def __init__(self, *, mirror_path: Path, layout: RepositoryLayout) -> None:
        self._mirror_path = Path(mirror_path)
        self._layout = layout

    @property
    def layout(self) -> RepositoryLayout:
        return self._layout

    def resolve_root(self) -> RulesRoot:
        return self._layout.resolve_root(self._mirror_path)

    def list_entries(self, root: Optional[RulesRoot] = None) -> list[RuleEntry]:
        """
        Rule files directly under the rules root, in directory listing order.

        The repository readme is never listed. A single-file root is listed as one rule.
        """
        root = root or self.resolve_root()
        if root.is_file:
            return [RuleEntry(name=self._layout.single_file_rule_name(root.path), file=root.path.name)]

        entries: list[RuleEntry] = []
        for path in root.path.iterdir():
            name = self._layout.rule_name(path.name)
            if name is None:
                continue
            try:
                if not path.is_file():
                    continue
            except OSError as e:
                logger.warning("Failed to stat rule file. path=%s error=%s", path, e)
                continue
            entries.append(RuleEntry(name=name, file=path.name))
        return entries

    def read_all(self) -> str:
        root = self.resolve_root()
        sections = [COMBINED_TITLE]
        for entry in self.list_entries(root):
            path = root.path if root.is_file else root.path / entry.file
            try:
                content = read_exact_text(path)
            except UnicodeDecodeError:
                logger.warning("Skipping non-UTF8 rule file. path=%s", path)
                continue
            except OSError as e:
                logger.warning("Failed to read rule file. path=%s error=%s", path, e)
                continue
            sections.append(_format_section(entry.file, content))
        return "\n\n".join(sections)

    def resources(self) -> list[ResourceDescriptor]:
        resources = [
            ResourceDescriptor(
                uri=f"{RULE_URI_SCHEME}{entry.name}",
                name=entry.name,
                description=f"Rule: {entry.name}",
            )
            for entry in self.list_entries()
        ]
        resources.append(
            ResourceDescriptor(
                uri=f"{RULE_URI_SCHEME}{README_RESOURCE_NAME}",
                name=README_RESOURCE_NAME,
                description="Rules README documentation",
            )
        )
        return resources
