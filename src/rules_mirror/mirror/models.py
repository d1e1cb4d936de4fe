from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal


@dataclass(frozen=True, slots=True)
class RulesRoot:
    path: Path
    kind: Literal["directory", "file"]

    @property
    def is_file(self) -> bool:
        return self.kind == "file"


@dataclass(frozen=True, slots=True)
class RuleDescriptor:
    """Candidate files for one lookup, in the order they are tried."""

    logical_name: str
    candidate_paths: tuple[Path, ...]


@dataclass(frozen=True, slots=True)
class RuleMatch:
    name: str
    path: Path
    content: str


@dataclass(frozen=True, slots=True)
class RuleNotFound:
    name: str
    searched_root: Path
    available: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class RuleEntry:
    name: str
    file: str


@dataclass(frozen=True, slots=True)
class ResourceDescriptor:
    uri: str
    name: str
    description: str
    mime_type: str = "text/markdown"
