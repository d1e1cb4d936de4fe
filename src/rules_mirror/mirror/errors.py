from __future__ import annotations

from pathlib import Path
from typing import Sequence

FETCH_REMEDIATION_HINTS = (
    "Git is installed and on PATH",
    "The repository URL is correct",
    "You have network access and permission to read the repository",
)


class RulesMirrorError(Exception):
    """Base class for errors raised by the rules mirror."""


class ConfigurationError(RulesMirrorError):
    """Setup problem that retrying will not fix."""


class GitNotFoundError(ConfigurationError):
    def __init__(self, executable: str) -> None:
        super().__init__(f"Git executable not found: {executable!r}. Install git or set repository.git_executable.")
        self.executable = executable


class FetchError(RulesMirrorError):
    """A clone, pull or checkout failed. Not retried; the next access may try again."""

    def __init__(self, operation: str, detail: str) -> None:
        hints = "\n".join(f"{index}. {hint}" for index, hint in enumerate(FETCH_REMEDIATION_HINTS, start=1))
        super().__init__(f"Failed to fetch rules from Git ({operation}): {detail}\n\nMake sure:\n{hints}")
        self.operation = operation
        self.detail = detail


class RulesRootNotFoundError(RulesMirrorError):
    def __init__(self, checked: Sequence[Path]) -> None:
        super().__init__(f"Could not find rules directory. Checked: {', '.join(str(p) for p in checked)}")
        self.checked = tuple(checked)
