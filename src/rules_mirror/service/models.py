from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from rules_mirror.mirror.models import RuleEntry


@dataclass(frozen=True, slots=True)
class ServiceResult:
    """
    Uniform outcome of a service operation.

    `text` is always human readable and safe to hand to a client as-is. Errors are
    results too: `is_error` is set and `text` carries the explanation.
    """

    text: str
    is_error: bool = False
    source: Optional[str] = None
    alternatives: tuple[str, ...] = ()
    rules: tuple[RuleEntry, ...] = ()

    @classmethod
    def error(cls, text: str, *, alternatives: tuple[str, ...] = ()) -> ServiceResult:
        return cls(text=text, is_error=True, alternatives=alternatives)
