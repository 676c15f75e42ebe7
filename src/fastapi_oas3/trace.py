"""SecurityTrace and TraceEntry — debug record of one security evaluation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal


@dataclass(frozen=True)
class TraceEntry:
    """Single scheme evaluation record."""

    clause_index: int
    scheme_name: str
    duration_ms: float
    outcome: Literal["OK", "FAILED"]
    code: int | None = None


@dataclass
class SecurityTrace:
    """Structured record of a single request's security evaluation."""

    entries: list[TraceEntry] = field(default_factory=list)
    total_duration_ms: float = 0.0
    outcome: Literal["OK", "DENIED"] = "OK"
    code: int | None = None
