"""Extra data handed to body-aware scheme functions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SecurityHandlerContext:
    """Passed to scheme functions declared with ``requires_parsed_body``."""

    body: Any = None
