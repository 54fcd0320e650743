from __future__ import annotations

import itertools
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol


class IdGenerator(Protocol):
    def run_suffix(self) -> str:
        """Short opaque token shared by every id minted in one generation run."""
        ...

    def assessment_id(self) -> str:
        ...


class RandomIdGenerator:
    """Default generator: uuid4-derived suffixes, timestamped assessment ids."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def run_suffix(self) -> str:
        return uuid.uuid4().hex[:7]

    def assessment_id(self) -> str:
        stamp = self._clock().strftime("%Y%m%d%H%M%S")
        return f"CASA-{stamp}-{uuid.uuid4().hex[:7]}"


class SequentialIdGenerator:
    """Deterministic generator for tests and reproducible runs."""

    def __init__(self, prefix: str = "run"):
        self.prefix = prefix
        self._counter = itertools.count(1)

    def run_suffix(self) -> str:
        return f"{self.prefix}{next(self._counter)}"

    def assessment_id(self) -> str:
        return f"CASA-{self.prefix}-{next(self._counter)}"
