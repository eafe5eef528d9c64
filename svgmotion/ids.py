"""Id generation for layers, groups and keyframes."""
from __future__ import annotations

import itertools
import random
import string
import time
from typing import Protocol

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


class IdSource(Protocol):
    def new_id(self, prefix: str) -> str:
        ...


class RandomIdSource:
    """`<prefix>-<timestamp>-<random-suffix>` ids.

    Collisions are improbable, not impossible.
    """

    def __init__(self, suffix_length: int = 7) -> None:
        self.suffix_length = suffix_length

    def new_id(self, prefix: str) -> str:
        stamp = int(time.time() * 1000)
        suffix = "".join(random.choices(_SUFFIX_ALPHABET, k=self.suffix_length))
        return f"{prefix}-{stamp}-{suffix}"


class CounterIdSource:
    """Monotonic ids for reproducible tests: `<prefix>-1`, `<prefix>-2`, ..."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)

    def new_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._counter)}"


default_id_source: IdSource = RandomIdSource()
