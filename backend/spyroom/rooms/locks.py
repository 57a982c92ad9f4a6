"""Per-room lock table whose entries live only while someone holds or waits."""

from __future__ import annotations

import threading
from collections.abc import Callable
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from dataclasses import field
from typing import Any


@dataclass(slots=True)
class _Entry:
    lock: Any
    holders: int = field(default=0)


class RoomLocks:
    def __init__(self, factory: Callable[[], Any] = threading.Lock) -> None:
        self._factory = factory
        self._entries: dict[str, _Entry] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, code: str) -> Iterator[None]:
        with self._guard:
            entry = self._entries.get(code)
            if entry is None:
                entry = self._entries[code] = _Entry(self._factory())
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    self._entries.pop(code, None)


__all__ = ["RoomLocks"]
