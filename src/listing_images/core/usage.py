"""Lifetime usage counters kept outside the core pipeline."""

import json
import threading
from pathlib import Path


class InMemoryUsageCounter:
    """Process-local counter."""

    def __init__(self, initial: int = 0):
        self._value = initial
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        return self._value

    def increment(self, by: int = 1) -> int:
        if by < 0:
            raise ValueError("Usage counter only moves forward")
        with self._lock:
            self._value += by
            return self._value


class JsonFileUsageCounter:
    """Counter persisted as ``{"processed": N}`` in a JSON file."""

    def __init__(self, path: Path):
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        if not self._path.exists():
            return 0
        data = json.loads(self._path.read_text(encoding="utf-8"))
        return int(data.get("processed", 0))

    def increment(self, by: int = 1) -> int:
        if by < 0:
            raise ValueError("Usage counter only moves forward")
        with self._lock:
            total = self.value + by
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps({"processed": total}), encoding="utf-8")
            return total
