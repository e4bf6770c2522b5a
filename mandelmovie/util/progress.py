from __future__ import annotations

import threading
from typing import Optional

from tqdm import tqdm


class TqdmProgress:
    """Progress sink drawing a tqdm bar on the console."""

    def __init__(self, desc: Optional[str] = None, unit: str = "px", leave: bool = False):
        self._bar = tqdm(total=0, desc=desc, unit=unit, unit_scale=True, leave=leave)

    def set_total_work(self, total: float) -> None:
        self._bar.reset(total=total)

    def increment_progress(self, amount: float) -> None:
        self._bar.update(amount)

    def close(self) -> None:
        self._bar.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class FractionProgress:
    """Thread-safe progress as a fraction in [0, 1]."""

    def __init__(self, total: float = 1.0):
        self._lock = threading.Lock()
        self._total = total
        self._current = 0.0

    def set_total_work(self, total: float) -> None:
        with self._lock:
            self._total = total

    def increment_progress(self, amount: float) -> None:
        with self._lock:
            self._current += amount

    @property
    def fraction(self) -> float:
        with self._lock:
            if self._total <= 0:
                return 0.0
            return min(1.0, self._current / self._total)
