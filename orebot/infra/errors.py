from __future__ import annotations

import logging
from collections import defaultdict


class ErrorTracker:
    """Counts repeated errors per key and only logs every ``every``-th one after the first."""

    def __init__(self, log: logging.Logger):
        self.log = log
        self.counts: dict[str, int] = defaultdict(int)

    def tick(self, key: str, err: BaseException | str | None = None, every: int = 25) -> None:
        self.counts[key] += 1
        n = self.counts[key]
        if n == 1 or n % every == 0:
            suffix = f" last={err}" if err else ""
            self.log.warning("%s failed (%dx)%s", key, n, suffix)

    def clear(self, key: str) -> None:
        self.counts.pop(key, None)
