"""Pacing between provider calls.

Responsibilities:
- Provide a single explicit suspension point between chunk synthesis requests.
- Keep the delay policy injectable so tests never sleep.
"""

from __future__ import annotations

from dataclasses import dataclass
from time import sleep
from typing import Callable


@dataclass(slots=True)
class ChunkPacer:
    """Fixed inter-chunk delay used to respect provider rate limits."""

    delay_ms: int = 1000
    sleeper: Callable[[float], None] = sleep

    def pause(self) -> None:
        """Block for the configured delay; no-op for a zero delay."""

        if self.delay_ms <= 0:
            return
        self.sleeper(self.delay_ms / 1000.0)
