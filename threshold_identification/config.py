"""Solver configuration shared by all linear-program backends."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class SolverConfig:
    msg: bool = False                  # let the backend print its own log
    time_limit: Optional[float] = None  # seconds; None = run to completion
    threads: Optional[int] = None      # CBC worker threads (PuLP backend only)

    def __post_init__(self):
        if self.time_limit is not None and self.time_limit <= 0:
            raise ValueError(f"time_limit must be positive, got {self.time_limit}")
        if self.threads is not None and self.threads < 1:
            raise ValueError(f"threads must be >= 1, got {self.threads}")
