"""
Wall-clock timing for backends.

Every backend times its own stages (decomposition, solve, residuals) and
hands the breakdown to ``Result.timing``, so summaries can report where a
fit spent its time.
"""

import time
from contextlib import contextmanager
from typing import Iterator


class Timer:
    """
    Total time plus per-stage sections.

    Usage:
        timer = Timer()
        timer.start()
        with timer.section('qr_decomposition'):
            qr = qr_cpu(X)
        with timer.section('solve'):
            beta = qr_solve_cpu(X, y, check_rank=True, qr_result=qr)
        timer.stop()
        timer.result()
        # {'total_seconds': 0.0004, 'qr_decomposition': 0.0002, 'solve': 0.0001}
    """

    def __init__(self):
        self._sections: dict[str, float] = {}
        self._started_at: float | None = None
        self._total: float | None = None

    def start(self) -> None:
        self._started_at = time.perf_counter()

    def stop(self) -> None:
        if self._started_at is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._total = time.perf_counter() - self._started_at

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Time the enclosed block under ``name``; repeats add up."""
        began = time.perf_counter()
        try:
            yield
        finally:
            self._sections[name] = (
                self._sections.get(name, 0.0) + time.perf_counter() - began
            )

    def result(self) -> dict[str, float]:
        """
        Timing breakdown for Result.timing.

        Raises:
            RuntimeError: If the timer has not been stopped
        """
        if self._total is None:
            raise RuntimeError("Timer.result() called before stop()")
        return {'total_seconds': self._total, **self._sections}


@contextmanager
def timed() -> Iterator[Timer]:
    """
    Time a block of user code.

    Usage:
        with timed() as timer:
            solution = lm("expression ~ treatment * time", data)
        timer.result()['total_seconds']
    """
    timer = Timer()
    timer.start()
    try:
        yield timer
    finally:
        timer.stop()
