"""처리 시간 측정"""

import time
from typing import Optional


class Stopwatch:
    """perf_counter 기반 스톱워치

    Usage::

        with Stopwatch() as watch:
            response = await call_next(request)
        logger.info(f"took {watch.elapsed_ms:.2f}ms")

    블록 안에서 읽으면 현재까지의 경과 시간을, 블록을 벗어난 뒤에는
    고정된 값을 반환합니다. 예외가 발생해도 측정은 멈춥니다.
    """

    def __init__(self) -> None:
        self._started: Optional[float] = None
        self._stopped: Optional[float] = None

    def __enter__(self) -> "Stopwatch":
        self._started = time.perf_counter()
        self._stopped = None
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._stopped = time.perf_counter()
        return False

    @property
    def elapsed_ms(self) -> float:
        if self._started is None:
            return 0.0
        end = self._stopped if self._stopped is not None else time.perf_counter()
        return (end - self._started) * 1000
