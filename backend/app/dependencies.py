# backend/app/dependencies.py
import logging
import random
from typing import Callable, Optional

from app.core.settings import settings

log = logging.getLogger("uvicorn.error")


class SimulatedServerError(RuntimeError):
    pass


class FaultInjector:
    """Fails a fixed fraction of requests on purpose so error paths get exercised."""

    def __init__(self, rate: float, rng: Optional[Callable[[], float]] = None):
        self.rate = max(0.0, min(1.0, float(rate)))
        self._rng = rng or random.random

    def maybe_fail(self) -> None:
        if self.rate > 0.0 and self._rng() < self.rate:
            log.warning(f"[faults] injecting simulated failure (rate={self.rate})")
            raise SimulatedServerError("Simulated server error")


def get_fault_injector() -> FaultInjector:
    return FaultInjector(settings.contact_fault_rate)
