"""Retry-with-exponential-backoff policy shared by every upstream adapter."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Tuple, Type, TypeVar

from ...config import RetrySettings

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """Call a function until it succeeds or attempts run out.

    The delay before attempt ``n + 1`` (zero-based ``n``) is
    ``base_delay_seconds * backoff_multiplier ** n``.

    Attributes:
        max_attempts: Total number of attempts, including the first
        base_delay_seconds: Delay after the first failure
        backoff_multiplier: Growth factor of the delay
        sleep: Sleep function, replaced in tests
    """

    max_attempts: int = 3
    base_delay_seconds: float = 2.0
    backoff_multiplier: float = 2.0
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._logger = logging.getLogger(__name__)

    @classmethod
    def from_settings(cls, settings: RetrySettings) -> RetryPolicy:
        return cls(
            max_attempts=settings.max_attempts,
            base_delay_seconds=settings.base_delay_seconds,
            backoff_multiplier=settings.backoff_multiplier,
        )

    def delay_for(self, attempt: int) -> float:
        """Delay to wait after the failed zero-based ``attempt``."""
        return self.base_delay_seconds * self.backoff_multiplier ** attempt

    def call(
        self,
        fn: Callable[[], T],
        retry_on: Tuple[Type[BaseException], ...] = (Exception,),
        operation: str = "call",
    ) -> T:
        """Run ``fn`` under this policy.

        Exceptions not listed in ``retry_on`` propagate immediately.

        Raises:
            The last exception raised by ``fn`` once attempts are exhausted.
        """
        for attempt in range(self.max_attempts):
            try:
                return fn()
            except retry_on as e:
                if attempt == self.max_attempts - 1:
                    self._logger.warning(
                        "Retries exhausted",
                        extra={
                            "operation": operation,
                            "attempts": self.max_attempts,
                            "error": str(e),
                        },
                    )
                    raise
                delay = self.delay_for(attempt)
                self._logger.debug(
                    "Attempt failed, retrying",
                    extra={
                        "operation": operation,
                        "attempt": attempt + 1,
                        "delay_seconds": delay,
                        "error": str(e),
                    },
                )
                self.sleep(delay)
        raise AssertionError("unreachable")
