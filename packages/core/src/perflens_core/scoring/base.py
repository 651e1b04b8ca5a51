"""Base scoring client implementing the Template Method pattern.

All scoring services share the same collection algorithm:
    run_until_success() → _call_with_retry() → _call_api()   ← only this differs per service

Subclasses implement two things only:
  - __init__: validate and store credentials / HTTP session
  - _call_api: request one report for a URL and return it serialized

The autocollector treats anything raised from run_until_success() as
terminal for the site.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

_MAX_ATTEMPTS = 3


class BaseScoringClient(ABC):
    MAX_ATTEMPTS: int = _MAX_ATTEMPTS

    def run_until_success(self, url: str) -> str:
        """Return a serialized report for ``url``, retrying transient failures.

        Raises the last error once MAX_ATTEMPTS attempts have failed.
        """
        return self._call_with_retry(url)

    @abstractmethod
    def _call_api(self, url: str) -> str:
        """Make a single scoring request and return the serialized report.

        Raises on failure; _call_with_retry handles retries and logging.
        """

    def _call_with_retry(self, url: str) -> str:
        for attempt in range(self.MAX_ATTEMPTS):
            try:
                return self._call_api(url)
            except Exception as e:
                if attempt == self.MAX_ATTEMPTS - 1:
                    logger.error(
                        "%s failed for %s after %d attempts: %s",
                        self.__class__.__name__,
                        url,
                        self.MAX_ATTEMPTS,
                        e,
                    )
                    raise
                delay = 2**attempt
                logger.warning(
                    "%s error for %s (attempt %d/%d): %s. Retrying in %ds...",
                    self.__class__.__name__,
                    url,
                    attempt + 1,
                    self.MAX_ATTEMPTS,
                    e,
                    delay,
                )
                time.sleep(delay)
        raise RuntimeError(f"{self.__class__.__name__}.MAX_ATTEMPTS must be at least 1")
