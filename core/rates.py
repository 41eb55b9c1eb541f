"""
Exchange-rate cache used by the currency endpoint.

``RateCache`` owns its state (rates, fetch time, refresh interval); there is
one process-wide instance built from settings, and tests build their own.
A refresh that fails keeps serving the last good rates. Only a cache that
has never fetched successfully raises ``RateUnavailable``.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, Optional

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

TIMEOUT = (5, 15)  # connect, read


class RateUnavailable(Exception):
    pass


def fetch_rates(url: str) -> Dict[str, float]:
    r = requests.get(url, timeout=TIMEOUT)
    r.raise_for_status()
    body = r.json()
    rates = body.get("rates") if isinstance(body, dict) else None
    if not isinstance(rates, dict) or not rates:
        raise RateUnavailable("Malformed rates payload")
    return {str(k): float(v) for k, v in rates.items()}


class RateCache:
    def __init__(
        self,
        url: str,
        ttl_seconds: int = 12 * 60 * 60,
        fetcher: Optional[Callable[[str], Dict[str, float]]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.url = url
        self.ttl_seconds = ttl_seconds
        self._fetch = fetcher or fetch_rates
        self._clock = clock
        self._lock = threading.Lock()
        self._rates: Dict[str, float] | None = None
        self._fetched_at: float | None = None
        self.stale = False

    def is_fresh(self) -> bool:
        return self._fetched_at is not None and (self._clock() - self._fetched_at) < self.ttl_seconds

    def get(self) -> Dict[str, float]:
        with self._lock:
            if self.is_fresh():
                return dict(self._rates)
            try:
                self._rates = self._fetch(self.url)
                self._fetched_at = self._clock()
                self.stale = False
            except Exception as e:
                if self._rates is None:
                    raise RateUnavailable(f"Currency rates unavailable: {e}") from e
                logger.warning("Rate refresh failed, serving stale rates: %s", e)
                self.stale = True
            return dict(self._rates)

    def clear(self) -> None:
        with self._lock:
            self._rates = None
            self._fetched_at = None
            self.stale = False


_default: RateCache | None = None


def default_cache() -> RateCache:
    global _default
    if _default is None:
        _default = RateCache(
            url=getattr(settings, "CURRENCY_RATES_URL", ""),
            ttl_seconds=int(getattr(settings, "CURRENCY_RATES_TTL", 12 * 60 * 60)),
        )
    return _default
