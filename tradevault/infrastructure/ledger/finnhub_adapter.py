"""
Adapter: Finnhub market data.

Implements MarketDataPort against the Finnhub `/quote` endpoint.
Quotes are cached per symbol for a short TTL; the cache is shared by
all request threads and guarded by a lock. Expired entries are dropped
on every insert and the oldest entries go once `max_entries` is reached.
"""

import logging
import threading
import time
from collections import OrderedDict
from decimal import Decimal
from typing import Optional

import httpx

from tradevault.domain.errors import ExternalServiceError
from tradevault.domain.ledger.entities import Quote
from tradevault.domain.ledger.ports import MarketDataPort

logger = logging.getLogger(__name__)

SERVICE_NAME = "Finnhub"


def _decimal(payload: dict, key: str) -> Decimal:
    value = payload.get(key)
    return Decimal(str(value)) if value is not None else Decimal("0")


class FinnhubMarketDataAdapter(MarketDataPort):
    """Finnhub quote client with a TTL cache.

    Args:
        api_key: Finnhub API token.
        base_url: API root, e.g. https://finnhub.io/api/v1.
        cache_seconds: How long a quote is served from cache.
        timeout: HTTP timeout in seconds.
        max_entries: Upper bound on cached symbols.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://finnhub.io/api/v1",
        cache_seconds: int = 60,
        timeout: float = 10.0,
        max_entries: int = 512,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._cache_seconds = cache_seconds
        self._timeout = timeout
        self._max_entries = max_entries
        self._cache: OrderedDict[str, tuple[float, Quote]] = OrderedDict()
        self._lock = threading.Lock()
        self._stats = {"requests": 0, "cache_hits": 0, "errors": 0}

    @property
    def stats(self) -> dict:
        return dict(self._stats)

    @property
    def cache_size(self) -> int:
        with self._lock:
            return len(self._cache)

    def get_quote(self, symbol: str) -> Quote:
        symbol = symbol.upper()
        now = time.monotonic()
        with self._lock:
            cached = self._cache.get(symbol)
            if cached is not None and now - cached[0] < self._cache_seconds:
                self._stats["cache_hits"] += 1
                return cached[1]

        quote = self._fetch(symbol)
        with self._lock:
            self._store(symbol, quote, time.monotonic())
        return quote

    def _store(self, symbol: str, quote: Quote, now: float) -> None:
        # Entries are kept in insertion order, so expired ones lead.
        self._cache.pop(symbol, None)
        while self._cache:
            oldest = next(iter(self._cache.values()))
            if now - oldest[0] < self._cache_seconds:
                break
            self._cache.popitem(last=False)
        while len(self._cache) >= self._max_entries:
            self._cache.popitem(last=False)
        self._cache[symbol] = (now, quote)

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def _fetch(self, symbol: str) -> Quote:
        if not self._api_key:
            raise ExternalServiceError(SERVICE_NAME, "API key not configured")

        self._stats["requests"] += 1
        try:
            with httpx.Client(timeout=self._timeout) as client:
                resp = client.get(
                    f"{self._base_url}/quote",
                    params={"symbol": symbol, "token": self._api_key},
                )
                resp.raise_for_status()
                payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            self._stats["errors"] += 1
            logger.error("Finnhub quote for %s failed: %s", symbol, exc)
            raise ExternalServiceError(SERVICE_NAME, str(exc)) from exc

        current = _decimal(payload, "c")
        if current <= 0:
            # Finnhub answers unknown symbols with an all-zero payload.
            raise ExternalServiceError(SERVICE_NAME, f"no price for {symbol}")

        return Quote(
            symbol=symbol,
            current=current,
            change=_decimal(payload, "d"),
            percent_change=_decimal(payload, "dp"),
            high=_decimal(payload, "h"),
            low=_decimal(payload, "l"),
            open=_decimal(payload, "o"),
            previous_close=_decimal(payload, "pc"),
            timestamp=int(payload.get("t") or time.time()),
        )
