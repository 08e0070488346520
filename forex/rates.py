# forex/rates.py

import asyncio
import time
from types import MappingProxyType
from typing import Callable, Dict, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from app.config import RATES_CACHE_TTL_SECONDS
from forex.provider import BASE_CURRENCY, RateProvider, RateTable
from utils.logger import logger

# 업스트림 장애 시 사용하는 고정 환율 (1 USD 기준)
FALLBACK_RATES: Dict[str, float] = {
    "EUR": 0.85, "GBP": 0.73, "JPY": 149.50, "INR": 83.25,
    "CAD": 1.37, "AUD": 1.53, "CHF": 0.88, "CNY": 7.28,
    "SEK": 10.85, "NOK": 10.95, "DKK": 6.35, "PLN": 4.05,
}

RateSource = Literal["live", "fallback"]


class CacheEntry(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    # 읽기 전용 뷰. 갱신은 항목 전체 교체로만 한다
    rates: MappingProxyType
    fetched_at: float
    source: RateSource


class RateStore:
    """
    프로세스 전체에서 공유하는 환율 캐시.

    - 캐시 나이가 ttl 미만이면 네트워크 없이 그대로 반환
    - 아니면 provider 로 새로 가져오고, 실패하면 FALLBACK_RATES 로 교체
    - 항목은 통째로 교체되므로 읽는 쪽은 항상 완전한 테이블을 본다
    """

    def __init__(
        self,
        provider: Optional[RateProvider] = None,
        ttl_seconds: float = RATES_CACHE_TTL_SECONDS,
        fallback_rates: Optional[RateTable] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.provider = provider or RateProvider()
        self.ttl_seconds = ttl_seconds
        self.fallback_rates = dict(fallback_rates or FALLBACK_RATES)
        self.base = BASE_CURRENCY
        self._clock = clock
        self._entry: Optional[CacheEntry] = None
        self._refresh_lock = asyncio.Lock()

    @property
    def entry(self) -> Optional[CacheEntry]:
        """Current cache entry, without triggering a refresh."""
        return self._entry

    def age(self) -> Optional[float]:
        if self._entry is None:
            return None
        return self._clock() - self._entry.fetched_at

    def _is_fresh(self, entry: Optional[CacheEntry]) -> bool:
        return entry is not None and self._clock() - entry.fetched_at < self.ttl_seconds

    async def get_entry(self) -> CacheEntry:
        entry = self._entry
        if self._is_fresh(entry):
            logger.debug("[RateStore] Using cached rates")
            return entry

        async with self._refresh_lock:
            # 락을 기다리는 동안 다른 요청이 이미 갱신했을 수 있다
            entry = self._entry
            if self._is_fresh(entry):
                return entry
            self._entry = await self._refresh()
            return self._entry

    async def get_rates(self) -> Mapping[str, float]:
        return (await self.get_entry()).rates

    async def _refresh(self) -> CacheEntry:
        logger.info("[RateStore] Fetching live exchange rates...")
        result = await self.provider.fetch()

        if result.ok:
            logger.info(f"[RateStore] Live rates fetched successfully ({len(result.rates)} currencies)")
            return CacheEntry(rates=MappingProxyType(dict(result.rates)), fetched_at=self._clock(), source="live")

        logger.error(f"[RateStore] Failed to fetch live rates: {result.error}")
        logger.warning("[RateStore] Using fallback exchange rates")
        return CacheEntry(rates=MappingProxyType(dict(self.fallback_rates)), fetched_at=self._clock(), source="fallback")
