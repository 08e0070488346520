# forex/provider.py

import math
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from app.config import RATES_API_BASE, RATES_TIMEOUT_SECONDS
from utils.logger import logger

BASE_CURRENCY = "USD"

RateTable = Dict[str, float]


class FetchResult(BaseModel):
    """
    업스트림 호출 결과. rates 가 있으면 성공, 없으면 error 에 사유가 담긴다.
    """
    rates: Optional[RateTable] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.rates is not None

    @classmethod
    def success(cls, rates: RateTable) -> "FetchResult":
        return cls(rates=rates)

    @classmethod
    def failure(cls, error: str) -> "FetchResult":
        return cls(error=error)


def _is_valid_rate(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        value = float(value)
    except OverflowError:
        return False
    return math.isfinite(value) and value > 0


def parse_rates(data: Any, base: str = BASE_CURRENCY) -> FetchResult:
    """Extract a base-relative RateTable from a provider payload."""
    rates = data.get("rates") if isinstance(data, dict) else None
    if not isinstance(rates, dict) or not rates:
        return FetchResult.failure("Invalid API response - no rates data")

    # base 통화는 암묵적으로 1.0 이므로 테이블에 저장하지 않는다
    table = {
        code: float(value)
        for code, value in rates.items()
        if isinstance(code, str) and code != base and _is_valid_rate(value)
    }
    dropped = len(rates) - len(table) - (1 if base in rates else 0)
    if dropped:
        logger.debug(f"[RateProvider] Dropped {dropped} invalid rate entries")

    if not table:
        return FetchResult.failure("Invalid API response - no usable rates")
    return FetchResult.success(table)


class RateProvider:
    """
    "latest rates relative to USD" 엔드포인트 호출 담당.
    client 를 주입하지 않으면 호출마다 AsyncClient 를 연다.
    """

    def __init__(
        self,
        base_url: str = RATES_API_BASE,
        base: str = BASE_CURRENCY,
        timeout: float = RATES_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base = base
        self.url = f"{base_url.rstrip('/')}/{base}"
        self.timeout = timeout
        self._client = client

    async def _get(self) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(self.url, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(self.url)

    async def fetch(self) -> FetchResult:
        logger.info(f"[RateProvider] GET {self.url}")
        try:
            r = await self._get()
            r.raise_for_status()
            data = r.json()
        except httpx.HTTPStatusError as e:
            return FetchResult.failure(f"HTTP {e.response.status_code}: {e.response.reason_phrase}")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return FetchResult.failure(f"{type(e).__name__}: {e}")
        except ValueError as e:
            # JSON 이 아닌 응답 본문
            return FetchResult.failure(f"Invalid JSON body: {e}")
        except Exception as e:
            # 클라이언트 생성 실패 (SSL 인증서 등) 도 fallback 경로로 보낸다
            logger.error(f"[RateProvider] Unexpected error fetching rates: {e}", exc_info=True)
            return FetchResult.failure(f"{type(e).__name__}: {e}")

        return parse_rates(data, self.base)
