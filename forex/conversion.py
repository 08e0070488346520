# forex/conversion.py

import math
from datetime import datetime, timezone
from typing import Mapping, Optional

from pydantic import BaseModel

from forex.provider import BASE_CURRENCY


class UnsupportedCurrencyError(ValueError):
    def __init__(self, from_currency: str, to_currency: str):
        self.from_currency = from_currency
        self.to_currency = to_currency
        super().__init__(f"Unsupported currency: {from_currency} or {to_currency}")


class ConversionResult(BaseModel):
    amount: float
    from_currency: str
    to_currency: str
    converted_amount: float
    effective_rate: float  # 1 from_currency 당 to_currency 단위 수
    timestamp: datetime

    @property
    def same_currency(self) -> bool:
        return self.from_currency == self.to_currency


def base_rate(table: Mapping[str, float], currency: str, base: str = BASE_CURRENCY) -> Optional[float]:
    """Units of `currency` per one unit of `base`; None when the table has no usable rate."""
    if currency == base:
        return 1.0
    rate = table.get(currency)
    if rate is None or not math.isfinite(rate) or rate <= 0:
        return None
    return rate


def convert(
    table: Mapping[str, float],
    amount: float,
    from_currency: str,
    to_currency: str,
    timestamp: Optional[datetime] = None,
    base: str = BASE_CURRENCY,
) -> ConversionResult:
    """
    base 통화를 거쳐 교차 환율을 계산한다.

    rate(from, to) = (1 / baseRate(from)) * baseRate(to), baseRate(base) = 1.
    from == to 이면 테이블 조회 없이 1.0 (알 수 없는 코드여도 성립).
    """
    timestamp = timestamp or datetime.now(timezone.utc)

    if from_currency == to_currency:
        rate = 1.0
    else:
        from_rate = base_rate(table, from_currency, base)
        to_rate = base_rate(table, to_currency, base)
        if from_rate is None or to_rate is None:
            raise UnsupportedCurrencyError(from_currency, to_currency)
        rate = (1 / from_rate) * to_rate

    converted = amount * rate
    if math.isnan(rate) or math.isnan(converted):
        raise UnsupportedCurrencyError(from_currency, to_currency)

    return ConversionResult(
        amount=amount,
        from_currency=from_currency,
        to_currency=to_currency,
        converted_amount=converted,
        effective_rate=rate,
        timestamp=timestamp,
    )


def format_amount(value: float) -> str:
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


def format_conversion(result: ConversionResult, rate_label: str = "Live") -> str:
    amount = format_amount(result.amount)
    if result.same_currency:
        return f"💰 {amount} {result.from_currency} = {amount} {result.to_currency} (same currency)"

    when = result.timestamp.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
    return (
        f"💰 {amount} {result.from_currency} = {result.converted_amount:.2f} {result.to_currency}\n"
        f"📈 {rate_label} Rate: 1 {result.from_currency} = {result.effective_rate:.4f} {result.to_currency}\n"
        f"🕐 {when}"
    )
