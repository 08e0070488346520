"""
Shared pytest fixtures: a controllable clock and an upstream rates API
served through httpx.MockTransport.
"""

import httpx
import pytest

from forex.provider import RateProvider
from forex.rates import RateStore

RATES_API_BASE = "https://rates.test/v4/latest"


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class CountingHandler:
    """MockTransport handler that records how many requests reached the upstream."""

    def __init__(self, responder):
        self.responder = responder
        self.calls = 0
        self.urls = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        self.urls.append(str(request.url))
        return self.responder(request)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rates_payload():
    """Body in the shape returned by the latest-rates endpoint"""
    return {
        "base": "USD",
        "date": "2024-01-15",
        "rates": {
            "USD": 1,
            "EUR": 0.85,
            "GBP": 0.73,
            "JPY": 149.5,
        },
    }


@pytest.fixture
def make_provider():
    def _make(responder):
        handler = CountingHandler(responder)
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return RateProvider(base_url=RATES_API_BASE, client=client), handler
    return _make


@pytest.fixture
def make_store(make_provider, clock):
    def _make(responder, **kwargs):
        provider, handler = make_provider(responder)
        return RateStore(provider, clock=clock, **kwargs), handler
    return _make


@pytest.fixture
def live_store(make_store, rates_payload):
    store, _ = make_store(lambda request: httpx.Response(200, json=rates_payload))
    return store
