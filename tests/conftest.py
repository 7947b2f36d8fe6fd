"""Pytest fixtures."""

from typing import Any, Callable, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from backoffice.config import Settings
from backoffice.main import create_app

MLS_URL = "https://mls.example.com/odata/Property"
MLS_TOKEN = "s3cret-token"


class FakeMLS:
    """Records outbound requests and answers with a configurable handler."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.respond: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
            200, json={"@odata.count": 0, "value": []}
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    def reply(self, status_code: int = 200, **kwargs: Any) -> None:
        self.respond = lambda request: httpx.Response(status_code, **kwargs)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_params(self) -> Dict[str, str]:
        return dict(self.last.url.params)


@pytest.fixture
def settings() -> Settings:
    return Settings(mls_api_url=MLS_URL, mls_access_token=MLS_TOKEN, database_url="sqlite://")


@pytest.fixture
def fake_mls() -> FakeMLS:
    return FakeMLS()


@pytest.fixture
def transport(fake_mls: FakeMLS) -> httpx.MockTransport:
    return httpx.MockTransport(fake_mls)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield eng
    eng.dispose()


@pytest.fixture
def client(settings, engine, transport):
    app = create_app(settings=settings, engine=engine, mls_transport=transport)
    with TestClient(app) as c:
        yield c
