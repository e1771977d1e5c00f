"""Shared fixtures for the gateway tests."""

import datetime
import os
import tempfile
from unittest.mock import MagicMock

# Point the module-level engine at a throwaway database before the package is imported.
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tempfile.mkdtemp(), "gateway.db")

import pytest
import requests
from sqlalchemy.orm import sessionmaker

from lazada_gateway.core.client import LazadaClient
from lazada_gateway.core.credentials import SqlCredentialStore
from lazada_gateway.core.database import make_engine
from lazada_gateway.core.init_db import init_db
from lazada_gateway.core.models import Credential
from lazada_gateway.core.settings import LazadaSettings

FIXED_NOW = datetime.datetime(2023, 11, 14, 22, 13, 20, tzinfo=datetime.UTC)
FIXED_MILLIS = "1700000000000"


@pytest.fixture
def mock_settings() -> LazadaSettings:
    """Mock settings for testing."""
    return LazadaSettings(
        app_key="K",
        app_secret="S",
        api_url="https://api.example.test/rest",
        auth_url="https://auth.example.test/rest",
    )


@pytest.fixture
def clock():
    """Fixed clock at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def session_factory(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'credentials.db'}")
    init_db(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def store(session_factory, clock) -> SqlCredentialStore:
    return SqlCredentialStore(session_factory, clock=clock)


@pytest.fixture
def credential() -> Credential:
    return Credential(
        access_token="access-123",
        refresh_token="refresh-456",
        expires_at=FIXED_NOW + datetime.timedelta(hours=1),
        refresh_expires_at=FIXED_NOW + datetime.timedelta(hours=2),
        created_at=FIXED_NOW,
    )


def make_response(status_code: int = 200, payload=None, text: str = "") -> MagicMock:
    """Build a stand-in for requests.Response."""
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.text = text
    if payload is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} Error", response=response
        )
    return response


@pytest.fixture
def http_session() -> MagicMock:
    session = MagicMock(spec=requests.Session)
    session.request.return_value = make_response(payload={"code": "0", "data": {}})
    return session


@pytest.fixture
def lazada_client(http_session) -> LazadaClient:
    return LazadaClient(session=http_session)
