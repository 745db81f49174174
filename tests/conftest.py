"""
Test configuration and fixtures for beanstalk_api tests.

Provides shared fixtures for:
- Client configuration and a client with a mocked HTTP session
- Canned ``requests.Response`` objects
- Environment variable isolation
"""

from typing import Callable, Dict, Optional
from unittest.mock import Mock

import pytest
import requests

from beanstalk_api.config import BeanstalkConfig
from beanstalk_api.core.api.beanstalk import BeanstalkClient

BEANSTALK_ENV_VARS = (
    "BEANSTALK_ACCOUNT",
    "BEANSTALK_USERNAME",
    "BEANSTALK_PASSWORD",
    "BEANSTALK_HOST",
    "BEANSTALK_VERIFY_TLS",
    "BEANSTALK_TIMEOUT",
    "BEANSTALK_RICH_UI",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Keep developer credentials out of every test.

    Clears BEANSTALK_* variables and points the credentials file at a path
    that does not exist.
    """
    for key in BEANSTALK_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv(
        "BEANSTALK_CREDENTIALS_FILE", str(tmp_path / "no-credentials.toml")
    )


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> Dict[str, str]:
    """Provide patched credential environment variables.

    Returns:
        Dictionary of environment variables set.
    """
    env_vars = {
        "BEANSTALK_ACCOUNT": "example",
        "BEANSTALK_USERNAME": "jane",
        "BEANSTALK_PASSWORD": "s3cret",
        "LOG_LEVEL": "ERROR",
    }

    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)

    return env_vars


@pytest.fixture
def beanstalk_config() -> BeanstalkConfig:
    return BeanstalkConfig(account="example", username="jane", password="s3cret")


@pytest.fixture
def mock_session() -> Mock:
    """Mock requests.Session; set ``request.return_value`` per test."""
    return Mock(spec=requests.Session)


@pytest.fixture
def client(beanstalk_config: BeanstalkConfig, mock_session: Mock) -> BeanstalkClient:
    """Provide a client whose HTTP session is a mock."""
    beanstalk_client = BeanstalkClient(beanstalk_config)
    beanstalk_client.session = mock_session
    return beanstalk_client


@pytest.fixture
def make_response() -> Callable[..., requests.Response]:
    """Factory for canned responses.

    The returned response's ``close`` is a Mock so tests can assert that
    the executor released it. ``encoding`` is derived from the headers the
    way the requests adapter does it.
    """

    def _make_response(
        status_code: int = 200,
        body: str = "",
        url: str = "https://example.beanstalkapp.com/api/",
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        response = requests.Response()
        response.status_code = status_code
        response.headers.update(
            headers or {"Content-Type": "application/xml; charset=utf-8"}
        )
        response._content = body.encode("utf-8")
        response._content_consumed = True
        response.encoding = requests.utils.get_encoding_from_headers(response.headers)
        response.url = url
        response.raw = Mock()
        response.close = Mock()
        return response

    return _make_response
