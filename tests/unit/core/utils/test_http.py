"""Tests for HTTP utilities for Beanstalk API communication."""

from importlib import metadata
from unittest.mock import patch

import requests

from beanstalk_api.config import BeanstalkConfig
from beanstalk_api.core.utils.http import (
    get_authenticated_requests_session,
    get_user_agent,
)


class TestGetAuthenticatedRequestsSession:
    """Test the get_authenticated_requests_session utility function."""

    def test_session_uses_basic_auth(self, beanstalk_config):
        """Test session carries username and password for basic auth."""
        session = get_authenticated_requests_session(beanstalk_config)

        assert session.auth == ("jane", "s3cret")
        session.close()

    def test_session_sets_xml_headers(self, beanstalk_config):
        """Test session sends and accepts XML."""
        session = get_authenticated_requests_session(beanstalk_config)

        assert session.headers["Content-Type"] == "application/xml"
        assert session.headers["Accept"] == "application/xml"
        assert session.headers["User-Agent"] == get_user_agent()
        session.close()

    def test_session_verifies_tls_by_default(self, beanstalk_config):
        """Test certificate verification is on unless switched off."""
        session = get_authenticated_requests_session(beanstalk_config)

        assert session.verify is True
        session.close()

    def test_session_tls_verification_can_be_disabled(self):
        """Test verify_tls=False is passed through to the session."""
        config = BeanstalkConfig(
            account="example", username="jane", password="s3cret", verify_tls=False
        )

        session = get_authenticated_requests_session(config)

        assert session.verify is False
        session.close()

    def test_returns_valid_session(self, beanstalk_config):
        """Test returned object is a valid requests.Session."""
        session = get_authenticated_requests_session(beanstalk_config)

        assert isinstance(session, requests.Session)
        session.close()


class TestUserAgent:
    def test_names_package_and_http_library(self):
        user_agent = get_user_agent()

        assert user_agent.startswith("beanstalk-api/")
        assert f"python-requests/{requests.__version__}" in user_agent
        assert "Python/" in user_agent

    def test_unknown_version_when_not_installed(self):
        with patch(
            "beanstalk_api.core.utils.http.metadata.version",
            side_effect=metadata.PackageNotFoundError,
        ):
            assert get_user_agent().startswith("beanstalk-api/unknown ")
