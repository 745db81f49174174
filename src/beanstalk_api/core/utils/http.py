"""HTTP utilities for Beanstalk API communication."""

import platform
from importlib import metadata

import requests

from beanstalk_api.config import BeanstalkConfig

XML_CONTENT_TYPE = "application/xml"
PACKAGE_NAME = "beanstalk-api"


def get_user_agent() -> str:
    """User-Agent sent with every request.

    Example: ``beanstalk-api/0.5.0 python-requests/2.32.3 Python/3.12.3 (Linux x86_64)``
    """
    try:
        version = metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        version = "unknown"

    return (
        f"{PACKAGE_NAME}/{version} python-requests/{requests.__version__} "
        f"Python/{platform.python_version()} ({platform.system()} {platform.machine()})"
    )


def get_authenticated_requests_session(config: BeanstalkConfig) -> requests.Session:
    """Create requests Session with Beanstalk authentication.

    Sets HTTP basic auth, the XML content headers, the User-Agent and TLS
    verification from ``config``. Provides a single place to manage
    connection settings for every Beanstalk request.

    Args:
        config: Connection settings for the account.

    Returns:
        Configured requests.Session

    Example:
        session = get_authenticated_requests_session(config)
        response = session.get(url, timeout=config.timeout)
        # Remember to close: session.close()
    """
    session = requests.Session()
    session.auth = (config.username, config.password.get_secret_value())
    session.verify = config.verify_tls
    session.headers.update(
        {
            "Content-Type": XML_CONTENT_TYPE,
            "Accept": XML_CONTENT_TYPE,
            "User-Agent": get_user_agent(),
        }
    )
    return session
