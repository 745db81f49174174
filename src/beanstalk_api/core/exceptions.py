"""Custom exceptions for beanstalk_api.

Every failure surfaced by the client is a ``BeanstalkError`` subclass, so
callers can catch the whole family or a single kind:

- ``ArgumentError``: bad caller input, raised before any network call.
- ``TransportError``: the request never produced an HTTP response.
- ``ApiError``: the service answered with a status other than 200.
- ``ParseError``: the service answered 200 with a body that is not XML.
"""

from typing import Iterable, List, Optional, Tuple


class BeanstalkError(Exception):
    """Base class for all errors raised by beanstalk_api."""


class ArgumentError(BeanstalkError):
    """Raised when required arguments are missing or invalid.

    Attributes:
        fields: Names of the offending arguments, if known.
    """

    def __init__(self, message: str, fields: Iterable[str] = ()):
        super().__init__(message)
        self.fields: Tuple[str, ...] = tuple(fields)

    @classmethod
    def missing(cls, fields: Iterable[str]) -> "ArgumentError":
        """Build an error naming every missing required field."""
        fields = tuple(fields)
        noun = "field" if len(fields) == 1 else "fields"
        return cls(f"Missing required {noun}: {', '.join(fields)}", fields)


class CredentialsError(ArgumentError):
    """Raised when account name, username or password is not configured.

    Extends ArgumentError with setup instructions in the default message.
    """

    def __init__(self, fields: Iterable[str] = ()):
        fields = tuple(fields)
        super().__init__(self._default_message(fields), fields)

    @staticmethod
    def _default_message(fields: Tuple[str, ...]) -> str:
        missing = ", ".join(fields) if fields else "account, username, password"
        return f"""Beanstalk credentials are incomplete (missing: {missing}).

Account name, username and password are all required.

Set them using one of these methods:

  1. Environment variables:
     export BEANSTALK_ACCOUNT=example
     export BEANSTALK_USERNAME=jane
     export BEANSTALK_PASSWORD=secret

  2. In your project's .env file

  3. In ~/.config/beanstalk/credentials.toml:
     account = "example"
     username = "jane"
     password = "secret"

The account name is the first segment of your Beanstalk URL
(https://example.beanstalkapp.com)."""


class TransportError(BeanstalkError):
    """Raised when the request fails before an HTTP response is received.

    Attributes:
        code: Short identifier of the underlying failure (exception class name).
        message: Description from the underlying HTTP library.
    """

    def __init__(self, code: str, message: str):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


class ApiError(BeanstalkError):
    """Raised when the service responds with a status other than 200.

    Attributes:
        status_code: HTTP status code of the response.
        message: Generic failure description.
        body: Raw response text, truncated, for diagnostics.
        errors: Messages from a Beanstalk ``<errors>`` document, if any.
    """

    def __init__(
        self,
        status_code: int,
        message: Optional[str] = None,
        body: str = "",
        errors: Optional[List[str]] = None,
    ):
        self.status_code = status_code
        self.message = message or f"Request failed with status {status_code}"
        self.body = body
        self.errors = list(errors or [])

        text = f"{status_code}: {self.message}"
        if self.errors:
            text = f"{text} ({'; '.join(self.errors)})"
        super().__init__(text)


class ParseError(BeanstalkError):
    """Raised when a successful response body is not well-formed XML."""

    def __init__(self, message: str, body: str = ""):
        super().__init__(f"Invalid XML in response: {message}")
        self.message = message
        self.body = body
