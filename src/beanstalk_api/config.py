"""Configuration management for the Beanstalk API client."""

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator

from .core.credentials import get_credentials
from .core.exceptions import ArgumentError
from .core.validation import validate_credentials

DEFAULT_HOST = "beanstalkapp.com"
DEFAULT_TIMEOUT = 30.0


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("true", "1", "yes", "on")


def _env_timeout() -> float:
    value = os.getenv("BEANSTALK_TIMEOUT")
    if value is None or not value.strip():
        return DEFAULT_TIMEOUT
    try:
        timeout = float(value)
    except ValueError:
        timeout = 0.0
    if not timeout > 0:
        raise ArgumentError(
            f"BEANSTALK_TIMEOUT must be a positive number of seconds, got {value!r}",
            ("timeout",),
        )
    return timeout


class BeanstalkConfig(BaseModel):
    """Immutable connection settings for one Beanstalk account.

    The password is kept as a ``SecretStr`` so it never shows up in reprs
    or log lines.
    """

    model_config = ConfigDict(frozen=True)

    account: str
    username: str
    password: SecretStr
    host: str = Field(default=DEFAULT_HOST, min_length=1)
    verify_tls: bool = True
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)

    @property
    def base_url(self) -> str:
        """Root of the API, e.g. ``https://example.beanstalkapp.com/api``."""
        return f"https://{self.account}.{self.host}/api"

    @model_validator(mode="after")
    def check_credentials(self) -> "BeanstalkConfig":
        """Blank credentials raise CredentialsError rather than ValidationError."""
        validate_credentials(
            self.account, self.username, self.password.get_secret_value()
        )
        return self

    @classmethod
    def from_env(
        cls,
        account: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> "BeanstalkConfig":
        """Build a config from explicit values, environment and credentials file.

        Explicit arguments take precedence, then ``BEANSTALK_*`` environment
        variables, then ``credentials.toml``.

        Raises:
            CredentialsError: If any credential is still missing.
        """
        stored = get_credentials()
        account = account or stored["account"]
        username = username or stored["username"]
        password = password or stored["password"]
        validate_credentials(account, username, password)

        return cls(
            account=account,
            username=username,
            password=password,
            host=os.getenv("BEANSTALK_HOST") or DEFAULT_HOST,
            verify_tls=_env_flag("BEANSTALK_VERIFY_TLS", True),
            timeout=_env_timeout(),
        )
