from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional

try:
    import tomllib
except ImportError:  # python < 3.11
    import tomli as tomllib

CREDENTIAL_KEYS = ("account", "username", "password")


def get_credentials_path() -> Path:
    credentials_file = os.getenv("BEANSTALK_CREDENTIALS_FILE")
    if credentials_file:
        return Path(credentials_file).expanduser()

    config_home = os.getenv("XDG_CONFIG_HOME")
    base_dir = (
        Path(config_home).expanduser() if config_home else Path.home() / ".config"
    )
    return base_dir / "beanstalk" / "credentials.toml"


def _read_credentials() -> dict:
    path = get_credentials_path()
    if not path.exists():
        return {}

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except (OSError, ValueError):
        return {}


def get_credentials() -> Dict[str, Optional[str]]:
    """Resolve account, username and password.

    Environment variables (``BEANSTALK_ACCOUNT`` etc.) win over the
    credentials file. Blank values are treated as missing.
    """
    stored = _read_credentials()
    credentials: Dict[str, Optional[str]] = {}

    for key in CREDENTIAL_KEYS:
        value = os.getenv(f"BEANSTALK_{key.upper()}")
        if not (value and value.strip()):
            value = stored.get(key)
        if not (isinstance(value, str) and value.strip()):
            value = None
        credentials[key] = value

    return credentials


def save_credentials(account: str, username: str, password: str) -> Path:
    path = get_credentials_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [
        f'{key} = "{_escape_toml(value)}"'
        for key, value in zip(CREDENTIAL_KEYS, (account, username, password))
    ]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    try:
        os.chmod(path, 0o600)
    except OSError:
        pass
    return path


def _escape_toml(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')
