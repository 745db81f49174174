# Load .env vars from file before everything else
from dotenv import load_dotenv

load_dotenv()

from .logger import setup_logging  # noqa: E402

setup_logging()

# TYPE_CHECKING imports provide full IDE support (autocomplete, type hints)
# while __getattr__ enables lazy loading at runtime for fast CLI startup
from typing import TYPE_CHECKING  # noqa: E402

if TYPE_CHECKING:
    from .config import BeanstalkConfig
    from .core.api.beanstalk import BeanstalkClient
    from .core.exceptions import (
        ApiError,
        ArgumentError,
        BeanstalkError,
        CredentialsError,
        ParseError,
        TransportError,
    )
    from .core.utils.xml import element_to_python

_EXCEPTIONS = (
    "ApiError",
    "ArgumentError",
    "BeanstalkError",
    "CredentialsError",
    "ParseError",
    "TransportError",
)


def __getattr__(name):
    """Lazily import core modules only when accessed."""
    if name == "BeanstalkClient":
        from .core.api.beanstalk import BeanstalkClient

        return BeanstalkClient
    elif name == "BeanstalkConfig":
        from .config import BeanstalkConfig

        return BeanstalkConfig
    elif name == "element_to_python":
        from .core.utils.xml import element_to_python

        return element_to_python
    elif name in _EXCEPTIONS:
        from .core import exceptions

        return getattr(exceptions, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "BeanstalkClient",
    "BeanstalkConfig",
    "element_to_python",
    *_EXCEPTIONS,
]
