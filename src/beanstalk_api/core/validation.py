"""Validation utilities for beanstalk_api.

Provides the argument checks every resource method runs before it touches
the network.
"""

from typing import Any, Iterable, List, Mapping, Optional, Tuple

from beanstalk_api.core.exceptions import ArgumentError, CredentialsError


def is_blank(value: Any) -> bool:
    """Return True for None, empty strings and whitespace-only strings.

    Zero and False are real values, not blanks.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def require(**arguments: Any) -> None:
    """Ensure every keyword argument has a value.

    Raises:
        ArgumentError: Naming all blank arguments, in call order.
    """
    missing = [name for name, value in arguments.items() if is_blank(value)]
    if missing:
        raise ArgumentError.missing(missing)


def validate_credentials(account: Any, username: Any, password: Any) -> None:
    """Validate the three credential values used to build a client.

    Raises:
        CredentialsError: If any of them is blank.
    """
    missing = [
        name
        for name, value in (
            ("account", account),
            ("username", username),
            ("password", password),
        )
        if is_blank(value)
    ]
    if missing:
        raise CredentialsError(missing)


def normalize_params(
    params: Optional[Mapping[str, Any]], allowed: Iterable[str]
) -> List[Tuple[str, Any]]:
    """Validate an update mapping and return its entries in ``allowed`` order.

    Keys may use underscores or hyphens (``first_name`` or ``first-name``).
    Entries whose value is None are dropped.

    Args:
        params: Caller supplied fields to update.
        allowed: Accepted field names, in snake_case.

    Returns:
        List of ``(snake_case_key, value)`` pairs.

    Raises:
        ArgumentError: If params is empty or contains unknown keys.
    """
    if not params:
        raise ArgumentError("Nothing to update")

    allowed = tuple(allowed)
    normalized = {key.replace("-", "_"): value for key, value in params.items()}

    unknown = sorted(key for key in normalized if key not in allowed)
    if unknown:
        raise ArgumentError(
            f"Unknown field(s): {', '.join(unknown)}. "
            f"Accepted fields: {', '.join(allowed)}",
            unknown,
        )

    entries = [(key, normalized[key]) for key in allowed if key in normalized]
    entries = [(key, value) for key, value in entries if value is not None]
    if not entries:
        raise ArgumentError("Nothing to update")
    return entries
