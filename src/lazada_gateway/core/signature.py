"""Lazada Open Platform request signing."""

import hashlib
import hmac
from typing import Any, Mapping


def format_value(value: Any) -> str:
    """
    Render a parameter value the way it is signed and sent on the wire.

    Lazada verifies the signature byte for byte, so the rendering must be
    stable: booleans are lower case, integral floats lose their ``.0`` and
    ``None`` becomes ``null``.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if value is None:
        return "null"
    return str(value)


def canonical_string(path: str, params: Mapping[str, Any]) -> str:
    """Concatenate the path and every ``key + value`` pair in sorted key order."""
    return path + "".join(key + format_value(params[key]) for key in sorted(params))


def sign_request(path: str, params: Mapping[str, Any], secret: str) -> str:
    """
    Compute the ``sign`` field for a Lazada API call.

    Args:
        path (str): API path without host, e.g. ``/products/get``.
        params (Mapping[str, Any]): Every request field except ``sign``.
        secret (str): Application shared secret.

    Returns:
        str: Upper-case hex HMAC-SHA256 of the canonical string.
    """
    digest = hmac.new(
        secret.encode("utf-8"),
        canonical_string(path, params).encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return digest.upper()
