"""Blocking HTTP transport to the Lazada hosts."""

import datetime
import logging
from typing import Any, Mapping, Optional

import requests

from lazada_gateway.core.errors import UpstreamRequestFailed
from lazada_gateway.core.settings import SIGN_METHOD
from lazada_gateway.core.signature import format_value, sign_request

logger = logging.getLogger("lazada")


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


def to_millis(moment: datetime.datetime) -> int:
    """Epoch milliseconds, the unit Lazada expects for ``timestamp``."""
    return int(moment.timestamp() * 1000)


def build_signed_params(
    path: str, params: Mapping[str, Any], app_key: str, app_secret: str, timestamp: int
) -> dict[str, str]:
    """
    Add the common fields to ``params`` and append the signature.

    Values are stringified before signing so the query string carries exactly
    the bytes that were signed.
    """
    fields = {key: format_value(value) for key, value in params.items()}
    fields["app_key"] = app_key
    fields["sign_method"] = SIGN_METHOD
    fields["timestamp"] = format_value(timestamp)
    fields["sign"] = sign_request(path, fields, app_secret)
    return fields


def _error_body(response: Optional[requests.Response]) -> Any:
    if response is None:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text or None


class LazadaClient:
    """Issues already-signed requests and returns the decoded JSON body."""

    def __init__(
        self, session: Optional[requests.Session] = None, timeout: Optional[float] = None
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    def call(self, method: str, base_url: str, path: str, params: Mapping[str, str]) -> Any:
        """
        Send one request to ``base_url + path`` with ``params`` in the query string.

        Raises:
            UpstreamRequestFailed: On network errors, non-2xx statuses, or a
                body that is not JSON.
        """
        url = f"{base_url}{path}"
        try:
            response = self.session.request(method, url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as e:
            body = _error_body(e.response)
            status = e.response.status_code if e.response is not None else None
            logger.error("Lazada %s %s failed with %s: %s", method, path, status, body)
            raise UpstreamRequestFailed(body) from e
        except requests.RequestException as e:
            logger.error("Lazada %s %s failed: %s", method, path, e)
            raise UpstreamRequestFailed(message=str(e)) from e

        logger.info("Lazada %s %s -> %s", method, path, response.status_code)
        try:
            return response.json()
        except ValueError as e:
            logger.error("Lazada %s %s returned a non-JSON body", method, path)
            raise UpstreamRequestFailed(response.text or None) from e
