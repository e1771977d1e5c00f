"""
FastAPI dependencies for the Lazada gateway.
"""

import logging
from functools import lru_cache

from lazada_gateway.core.authorization import AuthorizationFlow
from lazada_gateway.core.client import LazadaClient
from lazada_gateway.core.credentials import CredentialStore, SqlCredentialStore
from lazada_gateway.core.database import SessionLocal
from lazada_gateway.core.proxy import RequestProxy
from lazada_gateway.core.settings import LazadaSettings

# Setup logger
logger = logging.getLogger("dependencies")


@lru_cache()
def get_settings() -> LazadaSettings:
    """
    Get the settings for the gateway. Reads LAZADA_* vars from .env.
    """
    settings = LazadaSettings()
    if not settings.app_key or not settings.app_secret:
        logger.warning("LAZADA_APP_KEY or LAZADA_APP_SECRET is not set")
    logger.info(
        "get_settings returning LazadaSettings with api_url=%s auth_url=%s",
        settings.api_url,
        settings.auth_url,
    )
    return settings


@lru_cache()
def get_credential_store() -> CredentialStore:
    """
    Injection method to get the process-wide credential store.
    """
    return SqlCredentialStore(SessionLocal)


@lru_cache()
def get_lazada_client() -> LazadaClient:
    """
    Injection method to get the Lazada HTTP client.
    """
    return LazadaClient(timeout=get_settings().request_timeout)


def get_authorization_flow() -> AuthorizationFlow:
    return AuthorizationFlow(get_settings(), get_credential_store(), get_lazada_client())


def get_request_proxy() -> RequestProxy:
    return RequestProxy(get_settings(), get_credential_store(), get_lazada_client())
