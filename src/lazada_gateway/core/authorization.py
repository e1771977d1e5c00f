"""Authorization code exchange against the Lazada auth host."""

import datetime
import logging
from typing import Any, Callable

from lazada_gateway.core.client import LazadaClient, build_signed_params, to_millis, utc_now
from lazada_gateway.core.credentials import CredentialStore
from lazada_gateway.core.errors import AuthorizationExchangeFailed, UpstreamRequestFailed
from lazada_gateway.core.models import Credential
from lazada_gateway.core.settings import LazadaSettings

logger = logging.getLogger("authorization")

TOKEN_CREATE_PATH = "/auth/token/create"
REQUIRED_TOKEN_FIELDS = ("access_token", "refresh_token", "expires_in", "refresh_expires_in")


class AuthorizationFlow:
    """Turns the ``code`` from Lazada's redirect into a stored Credential."""

    def __init__(
        self,
        settings: LazadaSettings,
        store: CredentialStore,
        client: LazadaClient,
        clock: Callable[[], datetime.datetime] = utc_now,
    ) -> None:
        self.settings = settings
        self.store = store
        self.client = client
        self.clock = clock

    def exchange_code(self, code: str) -> Credential:
        """
        Exchange an authorization code and persist the resulting credential.

        Args:
            code (str): The authorization code from the Lazada redirect.

        Returns:
            Credential: The newly stored credential.

        Raises:
            AuthorizationExchangeFailed: If Lazada rejects the code or the
                response lacks token fields. Nothing is persisted.
            StoreUnavailable: If the credential cannot be written.
        """
        logger.info("Exchanging Lazada authorization code %s...", code[:5])
        params = build_signed_params(
            TOKEN_CREATE_PATH,
            {"code": code},
            self.settings.app_key,
            self.settings.app_secret,
            to_millis(self.clock()),
        )
        try:
            data = self.client.call("GET", self.settings.auth_url, TOKEN_CREATE_PATH, params)
        except UpstreamRequestFailed as e:
            raise AuthorizationExchangeFailed("Lazada token request failed", e.body) from e

        received_at = self.clock()
        credential = self._credential_from_response(data, received_at)
        self.store.save(credential)
        logger.info("Lazada seller connected, access token valid until %s", credential.expires_at)
        return credential

    @staticmethod
    def _credential_from_response(data: Any, received_at: datetime.datetime) -> Credential:
        if not isinstance(data, dict) or any(data.get(f) in (None, "") for f in REQUIRED_TOKEN_FIELDS):
            logger.error("Lazada token response is missing token fields: %s", data)
            raise AuthorizationExchangeFailed("Lazada token response is incomplete", data)

        try:
            expires_in = int(data["expires_in"])
            refresh_expires_in = int(data["refresh_expires_in"])
        except (TypeError, ValueError) as e:
            raise AuthorizationExchangeFailed("Lazada token lifetimes are not numbers", data) from e

        return Credential(
            access_token=str(data["access_token"]),
            refresh_token=str(data["refresh_token"]),
            expires_at=received_at + datetime.timedelta(seconds=expires_in),
            refresh_expires_at=received_at + datetime.timedelta(seconds=refresh_expires_in),
            account=data.get("account"),
            country=data.get("country"),
            created_at=received_at,
        )
