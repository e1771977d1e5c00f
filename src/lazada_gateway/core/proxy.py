"""
Generic signed proxy for Lazada resource-API calls.

Every exposed operation is a ``RouteDescriptor``; ``RequestProxy.execute`` is
the only code path that talks to the resource-API host.
"""

import datetime
import json
import logging
from typing import Any, Callable, Literal, Mapping, Optional

import anyio
from pydantic import BaseModel, ConfigDict

from lazada_gateway.core.client import LazadaClient, build_signed_params, to_millis, utc_now
from lazada_gateway.core.credentials import CredentialStore
from lazada_gateway.core.errors import CredentialUnavailable, MissingParameter
from lazada_gateway.core.settings import LazadaSettings

logger = logging.getLogger("proxy")


class ParamSpec(BaseModel):
    """A caller-supplied field forwarded to Lazada."""

    model_config = ConfigDict(frozen=True)

    name: str
    required: bool = False
    default: Optional[Any] = None
    hint: Optional[str] = None


class RouteDescriptor(BaseModel):
    """
    Data-only description of one proxied operation.

    Attributes:
        path (str): Lazada API path, without host.
        method (str): HTTP method used upstream.
        requires_auth (bool): Whether ``access_token`` must be attached.
        params (tuple[ParamSpec, ...]): Fields taken from the caller.
        body_param (str | None): Field that receives the inbound JSON body,
            wrapped in a one-element array and JSON encoded.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    method: Literal["GET", "POST"] = "GET"
    requires_auth: bool = True
    params: tuple[ParamSpec, ...] = ()
    body_param: Optional[str] = None


def required(name: str, hint: Optional[str] = None) -> ParamSpec:
    return ParamSpec(name=name, required=True, hint=hint)


def optional(name: str, default: Any = None) -> ParamSpec:
    return ParamSpec(name=name, default=default)


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


class RequestProxy:
    """Validates, signs and forwards calls described by a RouteDescriptor."""

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

    def collect_params(
        self, route: RouteDescriptor, caller_params: Mapping[str, Any], body: Any = None
    ) -> dict[str, Any]:
        """
        Validate the caller's fields against the route and apply defaults.

        Raises:
            MissingParameter: If a required field is absent or empty.
        """
        fields: dict[str, Any] = {}
        for spec in route.params:
            value = caller_params.get(spec.name)
            if _is_missing(value):
                if spec.required:
                    raise MissingParameter(spec.name, spec.hint)
                value = spec.default
            if value is not None:
                fields[spec.name] = value

        if route.body_param is not None:
            fields[route.body_param] = json.dumps([body if body is not None else {}])
        return fields

    def _access_token(self) -> str:
        credential = self.store.load()
        if credential is None:
            raise CredentialUnavailable("Lazada account is not connected, authorize the app first")
        if self.store.is_expired(credential, self.clock()):
            raise CredentialUnavailable("Lazada access token has expired, authorize the app again")
        return credential.access_token

    def prepare(
        self, route: RouteDescriptor, caller_params: Mapping[str, Any], body: Any = None
    ) -> dict[str, str]:
        """Build the complete, signed field set for ``route``."""
        fields = self.collect_params(route, caller_params, body)
        if route.requires_auth:
            fields["access_token"] = self._access_token()
        return build_signed_params(
            route.path,
            fields,
            self.settings.app_key,
            self.settings.app_secret,
            to_millis(self.clock()),
        )

    def call(self, route: RouteDescriptor, caller_params: Mapping[str, Any], body: Any = None) -> Any:
        """Blocking variant of :meth:`execute`."""
        params = self.prepare(route, caller_params, body)
        return self.client.call(route.method, self.settings.api_url, route.path, params)

    async def execute(
        self, route: RouteDescriptor, caller_params: Mapping[str, Any], body: Any = None
    ) -> Any:
        """
        Run one proxied call and return Lazada's JSON body unmodified.

        Validation happens before the credential store or the network is touched.

        Raises:
            MissingParameter, CredentialUnavailable, StoreUnavailable,
            UpstreamRequestFailed.
        """
        self.collect_params(route, caller_params, body)
        logger.debug("Proxying %s %s", route.method, route.path)
        return await anyio.to_thread.run_sync(self.call, route, dict(caller_params), body)
