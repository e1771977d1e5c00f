"""Test the generic request proxy."""

import datetime
from unittest.mock import MagicMock

import pytest
import requests

from conftest import FIXED_MILLIS, FIXED_NOW, make_response
from lazada_gateway.core.credentials import CredentialStore
from lazada_gateway.core.errors import (
    CredentialUnavailable,
    MissingParameter,
    UpstreamRequestFailed,
)
from lazada_gateway.core.proxy import RequestProxy, RouteDescriptor, optional, required
from lazada_gateway.core.signature import sign_request
from lazada_gateway.plugins.lazada import GET_ROUTES, POST_ROUTES

PRODUCT_ITEM = GET_ROUTES["/product-item"]
PRODUCTS = GET_ROUTES["/products"]


@pytest.fixture
def proxy(mock_settings, store, lazada_client, clock) -> RequestProxy:
    return RequestProxy(mock_settings, store, lazada_client, clock=clock)


def _signed(path: str, fields: dict) -> dict:
    fields = dict(fields, app_key="K", sign_method="sha256", timestamp=FIXED_MILLIS)
    fields["sign"] = sign_request(path, fields, "S")
    return fields


@pytest.mark.asyncio
async def test_execute_relays_upstream_json(proxy, store, credential, http_session) -> None:
    """Test that the upstream body is returned unmodified."""
    store.save(credential)
    payload = {"code": "0", "data": {"item_id": 123, "attributes": {"name": "Shirt"}}, "request_id": "x"}
    http_session.request.return_value = make_response(payload=payload)

    result = await proxy.execute(PRODUCT_ITEM, {"item_id": "123"})

    assert result == payload
    http_session.request.assert_called_once_with(
        "GET",
        "https://api.example.test/rest/product/item/get",
        params=_signed("/product/item/get", {"item_id": "123", "access_token": "access-123"}),
        timeout=None,
    )


@pytest.mark.asyncio
async def test_defaults_are_applied_and_overridable(proxy, store, credential, http_session) -> None:
    """Test default values, caller overrides and dropped undeclared fields."""
    store.save(credential)

    await proxy.execute(PRODUCTS, {"limit": "10", "unknown": "dropped"})

    params = http_session.request.call_args.kwargs["params"]
    assert params["filter"] == "all"
    assert params["offset"] == "0"
    assert params["limit"] == "10"
    assert "unknown" not in params
    assert "search" not in params
    assert params == _signed(
        "/products/get",
        {"filter": "all", "offset": "0", "limit": "10", "access_token": "access-123"},
    )


@pytest.mark.asyncio
async def test_missing_required_field_fails_before_io(mock_settings, lazada_client, http_session) -> None:
    """Test that a missing required field fails before the store or network."""
    store = MagicMock(spec=CredentialStore)
    proxy = RequestProxy(mock_settings, store, lazada_client)

    with pytest.raises(MissingParameter) as exc_info:
        await proxy.execute(PRODUCT_ITEM, {})

    assert exc_info.value.field == "item_id"
    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == {"message": "Missing item_id"}
    store.load.assert_not_called()
    http_session.request.assert_not_called()


@pytest.mark.asyncio
async def test_empty_required_field_counts_as_missing(proxy, http_session) -> None:
    """Test that an empty value counts as missing."""
    with pytest.raises(MissingParameter):
        await proxy.execute(GET_ROUTES["/payout-status"], {"created_after": ""})
    http_session.request.assert_not_called()


@pytest.mark.asyncio
async def test_no_credential_fails_without_http(proxy, http_session) -> None:
    """Test that an authenticated route without a credential makes no call."""
    with pytest.raises(CredentialUnavailable) as exc_info:
        await proxy.execute(GET_ROUTES["/shop"], {})

    assert exc_info.value.status_code == 500
    http_session.request.assert_not_called()


@pytest.mark.asyncio
async def test_expired_credential_fails_without_http(
    mock_settings, store, credential, lazada_client, http_session
) -> None:
    """Test that an expired credential makes no call."""
    store.save(credential)
    later = FIXED_NOW + datetime.timedelta(hours=1)
    proxy = RequestProxy(mock_settings, store, lazada_client, clock=lambda: later)

    with pytest.raises(CredentialUnavailable):
        await proxy.execute(GET_ROUTES["/shop"], {})

    http_session.request.assert_not_called()


@pytest.mark.asyncio
async def test_unauthenticated_route_skips_store(mock_settings, lazada_client, http_session, clock) -> None:
    """Test that a route without auth never reads the store."""
    store = MagicMock(spec=CredentialStore)
    proxy = RequestProxy(mock_settings, store, lazada_client, clock=clock)
    route = RouteDescriptor(path="/public/get", requires_auth=False, params=(required("q"),))

    await proxy.execute(route, {"q": "x"})

    store.load.assert_not_called()
    params = http_session.request.call_args.kwargs["params"]
    assert "access_token" not in params
    assert params == _signed("/public/get", {"q": "x"})


@pytest.mark.asyncio
async def test_upstream_http_error_relays_body(proxy, store, credential, http_session) -> None:
    """Test that a non-2xx error body is relayed."""
    store.save(credential)
    error_body = {"code": "IllegalAccessToken", "type": "ISV", "message": "The specified access token is invalid"}
    http_session.request.return_value = make_response(status_code=403, payload=error_body)

    with pytest.raises(UpstreamRequestFailed) as exc_info:
        await proxy.execute(GET_ROUTES["/shop"], {})

    assert exc_info.value.detail == error_body
    assert exc_info.value.status_code == 500
    http_session.request.assert_called_once()


@pytest.mark.asyncio
async def test_network_error_gives_generic_message(proxy, store, credential, http_session) -> None:
    """Test that a network error without body gives a message."""
    store.save(credential)
    http_session.request.side_effect = requests.Timeout("read timed out")

    with pytest.raises(UpstreamRequestFailed) as exc_info:
        await proxy.execute(GET_ROUTES["/warehouse"], {})

    assert exc_info.value.detail == {"message": "read timed out"}
    http_session.request.assert_called_once()


@pytest.mark.asyncio
async def test_body_param_is_wrapped_in_json_array(proxy, store, credential, http_session) -> None:
    """Test that the POST body is sent as a JSON array string."""
    store.save(credential)
    route = POST_ROUTES["/check-seller-register"]

    await proxy.execute(route, {}, {"email": "a@b.c", "phone": "0900"})

    method, url = http_session.request.call_args.args
    params = http_session.request.call_args.kwargs["params"]
    assert method == "POST"
    assert url == "https://api.example.test/rest/seller/register/check"
    assert params["payload"] == '[{"email": "a@b.c", "phone": "0900"}]'
    assert params["sign"] == sign_request(
        route.path, {k: v for k, v in params.items() if k != "sign"}, "S"
    )


@pytest.mark.asyncio
async def test_missing_field_message_includes_hint(proxy, http_session) -> None:
    """Test that a declared hint is appended to the missing field message."""
    with pytest.raises(MissingParameter) as exc_info:
        await proxy.execute(GET_ROUTES["/payout-status"], {})

    assert exc_info.value.field == "created_after"
    assert exc_info.value.detail == {
        "message": "Missing created_after (format YYYY-MM-DDThh:mm:ss)"
    }
    http_session.request.assert_not_called()


def test_collect_params_uses_declared_fields(proxy) -> None:
    """Test collect_params."""
    route = RouteDescriptor(path="/x", params=(required("a"), optional("b", 2), optional("c")))
    assert proxy.collect_params(route, {"a": "1", "d": "4"}) == {"a": "1", "b": 2}


@pytest.mark.parametrize("gateway_path", sorted(GET_ROUTES))
def test_every_catalog_route_requires_auth(gateway_path: str) -> None:
    """Test that every catalog read needs an access token."""
    assert GET_ROUTES[gateway_path].requires_auth
    assert GET_ROUTES[gateway_path].method == "GET"
