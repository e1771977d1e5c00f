"""Lazada plugin module.

This module exposes the gateway's HTTP surface: the OAuth callback that
connects a Lazada seller account, and the catalog of proxied Open API
operations. Each proxied operation is a ``RouteDescriptor``; the router only
maps inbound query strings and bodies onto ``RequestProxy.execute``.
"""

import logging
from typing import Any, Callable

import anyio
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from lazada_gateway.core.authorization import AuthorizationFlow
from lazada_gateway.core.dependencies import get_authorization_flow, get_request_proxy
from lazada_gateway.core.errors import AuthorizationExchangeFailed, StoreUnavailable
from lazada_gateway.core.proxy import RequestProxy, RouteDescriptor, optional, required

# Setup module-level logger
logger = logging.getLogger("lazada")

GET_ROUTES: dict[str, RouteDescriptor] = {
    "/products": RouteDescriptor(
        path="/products/get",
        params=(
            optional("filter", "all"),
            optional("offset", 0),
            optional("limit", 50),
            optional("search"),
            optional("create_after"),
            optional("update_after"),
            optional("sku_seller_list"),
        ),
    ),
    "/shop": RouteDescriptor(path="/seller/get"),
    "/product-item": RouteDescriptor(path="/product/item/get", params=(required("item_id"),)),
    "/payout-status": RouteDescriptor(
        path="/finance/payout/status/get",
        params=(required("created_after", "format YYYY-MM-DDThh:mm:ss"),),
    ),
    "/seller-performance": RouteDescriptor(
        path="/seller/performance/get", params=(optional("language", "en-US"),)
    ),
    "/warehouse": RouteDescriptor(path="/rc/warehouse/get"),
    "/warehouse-detail": RouteDescriptor(
        path="/rc/warehouse/detail/get", params=(optional("warehouseCode"),)
    ),
    "/seller-notifications": RouteDescriptor(
        path="/sellercenter/msg/list",
        params=(
            optional("page", 1),
            optional("pageSize", 10),
            optional("language", "en"),
        ),
    ),
    "/countries": RouteDescriptor(
        path="/seller/country/list",
        params=(optional("type"), optional("seller_country")),
    ),
}

POST_ROUTES: dict[str, RouteDescriptor] = {
    "/check-seller-register": RouteDescriptor(
        path="/seller/register/check", method="POST", body_param="payload"
    ),
}


def _get_endpoint(route: RouteDescriptor) -> Callable:
    async def endpoint(request: Request, proxy: RequestProxy = Depends(get_request_proxy)) -> Any:
        data = await proxy.execute(route, dict(request.query_params))
        return JSONResponse(data)

    return endpoint


def _post_endpoint(route: RouteDescriptor) -> Callable:
    async def endpoint(request: Request, proxy: RequestProxy = Depends(get_request_proxy)) -> Any:
        try:
            body = await request.json() if await request.body() else {}
        except ValueError as e:
            raise HTTPException(status_code=400, detail="Request body must be JSON") from e
        data = await proxy.execute(route, dict(request.query_params), body)
        return JSONResponse(data)

    return endpoint


def create_lazada_router() -> APIRouter:
    """Create a router for the Lazada API."""

    router = APIRouter()

    @router.get("/lazada/callback", response_class=PlainTextResponse)
    async def oauth_callback(
        code: str | None = None,
        state: str | None = None,
        flow: AuthorizationFlow = Depends(get_authorization_flow),
    ) -> PlainTextResponse:
        """
        Handle the OAuth redirect from Lazada.

        Exchanges ``code`` on the authorization host and stores the resulting
        credential, replacing any previous one.

        Args:
            code (str | None): The authorization code from Lazada.
            state (str | None): Opaque state echoed back by Lazada.
        """
        if not code:
            return PlainTextResponse("Missing code", status_code=400)

        logger.info("OAuth callback received: code=%s... state=%s", code[:5], state)
        try:
            await anyio.to_thread.run_sync(flow.exchange_code, code)
        except AuthorizationExchangeFailed as e:
            logger.error("Error obtaining token from Lazada: %s", e.detail)
            return PlainTextResponse("Error when getting Lazada token", status_code=500)
        except StoreUnavailable as e:
            logger.error("Lazada token obtained but not stored: %s", e)
            return PlainTextResponse(
                "Lazada token obtained but could not be saved", status_code=500
            )

        return PlainTextResponse("Lazada connected successfully")

    for gateway_path, route in GET_ROUTES.items():
        router.add_api_route(
            gateway_path,
            _get_endpoint(route),
            methods=["GET"],
            name=gateway_path.strip("/"),
            summary=f"Proxy {route.path}",
        )

    for gateway_path, route in POST_ROUTES.items():
        router.add_api_route(
            gateway_path,
            _post_endpoint(route),
            methods=["POST"],
            name=gateway_path.strip("/"),
            summary=f"Proxy {route.path}",
        )

    return router
