"""Verifier endpoints: presentation requests, callbacks and polling."""

import json

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse

from vc_relay.api.dependencies import api_base_url, get_container, request_host
from vc_relay.containers import AppContainer
from vc_relay.errors import InvalidRequestError
from vc_relay.services.presentation import NOT_PRESENTED_MESSAGE

PREFIX = "/api/verifier"

router = APIRouter(prefix=PREFIX, tags=["verifier"])


@router.get("/echo")
async def echo(
    request: Request, container: AppContainer = Depends(get_container)
) -> dict[str, object]:
    """Describe the credential this verifier asks for."""
    return await container.presentation_service.describe(
        request_host(request), api_base_url(request, PREFIX)
    )


@router.get("/logo.png")
async def logo(container: AppContainer = Depends(get_container)) -> RedirectResponse:
    """Redirect to the credential card logo."""
    uri = container.presentation_service.logo_uri()
    if not uri:
        raise InvalidRequestError("Presentation manifest has no logo")
    return RedirectResponse(uri)


@router.api_route("/presentation-request", methods=["GET", "POST"])
async def presentation_request(
    request: Request, container: AppContainer = Depends(get_container)
) -> dict[str, object]:
    """Create a presentation request for the browser to render as a QR code."""
    return await container.presentation_service.create_request(
        api_base_url(request, PREFIX)
    )


@router.post("/presentationCallback")
async def presentation_callback(
    request: Request, container: AppContainer = Depends(get_container)
) -> Response:
    """Receive progress notifications from the VC Client API."""
    container.presentation_service.handle_callback(await request.body())
    return Response(status_code=200)


@router.get("/presentation-response-status")
async def presentation_response_status(
    correlation_id: str | None = Query(default=None, alias="id"),
    request_id: str | None = Query(default=None, alias="requestId"),
    container: AppContainer = Depends(get_container),
) -> Response:
    """Report presentation progress to a polling browser."""
    if not correlation_id:
        raise InvalidRequestError("Missing argument 'id'")
    result = container.presentation_service.poll(
        correlation_id,
        request_id,
        consume=not container.settings.b2c_integration,
    )
    if result is None:
        return Response(status_code=200)
    return JSONResponse(result)


@router.post("/presentation-response-b2c")
async def presentation_response_b2c(
    request: Request, container: AppContainer = Depends(get_container)
) -> JSONResponse:
    """Return the presented claims to an Azure AD B2C custom policy."""
    body = await request.body()
    try:
        b2c_request = json.loads(body)
    except ValueError as exc:
        raise InvalidRequestError(
            f"Error parsing json body. body={body!r} error={exc}"
        ) from exc
    correlation_id = b2c_request.get("id") if isinstance(b2c_request, dict) else None
    if not correlation_id:
        raise InvalidRequestError("Missing argument 'id'")

    claims = container.presentation_service.poll_b2c(str(correlation_id))
    if claims is None:
        return JSONResponse(
            status_code=409,
            content={
                "version": "1.0.0",
                "status": 400,
                "userMessage": NOT_PRESENTED_MESSAGE,
            },
        )
    return JSONResponse(claims)
